"""
Keypoint normalizer - raw detector output to Pose.
"""

from typing import Any, Sequence

from .constants import KEYPOINT_NAMES, NUM_KEYPOINTS
from .errors import InvalidPoseData, NoPersonDetected
from .models import Keypoint, Pose


def _field(raw: Any, name: str, default=None):
    """dict 또는 속성 객체에서 값 읽기"""
    if isinstance(raw, dict):
        return raw.get(name, default)
    return getattr(raw, name, default)


def _to_keypoint(raw: Any, index: int) -> Keypoint:
    name = KEYPOINT_NAMES[index]
    try:
        x = float(_field(raw, "x"))
        y = float(_field(raw, "y"))
        score = _field(raw, "score")
        score = float(score) if score is not None else 0.0
    except (TypeError, ValueError) as e:
        raise InvalidPoseData(f"Invalid keypoint {index} ({name}): {e}") from e
    return Keypoint(x=x, y=y, score=score, name=name)


def normalize_detections(detections: Sequence[Any]) -> Pose:
    """
    검출 결과 목록에서 첫 번째 사람을 Pose로 변환

    Raises:
        NoPersonDetected: 검출 결과가 비어 있을 때
        InvalidPoseData: 키포인트가 17개가 아닐 때 또는 좌표가 숫자가 아닐 때
    """
    if not detections:
        raise NoPersonDetected()

    first = detections[0]
    raw_keypoints = list(_field(first, "keypoints") or [])
    if len(raw_keypoints) != NUM_KEYPOINTS:
        raise InvalidPoseData(
            f"Expected {NUM_KEYPOINTS} keypoints, got {len(raw_keypoints)}"
        )

    score = _field(first, "score")
    return Pose(
        keypoints=[_to_keypoint(kp, idx) for idx, kp in enumerate(raw_keypoints)],
        score=float(score) if score is not None else 0.0,
    )
