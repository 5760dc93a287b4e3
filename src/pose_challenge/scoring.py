"""
Pose similarity scoring.

Two poses are compared keypoint by keypoint (same COCO index = same body
part). The mean planar distance of the keypoints valid in both poses is
mapped linearly to 0-100 and then discounted by detection quality, the
fraction of the 17 keypoints the weaker pose actually detected. When the
weaker pose has fewer than 8 valid keypoints the discount is applied a
second time, scaled by min_valid / 8, so a few accidentally matching
low-confidence points cannot produce a high score.
"""

import logging
from typing import Callable, Optional

import numpy as np

from .constants import (
    DISTANCE_FALLOFF,
    DISTANCE_SCALE,
    FALLBACK_SCORE_MESSAGE,
    NUM_KEYPOINTS,
    SCORE_MESSAGES,
    SEVERE_PENALTY_MIN_VALID,
)
from .models import Pose
from .utils import round_half_up

logger = logging.getLogger(__name__)


def count_valid(pose: Pose) -> int:
    """유효 키포인트 개수 (score > 0.3)"""
    return pose.valid_count


def _pose_arrays(pose: Pose, length: int):
    keypoints = pose.keypoints[:length]
    coords = np.array([(kp.x, kp.y) for kp in keypoints], dtype=np.float64).reshape(-1, 2)
    valid = np.array([kp.is_valid for kp in keypoints], dtype=bool)
    return coords, valid


def pair_distances(pose_a: Pose, pose_b: Pose) -> np.ndarray:
    """두 포즈 모두 유효한 인덱스의 정규화된 거리 배열"""
    length = min(len(pose_a.keypoints), len(pose_b.keypoints))
    coords_a, valid_a = _pose_arrays(pose_a, length)
    coords_b, valid_b = _pose_arrays(pose_b, length)

    both = valid_a & valid_b
    delta = (coords_a[both] - coords_b[both]) / DISTANCE_SCALE
    return np.sqrt(delta[:, 0] * delta[:, 0] + delta[:, 1] * delta[:, 1])


def score_poses(pose_a: Pose, pose_b: Pose) -> int:
    """두 포즈의 유사도 점수 (0-100 정수)"""
    min_valid = min(count_valid(pose_a), count_valid(pose_b))
    detection_quality = min_valid / NUM_KEYPOINTS

    distances = pair_distances(pose_a, pose_b)
    if distances.size == 0:
        return 0

    avg_distance = sum(distances.tolist()) / distances.size
    base_similarity = max(0.0, (1 - avg_distance / DISTANCE_FALLOFF) * 100)

    if min_valid < SEVERE_PENALTY_MIN_VALID:
        severe_penalty = min_valid / SEVERE_PENALTY_MIN_VALID
        quality_penalty = detection_quality * severe_penalty
        return round_half_up(base_similarity * quality_penalty)

    return round_half_up(base_similarity * detection_quality)


def score_message(score: int) -> str:
    """점수에 따른 피드백 메시지"""
    for threshold, message in SCORE_MESSAGES:
        if score >= threshold:
            return message
    return FALLBACK_SCORE_MESSAGE


class ScoreTracker:
    """
    Recomputes the similarity whenever a pose changes and reports a score
    to ``on_change`` only when it differs from the last reported value.
    """

    def __init__(self, on_change: Optional[Callable[[int], None]] = None):
        self.on_change = on_change
        self.previous: Optional[int] = None

    def update(self, pose_a: Optional[Pose], pose_b: Optional[Pose]) -> Optional[int]:
        if pose_a is None or pose_b is None:
            return None

        score = score_poses(pose_a, pose_b)
        if score != self.previous:
            logger.info("Similarity changed: %s -> %s", self.previous, score)
            self.previous = score
            if self.on_change is not None:
                self.on_change(score)
        return score

    def reset(self):
        self.previous = None
