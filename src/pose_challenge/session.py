"""
Challenge session - explicit state for the target and challenge slots.

Each slot owns its image, pose and flags. A detection result is committed
only while the slot still holds the image the request was made for, so a
slow detection can never overwrite a newer upload.
"""

import asyncio
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence

from PySide6.QtGui import QImage

from .errors import (
    FileReadFailure, ImageDecodeFailure, InvalidFileType, PoseChallengeError,
)
from .estimators import PoseEstimator
from .models import Pose
from .normalizer import normalize_detections
from .scoring import ScoreTracker

logger = logging.getLogger(__name__)

TARGET = "target"
CHALLENGE = "challenge"
SLOT_NAMES = (TARGET, CHALLENGE)


def is_image_mime(mime_type: Optional[str]) -> bool:
    return bool(mime_type) and mime_type.startswith("image/")


def decode_image(data: bytes, mime_type: Optional[str]) -> QImage:
    """바이트 데이터를 QImage로 디코딩"""
    if not is_image_mime(mime_type):
        raise InvalidFileType()
    image = QImage.fromData(data)
    if image.isNull():
        raise ImageDecodeFailure()
    return image


def load_image_file(path, mime_type: Optional[str] = None) -> QImage:
    """파일 경로에서 이미지 로드 (MIME 타입 미지정 시 확장자로 추정)"""
    path = Path(path)
    if mime_type is None:
        mime_type, _ = mimetypes.guess_type(path.name)
    if not is_image_mime(mime_type):
        raise InvalidFileType()
    try:
        data = path.read_bytes()
    except OSError as e:
        raise FileReadFailure() from e
    return decode_image(data, mime_type)


@dataclass
class SlotState:
    """이미지 슬롯 하나의 상태"""
    image: Optional[QImage] = None
    pose: Optional[Pose] = None
    detecting: bool = False
    show_image: bool = True
    error: Optional[str] = None

    @property
    def valid_count(self) -> int:
        return self.pose.valid_count if self.pose is not None else 0


class ChallengeSession:
    """
    Owns both slots and the similarity between them.

    ``on_score_change`` is called once per distinct new score (e.g. to
    play a sound cue); recomputing an identical score does not call it.
    """

    def __init__(self, estimator: Optional[PoseEstimator] = None,
                 on_score_change: Optional[Callable[[int], None]] = None):
        self.estimator = estimator
        self.slots: Dict[str, SlotState] = {name: SlotState() for name in SLOT_NAMES}
        self.tracker = ScoreTracker(on_score_change)
        self.similarity: Optional[int] = None

    @property
    def target(self) -> SlotState:
        return self.slots[TARGET]

    @property
    def challenge(self) -> SlotState:
        return self.slots[CHALLENGE]

    def slot(self, name: str) -> SlotState:
        if name not in self.slots:
            raise ValueError(f"Unknown slot: {name!r}")
        return self.slots[name]

    def set_image(self, name: str, image: QImage) -> SlotState:
        """새 이미지로 교체하고 이전 포즈를 버림"""
        slot = self.slot(name)
        slot.image = image
        slot.pose = None
        slot.detecting = False
        slot.error = None
        self.similarity = None
        return slot

    def set_error(self, name: str, error: Exception):
        slot = self.slot(name)
        slot.detecting = False
        if isinstance(error, PoseChallengeError):
            slot.error = str(error)
        else:
            slot.error = f"Pose detection failed: {error}"
        logger.warning("%s slot: %s", name, slot.error)

    def set_show_image(self, name: str, show: bool):
        self.slot(name).show_image = show

    def begin_detection(self, name: str) -> QImage:
        slot = self.slot(name)
        if slot.image is None:
            raise ValueError(f"No image loaded in {name} slot")
        slot.detecting = True
        slot.error = None
        logger.debug("Detecting pose for %s slot", name)
        return slot.image

    def _is_current(self, name: str, image: QImage) -> bool:
        if self.slot(name).image is image:
            return True
        logger.debug("Dropping stale detection result for %s slot", name)
        return False

    def complete_detection(self, name: str, image: QImage, detections: Sequence[Any]) -> bool:
        """
        검출 결과 반영

        Returns:
            포즈가 반영되었으면 True (오래된 요청이거나 실패하면 False)
        """
        if not self._is_current(name, image):
            return False

        slot = self.slot(name)
        try:
            pose = normalize_detections(detections)
        except PoseChallengeError as e:
            self.set_error(name, e)
            return False

        slot.pose = pose
        slot.detecting = False
        slot.error = None
        logger.info("%s pose detected: %d/%d valid keypoints",
                    name, pose.valid_count, len(pose.keypoints))
        self.rescore()
        return True

    def fail_detection(self, name: str, image: QImage, error: Exception) -> bool:
        if not self._is_current(name, image):
            return False
        self.set_error(name, error)
        return True

    def rescore(self) -> Optional[int]:
        self.similarity = self.tracker.update(self.target.pose, self.challenge.pose)
        return self.similarity

    async def detect(self, name: str) -> bool:
        """현재 슬롯 이미지에 대해 포즈 추정 실행 (추정기는 별도 스레드에서 실행)"""
        if self.estimator is None:
            raise RuntimeError("No pose estimator configured")

        image = self.begin_detection(name)
        try:
            detections = await asyncio.to_thread(self.estimator.estimate, image)
        except PoseChallengeError as e:
            self.fail_detection(name, image, e)
            return False
        except Exception as e:
            logger.exception("Pose estimator failed for %s slot", name)
            self.fail_detection(name, image, e)
            return False
        return self.complete_detection(name, image, detections)

    async def upload(self, name: str, image: QImage) -> bool:
        self.set_image(name, image)
        return await self.detect(name)

    def reset(self):
        """모든 슬롯과 점수 초기화"""
        self.slots = {name: SlotState() for name in SLOT_NAMES}
        self.similarity = None
        self.tracker.reset()
