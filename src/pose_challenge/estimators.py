"""
Pose estimator adapters.

The app only needs ``estimate(image)`` returning a list of raw estimates,
one per detected person, each shaped like
``{"keypoints": [{"x", "y", "score"} x 17], "score": float}`` in COCO-17
order and source image pixel coordinates.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from PySide6.QtGui import QImage

from .constants import KEYPOINT_NAMES
from .utils import qimage_to_rgb

logger = logging.getLogger(__name__)

RawEstimate = Dict[str, Any]


class PoseEstimator(ABC):
    """
    Model adapter interface.

    Implementations take a decoded QImage and return raw estimates.
    """

    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def estimate(self, image: QImage) -> List[RawEstimate]: ...

    def close(self) -> None:
        pass


class MediaPipePoseEstimator(PoseEstimator):
    """
    MediaPipe Pose (single person) mapped onto COCO-17.

    MediaPipe landmarks are normalized; they are converted to pixel space and
    ``visibility`` is used as the keypoint score.
    One MediaPipe graph is shared by every caller, so ``process`` is
    serialized with a lock.
    """

    def __init__(self, model_complexity: int = 1, min_detection_confidence: float = 0.5):
        try:
            import mediapipe as mp
        except ImportError as e:
            raise RuntimeError(
                "MediaPipe is not installed. Install it with: pip install 'pose-challenge[mediapipe]'"
            ) from e

        self._mp = mp
        self._lock = threading.Lock()
        self._pose = mp.solutions.pose.Pose(
            static_image_mode=True,
            model_complexity=int(model_complexity),
            enable_segmentation=False,
            min_detection_confidence=float(min_detection_confidence),
        )
        landmark = mp.solutions.pose.PoseLandmark
        self._indices = [int(landmark[name.upper()]) for name in KEYPOINT_NAMES]

    def name(self) -> str:
        return "mediapipe_pose"

    def estimate(self, image: QImage) -> List[RawEstimate]:
        rgb = qimage_to_rgb(image)
        h, w = int(rgb.shape[0]), int(rgb.shape[1])
        with self._lock:
            res = self._pose.process(rgb)
        if not res or not getattr(res, "pose_landmarks", None):
            logger.debug("MediaPipe found no person in %dx%d image", w, h)
            return []

        lm = res.pose_landmarks.landmark
        keypoints = []
        for idx in self._indices:
            p = lm[idx]
            keypoints.append({
                "x": float(p.x) * w,
                "y": float(p.y) * h,
                "score": float(getattr(p, "visibility", 0.0) or 0.0),
            })
        score = sum(kp["score"] for kp in keypoints) / len(keypoints)
        return [{"keypoints": keypoints, "score": score}]

    def close(self) -> None:
        with self._lock:
            if self._pose is not None:
                self._pose.close()
                self._pose = None
