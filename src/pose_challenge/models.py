"""
Data models for pose comparison.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .constants import VALID_SCORE_THRESHOLD


@dataclass(frozen=True)
class Keypoint:
    """단일 키포인트 데이터 (원본 이미지 픽셀 좌표)"""
    x: float
    y: float
    score: float
    name: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.score > VALID_SCORE_THRESHOLD


@dataclass(frozen=True)
class Pose:
    """한 사람의 17개 키포인트 포즈"""
    keypoints: List[Keypoint] = field(default_factory=list)
    score: float = 0.0

    @property
    def valid_count(self) -> int:
        return sum(1 for kp in self.keypoints if kp.is_valid)
