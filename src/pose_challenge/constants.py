"""
Constants for pose scoring and skeleton rendering.
"""

from typing import List, Tuple

from PySide6.QtGui import QColor


# 키포인트 유효성 임계값 (score > 0.3)
VALID_SCORE_THRESHOLD = 0.3

# COCO 17 키포인트 이름 (인덱스 순서 고정)
KEYPOINT_NAMES: List[str] = [
    "nose",
    "left_eye",
    "right_eye",
    "left_ear",
    "right_ear",
    "left_shoulder",
    "right_shoulder",
    "left_elbow",
    "right_elbow",
    "left_wrist",
    "right_wrist",
    "left_hip",
    "right_hip",
    "left_knee",
    "right_knee",
    "left_ankle",
    "right_ankle",
]
NUM_KEYPOINTS = len(KEYPOINT_NAMES)

# 스켈레톤 연결 (뼈대 12개)
SHOULDER_CONNECTION: Tuple[int, int] = (5, 6)
CONNECTIONS: List[Tuple[int, int]] = [
    SHOULDER_CONNECTION,
    (5, 7),
    (7, 9),
    (6, 8),
    (8, 10),
    (5, 11),
    (6, 12),
    (11, 12),
    (11, 13),
    (13, 15),
    (12, 14),
    (14, 16),
]

# 유사도 점수 파라미터
DISTANCE_SCALE = 100.0       # 픽셀 거리 정규화 상수
DISTANCE_FALLOFF = 5.0       # 평균 거리 5에서 유사도 0
SEVERE_PENALTY_MIN_VALID = 8  # 이 값 미만이면 강한 페널티

# 점수별 피드백 메시지 (높은 기준부터)
SCORE_MESSAGES: List[Tuple[int, str]] = [
    (90, "Perfect!"),
    (80, "Excellent!"),
    (70, "Very good!"),
    (60, "Nice!"),
    (50, "Not bad!"),
]
FALLBACK_SCORE_MESSAGE = "Keep practicing!"

# 캔버스/그리기 설정
CANVAS_HEIGHT = 300
SKELETON_WIDTH = 3
KEYPOINT_RADIUS = 5
SKELETON_GLOW_BLUR = 5
KEYPOINT_GLOW_BLUR = 8
BACKGROUND_COLOR = QColor("#000000")

# 오디오 볼륨 (0.0 ~ 1.0)
SCORE_SOUND_VOLUME = 0.5
BGM_VOLUME = 0.3

# 신체 부위별 색상
BODY_PART_COLORS = {
    'right': QColor("#FF6B6B"),
    'left': QColor("#4ECDC4"),
    'center': QColor("#FFE66D"),
    'face': QColor("#DDA0DD"),
    'foot': QColor("#FF8E53"),
}

# 어깨-어깨 연결은 항상 이 색상
SHOULDER_COLOR = BODY_PART_COLORS['center']


def _joint_part(name: str) -> str:
    if any(x in name for x in ['eye', 'ear', 'nose']):
        return 'face'
    if 'ankle' in name:
        return 'foot'
    if name.startswith('right'):
        return 'right'
    if name.startswith('left'):
        return 'left'
    return 'center'


# 관절 인덱스별 색상 테이블 (17개)
JOINT_COLORS: List[QColor] = [BODY_PART_COLORS[_joint_part(name)] for name in KEYPOINT_NAMES]
