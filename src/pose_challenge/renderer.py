"""
Skeleton renderer - draws a Pose over its source image.

The output canvas is always CANVAS_HEIGHT pixels tall with the image's
aspect ratio. Keypoint coordinates are in source image pixels and are
scaled independently on each axis onto the canvas. Glow follows the HTML
canvas shadowBlur convention (gaussian sigma = blur / 2) and is painted
on a separate layer beneath the sharp strokes.
"""

from typing import Callable, List, Optional, Tuple

import numpy as np
from scipy.ndimage import gaussian_filter
from PySide6.QtCore import QPointF, QRectF, QSize, Qt
from PySide6.QtGui import QBrush, QColor, QImage, QPainter, QPen

from .constants import (
    BACKGROUND_COLOR, CANVAS_HEIGHT, CONNECTIONS, JOINT_COLORS,
    KEYPOINT_GLOW_BLUR, KEYPOINT_RADIUS, SHOULDER_COLOR, SHOULDER_CONNECTION,
    SKELETON_GLOW_BLUR, SKELETON_WIDTH,
)
from .models import Pose
from .utils import array_to_qimage, qimage_to_array, round_half_up


def canvas_size(image_width: int, image_height: int, height: int = CANVAS_HEIGHT) -> Tuple[int, int]:
    """고정 높이에서 종횡비를 유지한 캔버스 크기 (width, height)"""
    aspect = image_width / image_height
    return max(1, round_half_up(height * aspect)), height


def scale_factors(canvas_width: int, canvas_height: int,
                  image_width: int, image_height: int) -> Tuple[float, float]:
    return canvas_width / image_width, canvas_height / image_height


def bone_color(connection: Tuple[int, int]) -> QColor:
    """어깨 연결은 고정 색상, 나머지는 첫 번째 관절 색상"""
    if connection == SHOULDER_CONNECTION:
        return SHOULDER_COLOR
    return JOINT_COLORS[connection[0]]


def visible_connections(pose: Pose) -> List[Tuple[int, int]]:
    """양 끝 키포인트가 모두 유효한 연결만 반환"""
    keypoints = pose.keypoints
    return [
        (i, j) for i, j in CONNECTIONS
        if i < len(keypoints) and j < len(keypoints)
        and keypoints[i].is_valid and keypoints[j].is_valid
    ]


def _paint_bones(painter: QPainter, points: List[QPointF], bones: List[Tuple[int, int]]):
    painter.setBrush(Qt.BrushStyle.NoBrush)
    for i, j in bones:
        pen = QPen(bone_color((i, j)), SKELETON_WIDTH)
        pen.setCapStyle(Qt.PenCapStyle.FlatCap)
        painter.setPen(pen)
        painter.drawLine(points[i], points[j])


def _paint_keypoints(painter: QPainter, points: List[QPointF], pose: Pose):
    painter.setPen(Qt.PenStyle.NoPen)
    for idx, kp in enumerate(pose.keypoints):
        if not kp.is_valid:
            continue
        painter.setBrush(QBrush(JOINT_COLORS[idx]))
        painter.drawEllipse(points[idx], KEYPOINT_RADIUS, KEYPOINT_RADIUS)


def blur_layer(layer: QImage, blur: float) -> QImage:
    """레이어 전체에 가우시안 블러 적용 (premultiplied 채널 그대로)"""
    sigma = blur / 2
    pixels = qimage_to_array(layer).astype(np.float32)
    blurred = gaussian_filter(pixels, sigma=(sigma, sigma, 0))
    return array_to_qimage(np.clip(np.rint(blurred), 0, 255).astype(np.uint8))


def _draw_glow(painter: QPainter, size: QSize, paint: Callable[[QPainter], None], blur: float):
    layer = QImage(size, QImage.Format.Format_ARGB32_Premultiplied)
    layer.fill(Qt.GlobalColor.transparent)
    layer_painter = QPainter(layer)
    try:
        layer_painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        paint(layer_painter)
    finally:
        layer_painter.end()
    painter.drawImage(0, 0, blur_layer(layer, blur))


def render_pose(pose: Pose, image: QImage, show_image: bool = True,
                height: int = CANVAS_HEIGHT) -> QImage:
    """
    포즈를 원본 이미지 위에 그린 캔버스 이미지 생성

    Args:
        pose: 그릴 포즈 (원본 이미지 좌표)
        image: 원본 이미지
        show_image: False이면 배경을 검은색으로 채움
        height: 캔버스 높이

    Raises:
        ValueError: 원본 이미지가 비어 있을 때
    """
    if image.isNull() or image.width() <= 0 or image.height() <= 0:
        raise ValueError("Cannot render a pose over an empty image")

    width, height = canvas_size(image.width(), image.height(), height)
    canvas = QImage(width, height, QImage.Format.Format_ARGB32_Premultiplied)
    canvas.fill(Qt.GlobalColor.transparent)

    scale_x, scale_y = scale_factors(width, height, image.width(), image.height())
    points = [QPointF(kp.x * scale_x, kp.y * scale_y) for kp in pose.keypoints]
    bones = visible_connections(pose)

    painter = QPainter(canvas)
    try:
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)

        if show_image:
            painter.drawImage(QRectF(0, 0, width, height), image)
        else:
            painter.fillRect(canvas.rect(), BACKGROUND_COLOR)

        _draw_glow(painter, canvas.size(), lambda p: _paint_bones(p, points, bones),
                   SKELETON_GLOW_BLUR)
        _paint_bones(painter, points, bones)

        _draw_glow(painter, canvas.size(), lambda p: _paint_keypoints(p, points, pose),
                   KEYPOINT_GLOW_BLUR)
        _paint_keypoints(painter, points, pose)
    finally:
        painter.end()

    return canvas


def draw_pose(canvas, pose: Optional[Pose], image: Optional[QImage], show_image: bool = True):
    """캔버스 위젯에 포즈 오버레이 설정 (캔버스/포즈/이미지가 없으면 무시)"""
    if canvas is None or pose is None or image is None or image.isNull():
        return
    canvas.set_overlay(render_pose(pose, image, show_image))
