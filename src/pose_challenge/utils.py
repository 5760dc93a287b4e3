"""
Utility functions for image conversion and rounding.
"""

import math

import numpy as np
from PySide6.QtGui import QImage


def round_half_up(value: float) -> int:
    """0.5는 올림 (Python 기본 round는 짝수 반올림)"""
    return int(math.floor(value + 0.5))


def qimage_to_array(image: QImage) -> np.ndarray:
    """QImage → (H, W, 4) uint8 배열 (ARGB32 premultiplied 메모리 순서)"""
    image = image.convertToFormat(QImage.Format.Format_ARGB32_Premultiplied)
    width, height = image.width(), image.height()
    buffer = np.frombuffer(image.constBits(), dtype=np.uint8, count=image.sizeInBytes())
    rows = buffer.reshape(height, image.bytesPerLine())
    return rows[:, :width * 4].reshape(height, width, 4).copy()


def array_to_qimage(array: np.ndarray) -> QImage:
    """(H, W, 4) uint8 배열 → ARGB32 premultiplied QImage"""
    array = np.ascontiguousarray(array, dtype=np.uint8)
    height, width = array.shape[:2]
    image = QImage(array.data, width, height, width * 4,
                   QImage.Format.Format_ARGB32_Premultiplied)
    # 버퍼를 공유하지 않도록 복사
    return image.copy()


def qimage_to_rgb(image: QImage) -> np.ndarray:
    """QImage → (H, W, 3) RGB uint8 배열 (포즈 추정기 입력용)"""
    image = image.convertToFormat(QImage.Format.Format_RGB888)
    width, height = image.width(), image.height()
    buffer = np.frombuffer(image.constBits(), dtype=np.uint8, count=image.sizeInBytes())
    rows = buffer.reshape(height, image.bytesPerLine())
    return rows[:, :width * 3].reshape(height, width, 3).copy()
