"""
PoseCanvas - displays a rendered skeleton overlay.
"""

from typing import Optional

from PySide6.QtWidgets import QSizePolicy, QWidget
from PySide6.QtCore import QSize, Qt
from PySide6.QtGui import QColor, QFont, QImage, QPainter

from .constants import CANVAS_HEIGHT
from .models import Pose
from .renderer import draw_pose


class PoseCanvas(QWidget):
    """포즈 오버레이를 표시하는 캔버스 위젯"""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.pose: Optional[Pose] = None
        self.image: Optional[QImage] = None
        self.show_image: bool = True
        self.overlay: Optional[QImage] = None
        self.placeholder_text: str = ""

        self.setFixedHeight(CANVAS_HEIGHT)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Fixed)
        self.setStyleSheet("background-color: #1a1a2e;")

    def sizeHint(self) -> QSize:
        if self.overlay is not None:
            return self.overlay.size()
        return QSize(CANVAS_HEIGHT, CANVAS_HEIGHT)

    def set_pose(self, pose: Optional[Pose], image: Optional[QImage]):
        """포즈와 원본 이미지 설정 후 다시 그리기"""
        self.pose = pose
        self.image = image
        self._refresh()

    def set_show_image(self, show: bool):
        self.show_image = show
        self._refresh()

    def set_placeholder_text(self, text: str):
        self.placeholder_text = text
        self.update()

    def set_overlay(self, overlay: Optional[QImage]):
        self.overlay = overlay
        self.updateGeometry()
        self.update()

    def clear(self):
        self.pose = None
        self.image = None
        self.set_overlay(None)

    def _refresh(self):
        if self.pose is None or self.image is None:
            self.set_overlay(None)
            return
        draw_pose(self, self.pose, self.image, self.show_image)

    def paintEvent(self, event):
        """캔버스 렌더링"""
        painter = QPainter(self)
        try:
            painter.fillRect(self.rect(), QColor("#1a1a2e"))

            if self.overlay is None:
                if self.placeholder_text:
                    painter.setPen(QColor("#ffffff"))
                    painter.setFont(QFont("Segoe UI", 11))
                    painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter,
                                     self.placeholder_text)
                return

            # 가로 중앙 정렬
            x = max(0, (self.width() - self.overlay.width()) // 2)
            painter.drawImage(x, 0, self.overlay)
        finally:
            painter.end()
