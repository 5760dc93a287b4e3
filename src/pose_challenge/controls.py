"""
Control widgets for the pose challenge - SlotPanel, ScoreBar and BgmPlayer.
"""

import logging
import mimetypes
from typing import Optional

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout,
    QLabel, QPushButton, QCheckBox, QFileDialog, QFrame, QSlider
)
from PySide6.QtCore import Qt, QUrl, Signal

from .canvas import PoseCanvas
from .constants import BGM_VOLUME, NUM_KEYPOINTS
from .scoring import score_message
from .session import SlotState, is_image_mime
from .utils import round_half_up

logger = logging.getLogger(__name__)


def _first_image_path(urls) -> Optional[str]:
    """드롭된 URL 중 첫 번째 이미지 파일 경로"""
    for url in urls:
        if not url.isLocalFile():
            continue
        path = url.toLocalFile()
        mime_type, _ = mimetypes.guess_type(path)
        if is_image_mime(mime_type):
            return path
    return None


class SlotPanel(QFrame):
    """이미지 슬롯 패널 (업로드 + 캔버스 + 상태)"""

    file_selected = Signal(str)
    drop_rejected = Signal()
    show_image_changed = Signal(bool)

    def __init__(self, title: str, parent=None):
        super().__init__(parent)
        self.title = title
        self.is_dragging = False
        self.setAcceptDrops(True)
        self._setup_ui()

    def _setup_ui(self):
        self.setObjectName("slotPanel")
        self._apply_frame_style()

        layout = QVBoxLayout(self)
        layout.setContentsMargins(15, 15, 15, 15)
        layout.setSpacing(10)

        title_label = QLabel(self.title)
        title_label.setStyleSheet("color: #e0e0e0; font-size: 16px; font-weight: bold; background: transparent;")
        layout.addWidget(title_label)

        # 업로드 버튼
        upload_layout = QHBoxLayout()
        self.upload_btn = QPushButton("Choose image...")
        self.upload_btn.clicked.connect(self._choose_file)
        self.upload_btn.setStyleSheet(self._get_button_style())
        upload_layout.addWidget(self.upload_btn)

        self.hint_label = QLabel("or drag & drop an image here")
        self.hint_label.setStyleSheet("color: #a0a0a0; background: transparent;")
        upload_layout.addWidget(self.hint_label)
        upload_layout.addStretch()
        layout.addLayout(upload_layout)

        # 캔버스
        self.canvas = PoseCanvas()
        self.canvas.set_placeholder_text("No image")
        layout.addWidget(self.canvas)

        # 이미지 표시 토글
        self.show_image_check = QCheckBox("Show image")
        self.show_image_check.setChecked(True)
        self.show_image_check.toggled.connect(self._on_show_image_toggled)
        self.show_image_check.setStyleSheet(self._get_checkbox_style())
        layout.addWidget(self.show_image_check)

        # 상태 라벨 (검출 중 / 오류 / 키포인트 개수)
        self.status_label = QLabel("")
        self.status_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.status_label.setStyleSheet("color: #e0e0e0; background: transparent;")
        layout.addWidget(self.status_label)

    def _apply_frame_style(self):
        border = "#4ECDC4" if self.is_dragging else "#3d3d5c"
        self.setStyleSheet(f"""
            #slotPanel {{
                background-color: #16213e;
                border: 2px dashed {border};
                border-radius: 10px;
            }}
        """)

    def _choose_file(self):
        path, _ = QFileDialog.getOpenFileName(
            self, f"{self.title}: choose image", "",
            "Images (*.png *.jpg *.jpeg *.bmp *.gif *.webp);;All files (*)"
        )
        if path:
            self.file_selected.emit(path)

    def _on_show_image_toggled(self, checked: bool):
        self.canvas.set_show_image(checked)
        self.show_image_changed.emit(checked)

    def update_state(self, slot: SlotState):
        """슬롯 상태를 화면에 반영"""
        if slot.detecting:
            self.status_label.setStyleSheet("color: #FFE66D; background: transparent;")
            self.status_label.setText("Detecting pose...")
        elif slot.error:
            self.status_label.setStyleSheet("color: #FF6B6B; background: transparent;")
            self.status_label.setText(slot.error)
        elif slot.pose is not None:
            self.status_label.setStyleSheet("color: #e0e0e0; background: transparent;")
            self.status_label.setText(f"Detected: {slot.valid_count}/{NUM_KEYPOINTS} keypoints")
        else:
            self.status_label.setText("")

        if slot.image is None:
            self.canvas.set_placeholder_text("No image")
        elif slot.detecting:
            self.canvas.set_placeholder_text("Detecting pose...")
        else:
            self.canvas.set_placeholder_text("")

        self.canvas.show_image = slot.show_image
        self.canvas.set_pose(slot.pose, slot.image)

    def set_upload_enabled(self, enabled: bool):
        """모델 준비 중에는 업로드와 드롭을 막음"""
        self.upload_btn.setEnabled(enabled)
        self.setAcceptDrops(enabled)
        self.hint_label.setText(
            "or drag & drop an image here" if enabled else "Waiting for the pose model..."
        )

    def reset(self):
        self.show_image_check.blockSignals(True)
        self.show_image_check.setChecked(True)
        self.show_image_check.blockSignals(False)
        self.canvas.show_image = True
        self.canvas.clear()
        self.status_label.setText("")

    # 드래그 앤 드롭
    def dragEnterEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()
            self.is_dragging = True
            self._apply_frame_style()
            self.hint_label.setText("Drop the image here")

    def dragLeaveEvent(self, event):
        self._end_drag()

    def dropEvent(self, event):
        self._end_drag()
        path = _first_image_path(event.mimeData().urls())
        if path is None:
            self.drop_rejected.emit()
            return
        event.acceptProposedAction()
        self.file_selected.emit(path)

    def _end_drag(self):
        self.is_dragging = False
        self._apply_frame_style()
        self.hint_label.setText("or drag & drop an image here")

    def _get_button_style(self):
        return """
            QPushButton {
                background-color: #4ECDC4;
                color: #1a1a2e;
                border: none;
                padding: 8px 20px;
                font-size: 12px;
                font-weight: bold;
                border-radius: 6px;
            }
            QPushButton:hover {
                background-color: #5FE6DD;
            }
            QPushButton:pressed {
                background-color: #3DBDB5;
            }
        """

    def _get_checkbox_style(self):
        return """
            QCheckBox {
                color: #e0e0e0;
                spacing: 8px;
                background: transparent;
            }
            QCheckBox::indicator {
                width: 18px;
                height: 18px;
                border-radius: 4px;
                border: 2px solid #3d3d5c;
                background-color: #2d2d44;
            }
            QCheckBox::indicator:checked {
                background-color: #4ECDC4;
                border-color: #4ECDC4;
            }
        """


class ScoreBar(QWidget):
    """하단 점수 표시 + 리셋 바"""

    reset_requested = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self._setup_ui()

    def _setup_ui(self):
        self.setFixedHeight(70)
        self.setObjectName("scoreBar")
        self.setStyleSheet("""
            #scoreBar {
                background-color: #16213e;
                border-top: 1px solid #3d3d5c;
            }
            QLabel {
                background-color: transparent;
                border: none;
            }
        """)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(15, 8, 15, 8)
        layout.setSpacing(15)

        self.score_label = QLabel("--")
        self.score_label.setStyleSheet("color: #FFE66D; font-size: 28px; font-weight: bold; min-width: 90px;")
        layout.addWidget(self.score_label)

        self.message_label = QLabel("Upload a target and a challenge pose")
        self.message_label.setStyleSheet("color: #e0e0e0; font-size: 16px;")
        layout.addWidget(self.message_label, 1)

        self.reset_btn = QPushButton("Reset")
        self.reset_btn.clicked.connect(self.reset_requested.emit)
        self.reset_btn.setStyleSheet("""
            QPushButton {
                background-color: #FF6B6B;
                color: #1a1a2e;
                border: none;
                padding: 8px 20px;
                font-size: 13px;
                font-weight: bold;
                border-radius: 6px;
            }
            QPushButton:hover {
                background-color: #FF8585;
            }
        """)
        layout.addWidget(self.reset_btn)

    def set_score(self, score: Optional[int]):
        if score is None:
            self.score_label.setText("--")
            self.message_label.setText("Upload a target and a challenge pose")
            return
        self.score_label.setText(f"{score}%")
        self.message_label.setText(score_message(score))


class BgmPlayer(QFrame):
    """
    배경 음악 플레이어 (반복 재생)

    재생/일시정지, 음소거, 볼륨 슬라이더(0.1 단위)와 퍼센트 표시.
    Space 는 재생/일시정지, M 은 음소거. 로드 실패 시 오류 메시지와
    재시도 버튼을 보여주고 나머지 조작은 막는다.
    """

    LOAD_ERROR = "Failed to load the music file"

    def __init__(self, source: Optional[str] = None, volume: float = BGM_VOLUME, parent=None):
        super().__init__(parent)
        from PySide6.QtMultimedia import QAudioOutput, QMediaPlayer

        self.source = source
        self.volume = volume
        self.is_muted = False
        self.is_playing = False
        self.is_loading = False
        self.has_error = False
        self.error_message = ""

        self.player = QMediaPlayer(self)
        self.audio_output = QAudioOutput(self)
        self.player.setAudioOutput(self.audio_output)
        self.player.setLoops(QMediaPlayer.Loops.Infinite)
        self.player.mediaStatusChanged.connect(self._on_media_status)
        self.player.playbackStateChanged.connect(self._on_playback_state)
        self.player.errorOccurred.connect(self._on_error)

        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self._setup_ui()
        self._apply_volume()
        self.load()

    def _setup_ui(self):
        self.setObjectName("bgmPlayer")
        self.setStyleSheet("""
            #bgmPlayer {
                background-color: #16213e;
                border: 1px solid #3d3d5c;
                border-radius: 8px;
            }
            QLabel {
                background: transparent;
                border: none;
            }
        """)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(10, 6, 10, 6)
        layout.setSpacing(4)

        controls = QHBoxLayout()
        controls.setSpacing(8)

        self.play_btn = QPushButton("▶")
        self.play_btn.setFixedWidth(36)
        self.play_btn.setToolTip("Play (Space)")
        self.play_btn.clicked.connect(self.toggle_play_pause)
        self.play_btn.setStyleSheet(self._get_button_style())
        controls.addWidget(self.play_btn)

        self.mute_btn = QPushButton("🔊")
        self.mute_btn.setFixedWidth(36)
        self.mute_btn.setToolTip("Mute (M)")
        self.mute_btn.clicked.connect(self.toggle_mute)
        self.mute_btn.setStyleSheet(self._get_button_style())
        controls.addWidget(self.mute_btn)

        # 볼륨 슬라이더 (0~10 → 0.0~1.0)
        self.volume_slider = QSlider(Qt.Orientation.Horizontal)
        self.volume_slider.setRange(0, 10)
        self.volume_slider.setSingleStep(1)
        self.volume_slider.setFixedWidth(100)
        self.volume_slider.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.volume_slider.valueChanged.connect(self._on_slider_changed)
        self.volume_slider.setStyleSheet("""
            QSlider::groove:horizontal {
                border: none;
                height: 6px;
                background: #2d2d44;
                border-radius: 3px;
            }
            QSlider::handle:horizontal {
                background: #4ECDC4;
                border: none;
                width: 14px;
                height: 14px;
                margin: -4px 0;
                border-radius: 7px;
            }
            QSlider::sub-page:horizontal {
                background: #4ECDC4;
                border-radius: 3px;
            }
        """)
        controls.addWidget(self.volume_slider)

        self.volume_label = QLabel("")
        self.volume_label.setStyleSheet("color: #e0e0e0; font-size: 12px; min-width: 40px;")
        controls.addWidget(self.volume_label)
        layout.addLayout(controls)

        # 오류 표시 + 재시도
        error_layout = QHBoxLayout()
        self.error_label = QLabel("")
        self.error_label.setStyleSheet("color: #FF6B6B; font-size: 12px;")
        error_layout.addWidget(self.error_label, 1)
        self.retry_btn = QPushButton("Retry")
        self.retry_btn.clicked.connect(self.retry)
        self.retry_btn.setStyleSheet(self._get_button_style())
        error_layout.addWidget(self.retry_btn)
        layout.addLayout(error_layout)

        self._update_controls()

    @property
    def effective_volume(self) -> float:
        return 0.0 if self.is_muted else self.volume

    @property
    def volume_percent(self) -> int:
        return round_half_up(self.effective_volume * 100)

    def load(self):
        """소스 (재)로드"""
        if not self.source:
            self.is_loading = False
            self._update_controls()
            return
        self.is_loading = True
        self._update_controls()
        self.player.setSource(QUrl())
        self.player.setSource(QUrl.fromLocalFile(self.source))

    def retry(self):
        self.has_error = False
        self.error_message = ""
        self.load()

    def toggle_play_pause(self):
        if self.has_error or self.is_loading or not self.source:
            return
        if self.is_playing:
            self.player.pause()
        else:
            self.player.play()

    def toggle_mute(self):
        if self.has_error:
            return
        self.is_muted = not self.is_muted
        self._apply_volume()

    def set_volume(self, volume: float):
        if self.has_error:
            return
        self.volume = min(1.0, max(0.0, float(volume)))
        self.is_muted = False
        self._apply_volume()

    def _on_slider_changed(self, value: int):
        self.set_volume(value / 10)

    def _apply_volume(self):
        self.audio_output.setVolume(self.effective_volume)
        self.volume_slider.blockSignals(True)
        self.volume_slider.setValue(round_half_up(self.effective_volume * 10))
        self.volume_slider.blockSignals(False)
        self.volume_label.setText(f"{self.volume_percent}%")
        self.mute_btn.setText("🔇" if self.is_muted else "🔊")
        self.mute_btn.setToolTip("Unmute (M)" if self.is_muted else "Mute (M)")

    def _on_media_status(self, status):
        from PySide6.QtMultimedia import QMediaPlayer

        if status == QMediaPlayer.MediaStatus.LoadingMedia:
            self.is_loading = True
        elif status == QMediaPlayer.MediaStatus.InvalidMedia:
            self.is_loading = False
            self._set_error(self.LOAD_ERROR)
            return
        elif status != QMediaPlayer.MediaStatus.NoMedia:
            self.is_loading = False
        self._update_controls()

    def _on_playback_state(self, state):
        from PySide6.QtMultimedia import QMediaPlayer

        self.is_playing = state == QMediaPlayer.PlaybackState.PlayingState
        self._update_controls()

    def _on_error(self, error, error_string: str = ""):
        logger.warning("Background music error: %s", error_string or error)
        self.is_loading = False
        self.is_playing = False
        self._set_error(self.LOAD_ERROR)

    def _set_error(self, message: str):
        self.has_error = True
        self.error_message = message
        self._update_controls()

    def _update_controls(self):
        self.play_btn.setEnabled(not (self.has_error or self.is_loading) and bool(self.source))
        if self.has_error:
            self.play_btn.setText("!")
            self.play_btn.setToolTip("An error occurred")
        elif self.is_loading:
            self.play_btn.setText("…")
            self.play_btn.setToolTip("Loading...")
        elif self.is_playing:
            self.play_btn.setText("❚❚")
            self.play_btn.setToolTip("Pause (Space)")
        else:
            self.play_btn.setText("▶")
            self.play_btn.setToolTip("Play (Space)")

        self.mute_btn.setEnabled(not self.has_error)
        self.volume_slider.setEnabled(not self.has_error)
        self.error_label.setText(self.error_message if self.has_error else "")
        self.error_label.setVisible(self.has_error)
        self.retry_btn.setVisible(self.has_error)

    def keyPressEvent(self, event):
        if event.key() == Qt.Key.Key_Space:
            self.toggle_play_pause()
        elif event.key() == Qt.Key.Key_M:
            self.toggle_mute()
        else:
            super().keyPressEvent(event)

    def _get_button_style(self):
        return """
            QPushButton {
                background-color: #2d2d44;
                color: #e0e0e0;
                border: 1px solid #3d3d5c;
                padding: 4px 8px;
                font-size: 12px;
                border-radius: 6px;
            }
            QPushButton:hover {
                background-color: #3d3d5c;
            }
            QPushButton:disabled {
                color: #6d6d8c;
            }
        """
