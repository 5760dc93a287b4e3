"""
Pose Challenge - Main Application Window
"""

import logging
from typing import Callable, Optional

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QLabel, QStatusBar
)
from PySide6.QtCore import QObject, QRunnable, QThreadPool, QUrl, Signal

from .constants import SCORE_SOUND_VOLUME
from .controls import BgmPlayer, ScoreBar, SlotPanel
from .errors import InvalidFileType, PoseChallengeError
from .estimators import PoseEstimator
from .session import CHALLENGE, SLOT_NAMES, TARGET, ChallengeSession, load_image_file

logger = logging.getLogger(__name__)

SLOT_TITLES = {
    TARGET: "Target pose",
    CHALLENGE: "Challenge pose",
}

MODEL_LOADING_MESSAGE = "Initializing pose model..."


class DetectionSignals(QObject):
    finished = Signal(str, object, object)
    failed = Signal(str, object, object)


class DetectionWorker(QRunnable):
    """포즈 추정을 스레드 풀에서 실행"""

    def __init__(self, estimator: PoseEstimator, slot_name: str, image):
        super().__init__()
        self.estimator = estimator
        self.slot_name = slot_name
        self.image = image
        self.signals = DetectionSignals()

    def run(self):
        try:
            detections = self.estimator.estimate(self.image)
        except Exception as e:
            if not isinstance(e, PoseChallengeError):
                logger.exception("Pose estimator failed for %s slot", self.slot_name)
            self.signals.failed.emit(self.slot_name, self.image, e)
            return
        self.signals.finished.emit(self.slot_name, self.image, detections)


class LoaderSignals(QObject):
    loaded = Signal(object)
    failed = Signal(str)


class EstimatorLoader(QRunnable):
    """포즈 모델 초기화를 스레드 풀에서 실행"""

    def __init__(self, factory: Callable[[], PoseEstimator]):
        super().__init__()
        self.factory = factory
        self.estimator = None
        self.signals = LoaderSignals()

    def run(self):
        try:
            self.estimator = self.factory()
        except Exception as e:
            if not isinstance(e, RuntimeError):
                logger.exception("Pose estimator initialisation failed")
            self.signals.failed.emit(str(e))
            return
        self.signals.loaded.emit(self.estimator)


class PoseChallengeWindow(QMainWindow):
    """메인 윈도우"""

    def __init__(self, estimator: Optional[PoseEstimator] = None,
                 score_sound: Optional[str] = None,
                 estimator_error: Optional[str] = None,
                 estimator_factory: Optional[Callable[[], PoseEstimator]] = None,
                 bgm: Optional[str] = None):
        super().__init__()
        self.estimator = estimator
        self.estimator_error = estimator_error
        self.estimator_factory = estimator_factory
        self.model_loading = False
        self.session = ChallengeSession(estimator, on_score_change=self._on_score_changed)
        self.thread_pool = QThreadPool.globalInstance()
        # 실행 중인 워커 참조 보관 (시그널 객체 수명 유지)
        self._workers = set()
        self._loader = None

        self.sound_player = None
        if score_sound:
            self._setup_sound(score_sound)

        self.bgm_player = BgmPlayer(bgm) if bgm else None

        self._setup_ui()
        self._connect_signals()

        if estimator_error:
            self.status_bar.showMessage(f"⚠ Pose model unavailable: {estimator_error}")

    def _setup_ui(self):
        self.setWindowTitle("Pose Challenge")
        self.setMinimumSize(1000, 560)
        self.setStyleSheet("""
            QMainWindow {
                background-color: #1a1a2e;
            }
            QStatusBar {
                background-color: #16213e;
                color: #e0e0e0;
            }
        """)

        central = QWidget()
        self.setCentralWidget(central)

        outer_layout = QVBoxLayout(central)
        outer_layout.setContentsMargins(0, 0, 0, 0)
        outer_layout.setSpacing(0)

        # 헤더 (제목 + 배경 음악)
        header = QWidget()
        header_layout = QHBoxLayout(header)
        header_layout.setContentsMargins(15, 10, 15, 0)
        title_label = QLabel("Pose Challenge")
        title_label.setStyleSheet("color: #FFE66D; font-size: 20px; font-weight: bold; background: transparent;")
        header_layout.addWidget(title_label)
        header_layout.addStretch()
        if self.bgm_player is not None:
            header_layout.addWidget(self.bgm_player)
        outer_layout.addWidget(header)

        content_widget = QWidget()
        content_layout = QHBoxLayout(content_widget)
        content_layout.setContentsMargins(10, 10, 10, 10)
        content_layout.setSpacing(10)

        self.panels = {name: SlotPanel(SLOT_TITLES[name]) for name in SLOT_NAMES}
        for name in SLOT_NAMES:
            content_layout.addWidget(self.panels[name], 1)
        outer_layout.addWidget(content_widget, 1)

        self.score_bar = ScoreBar()
        outer_layout.addWidget(self.score_bar)

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)
        self.status_bar.showMessage("Upload a target pose and a challenge pose")
    def _connect_signals(self):
        for name, panel in self.panels.items():
            panel.file_selected.connect(lambda path, n=name: self._load_file(n, path))
            panel.drop_rejected.connect(lambda n=name: self._on_drop_rejected(n))
            panel.show_image_changed.connect(lambda show, n=name: self.session.set_show_image(n, show))
        self.score_bar.reset_requested.connect(self._reset)

    def load_estimator(self):
        """포즈 모델을 백그라운드에서 초기화 (완료 전까지 업로드 비활성)"""
        if self.estimator_factory is None or self.model_loading:
            return
        self.model_loading = True
        self._set_uploads_enabled(False)
        self.status_bar.showMessage(MODEL_LOADING_MESSAGE)

        loader = EstimatorLoader(self.estimator_factory)
        loader.signals.loaded.connect(self._on_estimator_loaded)
        loader.signals.failed.connect(self._on_estimator_failed)
        self._loader = loader
        self.thread_pool.start(loader)

    def _on_estimator_loaded(self, estimator: PoseEstimator):
        self.model_loading = False
        self.estimator = estimator
        self.estimator_error = None
        self.session.estimator = estimator
        self._set_uploads_enabled(True)
        logger.info("Pose estimator ready: %s", estimator.name())
        self.status_bar.showMessage("✓ Pose model ready")

    def _on_estimator_failed(self, message: str):
        self.model_loading = False
        self.estimator_error = message
        self._set_uploads_enabled(True)
        logger.error("Pose estimator initialisation failed: %s", message)
        self.status_bar.showMessage(f"⚠ Pose model unavailable: {message}")

    def _set_uploads_enabled(self, enabled: bool):
        for panel in self.panels.values():
            panel.set_upload_enabled(enabled)

    def shutdown(self):
        """실행 중인 작업을 기다린 뒤 모델 해제"""
        self.thread_pool.waitForDone()
        estimator = self.estimator
        if estimator is None and self._loader is not None:
            estimator = self._loader.estimator
        if estimator is not None:
            estimator.close()
        self.estimator = None
        self.session.estimator = None

    def _setup_sound(self, path: str):
        from PySide6.QtMultimedia import QAudioOutput, QMediaPlayer

        self.sound_player = QMediaPlayer(self)
        self._audio_output = QAudioOutput(self)
        self._audio_output.setVolume(SCORE_SOUND_VOLUME)
        self.sound_player.setAudioOutput(self._audio_output)
        self.sound_player.setSource(QUrl.fromLocalFile(path))

    def _on_score_changed(self, score: int):
        """새로운 점수가 나왔을 때만 호출 (효과음)"""
        if self.sound_player is not None:
            self.sound_player.setPosition(0)
            self.sound_player.play()
        self.status_bar.showMessage(f"✓ Similarity: {score}%")

    def _load_file(self, name: str, path: str):
        if self.model_loading:
            self.status_bar.showMessage(MODEL_LOADING_MESSAGE)
            return
        try:
            image = load_image_file(path)
        except PoseChallengeError as e:
            self.session.set_error(name, e)
            self._refresh_slot(name)
            self.status_bar.showMessage(f"⚠ {e}")
            return

        self.session.set_image(name, image)
        self._refresh_score()
        if self.estimator is None:
            self.session.set_error(name, PoseChallengeError(
                f"Pose model unavailable: {self.estimator_error or 'not configured'}"
            ))
            self._refresh_slot(name)
            return

        self._start_detection(name)

    def _on_drop_rejected(self, name: str):
        self.session.set_error(name, InvalidFileType("Please drop an image file"))
        self._refresh_slot(name)

    def _start_detection(self, name: str):
        image = self.session.begin_detection(name)
        self._refresh_slot(name)

        worker = DetectionWorker(self.estimator, name, image)
        worker.signals.finished.connect(self._on_detection_finished)
        worker.signals.failed.connect(self._on_detection_failed)
        self._workers.add(worker)
        worker.signals.finished.connect(lambda *args, w=worker: self._workers.discard(w))
        worker.signals.failed.connect(lambda *args, w=worker: self._workers.discard(w))
        self.thread_pool.start(worker)

    def _on_detection_finished(self, name: str, image, detections):
        if self.session.complete_detection(name, image, detections):
            self.status_bar.showMessage(f"✓ {SLOT_TITLES[name]} detected")
        self._refresh_slot(name)
        self._refresh_score()

    def _on_detection_failed(self, name: str, image, error: Exception):
        if self.session.fail_detection(name, image, error):
            self.status_bar.showMessage(f"⚠ {SLOT_TITLES[name]}: {self.session.slot(name).error}")
        self._refresh_slot(name)

    def _refresh_slot(self, name: str):
        self.panels[name].update_state(self.session.slot(name))

    def _refresh_score(self):
        self.score_bar.set_score(self.session.similarity)

    def _reset(self):
        self.session.reset()
        for name, panel in self.panels.items():
            panel.reset()
            panel.update_state(self.session.slot(name))
        self._refresh_score()
        self.status_bar.showMessage("✓ Reset")
