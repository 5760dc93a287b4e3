import sys
import threading
import time
import types

import numpy as np
import pytest
from PySide6.QtGui import QColor, QImage

from pose_challenge.constants import KEYPOINT_NAMES
from pose_challenge.estimators import MediaPipePoseEstimator
from pose_challenge.utils import qimage_to_array, qimage_to_rgb


def test_mediapipe_missing_raises_runtime_error(monkeypatch):
    monkeypatch.setitem(sys.modules, "mediapipe", None)
    with pytest.raises(RuntimeError, match="mediapipe"):
        MediaPipePoseEstimator()


def test_qimage_to_rgb(qapp):
    image = QImage(3, 2, QImage.Format.Format_RGB32)
    image.fill(QColor(255, 0, 0))
    rgb = qimage_to_rgb(image)
    assert rgb.shape == (2, 3, 3)
    assert rgb.dtype == np.uint8
    assert (rgb == [255, 0, 0]).all()


def test_qimage_to_array_shape(qapp):
    image = QImage(5, 4, QImage.Format.Format_ARGB32_Premultiplied)
    image.fill(QColor(0, 0, 0, 0))
    pixels = qimage_to_array(image)
    assert pixels.shape == (4, 5, 4)
    assert not pixels.any()


class RecordingPoseGraph:
    """동시 호출 수를 기록하는 MediaPipe Pose 대역"""

    def __init__(self, **kwargs):
        self.active = 0
        self.max_active = 0
        self.calls = 0
        self.closed = False
        self._count_lock = threading.Lock()

    def process(self, rgb):
        with self._count_lock:
            self.active += 1
            self.calls += 1
            self.max_active = max(self.max_active, self.active)
        time.sleep(0.005)
        with self._count_lock:
            self.active -= 1
        return types.SimpleNamespace(pose_landmarks=None)

    def close(self):
        self.closed = True


@pytest.fixture
def fake_mediapipe(monkeypatch):
    graphs = []

    def make_graph(**kwargs):
        graph = RecordingPoseGraph(**kwargs)
        graphs.append(graph)
        return graph

    module = types.ModuleType("mediapipe")
    module.solutions = types.SimpleNamespace(pose=types.SimpleNamespace(
        Pose=make_graph,
        PoseLandmark={name.upper(): i for i, name in enumerate(KEYPOINT_NAMES)},
    ))
    monkeypatch.setitem(sys.modules, "mediapipe", module)
    return graphs


def test_concurrent_estimates_are_serialized(qapp, fake_mediapipe):
    estimator = MediaPipePoseEstimator()
    graph = fake_mediapipe[0]
    images = [QImage(320, 240, QImage.Format.Format_RGB32), QImage(200, 400, QImage.Format.Format_RGB32)]
    for image in images:
        image.fill(QColor(0, 0, 0))
    errors = []

    def run(image):
        try:
            for _ in range(10):
                assert estimator.estimate(image) == []
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=run, args=(image,)) for image in images]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert errors == []
    assert graph.calls == 20
    assert graph.max_active == 1

    estimator.close()
    assert graph.closed
