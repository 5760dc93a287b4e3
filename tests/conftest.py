import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from pose_challenge.constants import KEYPOINT_NAMES
from pose_challenge.models import Keypoint, Pose


BASE_POINTS = [(100.0 + 20.0 * i, 100.0 + 15.0 * i) for i in range(len(KEYPOINT_NAMES))]


def build_pose(points=None, scores=0.9, offset=(0.0, 0.0)):
    points = BASE_POINTS if points is None else points
    if not isinstance(scores, (list, tuple)):
        scores = [scores] * len(points)
    dx, dy = offset
    return Pose(
        keypoints=[
            Keypoint(x=x + dx, y=y + dy, score=s, name=KEYPOINT_NAMES[i])
            for i, ((x, y), s) in enumerate(zip(points, scores))
        ],
        score=0.8,
    )


def raw_estimate(points=None, score=0.9):
    points = BASE_POINTS if points is None else points
    return {
        "keypoints": [{"x": x, "y": y, "score": score} for x, y in points],
        "score": score,
    }


@pytest.fixture
def make_pose():
    return build_pose


@pytest.fixture
def make_raw_estimate():
    return raw_estimate


@pytest.fixture
def base_points():
    return list(BASE_POINTS)
