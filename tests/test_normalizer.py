from types import SimpleNamespace

import pytest

from pose_challenge.constants import KEYPOINT_NAMES
from pose_challenge.errors import InvalidPoseData, NoPersonDetected
from pose_challenge.normalizer import normalize_detections


def test_empty_detections_raise_no_person():
    with pytest.raises(NoPersonDetected):
        normalize_detections([])


def test_first_person_is_used(make_raw_estimate, base_points):
    first = make_raw_estimate()
    second = make_raw_estimate(points=[(1.0, 1.0)] * 17, score=0.5)
    pose = normalize_detections([first, second])

    assert len(pose.keypoints) == 17
    assert (pose.keypoints[3].x, pose.keypoints[3].y) == base_points[3]
    assert pose.score == pytest.approx(0.9)


def test_names_attached_by_position(make_raw_estimate):
    pose = normalize_detections([make_raw_estimate()])
    assert [kp.name for kp in pose.keypoints] == KEYPOINT_NAMES
    assert pose.keypoints[0].name == "nose"
    assert pose.keypoints[16].name == "right_ankle"


def test_missing_confidence_defaults_to_zero(make_raw_estimate):
    raw = make_raw_estimate()
    del raw["keypoints"][2]["score"]
    raw["keypoints"][4]["score"] = None
    del raw["score"]

    pose = normalize_detections([raw])
    assert pose.keypoints[2].score == 0.0
    assert pose.keypoints[4].score == 0.0
    assert not pose.keypoints[2].is_valid
    assert pose.score == 0.0
    assert pose.valid_count == 15


def test_attribute_style_estimates(base_points):
    estimate = SimpleNamespace(
        keypoints=[SimpleNamespace(x=x, y=y, score=0.7) for x, y in base_points],
        score=None,
    )
    pose = normalize_detections([estimate])
    assert pose.keypoints[5].x == base_points[5][0]
    assert pose.keypoints[5].score == pytest.approx(0.7)
    assert pose.score == 0.0


def test_wrong_keypoint_count_rejected(make_raw_estimate):
    raw = make_raw_estimate(points=[(0.0, 0.0)] * 12)
    with pytest.raises(InvalidPoseData) as excinfo:
        normalize_detections([raw])
    assert isinstance(excinfo.value, ValueError)
    assert "17" in str(excinfo.value)


def test_missing_coordinate_rejected(make_raw_estimate):
    raw = make_raw_estimate()
    del raw["keypoints"][3]["x"]
    with pytest.raises(InvalidPoseData, match="left_ear"):
        normalize_detections([raw])


def test_non_numeric_coordinate_rejected(make_raw_estimate):
    raw = make_raw_estimate()
    raw["keypoints"][0]["y"] = "top"
    with pytest.raises(InvalidPoseData):
        normalize_detections([raw])
