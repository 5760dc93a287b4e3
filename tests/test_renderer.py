import pytest
from PySide6.QtGui import QColor, QImage

from pose_challenge.constants import (
    JOINT_COLORS, SHOULDER_COLOR, SHOULDER_CONNECTION,
)
from pose_challenge.renderer import (
    blur_layer, bone_color, canvas_size, draw_pose, render_pose,
    scale_factors, visible_connections,
)

BLACK = QColor("#000000").rgb()


@pytest.fixture
def white_image(qapp):
    image = QImage(400, 200, QImage.Format.Format_RGB32)
    image.fill(QColor("#ffffff"))
    return image


def _pose_with_valid(make_pose, points):
    """points: {index: (x, y)} - 나머지 키포인트는 무효"""
    all_points = [points.get(i, (0.0, 0.0)) for i in range(17)]
    scores = [0.9 if i in points else 0.0 for i in range(17)]
    return make_pose(points=all_points, scores=scores)


def test_canvas_size_keeps_aspect_ratio():
    assert canvas_size(400, 200) == (600, 300)
    assert canvas_size(300, 600) == (150, 300)
    assert canvas_size(640, 480) == (400, 300)


def test_scale_factors():
    assert scale_factors(600, 300, 400, 200) == (1.5, 1.5)
    assert scale_factors(150, 300, 300, 600) == (0.5, 0.5)


def test_bone_colors():
    assert bone_color(SHOULDER_CONNECTION) == SHOULDER_COLOR
    assert bone_color((7, 9)) == JOINT_COLORS[7]
    assert bone_color((12, 14)) == JOINT_COLORS[12]


def test_visible_connections_require_both_endpoints(make_pose):
    scores = [0.9] * 17
    scores[7] = 0.2
    pose = make_pose(scores=scores)
    bones = visible_connections(pose)
    assert (5, 7) not in bones
    assert (7, 9) not in bones
    assert (5, 6) in bones
    assert len(bones) == 10


def test_render_size_and_keypoint_position(make_pose, white_image):
    pose = _pose_with_valid(make_pose, {0: (200.0, 100.0)})
    canvas = render_pose(pose, white_image, show_image=False)

    assert (canvas.width(), canvas.height()) == (600, 300)
    assert canvas.pixelColor(300, 150).rgb() == JOINT_COLORS[0].rgb()
    # 원 바깥쪽은 글로우
    assert canvas.pixelColor(308, 150).rgb() != BLACK
    assert canvas.pixelColor(10, 10).rgb() == BLACK


def test_show_image_draws_source(make_pose, white_image):
    pose = _pose_with_valid(make_pose, {0: (200.0, 100.0)})
    canvas = render_pose(pose, white_image, show_image=True)
    assert canvas.pixelColor(10, 10).rgb() == QColor("#ffffff").rgb()
    assert canvas.pixelColor(300, 150).rgb() == JOINT_COLORS[0].rgb()


def test_shoulder_bone_uses_shoulder_color(make_pose, white_image):
    pose = _pose_with_valid(make_pose, {5: (100.0, 100.0), 6: (300.0, 100.0)})
    canvas = render_pose(pose, white_image, show_image=False)
    assert canvas.pixelColor(300, 150).rgb() == SHOULDER_COLOR.rgb()


def test_bone_skipped_when_endpoint_invalid(make_pose, white_image):
    pose = _pose_with_valid(make_pose, {5: (100.0, 100.0)})
    canvas = render_pose(pose, white_image, show_image=False)
    assert canvas.pixelColor(300, 150).rgb() == BLACK


def test_render_is_idempotent(make_pose, white_image):
    pose = make_pose()
    first = render_pose(pose, white_image)
    second = render_pose(pose, white_image)
    assert first == second


def test_empty_image_rejected(make_pose, qapp):
    with pytest.raises(ValueError):
        render_pose(make_pose(), QImage())


def test_blur_keeps_empty_layer_empty(qapp):
    layer = QImage(20, 10, QImage.Format.Format_ARGB32_Premultiplied)
    layer.fill(QColor(0, 0, 0, 0))
    blurred = blur_layer(layer, 8)
    assert (blurred.width(), blurred.height()) == (20, 10)
    assert blurred.pixelColor(5, 5).alpha() == 0


class _RecordingCanvas:
    def __init__(self):
        self.overlays = []

    def set_overlay(self, overlay):
        self.overlays.append(overlay)


def test_draw_pose_sets_overlay(make_pose, white_image):
    canvas = _RecordingCanvas()
    draw_pose(canvas, make_pose(), white_image, show_image=False)
    assert len(canvas.overlays) == 1
    assert canvas.overlays[0].height() == 300


def test_draw_pose_without_canvas_is_noop(make_pose, white_image):
    draw_pose(None, make_pose(), white_image)
    canvas = _RecordingCanvas()
    draw_pose(canvas, None, white_image)
    draw_pose(canvas, make_pose(), None)
    assert canvas.overlays == []
