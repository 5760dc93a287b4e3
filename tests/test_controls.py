import pytest
from PySide6.QtCore import Qt
from PySide6.QtMultimedia import QMediaPlayer

from pose_challenge.controls import BgmPlayer


@pytest.fixture
def bgm(qtbot):
    player = BgmPlayer()
    qtbot.addWidget(player)
    return player


def test_bgm_defaults(bgm):
    assert bgm.volume == pytest.approx(0.3)
    assert bgm.volume_label.text() == "30%"
    assert bgm.volume_slider.value() == 3
    assert bgm.audio_output.volume() == pytest.approx(0.3, abs=1e-3)
    assert bgm.player.loops() == QMediaPlayer.Loops.Infinite
    assert bgm.retry_btn.isHidden()


def test_mute_toggle(bgm):
    bgm.toggle_mute()
    assert bgm.is_muted
    assert bgm.volume_label.text() == "0%"
    assert bgm.volume_slider.value() == 0
    assert bgm.audio_output.volume() == pytest.approx(0.0)

    bgm.toggle_mute()
    assert not bgm.is_muted
    assert bgm.volume_label.text() == "30%"


def test_volume_slider_sets_volume_and_unmutes(bgm):
    bgm.toggle_mute()
    bgm.volume_slider.setValue(7)

    assert not bgm.is_muted
    assert bgm.volume == pytest.approx(0.7)
    assert bgm.volume_label.text() == "70%"
    assert bgm.audio_output.volume() == pytest.approx(0.7, abs=1e-3)


def test_keyboard_shortcuts(qtbot, bgm):
    bgm.show()
    qtbot.keyClick(bgm, Qt.Key.Key_M)
    assert bgm.is_muted
    qtbot.keyClick(bgm, Qt.Key.Key_M)
    assert not bgm.is_muted

    # 소스가 없으면 재생하지 않음
    qtbot.keyClick(bgm, Qt.Key.Key_Space)
    assert not bgm.is_playing


def test_load_error_disables_controls_until_retry(bgm):
    bgm._on_error(QMediaPlayer.Error.ResourceError, "no such file")

    assert bgm.has_error
    assert bgm.error_label.text() == BgmPlayer.LOAD_ERROR
    assert not bgm.retry_btn.isHidden()
    assert not bgm.mute_btn.isEnabled()
    assert not bgm.volume_slider.isEnabled()
    assert not bgm.play_btn.isEnabled()

    bgm.toggle_mute()
    bgm.set_volume(0.9)
    assert not bgm.is_muted
    assert bgm.volume == pytest.approx(0.3)

    bgm.retry()
    assert not bgm.has_error
    assert bgm.retry_btn.isHidden()
    assert bgm.mute_btn.isEnabled()
