import pytest

from barblocks import hueshift
from barblocks.common import MouseButton, Scrolling
from barblocks.hueshift import (
    Gammastep,
    HueShiftError,
    HueShifter,
    Hueshift,
    HueshiftConfig,
    Redshift,
    Sct,
    Wlsunset,
    detect_hue_shifter,
    make_driver,
)


class FakeDriver:
    def __init__(self):
        self.calls = []

    def update(self, temp):
        self.calls.append(("update", temp))

    def reset(self):
        self.calls.append(("reset",))


def make_block(**kwargs):
    kwargs.setdefault("hue_shifter", HueShifter.SCT)
    driver = FakeDriver()
    block = Hueshift(HueshiftConfig(**kwargs), Scrolling.REVERSE, driver)
    return block, driver


class Recorder:
    def __init__(self):
        self.commands = []

    def __call__(self, args):
        self.commands.append(list(args))


def test_config_defaults():
    config = HueshiftConfig(hue_shifter=None)
    assert config.max_temp == 10_000
    assert config.min_temp == 1_000
    assert config.current_temp == 6_500
    assert config.click_temp == 6_500
    assert config.step == 100


def test_limits_are_clamped():
    block, _ = make_block(step=800, max_temp=20_000, min_temp=500)
    assert block.step == 500
    assert block.max_temp == 10_000
    assert block.min_temp == 1_000


def test_min_above_max_falls_back():
    block, _ = make_block(min_temp=5_000, max_temp=3_000)
    assert block.min_temp == 1_000


def test_update_shows_current_temp():
    block, _ = make_block(current_temp=4_200, interval=2.5)
    assert block.update() == 2.5
    assert block.output.text == "4200"


def test_left_click_sets_click_temp():
    block, driver = make_block(click_temp=3_300)
    block.click(MouseButton.LEFT)
    assert block.current_temp == 3_300
    assert driver.calls == [("update", 3_300)]
    assert block.output.text == "3300"


def test_right_click_resets_when_max_above_neutral():
    block, driver = make_block(current_temp=3_000)
    block.click(MouseButton.RIGHT)
    assert block.current_temp == 6_500
    assert driver.calls == [("reset",)]


def test_right_click_uses_max_when_low():
    block, driver = make_block(current_temp=3_000, max_temp=6_000)
    block.click(MouseButton.RIGHT)
    assert block.current_temp == 6_000
    assert driver.calls == [("update", 6_000)]


def test_scroll_up_then_down_returns():
    block, driver = make_block()
    start = block.current_temp
    block.click(MouseButton.WHEEL_UP)
    assert block.current_temp > start
    assert driver.calls[-1] == ("update", block.current_temp)
    assert block.output.text == str(block.current_temp)
    block.click(MouseButton.WHEEL_DOWN)
    assert block.current_temp == start
    assert driver.calls[-1] == ("update", start)


def test_scroll_up_past_max_is_ignored():
    block, driver = make_block(current_temp=10_000)
    block.click(MouseButton.WHEEL_UP)
    assert block.current_temp == 10_000
    assert driver.calls == []


def test_scroll_down_past_min_is_ignored():
    block, driver = make_block(current_temp=1_000)
    block.click(MouseButton.WHEEL_DOWN)
    assert block.current_temp == 1_000
    assert driver.calls == []


def test_other_button_changes_nothing():
    block, driver = make_block(current_temp=5_000)
    block.output.text = "marker"
    block.click(MouseButton.MIDDLE)
    assert block.output.text == "marker"
    assert driver.calls == []


def test_make_driver_without_program():
    with pytest.raises(HueShiftError):
        make_driver(None)


@pytest.mark.parametrize(
    "shifter, cls",
    [
        (HueShifter.REDSHIFT, Redshift),
        (HueShifter.SCT, Sct),
        (HueShifter.GAMMASTEP, Gammastep),
        (HueShifter.WLSUNSET, Wlsunset),
    ],
)
def test_make_driver_kinds(shifter, cls):
    assert type(make_driver(shifter)) is cls


def test_sct_commands():
    spawn = Recorder()
    driver = Sct(spawn=spawn)
    driver.update(4500)
    driver.reset()
    assert spawn.commands == [
        ["sh", "-c", "sct 4500 >/dev/null 2>&1"],
        ["sh", "-c", "sct >/dev/null 2>&1"],
    ]


def test_redshift_commands():
    spawn = Recorder()
    driver = Redshift(spawn=spawn)
    driver.update(4500)
    driver.reset()
    assert spawn.commands == [
        ["sh", "-c", "redshift -O 4500 -P >/dev/null 2>&1"],
        ["sh", "-c", "redshift -x >/dev/null 2>&1"],
    ]


def test_gammastep_commands():
    spawn = Recorder()
    driver = Gammastep(spawn=spawn)
    driver.update(4500)
    driver.reset()
    assert spawn.commands == [
        ["sh", "-c", "pkill gammastep; gammastep -O 4500 -P &"],
        ["sh", "-c", "gammastep -x >/dev/null 2>&1"],
    ]


def test_wlsunset_day_temp_is_one_higher():
    spawn = Recorder()
    driver = Wlsunset(spawn=spawn)
    driver.update(4000)
    driver.reset()
    assert spawn.commands == [
        ["sh", "-c", "pkill wlsunset; wlsunset -T 4001 -t 4000 &"],
        ["sh", "-c", "pkill wlsunset > /dev/null 2>&1"],
    ]


def test_spawn_failure_raises():
    def failing(args):
        raise FileNotFoundError("sh")

    with pytest.raises(HueShiftError):
        Redshift(spawn=failing).update(5000)


def test_detect_prefers_first_available(monkeypatch):
    available = {"gammastep", "wlsunset"}
    monkeypatch.setattr(
        hueshift.shutil, "which", lambda name: f"/bin/{name}" if name in available else None
    )
    assert detect_hue_shifter() is HueShifter.GAMMASTEP


def test_detect_none_available(monkeypatch):
    monkeypatch.setattr(hueshift.shutil, "which", lambda name: None)
    assert detect_hue_shifter() is None