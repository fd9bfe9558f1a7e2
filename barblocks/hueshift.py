"""Colour temperature block driving redshift, sct, gammastep or wlsunset."""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Protocol, Sequence

from barblocks.common import BlockOutput, LogicalDirection, MouseButton, Scrolling

Spawner = Callable[[Sequence[str]], object]

_MAX_STEP = 500
_MAX_TEMP = 10_000
_MIN_TEMP = 1_000
_NEUTRAL_TEMP = 6_500


class HueShiftError(Exception):
    """Raised when the colour temperature cannot be changed."""


class HueShifter(Enum):
    """Programs that can set the screen colour temperature."""

    REDSHIFT = "redshift"
    SCT = "sct"
    GAMMASTEP = "gammastep"
    WLSUNSET = "wlsunset"


def _spawn_child_async(args: Sequence[str]) -> subprocess.Popen:
    """Start a program in the background without waiting for it."""
    return subprocess.Popen(
        list(args),
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )


class HueShiftDriver(Protocol):
    """What the block needs from a colour temperature program."""

    def update(self, temp: int) -> None: ...

    def reset(self) -> None: ...


@dataclass
class _ShellDriver:
    spawn: Spawner = field(default=_spawn_child_async, repr=False)

    program = ""

    def _sh(self, command: str) -> None:
        try:
            self.spawn(["sh", "-c", command])
        except OSError as exc:
            raise HueShiftError(
                f"Failed to set new color temperature using {self.program}."
            ) from exc


class Redshift(_ShellDriver):
    """Sets the temperature with `redshift -O`."""

    program = "redshift"

    def update(self, temp: int) -> None:
        self._sh(f"redshift -O {temp} -P >/dev/null 2>&1")

    def reset(self) -> None:
        self._sh("redshift -x >/dev/null 2>&1")


class Sct(_ShellDriver):
    """Sets the temperature with `sct`."""

    program = "sct"

    def update(self, temp: int) -> None:
        self._sh(f"sct {temp} >/dev/null 2>&1")

    def reset(self) -> None:
        self._sh("sct >/dev/null 2>&1")


class Gammastep(_ShellDriver):
    """Sets the temperature by restarting `gammastep -O`."""

    program = "gammastep"

    def update(self, temp: int) -> None:
        self._sh(f"pkill gammastep; gammastep -O {temp} -P &")

    def reset(self) -> None:
        self._sh("gammastep -x >/dev/null 2>&1")


class Wlsunset(_ShellDriver):
    """Sets the temperature by restarting wlsunset with fixed day and night values."""

    program = "wlsunset"

    def update(self, temp: int) -> None:
        # wlsunset has no one-shot mode and rejects equal day and night values.
        self._sh(f"pkill wlsunset; wlsunset -T {temp + 1} -t {temp} &")

    def reset(self) -> None:
        # No reset option exists; stopping it leaves its defaults behind.
        self._sh("pkill wlsunset > /dev/null 2>&1")


def _has_command(name: str) -> bool:
    return shutil.which(name) is not None


def detect_hue_shifter() -> Optional[HueShifter]:
    """Return the first installed program, in order of preference, or None."""
    for shifter in (
        HueShifter.REDSHIFT,
        HueShifter.SCT,
        HueShifter.GAMMASTEP,
        HueShifter.WLSUNSET,
    ):
        if _has_command(shifter.value):
            return shifter
    return None


_DRIVERS = {
    HueShifter.REDSHIFT: Redshift,
    HueShifter.SCT: Sct,
    HueShifter.GAMMASTEP: Gammastep,
    HueShifter.WLSUNSET: Wlsunset,
}


def make_driver(shifter: Optional[HueShifter]) -> HueShiftDriver:
    """Build the driver for `shifter`; None means no program was found."""
    if shifter is None:
        raise HueShiftError("Could not detect driver program")
    return _DRIVERS[shifter]()


@dataclass
class HueshiftConfig:
    """Settings for the hueshift block."""

    interval: float = 5.0
    max_temp: int = _MAX_TEMP
    min_temp: int = _MIN_TEMP
    current_temp: int = _NEUTRAL_TEMP
    hue_shifter: Optional[HueShifter] = field(default_factory=detect_hue_shifter)
    step: int = 100
    click_temp: int = _NEUTRAL_TEMP


class Hueshift:
    """Shows the colour temperature; clicks and scrolling change it."""

    def __init__(
        self,
        config: Optional[HueshiftConfig] = None,
        scrolling: Scrolling = Scrolling.REVERSE,
        driver: Optional[HueShiftDriver] = None,
    ) -> None:
        self.config = config or HueshiftConfig()
        config = self.config
        # Large steps are capped to avoid harsh changes.
        self.step = min(config.step, _MAX_STEP)
        self.max_temp = min(config.max_temp, _MAX_TEMP)
        if config.min_temp < _MIN_TEMP or config.min_temp > config.max_temp:
            self.min_temp = _MIN_TEMP
        else:
            self.min_temp = config.min_temp
        self.current_temp = config.current_temp
        self.click_temp = config.click_temp
        self.scrolling = scrolling
        self.driver = driver if driver is not None else make_driver(config.hue_shifter)
        self.output = BlockOutput(text=str(self.current_temp))

    def update(self) -> float:
        """Refresh the output; return the seconds until the next update."""
        self.output.text = str(self.current_temp)
        return self.config.interval

    def click(self, button: MouseButton) -> None:
        """Left sets the click temperature, right resets, the wheel steps."""
        if button is MouseButton.LEFT:
            self.current_temp = self.click_temp
            self.driver.update(self.current_temp)
        elif button is MouseButton.RIGHT:
            if self.max_temp > _NEUTRAL_TEMP:
                self.current_temp = _NEUTRAL_TEMP
                self.driver.reset()
            else:
                self.current_temp = self.max_temp
                self.driver.update(self.current_temp)
        else:
            direction = self.scrolling.to_logical_direction(button)
            if direction is LogicalDirection.UP:
                new_temp = self.current_temp + self.step
                if new_temp <= self.max_temp:
                    self.driver.update(new_temp)
                    self.current_temp = new_temp
            elif direction is LogicalDirection.DOWN:
                new_temp = self.current_temp - self.step
                if new_temp >= self.min_temp:
                    self.driver.update(new_temp)
                    self.current_temp = new_temp
            else:
                return
        self.output.text = str(self.current_temp)