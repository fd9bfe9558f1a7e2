"""Shared types for status bar blocks: states, mouse input and text output."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Union


class State(Enum):
    """Visual state of a block's widget."""

    IDLE = "idle"
    INFO = "info"
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"


class MouseButton(Enum):
    """Mouse buttons reported by the bar."""

    LEFT = "left"
    MIDDLE = "middle"
    RIGHT = "right"
    WHEEL_UP = "wheel_up"
    WHEEL_DOWN = "wheel_down"
    FORWARD = "forward"
    BACK = "back"
    UNKNOWN = "unknown"


class LogicalDirection(Enum):
    """Direction a scroll event means, independent of the wheel setting."""

    UP = "up"
    DOWN = "down"


class Scrolling(Enum):
    """How wheel events map onto logical directions."""

    REVERSE = "reverse"
    NATURAL = "natural"

    def to_logical_direction(self, button: MouseButton) -> Optional[LogicalDirection]:
        """Map a wheel button to a direction; other buttons give None."""
        if button is MouseButton.WHEEL_UP:
            return LogicalDirection.UP if self is Scrolling.REVERSE else LogicalDirection.DOWN
        if button is MouseButton.WHEEL_DOWN:
            return LogicalDirection.DOWN if self is Scrolling.REVERSE else LogicalDirection.UP
        return None


@dataclass
class BlockOutput:
    """The text widget a block shows on the bar."""

    text: str = ""
    state: State = State.IDLE
    icon: Optional[str] = None


def threshold_state(
    value: float,
    warning: float,
    critical: float,
    info: Optional[float] = None,
) -> State:
    """Pick a state for a value: strictly above a threshold escalates it."""
    if value > critical:
        return State.CRITICAL
    if value > warning:
        return State.WARNING
    if info is not None and value > info:
        return State.INFO
    return State.IDLE


_PREFIX_FACTORS = {
    "K": 1024.0,
    "M": 1024.0**2,
    "G": 1024.0**3,
    "T": 1024.0**4,
}

_PLACEHOLDER = re.compile(r"\{([A-Za-z0-9_]+)(?:;([A-Za-z]*))?\}")


@dataclass(frozen=True)
class _Value:
    """A value to put into a format template, with an optional unit."""

    raw: Union[float, int, str]
    unit: str = ""

    def render(self, prefix: str = "") -> str:
        raw = self.raw
        if isinstance(raw, str):
            return raw
        if self.unit == "%":
            return f"{raw:.0f}%"
        if self.unit == "B":
            return self._render_bytes(float(raw), prefix)
        if isinstance(raw, int):
            return str(raw)
        return f"{raw:.2f}"

    @staticmethod
    def _render_bytes(raw: float, prefix: str) -> str:
        if not math.isfinite(raw):
            return f"{raw}B"
        if prefix:
            try:
                factor = _PREFIX_FACTORS[prefix.upper()]
            except KeyError:
                raise ValueError(f"unknown unit prefix '{prefix}'") from None
            return f"{raw / factor:.1f}{prefix.upper()}B"
        for name in ("T", "G", "M", "K"):
            factor = _PREFIX_FACTORS[name]
            if abs(raw) >= factor:
                return f"{raw / factor:.1f}{name}B"
        return f"{raw:.0f}B"


def _render(template: str, values: Mapping[str, _Value]) -> str:
    """Fill `{name}` and `{name;PREFIX}` placeholders from `values`."""

    def substitute(match: re.Match) -> str:
        name, prefix = match.group(1), match.group(2) or ""
        try:
            value = values[name]
        except KeyError:
            raise ValueError(f"unknown placeholder '{name}'") from None
        return value.render(prefix)

    return _PLACEHOLDER.sub(substitute, template)