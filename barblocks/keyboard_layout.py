"""Keyboard layout block and the monitors that report the active layout."""

from __future__ import annotations

import re
import subprocess
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Protocol, Sequence, Tuple

from barblocks.common import BlockOutput, _render, _Value

Runner = Callable[[Sequence[str]], bytes]

_WHITESPACE = re.compile(r"\s")


class KeyboardLayoutError(Exception):
    """Raised when the keyboard layout cannot be determined."""


class KeyboardLayoutDriver(Enum):
    """Where the keyboard layout is read from."""

    SETXKBMAP = "setxkbmap"
    LOCALEBUS = "localebus"
    KBDDBUS = "kbddbus"
    XKBSWITCH = "xkbswitch"
    SWAY = "sway"


def _run_command(args: Sequence[str]) -> bytes:
    """Run a command and return its standard output."""
    return subprocess.run(list(args), capture_output=True, check=False).stdout


def _decode(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise KeyboardLayoutError("Non-UTF8 input.") from exc


def parse_setxkbmap_layout(output: str) -> str:
    """Return the value of the `layout:` entry of `setxkbmap -query` output."""
    line = next((line for line in output.split("\n") if line.startswith("layout")), None)
    if line is None:
        raise KeyboardLayoutError("Could not find the layout entry from setxkbmap.")
    return _WHITESPACE.split(line)[-1]


def parse_xkb_switch(output: str) -> Tuple[str, Optional[str]]:
    """Split `xkb-switch -p` output of the form `layout(variant)` or `layout`."""
    components = output.rstrip().split("(")
    layout = components[0]
    rest = components[1:]
    variant = rest[-1][:-1] if rest else None
    return layout, variant


def kbdd_layout(layouts: str, index: int) -> str:
    """Pick the layout at `index` from a comma separated setxkbmap layout list.

    A variant glued to the layout (`bg:bas_phonetic`) is dropped. When the
    index is out of range the whole list is returned.
    """
    parts = layouts.split(",")
    if 0 <= index < len(parts):
        return parts[index].split(":")[0]
    return layouts


def sway_layout(name: str) -> str:
    """Layout part of a sway layout name such as `English (US)`."""
    paren = name.find("(")
    if paren < 0:
        return name
    head = name[:paren]
    words = head.split()
    return words[0] if words else head


def sway_variant(name: str) -> str:
    """Variant part of a sway layout name, or `N/A` when it has none."""
    paren = name.find("(")
    if paren < 0:
        return "N/A"
    return name[paren:][1:-1]


class KeyboardLayoutMonitor(Protocol):
    """What the keyboard layout block needs from a monitor."""

    def keyboard_layout(self) -> str: ...

    def keyboard_variant(self) -> str: ...

    def must_poll(self) -> bool: ...


def _setxkbmap_layouts(run: Runner) -> str:
    try:
        raw = run(["setxkbmap", "-query"])
    except OSError as exc:
        raise KeyboardLayoutError("Failed to execute setxkbmap.") from exc
    return parse_setxkbmap_layout(_decode(raw))


class SetXkbMap:
    """Reads the layout from `setxkbmap -query`; must be polled."""

    def __init__(self, run: Optional[Runner] = None) -> None:
        self._run = run or _run_command

    def keyboard_layout(self) -> str:
        return _setxkbmap_layouts(self._run)

    def keyboard_variant(self) -> str:
        return "N/A"

    def must_poll(self) -> bool:
        return True


class XkbSwitch:
    """Reads the layout and variant from `xkb-switch -p`; must be polled."""

    def __init__(self, run: Optional[Runner] = None) -> None:
        self._run = run or _run_command
        try:
            self._run(["xkb-switch"])
        except OSError as exc:
            raise KeyboardLayoutError("Failed to find xkb-switch in PATH") from exc

    def _show(self) -> Tuple[str, Optional[str]]:
        try:
            raw = self._run(["xkb-switch", "-p"])
        except OSError as exc:
            raise KeyboardLayoutError("Failed to execute `xkb-switch -p`.") from exc
        return parse_xkb_switch(_decode(raw))

    def keyboard_layout(self) -> str:
        return self._show()[0]

    def keyboard_variant(self) -> str:
        variant = self._show()[1]
        return variant if variant is not None else ""

    def must_poll(self) -> bool:
        return False if False else True


class KbdDaemonBus:
    """Per-window layouts from kbdd: the layout index selects from setxkbmap's list."""

    def __init__(self, layout_id: int = 0, run: Optional[Runner] = None) -> None:
        self._run = run or _run_command
        try:
            self._run(["setxkbmap", "-version"])
        except OSError as exc:
            raise KeyboardLayoutError("setxkbmap not found") from exc
        self.layout_id = layout_id

    def set_layout_id(self, index: int) -> None:
        """Record the layout index reported by a kbdd `layoutChanged` signal."""
        self.layout_id = index

    def keyboard_layout(self) -> str:
        return kbdd_layout(_setxkbmap_layouts(self._run), self.layout_id)

    def keyboard_variant(self) -> str:
        return "N/A"

    def must_poll(self) -> bool:
        return False


class Sway:
    """Layout from sway's `xkb_active_layout_name` of the chosen keyboard."""

    def __init__(self, layout_name: str) -> None:
        self.layout_name = layout_name

    def set_layout_name(self, name: str) -> None:
        """Record the active layout name reported by a sway input event."""
        self.layout_name = name

    def keyboard_layout(self) -> str:
        return sway_layout(self.layout_name)

    def keyboard_variant(self) -> str:
        return sway_variant(self.layout_name)

    def must_poll(self) -> bool:
        return False


@dataclass
class KeyboardLayoutConfig:
    """Settings for the keyboard layout block."""

    format: str = "{layout}"
    driver: KeyboardLayoutDriver = KeyboardLayoutDriver.SETXKBMAP
    interval: float = 60.0
    sway_kb_identifier: Optional[str] = None
    mappings: Optional[Dict[str, str]] = None


def _default_monitor(driver: KeyboardLayoutDriver) -> KeyboardLayoutMonitor:
    if driver is KeyboardLayoutDriver.SETXKBMAP:
        return SetXkbMap()
    if driver is KeyboardLayoutDriver.XKBSWITCH:
        return XkbSwitch()
    raise KeyboardLayoutError(f"the {driver.value} driver needs a monitor to be given")


class KeyboardLayout:
    """Shows the current keyboard layout, optionally renamed through mappings."""

    def __init__(
        self,
        config: Optional[KeyboardLayoutConfig] = None,
        monitor: Optional[KeyboardLayoutMonitor] = None,
    ) -> None:
        self.config = config or KeyboardLayoutConfig()
        self.monitor = monitor if monitor is not None else _default_monitor(self.config.driver)
        self.update_interval = self.config.interval if self.monitor.must_poll() else None
        self.output = BlockOutput()

    def update(self) -> Optional[float]:
        """Refresh the output; return seconds to the next poll, or None."""
        layout = self.monitor.keyboard_layout()
        variant = self.monitor.keyboard_variant()
        if self.config.mappings:
            layout = self.config.mappings.get(f"{layout} ({variant})", layout)
        values = {"layout": _Value(layout), "variant": _Value(variant)}
        self.output.text = _render(self.config.format, values)
        return self.update_interval