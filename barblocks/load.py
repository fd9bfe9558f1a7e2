"""System load average block."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple, Optional, Union

from barblocks.common import BlockOutput, State, _render, _Value, threshold_state

PathLike = Union[str, Path]


@dataclass
class LoadConfig:
    """Settings for the load block."""

    format: str = "{1m}"
    interval: float = 5.0
    info: float = 0.3
    warning: float = 0.6
    critical: float = 0.9


class LoadAverage(NamedTuple):
    """The 1, 5 and 15 minute load averages."""

    one: float
    five: float
    fifteen: float


def count_logical_cores(cpuinfo_text: str) -> int:
    """Count the logical processors listed in /proc/cpuinfo contents."""
    return sum(1 for line in cpuinfo_text.splitlines() if line.startswith("processor"))


def parse_loadavg(text: str) -> LoadAverage:
    """Parse the first three fields of /proc/loadavg contents."""
    fields = text.split(" ")[:3]
    if len(fields) < 3:
        raise ValueError(f"malformed load average: {text!r}")
    try:
        return LoadAverage(*(float(field) for field in fields))
    except ValueError as exc:
        raise ValueError(f"malformed load average: {text!r}") from exc


class Load:
    """Shows the load average and colours it by load per logical core."""

    def __init__(
        self,
        config: Optional[LoadConfig] = None,
        cpuinfo_path: PathLike = "/proc/cpuinfo",
        loadavg_path: PathLike = "/proc/loadavg",
    ) -> None:
        self.config = config or LoadConfig()
        self.loadavg_path = Path(loadavg_path)
        try:
            content = Path(cpuinfo_path).read_text()
        except OSError as exc:
            raise OSError("Your system doesn't support /proc/cpuinfo") from exc
        self.logical_cores = count_logical_cores(content)
        self.output = BlockOutput(state=State.INFO, icon="cogs")

    def update(self) -> float:
        """Refresh the output; return the seconds until the next update."""
        try:
            text = self.loadavg_path.read_text()
        except OSError as exc:
            raise OSError(
                "Your system does not support reading the load average from /proc/loadavg"
            ) from exc
        load = parse_loadavg(text)
        values = {
            "1m": _Value(load.one),
            "5m": _Value(load.five),
            "15m": _Value(load.fifteen),
        }

        if self.logical_cores:
            used = load.one / self.logical_cores
        else:
            used = math.inf if load.one > 0 else math.nan

        self.output.state = threshold_state(
            used, self.config.warning, self.config.critical, self.config.info
        )
        self.output.text = _render(self.config.format, values)
        return self.config.interval