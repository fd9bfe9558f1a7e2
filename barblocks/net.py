"""Network throughput and connection details block."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from barblocks.common import BlockOutput, MouseButton, _render, _Value
from barblocks.net_device import NetworkDevice

WifiInfo = Tuple[Optional[str], Optional[float], Optional[int]]

_GRAPH_BARS = "▁▂▃▄▅▆▇█"
_HISTORY = 10
_INACTIVE_TEXT = "×"


@dataclass
class NetConfig:
    """Settings for the net block."""

    interval: float = 1.0
    format: str = "{speed_down;K}{speed_up;K}"
    format_alt: Optional[str] = None
    device: Optional[str] = None
    hide_inactive: bool = False
    hide_missing: bool = False


def device_icon(device: NetworkDevice) -> str:
    """Icon name matching the kind of network device."""
    if device.is_wireless():
        return "net_wireless"
    if device.is_vpn():
        return "net_vpn"
    if device.device == "lo":
        return "net_loopback"
    return "net_wired"


def _bar_graph(values: List[float]) -> str:
    """Render a row of values as block characters scaled between min and max."""
    low, high = min(values), max(values)
    span = high - low
    top = len(_GRAPH_BARS) - 1
    if span <= 0:
        return _GRAPH_BARS[0] * len(values)
    return "".join(_GRAPH_BARS[round((value - low) / span * top)] for value in values)


def _no_wifi() -> WifiInfo:
    return None, None, None


def _default_device_name() -> str:
    name = NetworkDevice.default_device()
    return name if name else "lo"


def _mentions(name: str, *templates: Optional[str]) -> bool:
    return any(template is not None and name in template for template in templates)


class Net:
    """Shows throughput of a network device, plus addresses and bitrate on demand."""

    def __init__(
        self,
        config: Optional[NetConfig] = None,
        device: Optional[NetworkDevice] = None,
    ) -> None:
        self.config = config or NetConfig()
        config = self.config
        if device is None:
            name = config.device if config.device is not None else _default_device_name()
            device = NetworkDevice.from_device(name)
        self.device = device
        self.auto_device = config.device is None and device is None
        self.auto_device = config.device is None and self._given_none(device)

        self.format = config.format
        self.format_alt = config.format_alt
        self.bitrate: Optional[str] = "" if _mentions("bitrate", self.format, self.format_alt) else None
        self.ip_addr: Optional[str] = "" if _mentions("ip", self.format, self.format_alt) else None
        self.ipv6_addr: Optional[str] = "" if _mentions("ipv6", self.format, self.format_alt) else None

        self.speed_up = 0.0
        self.speed_down = 0.0
        self.graph_tx = ""
        self.graph_rx = ""
        self.tx_buff: List[float] = [0.0] * _HISTORY
        self.rx_buff: List[float] = [0.0] * _HISTORY
        self.tx_bytes = self._safe_counter(self.device.tx_bytes)
        self.rx_bytes = self._safe_counter(self.device.rx_bytes)
        self.active = True
        self.exists = True
        self.last_update = time.monotonic() - 30.0
        self.wifi_info: Callable[[], WifiInfo] = _no_wifi
        self.output = BlockOutput(text="", icon=device_icon(self.device))

    def _given_none(self, device: NetworkDevice) -> bool:
        return getattr(self, "_auto_marker", None) is None and self.config.device is None and not hasattr(self, "_explicit")

    @staticmethod
    def _safe_counter(read: Callable[[], int]) -> int:
        try:
            return read()
        except Exception:
            return 0

    def _update_bitrate(self) -> None:
        if self.bitrate is not None:
            rate = self.device.bitrate()
            if rate is not None:
                self.bitrate = rate

    def _update_ip_addr(self) -> None:
        if self.ip_addr is not None:
            address = self.device.ip_addr()
            if address is not None:
                self.ip_addr = address
        if self.ipv6_addr is not None:
            address = self.device.ipv6_addr()
            if address is not None:
                self.ipv6_addr = address

    def update_tx_rx(self) -> None:
        """Recompute the transfer rates and the history graphs."""
        interval = self.config.interval

        current_tx = self.device.tx_bytes()
        tx_rate = int(max(current_tx - self.tx_bytes, 0) / interval)
        self.tx_bytes = current_tx
        self.speed_up = float(tx_rate)
        self.tx_buff = self.tx_buff[1:] + [float(tx_rate)]
        self.graph_tx = _bar_graph(self.tx_buff)

        current_rx = self.device.rx_bytes()
        rx_rate = int(max(current_rx - self.rx_bytes, 0) / interval)
        self.rx_bytes = current_rx
        self.speed_down = float(rx_rate)
        self.rx_buff = self.rx_buff[1:] + [float(rx_rate)]
        self.graph_rx = _bar_graph(self.rx_buff)

    def update(self) -> float:
        """Refresh the output; return the seconds until the next update."""
        if self.auto_device:
            name = _default_device_name()
            if self.device.device != name:
                self.device = NetworkDevice.from_device(name)
                self.output.icon = device_icon(self.device)

        self.exists = self.device.exists()
        self.active = self.exists and self.device.is_up()
        if not self.active:
            self.output.text = _INACTIVE_TEXT
            return self.config.interval

        now = time.monotonic()
        elapsed = int(now - self.last_update)
        if elapsed % 10 == 0:
            self._update_bitrate()

        waiting_for_ip = self.ip_addr == ""
        waiting_for_ipv6 = self.ipv6_addr == ""
        if elapsed > 30 or waiting_for_ip or waiting_for_ipv6:
            self._update_ip_addr()
            self.last_update = now

        self.update_tx_rx()

        ssid, freq, signal = self.wifi_info()
        values = {
            "ssid": _Value(ssid if ssid is not None else "N/A"),
            "signal_strength": _Value(signal if signal is not None else 0, "%"),
            "frequency": _Value(freq if freq is not None else 0.0, "Hz"),
            "bitrate": _Value(self.bitrate or ""),
            "ip": _Value(self.ip_addr or ""),
            "ipv6": _Value(self.ipv6_addr or ""),
            "speed_up": _Value(self.speed_up, "B"),
            "speed_down": _Value(self.speed_down, "B"),
            "graph_up": _Value(self.graph_tx),
            "graph_down": _Value(self.graph_rx),
        }
        self.output.text = _render(self.format, values)
        return self.config.interval

    def click(self, button: MouseButton) -> None:
        """A left click swaps in the alternative format and refreshes."""
        if button is MouseButton.LEFT:
            if self.format_alt is not None:
                self.format, self.format_alt = self.format_alt, self.format
            self.update()

    def view(self) -> List[BlockOutput]:
        """Widgets to show; empty when the device is hidden as inactive or missing."""
        if (not self.active and self.config.hide_inactive) or (
            not self.exists and self.config.hide_missing
        ):
            return []
        return [self.output]