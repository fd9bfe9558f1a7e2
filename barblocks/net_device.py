"""Network device queries: sysfs state, traffic counters, addresses, bitrate."""

from __future__ import annotations

import json
import re
import subprocess
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

PathLike = Union[str, Path]
Runner = Callable[[Sequence[str]], bytes]

_DEFAULT_DEV = re.compile(rb"default.*dev (\w*).*")
_ETHTOOL_SPEED = re.compile(rb"Speed: (\d+\w\w/s)")
_IW_BITRATE = re.compile(rb"tx bitrate: (\d+(?:\.?\d+) [A-Za-z]+/s)")
_ESCAPED_BYTE = re.compile(rb"\\x([0-9A-Fa-f]{2})")


class NetError(Exception):
    """Raised when a network device cannot be queried."""


class Unit(Enum):
    """Byte unit prefixes for throughput display."""

    B = "B"
    K = "K"
    M = "M"
    G = "G"
    T = "T"

    @classmethod
    def default(cls) -> "Unit":
        return cls.K

    def __str__(self) -> str:
        return self.name


def _run_command(args: Sequence[str]) -> bytes:
    """Run a command and return its standard output."""
    return subprocess.run(list(args), capture_output=True, check=False).stdout


def decode_escaped_unicode(raw: Union[bytes, str]) -> str:
    """Turn `\\xNN` escapes into bytes and decode the result as UTF-8."""
    if isinstance(raw, str):
        raw = raw.encode("utf-8")
    decoded = _ESCAPED_BYTE.sub(lambda m: bytes([int(m.group(1), 16)]), raw)
    return decoded.decode("utf-8", errors="replace")


def signal_percents(raw: int) -> int:
    """Convert a signal level in dBm to a quality percentage in 0..100."""
    perfect = -20.0
    worst = -85.0
    d = perfect - worst
    level = float(raw)
    percents = 100.0 - (perfect - level) * (15.0 * d + 62.0 * (perfect - level)) / (d * d)
    return max(0, min(100, int(percents)))


def read_file(path: PathLike) -> str:
    """Read a sysfs file, dropping its final character (the newline)."""
    path = Path(path)
    try:
        content = path.read_text()
    except OSError as exc:
        raise NetError(f"failed to open file {path}") from exc
    except UnicodeDecodeError as exc:
        raise NetError(f"failed to read {path}") from exc
    return content[:-1]


def parse_default_device(output: bytes) -> Optional[str]:
    """Device name from `ip route show default` output, if there is one."""
    match = _DEFAULT_DEV.search(output)
    if match is None:
        return None
    try:
        return match.group(1).decode("utf-8")
    except UnicodeDecodeError:
        return None


def parse_ip_json(output: str) -> str:
    """First local address in `ip -json address show` output, or ""."""
    try:
        devices = json.loads(output)
    except json.JSONDecodeError as exc:
        raise NetError("Failed to parse JSON response") from exc
    if not isinstance(devices, list):
        raise NetError("Failed to parse JSON response")
    for device in devices:
        if not isinstance(device, dict):
            raise NetError("Failed to parse JSON response")
        for addr in device.get("addr_info") or []:
            if not isinstance(addr, dict):
                raise NetError("Failed to parse JSON response")
            local = addr.get("local")
            if local is not None:
                return str(local)
    return ""


def _decode_rate(rate: bytes) -> str:
    try:
        return rate.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise NetError("Non-UTF8 bitrate") from exc


def parse_iw_bitrate(output: bytes) -> Optional[str]:
    """Transmit bitrate from `iw dev X link` output."""
    match = _IW_BITRATE.search(output)
    return _decode_rate(match.group(1)) if match else None


def parse_ethtool_speed(output: bytes) -> Optional[str]:
    """Link speed from `ethtool X` output."""
    match = _ETHTOOL_SPEED.search(output)
    return _decode_rate(match.group(1)) if match else None


@dataclass
class NetworkDevice:
    """A network interface as seen under /sys/class/net."""

    device: str
    device_path: Path
    wireless: bool = False
    tun: bool = False
    wg: bool = False
    ppp: bool = False
    run: Runner = field(default=_run_command, repr=False, compare=False)

    @classmethod
    def from_device(cls, device: str, sys_root: PathLike = "/sys/class/net") -> "NetworkDevice":
        """Describe the interface `device` from its sysfs directory."""
        device_path = Path(sys_root) / device
        wireless = (device_path / "wireless").exists()
        tun = (
            (device_path / "tun_flags").exists()
            or device.startswith("tun")
            or device.startswith("tap")
        )
        try:
            uevent = (device_path / "uevent").read_text()
        except (OSError, UnicodeDecodeError):
            uevent = ""
        return cls(
            device=device,
            device_path=device_path,
            wireless=wireless,
            tun=tun,
            wg="wireguard" in uevent,
            ppp="ppp" in uevent,
        )

    @classmethod
    def default_device(cls) -> Optional[str]:
        """Name of the device the default route goes through, if any."""
        try:
            output = _run_command(["ip", "route", "show", "default"])
        except OSError:
            return None
        return parse_default_device(output)

    def exists(self) -> bool:
        """True when the device's sysfs directory exists."""
        return self.device_path.exists()

    def is_up(self) -> bool:
        """True when the device is up; a device that is not up need not be down."""
        operstate_file = self.device_path / "operstate"
        if not operstate_file.exists():
            return False
        if self.is_vpn():
            return True
        operstate = read_file(operstate_file)
        carrier_file = self.device_path / "carrier"
        if not carrier_file.exists():
            return operstate == "up"
        if operstate == "up":
            return True
        try:
            return read_file(carrier_file) == "1"
        except NetError:
            return operstate == "up"

    def _counter(self, name: str) -> int:
        text = read_file(self.device_path / "statistics" / name)
        if not (text.isascii() and text.isdigit()):
            raise NetError(f"Failed to parse {name}")
        return int(text)

    def tx_bytes(self) -> int:
        """Bytes transmitted so far."""
        return self._counter("tx_bytes")

    def rx_bytes(self) -> int:
        """Bytes received so far."""
        return self._counter("rx_bytes")

    def is_wireless(self) -> bool:
        return self.wireless

    def is_vpn(self) -> bool:
        return self.tun or self.wg or self.ppp

    def _query_ip(self, family: str) -> Optional[str]:
        if not self.is_up():
            return None
        try:
            raw = self.run(["ip", "-json", "-family", family, "address", "show", self.device])
        except OSError as exc:
            raise NetError("Failed to execute IP address query.") from exc
        try:
            output = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise NetError("Response contained non-UTF8 characters.") from exc
        return parse_ip_json(output)

    def ip_addr(self) -> Optional[str]:
        """IPv4 address of the device; None when it is not up."""
        return self._query_ip("inet")

    def ipv6_addr(self) -> Optional[str]:
        """IPv6 address of the device; None when it is not up."""
        return self._query_ip("inet6")

    def bitrate(self) -> Optional[str]:
        """Link bitrate via iw (wireless) or ethtool; None when unknown."""
        if not self.is_up():
            return None
        if self.wireless:
            try:
                output = self.run(["iw", "dev", self.device, "link"])
            except OSError as exc:
                raise NetError("Failed to execute bitrate query with iw.") from exc
            return parse_iw_bitrate(output)
        try:
            output = self.run(["ethtool", self.device])
        except OSError as exc:
            raise NetError("Failed to execute bitrate query with ethtool") from exc
        return parse_ethtool_speed(output)