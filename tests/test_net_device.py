import json

import pytest

from barblocks.net_device import (
    NetError,
    NetworkDevice,
    Unit,
    decode_escaped_unicode,
    parse_default_device,
    parse_ethtool_speed,
    parse_ip_json,
    parse_iw_bitrate,
    read_file,
    signal_percents,
)


def test_ssid_decode_escaped_unicode():
    assert decode_escaped_unicode(rb"\xc4\x85\xc5\xbeuolas") == "ąžuolas"


def test_ssid_decode_escaped_emoji():
    assert decode_escaped_unicode(rb"\xf0\x9f\x8c\xb3oak") == "🌳oak"


def test_ssid_decode_legit_backslash():
    assert decode_escaped_unicode(rb"\x5cx backslash") == r"\x backslash"


def test_ssid_decode_surrounded_by_spaces():
    assert decode_escaped_unicode(rb"\x20surrounded by spaces\x20") == " surrounded by spaces "


def test_ssid_decode_noescape_path():
    path = r"C:\Program Files(x86)\Custom\Utilities\Tool.exe"
    assert decode_escaped_unicode(path.encode()) == path


def test_ssid_decode_noescape_invalid():
    assert decode_escaped_unicode(rb"\xp0") == r"\xp0"


def test_signal_percents_perfect_and_range():
    assert signal_percents(-20) == 100
    assert signal_percents(-127) == 0
    values = [signal_percents(level) for level in range(-100, 0)]
    assert all(0 <= v <= 100 for v in values)


def test_signal_percents_monotonic_in_range():
    values = [signal_percents(level) for level in range(-85, -19)]
    assert values == sorted(values)


def test_unit_display():
    assert str(Unit.K) == "K"
    assert Unit.default() is Unit.K


def test_read_file_drops_last_char(tmp_path):
    path = tmp_path / "operstate"
    path.write_text("up\n")
    assert read_file(path) == "up"
    path.write_text("abc")
    assert read_file(path) == "ab"


def test_read_file_missing(tmp_path):
    with pytest.raises(NetError):
        read_file(tmp_path / "missing")


def test_parse_default_device():
    out = b"default via 192.168.1.1 dev wlan0 proto dhcp metric 600\n"
    assert parse_default_device(out) == "wlan0"
    assert parse_default_device(b"") is None


def test_parse_ip_json():
    data = [
        {"ifname": "eth0", "addr_info": []},
        {"ifname": "eth0", "addr_info": [{"family": "inet", "local": "10.0.0.5"}]},
    ]
    assert parse_ip_json(json.dumps(data)) == "10.0.0.5"
    assert parse_ip_json("[]") == ""
    assert parse_ip_json(json.dumps([{"ifname": "eth0"}])) == ""


def test_parse_ip_json_invalid():
    with pytest.raises(NetError):
        parse_ip_json("not json")


def test_parse_bitrates():
    assert parse_iw_bitrate(b"\ttx bitrate: 144.4 MBit/s MCS 15\n") == "144.4 MBit/s"
    assert parse_iw_bitrate(b"Not connected.") is None
    assert parse_ethtool_speed(b"\tSpeed: 1000Mb/s\n\tDuplex: Full\n") == "1000Mb/s"
    assert parse_ethtool_speed(b"\tSpeed: Unknown!\n") is None


def make_dev(tmp_path, name="eth0", operstate=None, carrier=None, uevent=None, wireless=False):
    path = tmp_path / name
    path.mkdir()
    if operstate is not None:
        (path / "operstate").write_text(operstate + "\n")
    if carrier is not None:
        (path / "carrier").write_text(carrier + "\n")
    if uevent is not None:
        (path / "uevent").write_text(uevent)
    if wireless:
        (path / "wireless").mkdir()
    return NetworkDevice.from_device(name, sys_root=tmp_path)


def test_is_up_states(tmp_path):
    assert make_dev(tmp_path, "a", operstate="up").is_up() is True
    assert make_dev(tmp_path, "b", operstate="down").is_up() is False
    assert make_dev(tmp_path, "c", operstate="unknown", carrier="1").is_up() is True
    assert make_dev(tmp_path, "d", operstate="down", carrier="0").is_up() is False
    assert make_dev(tmp_path, "e").is_up() is False


def test_vpn_devices_count_as_up(tmp_path):
    tun = make_dev(tmp_path, "tun0", operstate="unknown")
    assert tun.is_vpn() is True
    assert tun.is_up() is True
    wg = make_dev(tmp_path, "wg0", operstate="unknown", uevent="DEVTYPE=wireguard\n")
    assert wg.wg is True
    assert wg.is_up() is True


def test_wireless_and_exists(tmp_path):
    dev = make_dev(tmp_path, "wlan0", operstate="up", wireless=True)
    assert dev.is_wireless() is True
    assert dev.exists() is True
    assert NetworkDevice.from_device("nope", sys_root=tmp_path).exists() is False


def test_byte_counters(tmp_path):
    dev = make_dev(tmp_path, operstate="up")
    stats = dev.device_path / "statistics"
    stats.mkdir()
    (stats / "tx_bytes").write_text("12345\n")
    (stats / "rx_bytes").write_text("oops\n")
    assert dev.tx_bytes() == 12345
    with pytest.raises(NetError):
        dev.rx_bytes()


def test_ip_addr_uses_ip_command(tmp_path):
    dev = make_dev(tmp_path, operstate="up")
    calls = []

    def fake_run(args):
        calls.append(list(args))
        return json.dumps([{"addr_info": [{"local": "fe80::1"}]}]).encode()

    dev.run = fake_run
    assert dev.ipv6_addr() == "fe80::1"
    assert calls == [["ip", "-json", "-family", "inet6", "address", "show", "eth0"]]


def test_ip_addr_none_when_down(tmp_path):
    dev = make_dev(tmp_path, operstate="down")
    assert dev.ip_addr() is None


def test_bitrate_ethtool_and_iw(tmp_path):
    wired = make_dev(tmp_path, "eth0", operstate="up")
    wired.run = lambda args: b"Speed: 100Mb/s\n" if args[0] == "ethtool" else b""
    assert wired.bitrate() == "100Mb/s"

    wifi = make_dev(tmp_path, "wlan0", operstate="up", wireless=True)
    wifi.run = lambda args: b"tx bitrate: 72.2 MBit/s\n" if args[0] == "iw" else b""
    assert wifi.bitrate() == "72.2 MBit/s"


def test_bitrate_command_missing(tmp_path):
    dev = make_dev(tmp_path, operstate="up")

    def failing(args):
        raise FileNotFoundError(args[0])

    dev.run = failing
    with pytest.raises(NetError):
        dev.bitrate()