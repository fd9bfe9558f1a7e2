# barblocks

Building blocks for a Linux status bar. Each block reads system state and keeps a `BlockOutput` (text, state and icon name) that a bar such as i3bar or swaybar can show. A block's `update()` refreshes that output and returns the number of seconds until it wants to be updated again, or `None` when it does not need polling.

## Blocks

- `barblocks.load`: the 1, 5 and 15 minute load averages from `/proc/loadavg`. The state is chosen from the 1 minute load per logical core (counted from `/proc/cpuinfo`) against the `info`, `warning` and `critical` thresholds of `LoadConfig`. Helpers: `count_logical_cores`, `parse_loadavg`.
- `barblocks.maildir`: counts mail across the maildirs listed in `MaildirConfig.inboxes`. `MailType.NEW`, `MailType.CUR` or `MailType.ALL` chooses which subdirectories are counted; `threshold_warning` and `threshold_critical` set the state.
- `barblocks.net_device`: `NetworkDevice` describes an interface under `/sys/class/net`: whether it exists, is up, is wireless or a VPN (tun/tap, WireGuard, PPP), its byte counters, its IPv4/IPv6 address (via `ip -json`) and its bitrate (via `iw` or `ethtool`). Parsing helpers such as `decode_escaped_unicode`, `signal_percents`, `parse_ip_json`, `parse_iw_bitrate` and `parse_ethtool_speed` are available on their own.
- `barblocks.net`: `Net` shows throughput, bar graphs of recent traffic, addresses and bitrate for a device. When `NetConfig.device` is not set it follows the device of the default route. A left click swaps `format` and `format_alt`; `view()` returns nothing when the device is inactive or missing and `hide_inactive`/`hide_missing` is set.
- `barblocks.keyboard_layout`: `KeyboardLayout` shows the current layout and variant, optionally renamed through `mappings` keyed by `"layout (variant)"`. Monitors: `SetXkbMap`, `XkbSwitch`, `KbdDaemonBus` and `Sway`.
- `barblocks.hueshift`: `Hueshift` changes the screen colour temperature with `Redshift`, `Sct`, `Gammastep` or `Wlsunset`. A left click sets `click_temp`, a right click resets to 6500K (or to `max_temp` when that is lower), and the wheel moves by `step` (capped at 500) between `min_temp` and `max_temp`. `detect_hue_shifter()` picks the first of these programs found on `PATH`.

Shared types live in `barblocks.common`: `State`, `MouseButton`, `LogicalDirection`, `Scrolling`, `BlockOutput` and `threshold_state`.

## Format templates

Formats use `{name}` placeholders; byte values also accept a unit prefix, as in `{speed_down;K}`. An unknown placeholder raises `ValueError`.

- Load: `1m`, `5m`, `15m` (default `{1m}`).
- Net: `ssid`, `signal_strength`, `frequency`, `bitrate`, `ip`, `ipv6`, `speed_up`, `speed_down`, `graph_up`, `graph_down` (default `{speed_down;K}{speed_up;K}`).
- Keyboard layout: `layout`, `variant` (default `{layout}`).

## Examples

```python
from barblocks.load import Load

block = Load()
delay = block.update()          # seconds until the next update
print(block.output.text, block.output.state)
```

```python
from barblocks.keyboard_layout import (
    KeyboardLayout, KeyboardLayoutConfig, KeyboardLayoutDriver, Sway,
)

config = KeyboardLayoutConfig(driver=KeyboardLayoutDriver.SWAY, format="{layout} {variant}")
monitor = Sway("English (US)")
block = KeyboardLayout(config, monitor)
block.update()                  # None: sway monitors are not polled
print(block.output.text)        # English US
monitor.set_layout_name("German")
block.update()
```

```python
from barblocks.common import MouseButton
from barblocks.hueshift import Hueshift, HueshiftConfig, HueShifter

block = Hueshift(HueshiftConfig(hue_shifter=HueShifter.REDSHIFT, step=200))
block.click(MouseButton.WHEEL_UP)   # runs redshift with 6700K
print(block.output.text)
```

## What the package does not do

- It has no bar of its own: there is no command, no i3bar/swaybar protocol output and no scheduler. The caller runs the blocks and writes their output.
- It does not listen to D-Bus or sway IPC. `KbdDaemonBus` and `Sway` monitors must be created by the caller and fed with `set_layout_id` and `set_layout_name`; the `LOCALEBUS`, `KBDDBUS` and `SWAY` drivers raise `KeyboardLayoutError` unless a monitor is passed in.
- It does not query wireless details itself: `Net.wifi_info` is a callable that returns no SSID, frequency or signal by default (the `ssid` placeholder shows `N/A`) and may be replaced by the caller.
- It does not report memory usage or the music that is playing.

## Installing and testing

```
pip install .
pip install ".[test]"
pytest
```

Python 3.10 or later is required. The package has no third-party runtime dependencies. Some blocks call external tools where they are needed: `ip`, `iw`, `ethtool`, `setxkbmap`, `xkb-switch`, and `sh` to start the colour temperature programs.