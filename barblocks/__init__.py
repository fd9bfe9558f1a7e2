"""Status bar blocks for load average, maildir, network, keyboard layout and colour temperature."""

__version__ = "0.1.0"

__all__ = [
    "common",
    "hueshift",
    "keyboard_layout",
    "load",
    "maildir",
    "net",
    "net_device",
]