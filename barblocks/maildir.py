"""Maildir mail counter block."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from barblocks.common import BlockOutput, State

PathLike = Union[str, Path]


def _count_entries(directory: Path) -> int:
    try:
        entries = list(directory.iterdir())
    except OSError:
        return 0
    return sum(1 for entry in entries if not entry.name.startswith(".") and entry.is_file())


class MailType(Enum):
    """Which mails of a maildir to count."""

    NEW = "new"
    CUR = "cur"
    ALL = "all"

    def count_mail(self, maildir_path: PathLike) -> int:
        """Count the mails of this kind in the maildir at `maildir_path`."""
        root = Path(maildir_path)
        if self is MailType.NEW:
            return _count_entries(root / "new")
        if self is MailType.CUR:
            return _count_entries(root / "cur")
        return _count_entries(root / "new") + _count_entries(root / "cur")


@dataclass
class MaildirConfig:
    """Settings for the maildir block."""

    interval: float = 5.0
    inboxes: List[str] = field(default_factory=list)
    threshold_warning: int = 1
    threshold_critical: int = 10
    display_type: MailType = MailType.NEW
    icon: bool = True


class Maildir:
    """Shows the number of mails across a set of maildirs."""

    def __init__(self, config: Optional[MaildirConfig] = None) -> None:
        self.config = config or MaildirConfig()
        self.output = BlockOutput(text="", icon="mail" if self.config.icon else None)

    def update(self) -> float:
        """Recount mail; return the seconds until the next update."""
        count = sum(self.config.display_type.count_mail(inbox) for inbox in self.config.inboxes)
        if count >= self.config.threshold_critical:
            state = State.CRITICAL
        elif count >= self.config.threshold_warning:
            state = State.WARNING
        else:
            state = State.IDLE
        self.output.state = state
        self.output.text = str(count)
        return self.config.interval