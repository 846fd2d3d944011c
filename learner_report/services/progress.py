from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm

"""Dispatch progress bar.

One tick per candidate while notifications go out, with running sent/failed
counts as postfix. Only drawn when stdout is a terminal so that piped output
and CI logs stay free of control sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """Context manager around an optional tqdm bar (None when not on a TTY)."""

    def __init__(self, total: int, *, description: str = "Sending reports") -> None:
        self.total = total
        self.description = description
        self.current = 0
        self.enabled = is_tty_enabled()
        self.pbar: Any = (
            tqdm(
                total=total,
                desc=description,
                unit="candidate",
                leave=True,
                ncols=80,
                ascii=True,
            )
            if self.enabled
            else None
        )

    def start_item(self, label: str) -> None:
        """Mark the next candidate as in flight (label shown next to the bar)."""
        self.current += 1
        if self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({label})")

    def finish_item(self) -> None:
        if self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_description(self.description)

    def set_postfix(self, **counts: Any) -> None:
        if self.pbar is not None:
            self.pbar.set_postfix(**counts)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
