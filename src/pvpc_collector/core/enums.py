from __future__ import annotations

from enum import Enum


class WindowEnd(str, Enum):
    TODAY = "today"
    TOMORROW = "tomorrow"
