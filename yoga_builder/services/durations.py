from __future__ import annotations

import re


_UNIT_SECONDS = {
    "h": 3600, "hr": 3600, "hrs": 3600, "hour": 3600, "hours": 3600,
    "m": 60, "min": 60, "mins": 60, "minute": 60, "minutes": 60,
    "s": 1, "sec": 1, "secs": 1, "second": 1, "seconds": 1,
}

_PART = re.compile(r"(\d+)\s*([a-z]+)")
_FULL = re.compile(r"(?:\d+\s*[a-z]+\s*)+")


def parse_duration(text: str) -> int:
    """Parse a pose duration ("30s", "1m 30s", "1:30", "90") into seconds."""
    if text is None:
        raise ValueError("Duration is required")
    s = str(text).strip().lower()
    if not s:
        raise ValueError("Duration is required")

    if s.isdigit():
        return int(s)

    if ":" in s:
        parts = s.split(":")
        if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
            raise ValueError(f"Invalid duration: {text!r}")
        nums = [int(p) for p in parts]
        if any(n >= 60 for n in nums[1:]):
            raise ValueError(f"Invalid duration: {text!r}")
        if len(nums) == 2:
            return nums[0] * 60 + nums[1]
        return nums[0] * 3600 + nums[1] * 60 + nums[2]

    if not _FULL.fullmatch(s):
        raise ValueError(f"Invalid duration: {text!r}")

    total = 0
    for amount, unit in _PART.findall(s):
        if unit not in _UNIT_SECONDS:
            raise ValueError(f"Unknown duration unit {unit!r} in {text!r}")
        total += int(amount) * _UNIT_SECONDS[unit]
    return total


def format_duration(seconds: float) -> str:
    total = max(0, int(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
