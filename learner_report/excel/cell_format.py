from __future__ import annotations

import re
from datetime import date, datetime, time
from fractions import Fraction
from typing import Any

"""Display-text rendering of workbook cells.

openpyxl hands back the stored value (a float for a fraction-formatted
"6/17", a datetime for a "6/17" Excel turned into a date). Rows must carry
the text the sheet shows instead, so each value is rendered with its
``number_format``:

- fraction formats ("# ?/??", "?/8", ...) -> "6/17", "1 1/2"
- date / time values -> the format's tokens ("m/d" -> "6/17")
- percentages ("0%", "0.00%") -> "35%"
- anything else -> the plain value (integral floats without ".0")
"""

__all__ = [
    "format_cell",
]

# [Red] / [$-409] / "literal" / \x / _x (padding) / *x (fill)
_FORMAT_NOISE_RE = re.compile(r'\[[^\]]*\]|"([^"]*)"|\\(.)|_.|\*.')
_FRACTION_RE = re.compile(r"(#*\s*)([?0#]+)\s*/\s*([?0#]+|\d+)")
_PERCENT_RE = re.compile(r"0(?:\.(0+))?%")
_DATE_TOKEN_RE = re.compile(
    r"yyyy|yy|mmmmm|mmmm|mmm|mm|m|dddd|ddd|dd|d|hh|h|ss|s|am/pm|a/p|.",
    re.IGNORECASE,
)
_DATE_TOKENS = frozenset({"yyyy", "yy", "mmmmm", "mmmm", "mmm", "mm", "m", "dddd", "ddd", "dd", "d"})
_CLOCK_TOKENS = frozenset({"hh", "h", "mm", "m", "ss", "s", "am/pm", "a/p"})


def _first_section(number_format: str) -> str:
    """Positive-number section of the format with literals unquoted."""
    section = number_format.split(";", 1)[0]
    return _FORMAT_NOISE_RE.sub(lambda m: m.group(1) or m.group(2) or "", section)


def _format_fraction(value: float, match: re.Match[str]) -> str:
    whole_part, _, denominator = match.groups()
    negative = value < 0
    value = abs(value)
    if denominator.isdigit() and int(denominator) > 0:
        # 分母固定 (例: "?/8" は 4/8 を約分しない)
        num, den = round(value * int(denominator)), int(denominator)
    else:
        frac = Fraction(value).limit_denominator(10 ** len(denominator) - 1)
        num, den = frac.numerator, frac.denominator

    whole = 0
    if whole_part.strip():
        whole, num = divmod(num, den)

    if num == 0:
        text = str(whole)
    elif whole:
        text = f"{whole} {num}/{den}"
    else:
        text = f"{num}/{den}"
    return f"-{text}" if negative and text != "0" else text


def _significant(tokens: list[str]) -> list[str]:
    return [t.lower() for t in tokens if t.lower() in _DATE_TOKENS | _CLOCK_TOKENS]


def _format_temporal(value: date | time, fmt: str) -> str:
    tokens = _DATE_TOKEN_RE.findall(fmt)
    twelve_hour = any(t.lower() in ("am/pm", "a/p") for t in tokens)
    clock = value.time() if isinstance(value, datetime) else value if isinstance(value, time) else None
    day = value if isinstance(value, date) else None

    out: list[str] = []
    for i, tok in enumerate(tokens):
        low = tok.lower()
        before = _significant(tokens[:i])
        after = _significant(tokens[i + 1:])
        # "m"/"mm" は時の直後・秒の直前なら分
        is_minute = low in ("m", "mm") and (
            (before and before[-1] in ("h", "hh")) or (after and after[0] in ("s", "ss"))
        )

        if day is not None and low in _DATE_TOKENS and not is_minute:
            out.append({
                "yyyy": f"{day.year:04d}",
                "yy": f"{day.year % 100:02d}",
                "mmmmm": day.strftime("%B")[:1],
                "mmmm": day.strftime("%B"),
                "mmm": day.strftime("%b"),
                "mm": f"{day.month:02d}",
                "m": str(day.month),
                "dddd": day.strftime("%A"),
                "ddd": day.strftime("%a"),
                "dd": f"{day.day:02d}",
                "d": str(day.day),
            }[low])
        elif clock is not None and low in _CLOCK_TOKENS:
            hour = (clock.hour % 12 or 12) if twelve_hour else clock.hour
            out.append({
                "hh": f"{hour:02d}",
                "h": str(hour),
                "mm": f"{clock.minute:02d}",
                "m": str(clock.minute),
                "ss": f"{clock.second:02d}",
                "s": str(clock.second),
                "am/pm": "AM" if clock.hour < 12 else "PM",
                "a/p": "A" if clock.hour < 12 else "P",
            }[low])
        else:
            out.append(tok)
    return "".join(out)


def _plain(value: Any) -> Any:
    if isinstance(value, bool):
        return str(value).upper()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    return value


def format_cell(value: Any, number_format: str | None) -> Any:
    """Text the cell displays under ``number_format``; None stays None."""
    if value is None:
        return None
    fmt = _first_section(number_format or "General")
    is_general = not fmt.strip() or fmt.strip().lower() == "general"

    if isinstance(value, (datetime, date, time)):
        return _plain(value) if is_general else _format_temporal(value, fmt)

    if isinstance(value, (int, float)) and not isinstance(value, bool) and not is_general:
        m = _FRACTION_RE.search(fmt)
        if m is not None:
            return _format_fraction(float(value), m)
        p = _PERCENT_RE.search(fmt)
        if p is not None:
            return f"{value * 100:.{len(p.group(1) or '')}f}%"
    return _plain(value)
