"""Duration parsing and reactive cost calculation - no I/O dependencies."""

import math
import re

DEFAULT_COLOR = "#00E5FF"

_HHMM_PATTERN = re.compile(r"^(\d+):(\d+)$")
_HOURS_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(?:horas|hora|hor|hrs|hr|h)")
_MINUTES_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(?:minutos|minuto|mins|min|m)")
_NUMBER_PATTERN = re.compile(r"\d+(?:\.\d+)?")
_HEX_PATTERN = re.compile(r"^#?([0-9a-fA-F]{6})$")


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives, like a spreadsheet would."""
    return math.floor(value + 0.5)


def parse_duration_to_hours(text: str | None) -> float:
    """
    Parse a free-text duration into hours.

    Accepts "HH:MM", any mix of hour tokens ("2h", "1.5 hr", "3 horas") and
    minute tokens ("45 min", "30m"), or a lone bare number read as hours.
    Commas are decimal separators. Anything unparseable is 0.
    """
    if not text:
        return 0.0
    s = text.lower().replace(",", ".").strip()

    hhmm = _HHMM_PATTERN.match(s)
    if hhmm:
        return int(hhmm.group(1)) + int(hhmm.group(2)) / 60

    total = 0.0
    for value in _HOURS_PATTERN.findall(s):
        total += float(value)
    for value in _MINUTES_PATTERN.findall(s):
        total += float(value) / 60

    if total == 0:
        numbers = _NUMBER_PATTERN.findall(s)
        # Only an unambiguous single number counts as hours
        if len(numbers) == 1:
            total = float(numbers[0])

    return total


def parse_duration_to_minutes(text: str | None) -> int:
    """Parse a free-text duration into whole minutes."""
    return round_half_up(parse_duration_to_hours(text) * 60)


def format_duration(total_minutes: float) -> str:
    """Render minutes as "1h 30m", "2h" or "45m"."""
    hours = int(total_minutes // 60)
    minutes = round_half_up(total_minutes % 60)
    if minutes == 60:
        hours, minutes = hours + 1, 0
    if hours > 0 and minutes > 0:
        return f"{hours}h {minutes}m"
    if hours > 0:
        return f"{hours}h"
    return f"{minutes}m"


def calculate_cost(
    duration: str | None,
    hourly_rate: float,
    manual_cost: float | None = None,
    multiplier: int = 1,
    force_recompute: bool = False,
) -> float:
    """
    Cost of a piece of work.

    A manually set cost wins unless force_recompute is set; otherwise the
    reactive cost is duration hours * rate * multiplier, rounded.
    """
    if manual_cost is not None and not force_recompute:
        return manual_cost
    hours = parse_duration_to_hours(duration)
    return round_half_up(hours * hourly_rate * multiplier)


def mix_color(colors: list[str], fallback: str = DEFAULT_COLOR) -> str:
    """Average hex colors channel by channel."""
    if not colors:
        return fallback
    if len(colors) == 1:
        return colors[0]

    channels = []
    for color in colors:
        match = _HEX_PATTERN.match(color.strip())
        if not match:
            continue
        value = int(match.group(1), 16)
        channels.append(((value >> 16) & 255, (value >> 8) & 255, value & 255))

    if not channels:
        return fallback

    r, g, b = (round_half_up(sum(c[i] for c in channels) / len(channels)) for i in range(3))
    return f"#{r:02x}{g:02x}{b:02x}"
