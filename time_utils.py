# time_utils.py
import re
from datetime import date

LEADING_NUMBER_RE = re.compile(r"\s*(\d+(?:\.\d+)?)\s*([A-Za-z]*)")

MIN_DATE_CODE_YEAR = 1700
MAX_DATE_CODE_YEAR = MIN_DATE_CODE_YEAR + 999


def split_leading_number(token: str) -> tuple[float, str, str]:
    """
    Split a badge token like "2.5 mi" or "1 h, 30 min" into
    (value, unit, remainder). Raises ValueError if no number leads the token.
    """
    match = LEADING_NUMBER_RE.match(token)
    if not match:
        raise ValueError(f"No numeric value in '{token}'")
    return float(match.group(1)), match.group(2).lower(), token[match.end():]


def parse_duration_minutes(token: str) -> float:
    """
    Convert a duration badge to minutes.

    "1 h, 30 min" -> 90.0, "2 h" -> 120.0, "45 min" -> 45.0.
    Any unit other than hours or minutes raises ValueError.
    """
    value, unit, remainder = split_leading_number(token)

    if unit.startswith("h"):
        minutes = value * 60.0
        remainder = remainder.strip()
        if remainder.startswith(","):
            extra, extra_unit, _ = split_leading_number(remainder[1:])
            if not extra_unit.startswith("m"):
                raise ValueError(f"Unexpected minutes unit in duration '{token}'")
            minutes += extra
        return minutes

    if unit.startswith("m"):
        return value

    raise ValueError(f"Unexpected duration unit '{unit}' in '{token}'")


def encode_date_code(year: int, month: int, day: int) -> int:
    """Pack a calendar date into one integer for equality and grouping."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month out of range: {month}")
    if not 1 <= day <= 31:
        raise ValueError(f"Day out of range: {day}")
    if not MIN_DATE_CODE_YEAR < year <= MAX_DATE_CODE_YEAR:
        raise ValueError(f"Year out of range: {year}")
    return (year - MIN_DATE_CODE_YEAR) + month * 1000 + day * 100000


def decode_date_code(code: int) -> tuple[int, int, int]:
    day, remainder = divmod(code, 100000)
    month, year_offset = divmod(remainder, 1000)
    return year_offset + MIN_DATE_CODE_YEAR, month, day


def date_code_for(checklist_date: date) -> int:
    return encode_date_code(checklist_date.year, checklist_date.month, checklist_date.day)


def format_minutes(total_minutes: float) -> str:
    """Render minutes as "H hr, M min", or "M min" under an hour."""
    minutes = int(round(total_minutes))
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours} hr, {minutes} min"
    return f"{minutes} min"
