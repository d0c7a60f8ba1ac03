# classorder/utils/schedule.py
# Разбор и форматирование меток слотов ("2024-12-20T19:00" или "12월 20일 19:00")

import re
from datetime import date, datetime

DAY_NAMES = ["월", "화", "수", "목", "금", "토", "일"]  # weekday(): 0 = понедельник

_KOREAN_RE = re.compile(r"(\d{1,2})월\s*(\d{1,2})일.*?(\d{1,2}):(\d{2})")
_KOREAN_DATE_RE = re.compile(r"(\d{1,2})월\s*(\d{1,2})일")
_TIME_RE = re.compile(r"(\d{1,2}):(\d{2})")


def _parse(value: str) -> datetime | None:
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError:
        pass

    match = _KOREAN_RE.search(value)
    if not match:
        return None
    mm, dd, hh, minutes = (int(g) for g in match.groups())
    try:
        return datetime(datetime.now().year, mm, dd, hh, minutes)
    except ValueError:
        return None


def format_schedule(value: str | None, with_padding: bool = True) -> str:
    """
    "2024-12-20T19:00" → "12월 20일 (금) 19:00".
    Нераспознанная метка возвращается как есть.
    """
    if not value:
        return ""

    dt = _parse(value)
    if dt is None:
        return value

    day_part = f" ({DAY_NAMES[dt.weekday()]})"
    if with_padding:
        return f"{dt.month:02d}월 {dt.day:02d}일{day_part} {dt.hour:02d}:{dt.minute:02d}"
    return f"{dt.month}월 {dt.day}일{day_part} {dt.hour:02d}:{dt.minute:02d}"


def parse_schedule_date(value: str) -> date | None:
    dt = _parse(value)
    if dt is not None:
        return dt.date()

    # метка без времени: "12월 20일"
    match = _KOREAN_DATE_RE.search(value)
    if not match:
        return None
    try:
        return date(datetime.now().year, int(match.group(1)), int(match.group(2)))
    except ValueError:
        return None


def is_schedule_on_date(value: str, day: date) -> bool:
    return parse_schedule_date(value) == day


def schedule_time_string(value: str) -> str:
    """"12월 25일 (수) 14:00" → "14:00"."""
    dt = _parse(value)
    if dt is not None:
        return f"{dt.hour:02d}:{dt.minute:02d}"
    match = _TIME_RE.search(value)
    return f"{int(match.group(1)):02d}:{match.group(2)}" if match else value
