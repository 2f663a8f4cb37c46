"""
Date handling for capture timestamps.

exiftool reports dates as "YYYY:MM:DD HH:MM:SS", optionally followed by
sub-seconds and a UTC offset. Cameras also leave placeholders such as
"0000:00:00 00:00:00" behind; those parse to None instead of a bogus date.
"""
import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from ..models import MetadataRecord

_DATE_RE = re.compile(
    r'^(\d{4})[:-](\d{2})[:-](\d{2})'
    r'(?:[ T](\d{2}):(\d{2})(?::(\d{2}))?(?:\.(\d+))?)?'
    r'\s*(Z|[+-]\d{2}:?\d{2})?'
)


def parse_exif_date(value) -> Optional[datetime]:
    """
    Parses an exiftool date value.

    Returns an aware datetime when the value carries an offset, a naive
    (local time) one when it does not, and None when the value is not a
    usable calendar date.
    """
    if value is None:
        return None

    text = str(value).strip()
    m = _DATE_RE.match(text)
    if not m:
        return None

    year, month, day, hour, minute, second, frac, offset = m.groups()
    micro = int((frac or '0').ljust(6, '0')[:6])

    tz = None
    if offset == 'Z':
        tz = timezone.utc
    elif offset:
        digits = offset[1:].replace(':', '')
        delta = timedelta(hours=int(digits[:2]), minutes=int(digits[2:]))
        tz = timezone(-delta if offset[0] == '-' else delta)

    try:
        return datetime(
            int(year), int(month), int(day),
            int(hour or 0), int(minute or 0), int(second or 0),
            micro, tzinfo=tz,
        )
    except ValueError:
        return None


def format_exif_date(dt: datetime) -> str:
    """Formats a datetime the way exiftool expects date tags to be written."""
    text = dt.strftime('%Y:%m:%d %H:%M:%S')
    offset = dt.utcoffset()
    if offset is not None:
        minutes = int(offset.total_seconds() // 60)
        sign = '-' if minutes < 0 else '+'
        hours, minutes = divmod(abs(minutes), 60)
        text += f"{sign}{hours:02d}:{minutes:02d}"
    return text


def select_capture_date(record: MetadataRecord) -> Tuple[str, datetime]:
    """
    Picks the capture date of a file.

    The first defined value of the fallback chain wins. If it is not a usable
    date we go straight to FileModifyDate, and from there to the filesystem
    mtime.

    QuickTime stores its dates in UTC and exiftool reports them without an
    offset, so naive dates of videos are read as UTC rather than local time.

    Returns:
        (source tag, datetime)
    """
    naive_tz = timezone.utc if record.mime_type.startswith('video') else None

    candidates = record.date_candidates()
    if candidates:
        tag, raw = candidates[0]
        dt = _with_default_tz(parse_exif_date(raw), naive_tz)
        if dt is not None:
            return tag, dt
        logging.debug(f"Unusable {tag} value {raw!r}, falling back to FileModifyDate")

    dt = _with_default_tz(parse_exif_date(record.file_modify_date), naive_tz)
    if dt is not None:
        return 'FileModifyDate', dt

    return 'mtime', datetime.fromtimestamp(record.file_mtime).astimezone()


def _with_default_tz(dt: Optional[datetime], tz) -> Optional[datetime]:
    if dt is None or dt.tzinfo is not None or tz is None:
        return dt
    return dt.replace(tzinfo=tz)
