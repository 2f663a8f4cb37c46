import os
import logging
from pathlib import Path

from .. import config
from ..exceptions import DateStampError, ExifToolError
from ..models import MetadataRecord
from .dates import format_exif_date, select_capture_date
from .exiftool import ExifTool


class DateStamper:
    """
    Restores the capture date on a freshly produced file: its embedded date
    tags and its filesystem access/modify times.

    A failure here never fails the file. A mis-dated file can be fixed by
    hand later; it is only logged.
    """

    def __init__(self, exiftool: ExifTool):
        self.exiftool = exiftool

    def stamp(self, dest: Path, record: MetadataRecord) -> bool:
        try:
            self._apply(dest, record)
        except DateStampError as e:
            logging.error(f"   error while setting date on {dest}: {e}")
            return False
        return True

    def _apply(self, dest: Path, record: MetadataRecord):
        tag, when = select_capture_date(record)
        logging.info(f"   writing date {when.isoformat()} (from {tag})")

        try:
            updated = self.exiftool.write(dest, {'AllDates': format_exif_date(when)})
        except ExifToolError as e:
            raise DateStampError(f"cannot write date tags: {e}") from e

        try:
            ts = when.timestamp()
            os.utime(dest, (ts, ts))
        except (OSError, OverflowError, ValueError) as e:
            raise DateStampError(f"cannot set file times: {e}") from e

        # exiftool only leaves a backup when it actually rewrote the file
        if updated:
            backup = dest.with_name(dest.name + config.EXIFTOOL_BACKUP_SUFFIX)
            try:
                backup.unlink()
            except OSError as e:
                raise DateStampError(f"cannot remove backup {backup}: {e}") from e
