import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from pymediainfo import MediaInfo

from .. import config
from ..exceptions import ExifToolError, MetadataReadError
from ..models import MetadataRecord
from .dates import format_exif_date
from .exiftool import ExifTool


class MetadataReader:
    """
    Builds MetadataRecords from exiftool output.

    Strategies:
      - MIME type and dates: exiftool (shared stay-open session).
      - Video codec: exiftool's CompressorID -> falls back to MediaInfo's codec_id.
    """

    def __init__(self, exiftool: ExifTool):
        self.exiftool = exiftool

    def read(self, path: Path) -> MetadataRecord:
        try:
            tags = self.exiftool.read(path)
            mtime = path.stat().st_mtime
        except (ExifToolError, OSError) as e:
            raise MetadataReadError(f"Cannot read metadata of {path}: {e}") from e

        mime = tags.get('MIMEType')
        if not mime:
            raise MetadataReadError(f"No MIME type reported for {path}")
        mime = str(mime)

        codec = tags.get('CompressorID')
        if not codec and mime.startswith('video'):
            codec = self._mediainfo_codec(path)

        # FileModifyDate is a filesystem fact; synthesize it if exiftool left it out
        file_modify = tags.get('FileModifyDate')
        if not file_modify:
            file_modify = format_exif_date(datetime.fromtimestamp(mtime).astimezone())

        dates = {
            tag: str(tags[tag])
            for tag in config.DATE_FIELDS
            if tag != 'FileModifyDate' and tags.get(tag)
        }

        return MetadataRecord(
            mime_type=mime,
            codec_id=str(codec) if codec else None,
            file_modify_date=str(file_modify),
            file_mtime=mtime,
            dates=dates,
        )

    def _mediainfo_codec(self, path: Path) -> Optional[str]:
        """Codec identifier of the first video track, as MediaInfo sees it."""
        try:
            mi = MediaInfo.parse(str(path))
        except Exception as e:
            # libmediainfo missing or unreadable container
            logging.debug(f"MediaInfo failed for {path}: {e}")
            return None

        for track in mi.tracks:
            if track.track_type == 'Video':
                return getattr(track, 'codec_id', None)
        return None
