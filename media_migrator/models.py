from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from . import config


class Disposition(Enum):
    CONVERT_IMAGE = 'convert-image'
    CONVERT_VIDEO = 'convert-video'
    COPY_ORIGINAL = 'copy-original'


class ItemState(Enum):
    DISCOVERED = 'discovered'
    METADATA_READ = 'metadata-read'
    CLASSIFIED = 'classified'
    CONVERTING = 'converting'
    COPYING = 'copying'
    DONE = 'done'
    WARNED = 'warned'
    SKIPPED = 'skipped'
    FAILED = 'failed'


@dataclass
class MetadataRecord:
    """
    The subset of exiftool output the migrator acts on.
    Date values are kept as the raw strings exiftool reported.
    """
    mime_type: str
    file_modify_date: str
    file_mtime: float       # os.stat() mtime, last resort for dating
    codec_id: Optional[str] = None
    dates: Dict[str, str] = field(default_factory=dict)

    def date_candidates(self) -> List[Tuple[str, str]]:
        """Defined date values in fallback-chain order."""
        values = dict(self.dates)
        values['FileModifyDate'] = self.file_modify_date
        return [(tag, values[tag]) for tag in config.DATE_FIELDS if values.get(tag)]


@dataclass
class FileItem:
    """
    One discovered source file and what became of it.
    """
    path: Path
    metadata: Optional[MetadataRecord] = None
    disposition: Optional[Disposition] = None
    destination: Optional[Path] = None
    state: ItemState = ItemState.DISCOVERED

    # At most one of these is ever set
    error: Optional[Exception] = None
    warning: Optional[str] = None
    skip_reason: Optional[str] = None

    def fail(self, error: Exception):
        if self.warning is not None:
            raise ValueError(f"{self.path} already carries a warning")
        self.error = error
        self.state = ItemState.FAILED

    def warn(self, message: str):
        if self.error is not None:
            raise ValueError(f"{self.path} already carries an error")
        self.warning = message
        self.state = ItemState.WARNED

    def skip(self, reason: str):
        self.skip_reason = reason
        self.state = ItemState.SKIPPED

    @property
    def succeeded(self) -> bool:
        return self.state in (ItemState.DONE, ItemState.WARNED, ItemState.SKIPPED)
