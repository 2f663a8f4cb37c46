from typing import AbstractSet

from .. import config
from ..models import Disposition, MetadataRecord


def classify(record: MetadataRecord,
             image_skip: AbstractSet[str] = frozenset(config.IMAGE_MIMES_TO_SKIP),
             video_skip: AbstractSet[str] = frozenset(config.VIDEO_CODECS_TO_SKIP)) -> Disposition:
    """
    Decides how a file is handled. Skip-listed images and videos, and
    anything that is neither, are copied unchanged.
    """
    mime = record.mime_type
    if mime.startswith('image') and mime not in image_skip:
        return Disposition.CONVERT_IMAGE
    if mime.startswith('video') and record.codec_id not in video_skip:
        return Disposition.CONVERT_VIDEO
    return Disposition.COPY_ORIGINAL
