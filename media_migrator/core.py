import logging
from pathlib import Path
from typing import AbstractSet, Optional

from tqdm import tqdm

from . import config
from .conversion.classifier import classify
from .conversion.encoders import run_command
from .conversion.paths import OutputPathBuilder
from .conversion.strategies import CopyStrategy, ImageStrategy, Runner, VideoStrategy
from .exceptions import ExistsError, MediaMigratorError, MetadataReadError
from .metadata.exiftool import ExifTool
from .metadata.reader import MetadataReader
from .metadata.stamper import DateStamper
from .models import Disposition, FileItem, ItemState
from .reporting import RunReport
from .scanning.walker import TreeWalker


class MediaMigrator:
    """
    One migration run from an input tree to an output tree.

    Files are handled strictly one after another; each is attempted once.
    The exiftool session is owned by the caller and must outlive run().
    """

    def __init__(self,
                 input_root: Path,
                 output_root: Path,
                 exiftool: ExifTool,
                 image_skip: Optional[AbstractSet[str]] = None,
                 video_skip: Optional[AbstractSet[str]] = None,
                 skip_existing: bool = False,
                 runner: Runner = run_command,
                 ffmpeg: str = config.FFMPEG_BIN,
                 magick: str = config.MAGICK_BIN):
        self.input_root = input_root
        self.output_root = output_root
        self.image_skip = frozenset(config.IMAGE_MIMES_TO_SKIP if image_skip is None else image_skip)
        self.video_skip = frozenset(config.VIDEO_CODECS_TO_SKIP if video_skip is None else video_skip)
        self.skip_existing = skip_existing

        self.walker = TreeWalker()
        self.reader = MetadataReader(exiftool)

        paths = OutputPathBuilder(input_root, output_root)
        stamper = DateStamper(exiftool)
        self.strategies = {
            Disposition.CONVERT_IMAGE: ImageStrategy(paths, stamper, runner=runner, magick=magick),
            Disposition.CONVERT_VIDEO: VideoStrategy(paths, stamper, runner=runner, ffmpeg=ffmpeg),
            Disposition.COPY_ORIGINAL: CopyStrategy(paths, stamper),
        }

    def run(self) -> RunReport:
        """
        Migrates every file of the input tree.
        A DiscoveryError aborts before any file is touched.
        """
        files = self.walker.walk(self.input_root)
        report = RunReport(total=len(files))
        logging.info(f"found {report.total} files")

        for index, path in enumerate(tqdm(files, desc="Migrating", unit="file"), start=1):
            failed = f" ({len(report.failed)} failed)" if report.failed else ""
            logging.info(f"file {index} of {report.total}{failed}: {path}")
            self.process_file(FileItem(path), report)

        return report

    def process_file(self, item: FileItem, report: RunReport):
        """Carries one item to a terminal state, recording the outcome in report."""
        try:
            item.metadata = self.reader.read(item.path)
        except MetadataReadError as e:
            self._record_failure(item, e, report)
            return
        item.state = ItemState.METADATA_READ

        item.disposition = classify(item.metadata, self.image_skip, self.video_skip)
        item.state = ItemState.CLASSIFIED
        if item.disposition is Disposition.CONVERT_IMAGE:
            logging.info(f"   image: {item.metadata.mime_type}")
        elif item.disposition is Disposition.CONVERT_VIDEO:
            logging.info(f"   video: {item.metadata.codec_id}")

        if item.disposition is Disposition.COPY_ORIGINAL:
            item.state = ItemState.COPYING
        else:
            item.state = ItemState.CONVERTING

        try:
            self.strategies[item.disposition].convert(item)
        except ExistsError as e:
            if self.skip_existing:
                item.skip(str(e))
                logging.warning(f"   skipped, {e}")
                report.add_skipped(item)
            else:
                self._record_failure(item, e, report)
            return
        except (MediaMigratorError, OSError) as e:
            self._record_failure(item, e, report)
            return

        if item.warning is not None:
            report.add_warning(item)
        else:
            item.state = ItemState.DONE

    def _record_failure(self, item: FileItem, error: Exception, report: RunReport):
        item.fail(error)
        logging.error(f"   failed to process file: {error}")
        report.add_failure(item)
