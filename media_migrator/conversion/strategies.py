import os
import shutil
import logging
from pathlib import Path
from typing import Callable, List

from .. import config
from ..exceptions import ConversionError, ExistsError
from ..metadata.stamper import DateStamper
from ..models import FileItem
from .encoders import ffmpeg_command, magick_command, run_command
from .paths import OutputPathBuilder

Runner = Callable[[List[str]], None]


class ConversionStrategy:
    """
    Shared flow of every strategy:
      1. Build the output path (mirrored tree, strategy extension).
      2. Refuse to touch an existing destination (ExistsError).
      3. Produce the destination.
      4. Restore capture dates (never fatal).
      5. Flag the item if the result is not smaller than the source.

    Errors propagate to the caller, which records them against the item.
    """
    label = 'converting'
    check_size = True

    def __init__(self, paths: OutputPathBuilder, stamper: DateStamper):
        self.paths = paths
        self.stamper = stamper

    def target_extension(self, source: Path) -> str:
        """Extension of the output file. Subclasses must override."""
        raise NotImplementedError

    def produce(self, source: Path, dest: Path):
        """Writes dest from source. Subclasses must override."""
        raise NotImplementedError

    def convert(self, item: FileItem) -> Path:
        dest = self.paths.build(item.path, self.target_extension(item.path))
        item.destination = dest
        logging.info(f"   {self.label} to {dest}")

        if os.path.lexists(dest):
            raise ExistsError(dest)

        try:
            self.produce(item.path, dest)
        except ExistsError:
            raise
        except ConversionError:
            self._discard_partial(dest)
            raise
        except OSError as e:
            self._discard_partial(dest)
            raise ConversionError(f"{self.label} {item.path} failed: {e}") from e
        except BaseException:
            # Interrupted mid-encode; a truncated output would block the next run
            self._discard_partial(dest)
            raise

        self.stamper.stamp(dest, item.metadata)

        if self.check_size:
            self._check_sizes(item, dest)
        return dest

    def _check_sizes(self, item: FileItem, dest: Path):
        original_size = item.path.stat().st_size
        output_size = dest.stat().st_size
        if output_size >= original_size:
            item.warn(
                f'converted file "{dest}" is larger than original, '
                f'please manually check which one you want to use'
            )
            logging.warning(f"   {item.warning}")

    def _discard_partial(self, dest: Path):
        # The destination did not exist before this attempt, so whatever is there is ours
        try:
            dest.unlink(missing_ok=True)
        except OSError as e:
            logging.warning(f"   could not remove partial output {dest}: {e}")


class ImageStrategy(ConversionStrategy):
    label = 'converting image'

    def __init__(self, paths: OutputPathBuilder, stamper: DateStamper,
                 runner: Runner = run_command, magick: str = config.MAGICK_BIN):
        super().__init__(paths, stamper)
        self.runner = runner
        self.magick = magick

    def target_extension(self, source: Path) -> str:
        return config.IMAGE_TARGET_EXT

    def produce(self, source: Path, dest: Path):
        # ImageMagick has no no-clobber switch, so claim the name first
        try:
            fd = os.open(dest, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError as e:
            raise ExistsError(dest) from e
        os.close(fd)
        self.runner(magick_command(source, dest, self.magick))


class VideoStrategy(ConversionStrategy):
    label = 'converting video'

    def __init__(self, paths: OutputPathBuilder, stamper: DateStamper,
                 runner: Runner = run_command, ffmpeg: str = config.FFMPEG_BIN):
        super().__init__(paths, stamper)
        self.runner = runner
        self.ffmpeg = ffmpeg

    def target_extension(self, source: Path) -> str:
        # .mp4/.mov keep their container so metadata survives; the rest become .mov
        ext = source.suffix.lower()
        return ext if ext in config.VIDEO_KEEP_EXTS else config.VIDEO_FALLBACK_EXT

    def produce(self, source: Path, dest: Path):
        self.runner(ffmpeg_command(source, dest, self.ffmpeg))


class CopyStrategy(ConversionStrategy):
    label = 'copying original file'
    # A verbatim copy is never smaller
    check_size = False

    def target_extension(self, source: Path) -> str:
        return source.suffix

    def produce(self, source: Path, dest: Path):
        try:
            with open(source, 'rb') as fsrc, open(dest, 'xb') as fdst:
                shutil.copyfileobj(fsrc, fdst)
        except FileExistsError as e:
            raise ExistsError(dest) from e
