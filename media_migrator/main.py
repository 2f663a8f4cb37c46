import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import config
from .core import MediaMigrator
from .exceptions import DiscoveryError, ExifToolError
from .metadata.exiftool import ExifTool

EXIT_OK = 0
EXIT_FILES_FAILED = 1
EXIT_ABORTED = 2
EXIT_INTERRUPTED = 130


def setup_logging(verbose: bool, log_file: Optional[Path] = None):
    """Sets up logging to the console and, optionally, a file."""
    log_level = logging.DEBUG if verbose else logging.INFO

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
        force=True,
    )


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="Media Migrator: re-encode a photo/video library into space-efficient formats"
    )

    p.add_argument("src", type=Path, help="Input library root")
    p.add_argument("dest", type=Path, help="Output library root")

    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    p.add_argument("--log-file", type=Path, default=None, help="Also write the log to this file")
    p.add_argument("--report-csv", type=Path, default=None,
                   help="Write failed, warned and skipped files to this CSV")
    p.add_argument("--skip-existing", action="store_true",
                   help="Skip files whose output already exists instead of failing them")

    p.add_argument("--skip-image-mime", action="append", default=[], metavar="MIME",
                   help="Additional image MIME type to copy instead of convert (repeatable)")
    p.add_argument("--skip-video-codec", action="append", default=[], metavar="CODEC",
                   help="Additional video codec identifier to copy instead of convert (repeatable)")

    p.add_argument("--exiftool", default=config.EXIFTOOL_BIN, help="exiftool executable")
    p.add_argument("--ffmpeg", default=config.FFMPEG_BIN, help="ffmpeg executable")
    p.add_argument("--magick", default=config.MAGICK_BIN, help="ImageMagick executable")

    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    src_root = args.src.resolve()
    dest_root = args.dest.resolve()

    setup_logging(args.verbose, args.log_file)

    logging.info("=== Media Migrator Started ===")
    logging.info(f"Source: {src_root}")
    logging.info(f"Dest:   {dest_root}")

    if not src_root.is_dir():
        logging.error(f"Source {src_root} is not a directory.")
        return EXIT_ABORTED
    if dest_root == src_root or src_root in dest_root.parents:
        logging.error("Destination must not be inside the source tree.")
        return EXIT_ABORTED

    image_skip = config.IMAGE_MIMES_TO_SKIP | set(args.skip_image_mime)
    video_skip = config.VIDEO_CODECS_TO_SKIP | set(args.skip_video_codec)

    try:
        with ExifTool(args.exiftool) as exiftool:
            migrator = MediaMigrator(
                input_root=src_root,
                output_root=dest_root,
                exiftool=exiftool,
                image_skip=image_skip,
                video_skip=video_skip,
                skip_existing=args.skip_existing,
                ffmpeg=args.ffmpeg,
                magick=args.magick,
            )
            report = migrator.run()
    except KeyboardInterrupt:
        logging.warning("Operation cancelled by user.")
        return EXIT_INTERRUPTED
    except (DiscoveryError, ExifToolError) as e:
        logging.error(f"Run aborted: {e}")
        return EXIT_ABORTED

    report.log_summary()
    if args.report_csv:
        report.write_csv(args.report_csv)

    return EXIT_OK if report.ok else EXIT_FILES_FAILED


if __name__ == "__main__":
    sys.exit(main())
