"""
External encoder invocations.

Commands are always built as argument lists; nothing goes through a shell.
"""
import logging
import subprocess
from pathlib import Path
from typing import List

from .. import config
from ..exceptions import ConversionError


def ffmpeg_command(source: Path, dest: Path, ffmpeg: str = config.FFMPEG_BIN) -> List[str]:
    """HEVC re-encode tagged for Apple players, moov atom up front, never overwriting."""
    return [
        ffmpeg,
        '-hide_banner', '-nostdin', '-loglevel', 'error',
        '-n',
        '-i', str(source),
        '-c:v', config.VIDEO_CODEC,
        '-x265-params', config.X265_PARAMS,
        '-tag:v', config.VIDEO_TAG,
        '-movflags', config.MOVFLAGS,
        str(dest),
    ]


def magick_command(source: Path, dest: Path, magick: str = config.MAGICK_BIN) -> List[str]:
    # Output format follows the destination extension
    return [magick, str(source), str(dest)]


def run_command(cmd: List[str]):
    """Runs an encoder to completion, raising ConversionError on failure."""
    logging.debug(f"Running: {' '.join(cmd)}")
    try:
        result = subprocess.run(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            errors='replace',
        )
    except OSError as e:
        raise ConversionError(f"cannot run {cmd[0]}: {e}", cmd=cmd) from e

    if result.returncode != 0:
        tail = (result.stderr or '').strip()[-config.STDERR_TAIL_CHARS:]
        raise ConversionError(
            f"{cmd[0]} exited with status {result.returncode}: {tail}",
            cmd=cmd,
            returncode=result.returncode,
            stderr=tail,
        )
