import json
import logging
import re
import subprocess
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .. import config
from ..exceptions import ExifToolError

_UPDATED_RE = re.compile(r'(\d+) image files updated')
_UNCHANGED_RE = re.compile(r'(\d+) image files unchanged')


class ExifTool:
    """
    A single long-lived exiftool process driven through its -stay_open protocol.

    Each command is written to exiftool's stdin as one argument per line and
    terminated with -execute. exiftool answers on stdout with the command
    output followed by a "{ready}" line; we ask it to echo the same marker on
    stderr so both streams can be drained without guessing.

    Use as a context manager so the process is released even when the run
    aborts:

        with ExifTool() as et:
            tags = et.read(path)
    """

    READY = '{ready}'

    def __init__(self, executable: str = config.EXIFTOOL_BIN):
        self.executable = executable
        self._proc: Optional[subprocess.Popen] = None

    @property
    def running(self) -> bool:
        return self._proc is not None and self._proc.poll() is None

    def start(self):
        if self._proc is not None:
            return

        logging.debug(f"Launching stay-open exiftool session ({self.executable})")
        try:
            self._proc = subprocess.Popen(
                [self.executable, '-stay_open', 'True', '-@', '-'],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding='utf-8',
                errors='replace',
                bufsize=1,
            )
        except OSError as e:
            raise ExifToolError(f"Cannot start {self.executable}: {e}") from e

    def close(self):
        if self._proc is None:
            return

        proc, self._proc = self._proc, None
        try:
            proc.stdin.write("-stay_open\nFalse\n")
            proc.stdin.flush()
        except OSError as e:
            logging.debug(f"exiftool stdin already closed: {e}")

        try:
            proc.communicate(timeout=config.EXIFTOOL_SHUTDOWN_TIMEOUT)
        except subprocess.TimeoutExpired:
            logging.warning("exiftool did not exit in time, killing it")
            proc.kill()
            proc.communicate()
        logging.debug("exiftool session closed")

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def execute(self, *args: str) -> Tuple[str, str]:
        """Runs one exiftool command and returns its (stdout, stderr)."""
        if self._proc is None:
            raise ExifToolError("exiftool is not running")

        if any('\n' in a for a in args):
            raise ExifToolError(f"Arguments must not contain newlines: {args!r}")

        payload = "\n".join([*args, '-echo4', self.READY, '-execute']) + "\n"
        try:
            self._proc.stdin.write(payload)
            self._proc.stdin.flush()
            out = self._read_until_ready(self._proc.stdout)
            err = self._read_until_ready(self._proc.stderr)
        except OSError as e:
            raise ExifToolError(f"Lost connection to exiftool: {e}") from e
        return out, err

    def read(self, path: Path) -> Dict[str, Any]:
        """Returns the tags of one file as exiftool's JSON object."""
        out, err = self.execute('-j', str(path))
        if not out.strip():
            raise ExifToolError(err.strip() or f"No metadata returned for {path}")

        try:
            data = json.loads(out)
        except json.JSONDecodeError as e:
            raise ExifToolError(f"Failed to parse exiftool output for {path}: {e}") from e

        if not data:
            raise ExifToolError(f"No metadata returned for {path}")
        return data[0]

    def write(self, path: Path, tags: Dict[str, str]) -> int:
        """
        Writes tags into a file. exiftool leaves the untouched original
        beside it under the '_original' suffix.

        Returns the number of files updated (0 when the values were already set).
        """
        args = [f"-{tag}={value}" for tag, value in tags.items()]
        out, err = self.execute(*args, str(path))

        errors = [line.strip() for line in err.splitlines() if line.lstrip().startswith('Error')]
        if errors:
            raise ExifToolError("; ".join(errors))

        updated = _UPDATED_RE.search(out)
        if updated:
            return int(updated.group(1))
        if _UNCHANGED_RE.search(out):
            return 0
        raise ExifToolError(err.strip() or out.strip() or f"exiftool did not update {path}")

    def _read_until_ready(self, stream) -> str:
        lines = []
        while True:
            line = stream.readline()
            if not line:
                raise ExifToolError('exiftool terminated unexpectedly')
            if line.rstrip('\r\n') == self.READY:
                break
            lines.append(line)
        return ''.join(lines)
