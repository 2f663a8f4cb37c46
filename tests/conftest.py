import time
import pytest
from pathlib import Path

from media_migrator.exceptions import ConversionError, ExifToolError

DEFAULT_MODIFY_DATE = "2019:05:06 07:08:09+00:00"

# Minimal exiftool answers keyed by extension
EXT_TAGS = {
    ".jpg": {"MIMEType": "image/jpeg"},
    ".png": {"MIMEType": "image/png"},
    ".heic": {"MIMEType": "image/heic"},
    ".mov": {"MIMEType": "video/quicktime", "CompressorID": "avc1"},
    ".mp4": {"MIMEType": "video/mp4", "CompressorID": "avc1"},
    ".avi": {"MIMEType": "video/x-msvideo", "CompressorID": "mpeg4"},
    ".txt": {"MIMEType": "text/plain"},
}


class FakeExifTool:
    """Stands in for the stay-open exiftool session."""

    def __init__(self, tags_by_name=None, fail_reads=(), fail_writes=False):
        self.tags_by_name = tags_by_name or {}
        self.fail_reads = set(fail_reads)
        self.fail_writes = fail_writes
        self.reads = []
        self.writes = []
        self.started = False
        self.closed = False

    def __enter__(self):
        self.started = True
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.closed = True

    def read(self, path):
        self.reads.append(path)
        if path.name in self.fail_reads:
            raise ExifToolError("Error: File format error")
        tags = {"FileModifyDate": DEFAULT_MODIFY_DATE}
        tags.update(EXT_TAGS.get(path.suffix.lower(), {}))
        tags.update(self.tags_by_name.get(path.name, {}))
        return tags

    def write(self, path, tags):
        if self.fail_writes:
            raise ExifToolError("Error: Not a valid HEIC")
        self.writes.append((path, tags))
        # exiftool leaves the previous version behind
        backup = path.with_name(path.name + "_original")
        backup.write_bytes(path.read_bytes())
        return 1


class FakeEncoder:
    """Stands in for ffmpeg/magick: writes a shrunken copy of the source."""

    def __init__(self, ratio=0.5, fail_on=()):
        self.ratio = ratio
        self.fail_on = set(fail_on)
        self.calls = []

    def __call__(self, cmd):
        self.calls.append(cmd)
        src = Path(cmd[cmd.index("-i") + 1]) if "-i" in cmd else Path(cmd[1])
        dest = Path(cmd[-1])
        if "-n" in cmd and dest.exists():
            raise ConversionError(f"{dest} already exists", cmd=cmd, returncode=1)
        if src.name in self.fail_on:
            dest.write_bytes(b"trunc")
            raise ConversionError("encoder crashed", cmd=cmd, returncode=1, stderr="crashed")
        data = src.read_bytes()
        dest.write_bytes(data[: max(1, int(len(data) * self.ratio))])


@pytest.fixture
def fake_exiftool():
    return FakeExifTool()


@pytest.fixture
def fake_encoder():
    return FakeEncoder()


@pytest.fixture
def library(tmp_path):
    """Returns (input_root, output_root) with an empty output root."""
    src = tmp_path / "in"
    dest = tmp_path / "out"
    src.mkdir()
    dest.mkdir()
    return src, dest


@pytest.fixture
def new_york_tz(monkeypatch):
    """Runs the test with local time set to America/New_York."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset not available")
    monkeypatch.setenv("TZ", "America/New_York")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()
