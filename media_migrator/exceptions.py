"""
Custom exception hierarchy for the media migrator.

Only DiscoveryError is fatal to a run. Every other error is recorded against
the file that raised it and the run moves on to the next file.
"""


class MediaMigratorError(Exception):
    """Base exception for all media migrator errors."""
    pass


class DiscoveryError(MediaMigratorError):
    """Raised when a directory of the input tree cannot be listed."""
    pass


class MetadataReadError(MediaMigratorError):
    """Raised when metadata cannot be read from a file."""
    pass


class ExistsError(MediaMigratorError):
    """Raised when the destination of a conversion is already present."""

    def __init__(self, path):
        super().__init__(f"file already exists: {path}")
        self.path = path


class ConversionError(MediaMigratorError):
    """Raised when an encoder or copy fails to produce the destination."""

    def __init__(self, message, cmd=None, returncode=None, stderr=None):
        super().__init__(message)
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr


class DateStampError(MediaMigratorError):
    """Raised when capture dates cannot be written to a destination."""
    pass


class ExifToolError(MediaMigratorError):
    """Raised when the exiftool process fails or reports an error."""
    pass
