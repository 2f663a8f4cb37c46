"""
Configuration constants for the media migrator.
"""

# --- Classification ---
# Formats that are already space-efficient; these are copied untouched.
IMAGE_MIMES_TO_SKIP = {'image/heic'}
VIDEO_CODECS_TO_SKIP = {'hvc1'}

# --- Output Extensions ---
IMAGE_TARGET_EXT = '.heic'
# Containers kept as-is so their metadata survives re-encoding
VIDEO_KEEP_EXTS = {'.mov', '.mp4'}
VIDEO_FALLBACK_EXT = '.mov'

# --- External Tools ---
EXIFTOOL_BIN = 'exiftool'
FFMPEG_BIN = 'ffmpeg'
MAGICK_BIN = 'magick'

# --- Video Encoding (ffmpeg) ---
VIDEO_CODEC = 'libx265'
X265_PARAMS = 'preset=veryslow:crf=23'
VIDEO_TAG = 'hvc1'
MOVFLAGS = 'faststart'

# --- Metadata ---
# Fallback chain for the capture date, most specific first.
# FileModifyDate is a filesystem fact and always present.
DATE_FIELDS = [
    'CreationDate',
    'DateTimeOriginal',
    'MediaCreateDate',
    'CreateDate',
    'FileModifyDate',
]

# exiftool keeps a copy of every file it rewrites under this suffix
EXIFTOOL_BACKUP_SUFFIX = '_original'

# Seconds to wait for exiftool to exit after -stay_open False
EXIFTOOL_SHUTDOWN_TIMEOUT = 5

# Characters of encoder stderr kept on a ConversionError
STDERR_TAIL_CHARS = 2000
