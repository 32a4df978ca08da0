"""Upload preparation: payload, content type, digest and retention deadline.

Turns a local file into a PreparedObject that can be handed to a
"put object with retention" call:
- load_file reads the complete payload
- detect_content_type sniffs a MIME type from the leading bytes
- compute_digest streams the file through MD5 for the Content-MD5 header
- compute_retention_deadline derives the retain-until date (UTC)
"""

import base64
import hashlib
import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Optional

from worm_upload.models import OBJECT_RETENTION_DAYS, PreparedObject, UploadRequest
from worm_upload.sniff import sniff

logger = logging.getLogger(__name__)

# Read size used when streaming a file through the hash
DIGEST_CHUNK_SIZE = 64 * 1024


class FileError(Exception):
    """Raised when the file to upload cannot be opened or read."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


class FileNotFound(FileError):
    """Raised when the file to upload does not exist."""

    pass


class FileReadError(FileError):
    """Raised when the file exists but cannot be fully read."""

    pass


class NoDigest(FileError):
    """Signals that no digest could be produced; ``digest`` is always empty."""

    digest = ""


class DigestError(Exception):
    """Raised when an opened file cannot be streamed through the hash.

    Fatal: callers must not continue the run after this error.
    """

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


def load_file(path: str) -> bytes:
    """Read the complete contents of a file.

    Args:
        path: Path to the file.

    Returns:
        The file contents.

    Raises:
        FileNotFound: If the path does not exist or is not a regular file.
        FileReadError: If the file cannot be opened or fully read.
    """
    if not path or not os.path.isfile(path):
        raise FileNotFound(f"Unable to open file {path}", path=path)

    try:
        with open(path, "rb") as f:
            size = os.fstat(f.fileno()).st_size
            data = f.read()
    except OSError as e:
        raise FileReadError(f"Unable to read file {path}: {e}", path=path) from e

    if len(data) < size:
        raise FileReadError(
            f"Short read on {path}: expected {size} bytes, got {len(data)}",
            path=path,
        )

    logger.debug("Loaded %d bytes from %s", len(data), path)
    return data


def detect_content_type(payload: bytes) -> str:
    """Best-guess MIME type of a payload from its leading bytes."""
    return sniff(payload)


def compute_digest(path: str) -> str:
    """Compute the base64-encoded MD5 digest of a file.

    The value is what S3 expects in the Content-MD5 header.

    Args:
        path: Path to the file.

    Returns:
        Base64 encoding of the 16-byte MD5 digest.

    Raises:
        NoDigest: If the path is empty or the file cannot be opened.
        DigestError: If the opened file cannot be streamed.
    """
    if not path:
        raise NoDigest("no md5hash possible for an empty path")

    try:
        f = open(path, "rb")
    except OSError as e:
        raise NoDigest(f"no md5hash possible for: {path}", path=path) from e

    hasher = hashlib.md5()
    with f:
        try:
            for chunk in iter(lambda: f.read(DIGEST_CHUNK_SIZE), b""):
                hasher.update(chunk)
        except OSError as e:
            raise DigestError(f"Failed to hash {path}: {e}", path=path) from e

    return base64.b64encode(hasher.digest()).decode("ascii")


def compute_retention_deadline(
    now: Optional[datetime] = None,
    days: int = OBJECT_RETENTION_DAYS,
) -> datetime:
    """Return the retain-until date for an object prepared at ``now``.

    Naive datetimes are taken to be UTC. The result is always UTC-aware.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    else:
        now = now.astimezone(timezone.utc)
    return now + timedelta(days=days)


def prepare(request: UploadRequest, now: Optional[datetime] = None) -> PreparedObject:
    """Build the PreparedObject for an upload request.

    Raises:
        FileError: If the file cannot be read or no digest is possible.
        DigestError: If hashing fails after the file was opened.
    """
    payload = load_file(request.file_path)
    retain_until = compute_retention_deadline(now)
    content_type = detect_content_type(payload)
    digest = compute_digest(request.file_path)

    return PreparedObject(
        payload=payload,
        content_type=content_type,
        digest_base64=digest,
        retain_until=retain_until,
    )
