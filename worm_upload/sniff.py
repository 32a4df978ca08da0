"""Content-type sniffing from leading bytes.

Implements the magic-byte table of the WHATWG MIME Sniffing standard
(https://mimesniff.spec.whatwg.org/) over the first 512 bytes of a payload:
- HTML and XML markers (after leading whitespace)
- Document, image, audio/video, font and archive signatures
- A plain-text check for samples without binary control bytes

Anything unrecognised is reported as ``application/octet-stream``.
"""

from typing import Callable, Optional

# Only this many leading bytes are inspected
SNIFF_LEN = 512

OCTET_STREAM = "application/octet-stream"
TEXT_PLAIN_UTF8 = "text/plain; charset=utf-8"

# Whitespace skipped before HTML/XML markers
_WHITESPACE = b"\t\n\x0c\r "

# Bytes that never appear in text
_BINARY_BYTES = frozenset(
    list(range(0x00, 0x09)) + [0x0B] + list(range(0x0E, 0x1B)) + list(range(0x1C, 0x20))
)

_HTML_TAGS = (
    b"<!DOCTYPE HTML",
    b"<HTML",
    b"<HEAD",
    b"<SCRIPT",
    b"<IFRAME",
    b"<H1",
    b"<DIV",
    b"<FONT",
    b"<TABLE",
    b"<A",
    b"<STYLE",
    b"<TITLE",
    b"<B",
    b"<BODY",
    b"<BR",
    b"<P",
    b"<!--",
)

Matcher = Callable[[bytes, int], Optional[str]]


def _skip_whitespace(data: bytes) -> int:
    """Return the index of the first non-whitespace byte."""
    index = 0
    while index < len(data) and data[index] in _WHITESPACE:
        index += 1
    return index


def html_tag(tag: bytes) -> Matcher:
    """Match an HTML tag case-insensitively, terminated by space or '>'."""

    def match(data: bytes, first_non_ws: int) -> Optional[str]:
        body = data[first_non_ws:]
        if len(body) < len(tag) + 1:
            return None
        if body[: len(tag)].upper() != tag:
            return None
        if body[len(tag)] not in b" >":
            return None
        return "text/html; charset=utf-8"

    return match


def prefix(signature: bytes, content_type: str, skip_whitespace: bool = False) -> Matcher:
    """Match a literal byte prefix."""

    def match(data: bytes, first_non_ws: int) -> Optional[str]:
        start = first_non_ws if skip_whitespace else 0
        if data[start:].startswith(signature):
            return content_type
        return None

    return match


def masked(mask: bytes, pattern: bytes, content_type: str) -> Matcher:
    """Match ``pattern`` against the leading bytes after applying ``mask``."""
    if len(mask) != len(pattern):
        raise ValueError("mask and pattern must have the same length")

    def match(data: bytes, first_non_ws: int) -> Optional[str]:
        if len(data) < len(pattern):
            return None
        for index, expected in enumerate(pattern):
            if data[index] & mask[index] != expected:
                return None
        return content_type

    return match


def mp4(data: bytes, first_non_ws: int) -> Optional[str]:
    """Match an ISO base media file whose ``ftyp`` box names an mp4 brand."""
    if len(data) < 12:
        return None
    box_size = int.from_bytes(data[:4], "big")
    if len(data) < box_size or box_size % 4 != 0:
        return None
    if data[4:8] != b"ftyp":
        return None
    for start in range(8, box_size, 4):
        if start == 12:
            # Minor version, not a brand
            continue
        if data[start : start + 3] == b"mp4":
            return "video/mp4"
    return None


def text(data: bytes, first_non_ws: int) -> Optional[str]:
    """Match samples with no binary control bytes."""
    for byte in data[first_non_ws:]:
        if byte in _BINARY_BYTES:
            return None
    return TEXT_PLAIN_UTF8


_RIFF_MASK = b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff"
# UTF-16 marks only count once at least four bytes are present
_BOM_MASK = b"\xff\xff\x00\x00"

SIGNATURES: list[Matcher] = [
    *[html_tag(tag) for tag in _HTML_TAGS],
    prefix(b"<?xml", "text/xml; charset=utf-8", skip_whitespace=True),
    prefix(b"%PDF-", "application/pdf"),
    prefix(b"%!PS-Adobe-", "application/postscript"),
    # Byte-order marks
    masked(_BOM_MASK, b"\xfe\xff\x00\x00", "text/plain; charset=utf-16be"),
    masked(_BOM_MASK, b"\xff\xfe\x00\x00", "text/plain; charset=utf-16le"),
    prefix(b"\xef\xbb\xbf", TEXT_PLAIN_UTF8),
    # Images
    prefix(b"\x00\x00\x01\x00", "image/x-icon"),
    prefix(b"\x00\x00\x02\x00", "image/x-icon"),
    prefix(b"BM", "image/bmp"),
    prefix(b"GIF87a", "image/gif"),
    prefix(b"GIF89a", "image/gif"),
    masked(_RIFF_MASK + b"\xff\xff", b"RIFF\x00\x00\x00\x00WEBPVP", "image/webp"),
    prefix(b"\x89PNG\r\n\x1a\n", "image/png"),
    prefix(b"\xff\xd8\xff", "image/jpeg"),
    # Audio and video
    masked(_RIFF_MASK, b"FORM\x00\x00\x00\x00AIFF", "audio/aiff"),
    prefix(b"ID3", "audio/mpeg"),
    prefix(b"OggS\x00", "application/ogg"),
    prefix(b"MThd\x00\x00\x00\x06", "audio/midi"),
    masked(_RIFF_MASK, b"RIFF\x00\x00\x00\x00AVI ", "video/avi"),
    masked(_RIFF_MASK, b"RIFF\x00\x00\x00\x00WAVE", "audio/wave"),
    mp4,
    prefix(b"\x1aE\xdf\xa3", "video/webm"),
    # Fonts
    prefix(b"\x00\x01\x00\x00", "font/ttf"),
    prefix(b"OTTO", "font/otf"),
    prefix(b"ttcf", "font/collection"),
    prefix(b"wOFF", "font/woff"),
    prefix(b"wOF2", "font/woff2"),
    # Archives
    prefix(b"\x1f\x8b\x08", "application/x-gzip"),
    prefix(b"PK\x03\x04", "application/zip"),
    prefix(b"Rar!\x1a\x07\x00", "application/x-rar-compressed"),
    prefix(b"Rar!\x1a\x07\x01\x00", "application/x-rar-compressed"),
    prefix(b"\x00asm", "application/wasm"),
    text,
]


def sniff(data: bytes) -> str:
    """Return the best-guess MIME type of ``data``.

    Args:
        data: Payload bytes; only the first ``SNIFF_LEN`` are inspected.

    Returns:
        A MIME type string, ``application/octet-stream`` when no
        signature matches.
    """
    sample = bytes(data[:SNIFF_LEN])
    first_non_ws = _skip_whitespace(sample)
    for matcher in SIGNATURES:
        content_type = matcher(sample, first_non_ws)
        if content_type is not None:
            return content_type
    return OCTET_STREAM
