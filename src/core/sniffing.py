"""Content-type and charset sniffing for fetched pages (core domain).

Every function here returns a best guess and never raises on odd input:
failing to detect something only degrades the guess, it never aborts a
preview.
"""

from __future__ import annotations

import codecs
import re
from typing import Optional, Tuple

from bs4.dammit import EncodingDetector

from core.models import ContentKind

SNIFF_LEN = 512
DEFAULT_ENCODING = "utf-8"
# Legacy pages with no usable declaration are assumed to be Windows-1252.
FALLBACK_ENCODING = "cp1252"
HTML_TYPE = "text/html"

_HTML_SIGNATURES = (
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

# Exact prefixes, checked in order after the markup signatures.
_EXACT_SIGNATURES: Tuple[Tuple[bytes, str], ...] = (
    (b"%PDF-", "application/pdf"),
    (b"%!PS-Adobe-", "application/postscript"),
    (b"\xfe\xff", "text/plain; charset=utf-16be"),
    (b"\xff\xfe", "text/plain; charset=utf-16le"),
    (b"\xef\xbb\xbf", "text/plain; charset=utf-8"),
    (b"\x00\x00\x01\x00", "image/x-icon"),
    (b"\x00\x00\x02\x00", "image/x-icon"),
    (b"BM", "image/bmp"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"wOFF", "font/woff"),
    (b"wOF2", "font/woff2"),
    (b"OggS\x00", "application/ogg"),
    (b"MThd\x00\x00\x00\x06", "audio/midi"),
    (b"ID3", "audio/mpeg"),
    (b"\x1aE\xdf\xa3", "video/webm"),
    (b"Rar!\x1a\x07\x00", "application/x-rar-compressed"),
    (b"Rar!\x1a\x07\x01\x00", "application/x-rar-compressed"),
    (b"\x1f\x8b\x08", "application/x-gzip"),
    (b"PK\x03\x04", "application/zip"),
    (b"\x00asm", "application/wasm"),
)

# RIFF containers carry their real type at offset 8.
_RIFF_TYPES = {b"WEBP": "image/webp", b"WAVE": "audio/wave", b"AVI ": "video/avi"}

_BINARY_BYTES = frozenset(
    list(range(0x00, 0x09)) + [0x0B] + list(range(0x0E, 0x1B)) + list(range(0x1C, 0x20))
)
_LEADING_WS = b"\t\n\x0c\r "
_CHARSET_RE = re.compile(r"charset\s*=\s*[\"']?([^\s;\"']+)", re.IGNORECASE)


def _matches_html(data: bytes) -> bool:
    upper = data.upper()
    for signature in _HTML_SIGNATURES:
        if not upper.startswith(signature):
            continue
        # The tag name must be followed by a space or ">" so "<BRAND" is not <BR.
        terminator = data[len(signature) : len(signature) + 1]
        if terminator in (b" ", b">"):
            return True
    return False


def sniff_content_type(data: bytes) -> str:
    """Best-guess media type from the first bytes of a body.

    Follows the browser content-sniffing signature table; unknown data is
    reported as text/plain unless it contains control bytes that never
    occur in text.
    """

    data = data[:SNIFF_LEN]
    if not data:
        return "text/plain; charset=utf-8"

    stripped = data.lstrip(_LEADING_WS)
    if _matches_html(stripped):
        return "text/html; charset=utf-8"
    if stripped.startswith(b"<?xml"):
        return "text/xml; charset=utf-8"

    for signature, media_type in _EXACT_SIGNATURES:
        if data.startswith(signature):
            return media_type

    if data.startswith(b"RIFF") and data[8:12] in _RIFF_TYPES:
        return _RIFF_TYPES[data[8:12]]
    if data[4:8] == b"ftyp":
        return "video/mp4"

    if any(byte in _BINARY_BYTES for byte in data):
        return "application/octet-stream"
    return "text/plain; charset=utf-8"


def classify(declared_type: Optional[str], prefix: bytes) -> ContentKind:
    """Decide whether a response is worth parsing as a page.

    A declared type is trusted as-is; only an absent one is sniffed.
    """

    content_type = declared_type if declared_type else sniff_content_type(prefix)
    if HTML_TYPE in content_type:
        return ContentKind.HTML
    return ContentKind.NON_HTML


def charset_from_content_type(content_type: Optional[str]) -> Optional[str]:
    if not content_type:
        return None
    match = _CHARSET_RE.search(content_type)
    if not match:
        return None
    return match.group(1).strip().lower()


def _known_codec(name: Optional[str]) -> Optional[str]:
    if not name:
        return None
    try:
        return codecs.lookup(name).name
    except LookupError:
        return None


def detect_encoding(body: bytes, declared_type: Optional[str]) -> Tuple[str, bytes]:
    """Pick a codec for `body` and return it with the bytes to decode.

    Order: declared charset, byte-order mark, in-document meta declaration.
    With none of those the body is UTF-8 if it decodes as UTF-8, otherwise
    Windows-1252. A BOM is stripped when it decides the codec.
    """

    declared = _known_codec(charset_from_content_type(declared_type))
    if declared:
        return declared, body

    stripped, bom_encoding = EncodingDetector.strip_byte_order_mark(body)
    bom_codec = _known_codec(bom_encoding)
    if bom_codec:
        return bom_codec, stripped

    meta_codec = _known_codec(EncodingDetector.find_declared_encoding(body, is_html=True))
    if meta_codec:
        return meta_codec, body

    if _looks_like_utf8(body):
        return DEFAULT_ENCODING, body
    return FALLBACK_ENCODING, body


def _looks_like_utf8(body: bytes) -> bool:
    try:
        body.decode(DEFAULT_ENCODING)
    except UnicodeDecodeError as exc:
        # A capped read may end in the middle of a multi-byte sequence.
        return exc.reason == "unexpected end of data" and exc.end == len(body)
    return True


def normalize(body: bytes, declared_type: Optional[str]) -> str:
    """Decode a page body into text, best-effort.

    Undecodable bytes become lone surrogates instead of raising, so callers
    can reject garbage text later rather than fail here.
    """

    encoding, data = detect_encoding(body, declared_type)
    try:
        return data.decode(encoding, errors="surrogateescape")
    except (LookupError, UnicodeError):
        return data.decode(DEFAULT_ENCODING, errors="surrogateescape")
