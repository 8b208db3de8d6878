"""
Content-type oracle and MIME-to-extension lookup.

The oracle turns raw header bytes into a generic MIME type. Its answer is
advisory: the classifier only uses it to decide which refinement to run.

Dependencies:
    pip install python-magic   (needs libmagic: apt-get install libmagic1)
"""

import logging
import mimetypes
import threading
from typing import Dict, Optional, Tuple

try:
    import magic
    MAGIC_AVAILABLE = True
except ImportError:
    magic = None
    MAGIC_AVAILABLE = False

UNKNOWN_MIME = 'unknown/unknown'
OCTET_STREAM_MIME = 'application/octet-stream'

ZIP_MIME_TYPES = frozenset({
    'application/zip',
    'application/x-zip-compressed',
    'application/x-zip',
})

# libmagic reports OLE files it cannot sub-type with these
BINARY_MIME_TYPES = frozenset({
    OCTET_STREAM_MIME,
    'application/x-ole-storage',
    'application/cdfv2',
})

logger = logging.getLogger(__name__)


class ContentTypeOracle:
    """Capability interface: raw header bytes in, lowercase MIME type out."""

    name = 'abstract'

    def detect(self, header: bytes) -> str:
        """
        Guess the MIME type of a header.

        Implementations never raise; failures yield UNKNOWN_MIME.
        """
        raise NotImplementedError


class LibmagicOracle(ContentTypeOracle):
    """Platform-backed oracle using libmagic through python-magic."""

    name = 'libmagic'

    def __init__(self):
        if not MAGIC_AVAILABLE:
            raise RuntimeError(
                "python-magic library not installed or libmagic missing. "
                "Install with: pip install python-magic (and libmagic1 on Debian/Ubuntu)"
            )
        self._magic = magic.Magic(mime=True)
        # A single libmagic cookie is not safe to share between threads
        self._lock = threading.Lock()

    def detect(self, header: bytes) -> str:
        try:
            with self._lock:
                mime = self._magic.from_buffer(header)
        except Exception as e:
            logger.debug(f"libmagic failed on {len(header)} byte header: {e}")
            return UNKNOWN_MIME
        return (mime or UNKNOWN_MIME).strip().lower()


class StaticTableOracle(ContentTypeOracle):
    """
    Fallback oracle for hosts without libmagic.

    Recognises a handful of formats by their leading bytes and reports
    everything else as a generic binary stream, which hands the decision
    over to the signature registry.
    """

    name = 'static'

    PREFIXES: Tuple[Tuple[bytes, str], ...] = (
        (b'PK\x03\x04', 'application/zip'),
        (b'PK\x05\x06', 'application/zip'),
        (b'\xFF\xD8\xFF', 'image/jpeg'),
        (b'GIF87a', 'image/gif'),
        (b'GIF89a', 'image/gif'),
        (b'\x1f\x8b', 'application/gzip'),
        (b'BZh', 'application/x-bzip2'),
        (b'\xFD7zXZ\x00', 'application/x-xz'),
        (b'ID3', 'audio/mpeg'),
        (b'fLaC', 'audio/flac'),
        (b'OggS', 'audio/ogg'),
        (b'\x1a\x45\xdf\xa3', 'video/x-matroska'),
        (b'\x7fELF', 'application/x-executable'),
        (b'MZ', 'application/x-dosexec'),
        (b'<?xml', 'text/xml'),
    )

    def detect(self, header: bytes) -> str:
        try:
            for prefix, mime in self.PREFIXES:
                if header.startswith(prefix):
                    return mime
            if len(header) >= 12 and header[4:8] == b'ftyp':
                return 'video/mp4'
        except Exception as e:
            logger.debug(f"Static oracle failed: {e}")
            return UNKNOWN_MIME
        return OCTET_STREAM_MIME


def default_oracle(use_libmagic: bool = True) -> ContentTypeOracle:
    """
    Return the best oracle available on this host.

    Args:
        use_libmagic: Set False to force the static table

    Returns:
        LibmagicOracle when libmagic loads, StaticTableOracle otherwise
    """
    if use_libmagic:
        try:
            return LibmagicOracle()
        except Exception as e:
            logger.warning(f"libmagic unavailable, using static content-type table: {e}")
    return StaticTableOracle()


class MimeExtensionLookup:
    """
    Maps an exact lowercase MIME type to a single extension.

    A static table is consulted first so that common types always map the
    same way, then the platform ``mimetypes`` registry.
    """

    MIME_TO_EXTENSION: Dict[str, str] = {
        # Images
        'image/jpeg': '.jpg',
        'image/pjpeg': '.jpg',
        'image/png': '.png',
        'image/x-png': '.png',
        'image/gif': '.gif',
        'image/bmp': '.bmp',
        'image/x-ms-bmp': '.bmp',
        'image/webp': '.webp',
        'image/tiff': '.tif',
        'image/svg+xml': '.svg',
        'image/vnd.microsoft.icon': '.ico',
        'image/x-icon': '.ico',
        'image/vnd.adobe.photoshop': '.psd',
        'image/heic': '.heic',
        'image/x-dpx': '.dpx',

        # Documents
        'application/pdf': '.pdf',
        'application/postscript': '.ps',
        'application/msword': '.doc',
        'application/vnd.ms-excel': '.xls',
        'application/vnd.ms-powerpoint': '.ppt',
        'application/vnd.openxmlformats-officedocument.wordprocessingml.document': '.docx',
        'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet': '.xlsx',
        'application/vnd.openxmlformats-officedocument.presentationml.presentation': '.pptx',
        'application/vnd.oasis.opendocument.text': '.odt',
        'application/vnd.oasis.opendocument.spreadsheet': '.ods',
        'application/vnd.oasis.opendocument.presentation': '.odp',
        'application/epub+zip': '.epub',
        'application/rtf': '.rtf',
        'text/rtf': '.rtf',
        'text/plain': '.txt',
        'text/csv': '.csv',
        'text/html': '.html',
        'text/xml': '.xml',
        'application/xml': '.xml',
        'application/json': '.json',

        # Archives
        'application/zip': '.zip',
        'application/x-zip-compressed': '.zip',
        'application/java-archive': '.jar',
        'application/x-rar': '.rar',
        'application/x-rar-compressed': '.rar',
        'application/vnd.rar': '.rar',
        'application/x-7z-compressed': '.7z',
        'application/x-tar': '.tar',
        'application/gzip': '.gz',
        'application/x-gzip': '.gz',
        'application/x-bzip2': '.bz2',
        'application/x-xz': '.xz',

        # Audio / video
        'audio/mpeg': '.mp3',
        'audio/wav': '.wav',
        'audio/x-wav': '.wav',
        'audio/flac': '.flac',
        'audio/ogg': '.ogg',
        'audio/x-ms-wma': '.wma',
        'video/mp4': '.mp4',
        'video/quicktime': '.mov',
        'video/x-msvideo': '.avi',
        'video/x-matroska': '.mkv',
        'video/webm': '.webm',
        'video/x-ms-asf': '.asf',

        # Executables
        'application/x-dosexec': '.exe',
        'application/x-msdownload': '.exe',
        'application/x-executable': '.elf',
        'application/x-sharedlib': '.so',
    }

    def __init__(self, overrides: Optional[Dict[str, str]] = None):
        self.table = dict(self.MIME_TO_EXTENSION)
        if overrides:
            self.table.update({k.lower(): v for k, v in overrides.items()})

    def lookup(self, mime_type: str) -> Optional[str]:
        """Return the extension for a MIME type, or None if unmapped."""
        mime_type = mime_type.strip().lower()
        if mime_type in self.table:
            return self.table[mime_type]
        return mimetypes.guess_extension(mime_type, strict=False)
