"""
Container Inspector Module.

Refines a generic container match into a concrete document type:
- ZIP archives: Office Open XML, EPUB and Java archives by entry names
- OLE compound files: Word, Excel and PowerPoint by embedded markers
"""

import re
import logging
import zipfile
from typing import BinaryIO, List, Tuple, Callable

from .signatures import MSOFFICE_EXTENSION, hex_encode

ZIP_EXTENSION = '.zip'


class ContainerInspector:
    """
    Resolves ambiguous container formats.

    Both resolvers return the unrefined candidate (``.zip`` or
    ``.officeDocument``) when the stream cannot be parsed.
    """

    # Evaluated in order, first hit wins. Names are compared lower-cased.
    ARCHIVE_RULES: List[Tuple[Callable[[str], bool], str]] = [
        (lambda name: name.startswith('word/'), '.docx'),
        (lambda name: name.startswith('xl/'), '.xlsx'),
        (lambda name: name.startswith('ppt/'), '.pptx'),
        (lambda name: name.endswith('content.opf'), '.epub'),
        (lambda name: name.startswith('meta-inf/'), '.jar'),
    ]

    # Hex-encoded ASCII markers found inside OLE streams
    COMPOUND_MARKERS: List[Tuple['re.Pattern', str]] = [
        (re.compile(hex_encode(b'Word.Document.')), '.doc'),
        (re.compile(hex_encode(b'Microsoft Excel\x00')), '.xls'),
        (re.compile(hex_encode(b'MS PowerPoint')), '.ppt'),
    ]

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def resolve_archive(self, stream: BinaryIO) -> str:
        """
        Identify a ZIP-structured file by its entry names.

        Args:
            stream: Seekable binary stream over the whole file

        Returns:
            '.docx', '.xlsx', '.pptx', '.epub', '.jar' or '.zip'
        """
        try:
            with zipfile.ZipFile(stream) as archive:
                names = [name.lower() for name in archive.namelist()]
        except Exception as e:
            self.logger.debug(f"Archive could not be parsed, keeping {ZIP_EXTENSION}: {e}")
            return ZIP_EXTENSION

        for rule, extension in self.ARCHIVE_RULES:
            if any(rule(name) for name in names):
                return extension
        return ZIP_EXTENSION

    def resolve_compound_document(self, stream: BinaryIO) -> str:
        """
        Identify an OLE compound document by application markers.

        The rest of the stream is read completely and searched as hex.

        Args:
            stream: Binary stream positioned where inspection starts

        Returns:
            '.doc', '.xls', '.ppt' or '.officeDocument'
        """
        try:
            content = hex_encode(stream.read())
        except (OSError, ValueError) as e:
            self.logger.debug(f"Compound document unreadable, keeping {MSOFFICE_EXTENSION}: {e}")
            return MSOFFICE_EXTENSION

        for marker, extension in self.COMPOUND_MARKERS:
            if marker.search(content):
                return extension
        return MSOFFICE_EXTENSION
