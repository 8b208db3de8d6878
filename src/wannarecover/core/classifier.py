"""
Type Classifier Module.

Decides the extension of a file whose name no longer tells anything,
using only its bytes:

1. empty files get EMPTY_EXTENSION
2. the content-type oracle gives a generic MIME type for the header
3. ZIP-family types are resolved from the archive entry names
4. generic binary types go through the known-header signature table,
   OLE compound documents through their embedded application markers
5. every other MIME type is translated by the MIME-to-extension lookup
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Optional, Union

from .containers import ContainerInspector
from .oracle import (
    BINARY_MIME_TYPES,
    UNKNOWN_MIME,
    ZIP_MIME_TYPES,
    ContentTypeOracle,
    MimeExtensionLookup,
    default_oracle,
)
from .signatures import (
    EMPTY_EXTENSION,
    HEADER_SIZE,
    MSOFFICE_EXTENSION,
    UNKNOWN_EXTENSION,
    SignatureRegistry,
)


class ClassificationSource(Enum):
    """Which stage of the pipeline produced an extension"""
    KNOWN_HEADER = "known_header"
    CONTAINER_INSPECTION = "container_inspection"
    SYSTEM_ORACLE = "system_oracle"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ClassificationResult:
    extension: str
    source: ClassificationSource
    mime_type: Optional[str] = None


class TypeClassifier:
    """
    Content-based file type classifier.

    Instances hold only read-only collaborators, so one classifier may be
    shared by any number of worker threads.
    """

    def __init__(self,
                 oracle: Optional[ContentTypeOracle] = None,
                 registry: Optional[SignatureRegistry] = None,
                 inspector: Optional[ContainerInspector] = None,
                 mime_lookup: Optional[MimeExtensionLookup] = None,
                 header_size: int = HEADER_SIZE):
        self.oracle = oracle if oracle is not None else default_oracle()
        self.registry = registry if registry is not None else SignatureRegistry()
        self.inspector = inspector if inspector is not None else ContainerInspector()
        self.mime_lookup = mime_lookup if mime_lookup is not None else MimeExtensionLookup()
        self.header_size = header_size
        self.logger = logging.getLogger(__name__)

    def classify(self, file_path: Union[str, Path]) -> str:
        """
        Guess the extension of a file from its content.

        Never raises; any failure yields UNKNOWN_EXTENSION.

        Args:
            file_path: Path to the file

        Returns:
            Extension including the leading dot
        """
        return self.identify(file_path).extension

    def identify(self, file_path: Union[str, Path]) -> ClassificationResult:
        """
        Classify a file and report which stage decided.

        Args:
            file_path: Path to the file

        Returns:
            ClassificationResult; source is FALLBACK when nothing matched
            or the file could not be read
        """
        try:
            with open(file_path, 'rb') as f:
                return self.identify_stream(f)
        except Exception as e:
            self.logger.debug(f"Classification failed for {file_path}: {e}")
            return ClassificationResult(UNKNOWN_EXTENSION, ClassificationSource.FALLBACK)

    def identify_stream(self, stream: BinaryIO) -> ClassificationResult:
        """
        Classify an open binary stream positioned at its start.

        The header is consumed; container refinement continues from the
        current position (compound documents) or re-reads the stream
        through its central directory (archives).
        """
        header = stream.read(self.header_size)
        if not header:
            return ClassificationResult(EMPTY_EXTENSION, ClassificationSource.FALLBACK)

        mime_type = self._detect_mime(header)

        if mime_type in ZIP_MIME_TYPES:
            extension = self.inspector.resolve_archive(stream)
            return ClassificationResult(extension, ClassificationSource.CONTAINER_INSPECTION, mime_type)

        if mime_type in BINARY_MIME_TYPES:
            extension = self.registry.match(header)
            if extension is None:
                return ClassificationResult(UNKNOWN_EXTENSION, ClassificationSource.FALLBACK, mime_type)
            if extension == MSOFFICE_EXTENSION:
                extension = self.inspector.resolve_compound_document(stream)
                return ClassificationResult(extension, ClassificationSource.CONTAINER_INSPECTION, mime_type)
            return ClassificationResult(extension, ClassificationSource.KNOWN_HEADER, mime_type)

        extension = self.mime_lookup.lookup(mime_type)
        if extension:
            return ClassificationResult(extension, ClassificationSource.SYSTEM_ORACLE, mime_type)
        return ClassificationResult(UNKNOWN_EXTENSION, ClassificationSource.FALLBACK, mime_type)

    def _detect_mime(self, header: bytes) -> str:
        try:
            mime_type = self.oracle.detect(header)
        except Exception as e:
            self.logger.debug(f"Content-type oracle {self.oracle.name} failed: {e}")
            return UNKNOWN_MIME
        return (mime_type or UNKNOWN_MIME).lower()
