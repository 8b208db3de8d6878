"""
Core recovery engine: discovery, content classification and copying.
"""

from .signatures import (
    EMPTY_EXTENSION,
    MSOFFICE_EXTENSION,
    UNKNOWN_EXTENSION,
    FileSignature,
    SignatureRegistry,
)
from .containers import ContainerInspector
from .oracle import (
    ContentTypeOracle,
    LibmagicOracle,
    MimeExtensionLookup,
    StaticTableOracle,
    default_oracle,
)
from .classifier import ClassificationResult, ClassificationSource, TypeClassifier
from .discovery import TEMP_FILE_PATTERN, FileDiscoverer
from .copier import RecoveryCopier, RecoveryJob, RecoveryOutcome

__all__ = [
    'EMPTY_EXTENSION',
    'MSOFFICE_EXTENSION',
    'UNKNOWN_EXTENSION',
    'FileSignature',
    'SignatureRegistry',
    'ContainerInspector',
    'ContentTypeOracle',
    'LibmagicOracle',
    'MimeExtensionLookup',
    'StaticTableOracle',
    'default_oracle',
    'ClassificationResult',
    'ClassificationSource',
    'TypeClassifier',
    'TEMP_FILE_PATTERN',
    'FileDiscoverer',
    'RecoveryCopier',
    'RecoveryJob',
    'RecoveryOutcome',
]
