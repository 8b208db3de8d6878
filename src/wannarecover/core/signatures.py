"""
Known-header signature table.

Headers are compared as upper-case hex strings against compiled regular
expressions, in registration order. Several patterns overlap (the EPUB
header is a prefix-extended ZIP header, every OLE file also looks like
"binary"), so the first registered match wins and the order of
DEFAULT_SIGNATURES must not change.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple

UNKNOWN_EXTENSION = '.txt'
EMPTY_EXTENSION = '.empty'
MSOFFICE_EXTENSION = '.officeDocument'

HEADER_SIZE = 256


def hex_encode(data: bytes) -> str:
    """Return the upper-case hex encoding used by all signature patterns."""
    return data.hex().upper()


@dataclass(frozen=True)
class FileSignature:
    extension: str
    pattern: str
    regex: 're.Pattern' = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.extension or not self.extension.startswith('.'):
            raise ValueError(f"Signature extension must start with '.': {self.extension!r}")
        try:
            compiled = re.compile(self.pattern)
        except re.error as e:
            raise ValueError(f"Invalid signature pattern for {self.extension}: {e}") from e
        object.__setattr__(self, 'regex', compiled)

    def matches(self, hex_content: str) -> bool:
        return self.regex.search(hex_content) is not None


DEFAULT_SIGNATURES: Tuple[FileSignature, ...] = (
    FileSignature('.7z', '^377ABCAF271C'),
    FileSignature(MSOFFICE_EXTENSION, '^D0CF11E0A1B11AE1'),
    FileSignature('.dpx', '^53445058'),
    FileSignature('.jpg', '^4A464946'),
    FileSignature('.pdf', '^25504446'),
    FileSignature('.png', '^89504E470D0A1A0A'),
    FileSignature('.ps', '^25215053'),
    FileSignature('.psd', '^38425053'),
    FileSignature('.rar', '^526172211A0700'),
    FileSignature('.tif', '^49492A00'),
    FileSignature('.vsdx', '^504B0708'),
    FileSignature('.wav', '^52494646'),
    FileSignature('.wma', '^A6D900AA0062CE6C'),
    FileSignature('.epub', '^504B03040A000200'),
    FileSignature('.zip', '^504B0304'),
    FileSignature('.rtf', '^7B5C72746631'),
    FileSignature('.bmp', '^424D'),
)


class SignatureRegistry:
    """
    Read-only, ordered collection of file signatures.

    A registry is built once and shared between classifier instances.
    Use ``extended()`` to obtain a new registry with additional
    signatures appended after the existing ones.
    """

    def __init__(self, signatures: Iterable[FileSignature] = DEFAULT_SIGNATURES):
        self._signatures: Tuple[FileSignature, ...] = tuple(signatures)

    @property
    def signatures(self) -> Tuple[FileSignature, ...]:
        return self._signatures

    def __len__(self) -> int:
        return len(self._signatures)

    def __iter__(self):
        return iter(self._signatures)

    def match(self, header: bytes) -> Optional[str]:
        """
        Find the extension registered for a file header.

        Args:
            header: First bytes of the file (at most HEADER_SIZE)

        Returns:
            Extension of the first matching signature, or None
        """
        content = hex_encode(header[:HEADER_SIZE])
        for signature in self._signatures:
            if signature.matches(content):
                return signature.extension
        return None

    def extended(self, extra: Dict[str, str]) -> 'SignatureRegistry':
        """
        Build a registry with extra signatures appended.

        Args:
            extra: Mapping of extension to hex pattern, e.g. {'.gif': '^47494638'}

        Returns:
            New registry; this one is left untouched

        Raises:
            ValueError: If an extension or pattern is malformed
        """
        added = [FileSignature(ext, pattern) for ext, pattern in extra.items()]
        return SignatureRegistry(self._signatures + tuple(added))
