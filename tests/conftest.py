import io
import sys
import zipfile
from pathlib import Path

import pytest

# Make the package importable when running from a source checkout
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from wannarecover.core.classifier import TypeClassifier
from wannarecover.core.oracle import ContentTypeOracle

OLE_HEADER = bytes.fromhex('D0CF11E0A1B11AE1')
PDF_BYTES = b'%PDF-1.7\n1 0 obj\n<< /Type /Catalog >>\nendobj\n%%EOF\n'


class FixedOracle(ContentTypeOracle):
    """Oracle that always answers the same MIME type"""

    name = 'fixed'

    def __init__(self, mime_type):
        self.mime_type = mime_type
        self.calls = 0

    def detect(self, header):
        self.calls += 1
        return self.mime_type


class BrokenOracle(ContentTypeOracle):
    name = 'broken'

    def detect(self, header):
        raise RuntimeError("oracle exploded")


def zip_bytes(*names):
    """Build an in-memory ZIP holding empty entries with the given names"""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, 'w') as archive:
        for name in names:
            archive.writestr(name, b'data')
    return buffer.getvalue()


def ole_bytes(marker=b'', padding=512):
    """OLE compound-file header followed by padding and an optional marker"""
    return OLE_HEADER + b'\x00' * padding + marker + b'\x00' * 64


@pytest.fixture
def binary_classifier():
    """Classifier whose oracle reports every header as a generic binary stream"""
    return TypeClassifier(oracle=FixedOracle('application/octet-stream'))


@pytest.fixture
def write_file(tmp_path):
    def _write(name, content):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path
    return _write


@pytest.fixture
def app_overrides(tmp_path):
    """Configuration for RecoveryApp instances used in tests"""
    return {
        "log_dir": None,
        "log_level": "DEBUG",
        "use_libmagic": False,
        "poll_interval": 0.05,
    }
