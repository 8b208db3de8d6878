"""Tests for core/classifier.py - the layered classification pipeline."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from wannarecover.core.classifier import ClassificationSource, TypeClassifier
from wannarecover.core import oracle as oracle_module
from wannarecover.core.oracle import LibmagicOracle, StaticTableOracle
from wannarecover.core.signatures import (
    DEFAULT_SIGNATURES,
    EMPTY_EXTENSION,
    MSOFFICE_EXTENSION,
    UNKNOWN_EXTENSION,
)

from conftest import FixedOracle, BrokenOracle, PDF_BYTES, OLE_HEADER, zip_bytes, ole_bytes


def test_empty_file(write_file):
    oracle = FixedOracle('application/pdf')
    classifier = TypeClassifier(oracle=oracle)
    result = classifier.identify(write_file('empty.WNCRYT', b''))
    assert result.extension == EMPTY_EXTENSION
    assert result.source is ClassificationSource.FALLBACK
    # Nothing past the header read happens for empty files
    assert oracle.calls == 0


@pytest.mark.parametrize("size", [1, 2, 7, 100, 255, 256, 257])
def test_small_files_never_raise(binary_classifier, write_file, size):
    path = write_file(f'small_{size}.WNCRYT', b'\x01' * size)
    assert binary_classifier.classify(path) == UNKNOWN_EXTENSION


def test_pdf_header_with_binary_oracle(binary_classifier, write_file):
    result = binary_classifier.identify(write_file('a.WNCRYT', PDF_BYTES))
    assert result.extension == '.pdf'
    assert result.source is ClassificationSource.KNOWN_HEADER
    assert result.mime_type == 'application/octet-stream'


def test_unmatched_binary_falls_back(binary_classifier, write_file):
    result = binary_classifier.identify(write_file('a.WNCRYT', b'\x00\x01\x02\x03' * 10))
    assert result.extension == UNKNOWN_EXTENSION
    assert result.source is ClassificationSource.FALLBACK


@pytest.mark.parametrize("zip_mime", [
    'application/zip',
    'application/x-zip-compressed',
    'APPLICATION/X-ZIP-COMPRESSED',
])
def test_zip_mime_defers_to_archive_inspection(write_file, zip_mime):
    classifier = TypeClassifier(oracle=FixedOracle(zip_mime))
    result = classifier.identify(write_file('doc.WNCRYT', zip_bytes('word/document.xml')))
    assert result.extension == '.docx'
    assert result.source is ClassificationSource.CONTAINER_INSPECTION


def test_zip_with_manifest_only_is_jar(write_file):
    classifier = TypeClassifier(oracle=FixedOracle('application/zip'))
    path = write_file('lib.WNCRYT', zip_bytes('META-INF/MANIFEST.MF', 'a/B.class'))
    assert classifier.classify(path) == '.jar'


def test_large_zip_is_inspected_past_header(write_file):
    classifier = TypeClassifier(oracle=FixedOracle('application/zip'))
    names = [f'content/part{i:04d}.bin' for i in range(50)] + ['xl/workbook.xml']
    assert classifier.classify(write_file('big.WNCRYT', zip_bytes(*names))) == '.xlsx'


def test_compound_document_word(binary_classifier, write_file):
    result = binary_classifier.identify(write_file('a.WNCRYT', ole_bytes(b'Word.Document.8')))
    assert result.extension == '.doc'
    assert result.source is ClassificationSource.CONTAINER_INSPECTION


def test_compound_document_without_marker(binary_classifier, write_file):
    assert binary_classifier.classify(write_file('a.WNCRYT', ole_bytes())) == MSOFFICE_EXTENSION


def test_compound_marker_inside_header_is_not_rescanned(binary_classifier, write_file):
    # Refinement inspects the bytes after the header only
    data = OLE_HEADER + b'Word.Document.8' + b'\x00' * 300
    assert binary_classifier.classify(write_file('a.WNCRYT', data)) == MSOFFICE_EXTENSION


def test_ole_mime_from_libmagic_counts_as_binary(write_file):
    classifier = TypeClassifier(oracle=FixedOracle('application/CDFV2'))
    assert classifier.classify(write_file('a.WNCRYT', ole_bytes(b'MS PowerPoint'))) == '.ppt'


def test_other_mime_uses_lookup(write_file):
    classifier = TypeClassifier(oracle=FixedOracle('image/png'))
    result = classifier.identify(write_file('a.WNCRYT', b'anything at all'))
    assert result.extension == '.png'
    assert result.source is ClassificationSource.SYSTEM_ORACLE


def test_unmapped_mime_falls_back(write_file):
    classifier = TypeClassifier(oracle=FixedOracle('application/x-nothing-maps-this'))
    result = classifier.identify(write_file('a.WNCRYT', PDF_BYTES))
    assert result.extension == UNKNOWN_EXTENSION
    assert result.source is ClassificationSource.FALLBACK


def test_oracle_failure_degrades(write_file):
    classifier = TypeClassifier(oracle=BrokenOracle())
    result = classifier.identify(write_file('a.WNCRYT', PDF_BYTES))
    assert result.extension == UNKNOWN_EXTENSION
    assert result.mime_type == 'unknown/unknown'


def test_missing_file_degrades(binary_classifier, tmp_path):
    result = binary_classifier.identify(tmp_path / 'does_not_exist.WNCRYT')
    assert result.extension == UNKNOWN_EXTENSION
    assert result.source is ClassificationSource.FALLBACK


def test_classification_does_not_modify_source(binary_classifier, write_file):
    data = ole_bytes(b'Word.Document.8')
    path = write_file('a.WNCRYT', data)
    before = path.stat().st_mtime_ns
    binary_classifier.classify(path)
    assert path.read_bytes() == data
    assert path.stat().st_mtime_ns == before


def test_static_oracle_pipeline(write_file):
    classifier = TypeClassifier(oracle=StaticTableOracle())
    assert classifier.classify(write_file('a.WNCRYT', PDF_BYTES)) == '.pdf'
    assert classifier.classify(write_file('b.WNCRYT', zip_bytes('ppt/slides/slide1.xml'))) == '.pptx'
    assert classifier.classify(write_file('c.WNCRYT', b'GIF89a\x01\x00')) == '.gif'
    assert classifier.classify(write_file('d.WNCRYT', ole_bytes(b'Microsoft Excel\x00'))) == '.xls'


def test_concurrent_matches_sequential(write_file):
    classifier = TypeClassifier(oracle=StaticTableOracle())
    contents = [
        PDF_BYTES,
        zip_bytes('word/document.xml'),
        zip_bytes('META-INF/MANIFEST.MF'),
        ole_bytes(b'Word.Document.8'),
        ole_bytes(b'MS PowerPoint'),
        b'',
        b'\x89PNG\r\n\x1a\n' + b'\x00' * 64,
        b'plain old bytes',
    ]
    paths = [write_file(f'f{i:03d}.WNCRYT', contents[i % len(contents)]) for i in range(64)]

    sequential = [classifier.classify(p) for p in paths]
    with ThreadPoolExecutor(max_workers=8) as pool:
        concurrent = list(pool.map(classifier.classify, paths))

    assert concurrent == sequential


def test_dpx_mime_maps_to_dpx(write_file):
    classifier = TypeClassifier(oracle=FixedOracle('image/x-dpx'))
    result = classifier.identify(write_file('scan.WNCRYT', b'SDPX' + b'\x00' * 512))
    assert result.extension == '.dpx'
    assert result.source is ClassificationSource.SYSTEM_ORACLE


@pytest.mark.parametrize("signature", DEFAULT_SIGNATURES, ids=lambda s: s.extension)
def test_libmagic_pipeline_recognises_every_known_header(write_file, signature):
    if not oracle_module.MAGIC_AVAILABLE:
        pytest.skip("libmagic not loadable")
    classifier = TypeClassifier(oracle=LibmagicOracle())
    header = bytes.fromhex(signature.pattern.lstrip('^'))

    result = classifier.identify(write_file('a.WNCRYT', header + b'\x00' * 512))

    assert result.extension != UNKNOWN_EXTENSION, result
