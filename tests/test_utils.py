"""Tests for utils.py - default search roots and formatting."""

import os
from collections import namedtuple

import psutil

from wannarecover import utils

Partition = namedtuple('Partition', 'device mountpoint fstype opts')


def test_default_roots(monkeypatch, tmp_path):
    monkeypatch.setenv('LOCALAPPDATA', str(tmp_path))
    monkeypatch.setattr(psutil, 'disk_partitions', lambda all=False: [
        Partition('/dev/sda1', '/', 'ext4', 'rw'),
        Partition('/dev/sdb1', '/mnt/data', 'ntfs', 'rw'),
    ])

    roots = utils.default_search_roots()

    assert roots == [
        os.path.join(str(tmp_path), 'Temp'),
        os.path.join('/', '$RECYCLE'),
        os.path.join('/mnt/data', '$RECYCLE'),
    ]


def test_default_roots_without_partitions(monkeypatch):
    monkeypatch.delenv('LOCALAPPDATA', raising=False)

    def fail(all=False):
        raise OSError("no mount table")

    monkeypatch.setattr(psutil, 'disk_partitions', fail)

    roots = utils.default_search_roots()

    assert len(roots) == 1
    assert os.path.isabs(roots[0])


def test_format_bytes():
    assert utils.format_bytes(512) == "512.0 B"
    assert utils.format_bytes(1536) == "1.5 KB"


def test_file_size(tmp_path):
    path = tmp_path / 'a.bin'
    path.write_bytes(b'12345')
    assert utils.file_size(str(path)) == 5
    assert utils.file_size(str(tmp_path / 'missing')) == 0
