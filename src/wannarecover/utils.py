"""
WannaRecover Utility Functions
Search-root detection and small formatting helpers

Dependencies:
    pip install psutil
"""

import os
import tempfile
from pathlib import Path
from typing import List, Dict

import psutil

RECYCLE_DIRECTORY = '$RECYCLE'


class SearchRootLocator:
    """Find the directories where WannaCry drops its temporary files"""

    @staticmethod
    def get_all_partitions() -> List[Dict]:
        """
        Get all mounted partitions on the system

        Returns:
            List of partition info dictionaries
        """
        partitions = []

        try:
            for partition in psutil.disk_partitions(all=False):
                partitions.append({
                    'device': partition.device,
                    'mountpoint': partition.mountpoint,
                    'fstype': partition.fstype,
                    'opts': partition.opts,
                })
        except (OSError, RuntimeError):
            # psutil cannot read the mount table (e.g. restricted container)
            pass

        return partitions

    @staticmethod
    def temp_directory() -> str:
        """
        Get the per-user temp directory

        On Windows this is %LOCALAPPDATA%\\Temp, where the encryptor keeps
        work files for the system drive.
        """
        local_app_data = os.environ.get('LOCALAPPDATA')
        if local_app_data:
            return os.path.join(local_app_data, 'Temp')
        return tempfile.gettempdir()

    @classmethod
    def default_roots(cls) -> List[str]:
        """
        Build the default list of directories to search

        Returns:
            Temp directory first, then the $RECYCLE folder of each partition.
            Roots are not checked for existence; discovery skips missing ones.
        """
        roots = [cls.temp_directory()]
        for partition in cls.get_all_partitions():
            candidate = os.path.join(partition['mountpoint'], RECYCLE_DIRECTORY)
            if candidate not in roots:
                roots.append(candidate)
        return roots

    @staticmethod
    def format_size(bytes_size: float) -> str:
        """
        Format byte size to human-readable format

        Args:
            bytes_size: Size in bytes

        Returns:
            Formatted string (e.g., "1.5 GB")
        """
        for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
            if bytes_size < 1024.0:
                return f"{bytes_size:.1f} {unit}"
            bytes_size /= 1024.0
        return f"{bytes_size:.1f} PB"


def default_search_roots() -> List[str]:
    """List the default directories searched for leftovers"""
    return SearchRootLocator.default_roots()


def format_bytes(size: float) -> str:
    """Format byte size to human-readable string"""
    return SearchRootLocator.format_size(size)


def file_size(path: str) -> int:
    """Size of a file in bytes, 0 if it cannot be read"""
    try:
        return Path(path).stat().st_size
    except OSError:
        return 0
