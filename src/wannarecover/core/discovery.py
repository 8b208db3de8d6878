"""
File Discovery Module.

Walks several root directories at once and streams matching file paths
to the caller while the walks are still running.
"""

import os
import queue
import fnmatch
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Iterator, List, Union

TEMP_FILE_PATTERN = '*.WNCRYT'
POLL_INTERVAL = 0.5


class FileDiscoverer:
    """
    Concurrent recursive file finder.

    One traversal task runs per root directory. Every match is put on a
    shared queue as soon as it is found; ``discover`` yields from that
    queue until it is empty and all traversals have finished.

    Directories that cannot be listed (permission denied, name too long,
    removed mid-walk) are skipped together with their subtree.
    """

    def __init__(self, poll_interval: float = POLL_INTERVAL, recursive: bool = True):
        self.poll_interval = poll_interval
        self.recursive = recursive
        self.logger = logging.getLogger(__name__)

    def discover(self, roots: Iterable[Union[str, Path]],
                 pattern: str = TEMP_FILE_PATTERN) -> Iterator[str]:
        """
        Lazily yield paths of files matching a glob under the given roots.

        Args:
            roots: Directories to search; missing ones are ignored
            pattern: Glob matched case-insensitively against file names

        Yields:
            Paths of matching files under their root, in no particular order
        """
        existing = [str(root) for root in roots if os.path.isdir(root)]
        if not existing:
            self.logger.info("No existing search roots to walk")
            return

        found: 'queue.Queue[str]' = queue.Queue()
        stop = threading.Event()
        executor = ThreadPoolExecutor(max_workers=len(existing), thread_name_prefix='discover')
        try:
            tasks: List[Future] = [
                executor.submit(self._walk_root, root, pattern, found, stop)
                for root in existing
            ]
            self.logger.debug(f"Started {len(tasks)} discovery task(s) for pattern {pattern}")

            while True:
                try:
                    path = found.get(timeout=self.poll_interval)
                except queue.Empty:
                    # Tasks enqueue before completing: done + empty means exhausted
                    if all(task.done() for task in tasks) and found.empty():
                        break
                    continue
                yield path
        finally:
            # Also reached when the consumer stops iterating early
            stop.set()
            executor.shutdown(wait=False, cancel_futures=True)

    def _walk_root(self, root: str, pattern: str, found: 'queue.Queue[str]',
                   stop: threading.Event) -> int:
        count = 0
        try:
            for path in self._walk(root, pattern.lower(), stop):
                found.put(path)
                count += 1
        except Exception as e:
            self.logger.warning(f"Discovery under {root} stopped early: {e}")
        self.logger.info(f"Finished walking {root}: {count} match(es)")
        return count

    def _walk(self, directory: str, pattern: str, stop: threading.Event) -> Iterator[str]:
        """Depth-first walk: files of a directory first, then its subdirectories."""
        if stop.is_set():
            return
        subdirs: List[str] = []
        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            subdirs.append(entry.path)
                        elif entry.is_file() and fnmatch.fnmatchcase(entry.name.lower(), pattern):
                            yield entry.path
                    except OSError as e:
                        self.logger.debug(f"Skipping entry {entry.path}: {e}")
        except OSError as e:
            self.logger.debug(f"Skipping directory {directory}: {e}")
            return

        if not self.recursive:
            return
        for subdir in subdirs:
            yield from self._walk(subdir, pattern, stop)
