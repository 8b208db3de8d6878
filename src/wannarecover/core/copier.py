"""
Recovery Copier Module.

Copies discovered leftovers to a destination folder under their original
base name with the extension guessed from their content.
"""

import os
import shutil
import tempfile
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from .classifier import TypeClassifier


@dataclass(frozen=True)
class RecoveryJob:
    source: Path
    destination: Path
    overwrite: bool


@dataclass
class RecoveryOutcome:
    """Result of one copy attempt"""
    source: Path
    destination: Optional[Path] = None
    extension: Optional[str] = None
    copied: bool = False
    error: Optional[str] = None

    def to_dict(self):
        return {
            'source': str(self.source),
            'destination': str(self.destination) if self.destination else None,
            'extension': self.extension,
            'copied': self.copied,
            'error': self.error,
        }


def destination_name(source: Union[str, Path], extension: str) -> str:
    """Replace the last extension of a file name, e.g. 'a.b.WNCRYT' -> 'a.b.pdf' and '.WNCRYT' -> '.pdf'."""
    name = os.path.basename(source)
    base, dot, _ = name.rpartition('.')
    if not dot:
        base = name
    return f"{base}{extension}"


class RecoveryCopier:
    """
    Best-effort parallel copier.

    Each file is classified and copied independently in a worker pool
    bounded by the number of CPUs. A failing file is recorded and
    skipped; the rest of the batch carries on.
    """

    def __init__(self, classifier: TypeClassifier, max_workers: Optional[int] = None):
        self.classifier = classifier
        self.max_workers = max_workers or os.cpu_count() or 1
        self.logger = logging.getLogger(__name__)

    def recover(self, destination_dir: Union[str, Path], overwrite: bool,
                sources: Iterable[Union[str, Path]],
                progress_cb: Optional[Callable[[int, int], None]] = None) -> List[RecoveryOutcome]:
        """
        Classify and copy every source file into destination_dir.

        Args:
            destination_dir: Output folder, created if missing
            overwrite: Replace existing files; when False they are left untouched
            sources: Files to recover
            progress_cb: Optional callback called with (done, total)

        Returns:
            One RecoveryOutcome per source, in completion order
        """
        destination_dir = Path(destination_dir)
        try:
            destination_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            # Each copy below then fails and is recorded on its own
            self.logger.error(f"Cannot create destination {destination_dir}: {e}")
        sources = [Path(s) for s in sources]
        total = len(sources)
        outcomes: List[RecoveryOutcome] = []

        self.logger.info(f"Recovering {total} file(s) to {destination_dir} with {self.max_workers} worker(s)")

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {
                pool.submit(self._recover_one, destination_dir, overwrite, source): source
                for source in sources
            }
            for future in as_completed(futures):
                outcomes.append(future.result())
                if progress_cb:
                    progress_cb(len(outcomes), total)

        copied = sum(1 for o in outcomes if o.copied)
        self.logger.info(f"Recovery complete: {copied}/{total} file(s) copied")
        return outcomes

    def _recover_one(self, destination_dir: Path, overwrite: bool, source: Path) -> RecoveryOutcome:
        outcome = RecoveryOutcome(source=source)
        try:
            outcome.extension = self.classifier.classify(source)
            job = RecoveryJob(
                source=source,
                destination=destination_dir / destination_name(source, outcome.extension),
                overwrite=overwrite,
            )
            outcome.destination = job.destination
            self._copy(job)
            outcome.copied = True
            self.logger.debug(f"Recovered {source} -> {job.destination}")
        except Exception as e:
            outcome.error = str(e)
            self.logger.warning(f"Skipping {source}: {e}")
        return outcome

    def _copy(self, job: RecoveryJob) -> None:
        """
        Copy data and metadata without leaving a partial file behind.

        When overwriting, data goes to a temporary file next to the
        destination which then replaces it, so a failed copy keeps the old
        file. Otherwise the destination is created exclusively and removed
        again if the copy fails.

        Raises:
            FileExistsError: If not overwriting and the destination exists
        """
        if job.overwrite:
            fd, partial = tempfile.mkstemp(prefix=f".{job.destination.name}.", suffix='.part',
                                           dir=job.destination.parent)
            try:
                with os.fdopen(fd, 'wb') as dst, open(job.source, 'rb') as src:
                    shutil.copyfileobj(src, dst)
                self._copy_metadata(job.source, partial)
                os.replace(partial, job.destination)
            except BaseException:
                os.unlink(partial)
                raise
            return

        with open(job.source, 'rb') as src, open(job.destination, 'xb') as dst:
            try:
                shutil.copyfileobj(src, dst)
            except BaseException:
                dst.close()
                os.unlink(job.destination)
                raise
        self._copy_metadata(job.source, job.destination)

    def _copy_metadata(self, source: Path, target: Union[str, Path]) -> None:
        # Timestamps and mode are best effort once the data is complete
        try:
            shutil.copystat(source, target)
        except OSError as e:
            self.logger.debug(f"Could not copy metadata of {source}: {e}")
