"""
WannaRecover - Central Application Controller

This module wires configuration, logging and the recovery engine together
for the command-line interface.

Author: WannaRecover Development Team
Version: 1.0.0
"""

import logging
import json
import uuid
from pathlib import Path
from typing import Optional, Dict, List, Any, Iterator, Iterable, Union
from datetime import datetime

from .core.classifier import ClassificationResult, TypeClassifier
from .core.copier import RecoveryCopier, RecoveryOutcome
from .core.discovery import FileDiscoverer, POLL_INTERVAL, TEMP_FILE_PATTERN
from .core.oracle import MimeExtensionLookup, default_oracle
from .core.signatures import HEADER_SIZE, SignatureRegistry
from .utils import default_search_roots


class RecoverySession:
    """
    Tracks one find/recover run for reporting.
    """

    def __init__(self, roots: List[str], destination: Optional[Path] = None):
        """
        Initialize a recovery session.

        Args:
            roots: Directories searched for leftovers
            destination: Folder receiving recovered files
        """
        self.session_id = uuid.uuid4().hex[:16]
        self.roots = roots
        self.destination = destination
        self.created_at = datetime.now()
        self.found_files: List[str] = []
        self.outcomes: List[RecoveryOutcome] = []

    @property
    def copied_count(self) -> int:
        return sum(1 for o in self.outcomes if o.copied)

    @property
    def skipped_count(self) -> int:
        return sum(1 for o in self.outcomes if not o.copied)

    def to_dict(self) -> Dict[str, Any]:
        """Convert session to dictionary for serialization"""
        return {
            "session_id": self.session_id,
            "roots": list(self.roots),
            "destination": str(self.destination) if self.destination else None,
            "created_at": self.created_at.isoformat(),
            "found_files_count": len(self.found_files),
            "copied_count": self.copied_count,
            "skipped_count": self.skipped_count,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


class RecoveryApp:
    """
    Main application class coordinating leftover recovery.

    This class provides a unified interface for:
    - Configuration loading
    - Locating *.WNCRYT leftovers
    - Identifying file types by content
    - Copying leftovers back with proper extensions
    - Writing a JSON report of a session
    """

    DEFAULT_CONFIG: Dict[str, Any] = {
        "version": "1.0.0",
        "log_level": "INFO",
        "log_dir": "logs",
        "file_pattern": TEMP_FILE_PATTERN,
        "search_roots": [],
        "recursive": True,
        "overwrite": False,
        "max_workers": 0,
        "poll_interval": POLL_INTERVAL,
        "header_size": HEADER_SIZE,
        "use_libmagic": True,
        "extra_signatures": {},
        "mime_overrides": {},
    }

    def __init__(self, config_path: Optional[Path] = None, overrides: Optional[Dict[str, Any]] = None):
        """
        Initialize the application.

        Args:
            config_path: Optional path to JSON configuration file
            overrides: Values applied on top of the file configuration

        Raises:
            ValueError: If the configuration is unusable
        """
        self.config = self._load_config(config_path)
        if overrides:
            self.config.update(overrides)
        self.logger = self._setup_logging()

        registry = SignatureRegistry().extended(self.config.get("extra_signatures") or {})
        self.classifier = TypeClassifier(
            oracle=default_oracle(self.config.get("use_libmagic", True)),
            registry=registry,
            mime_lookup=MimeExtensionLookup(self.config.get("mime_overrides") or {}),
            header_size=int(self.config.get("header_size", HEADER_SIZE)),
        )
        self.discoverer = FileDiscoverer(
            poll_interval=float(self.config.get("poll_interval", POLL_INTERVAL)),
            recursive=bool(self.config.get("recursive", True)),
        )
        self.copier = RecoveryCopier(self.classifier, max_workers=self.config.get("max_workers") or None)
        self.session: Optional[RecoverySession] = None

        self.logger.info(f"WannaRecover initialized (content-type oracle: {self.classifier.oracle.name})")

    def _load_config(self, config_path: Optional[Path]) -> Dict[str, Any]:
        """
        Load application configuration.

        Args:
            config_path: Path to JSON configuration file

        Returns:
            Configuration dictionary with defaults
        """
        config = dict(self.DEFAULT_CONFIG)

        if config_path and Path(config_path).exists():
            try:
                with open(config_path, 'r') as f:
                    user_config = json.load(f)
                config.update(user_config)
            except Exception as e:
                logging.warning(f"Failed to load config from {config_path}: {e}")

        return config

    def _setup_logging(self) -> logging.Logger:
        """
        Configure logging with an optional file trail.

        Returns:
            Configured logger instance
        """
        level_name = str(self.config.get("log_level", "INFO")).upper()
        log_level = getattr(logging, level_name, None)
        if not isinstance(log_level, int):
            raise ValueError(f"Unknown log level: {level_name}")

        logger = logging.getLogger("wannarecover")
        logger.setLevel(log_level)

        # Handlers are shared by every app instance in the process
        if logger.handlers:
            return logger

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        log_dir = self.config.get("log_dir")
        if log_dir:
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)
            log_file = log_dir / f"wannarecover_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        return logger

    def search_roots(self) -> List[str]:
        """Configured search roots, or the system defaults when none are set"""
        roots = self.config.get("search_roots") or []
        return [str(r) for r in roots] if roots else default_search_roots()

    def find_leftovers(self, roots: Optional[Iterable[Union[str, Path]]] = None) -> Iterator[str]:
        """
        Stream leftover files as they are found.

        Args:
            roots: Directories to search; defaults to search_roots()

        Yields:
            Paths of files matching the configured pattern
        """
        roots = [str(r) for r in roots] if roots else self.search_roots()
        self.session = RecoverySession(roots)
        pattern = self.config.get("file_pattern", TEMP_FILE_PATTERN)

        self.logger.info(f"Searching {len(roots)} root(s) for {pattern}")
        for path in self.discoverer.discover(roots, pattern):
            self.session.found_files.append(path)
            yield path
        self.logger.info(f"Found {len(self.session.found_files)} leftover file(s)")

    def identify(self, file_path: Union[str, Path]) -> ClassificationResult:
        """
        Identify the content type of a single file.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        path = Path(file_path)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {file_path}")
        return self.classifier.identify(path)

    def recover(self, destination: Union[str, Path],
                files: Optional[Iterable[Union[str, Path]]] = None,
                overwrite: Optional[bool] = None,
                progress_cb=None) -> RecoverySession:
        """
        Copy leftovers to destination with their content-based extension.

        Args:
            destination: Output folder
            files: Files to recover; when None the search roots are searched first
            overwrite: Replace existing outputs; defaults to the configured value
            progress_cb: Optional (done, total) callback

        Returns:
            The session holding per-file outcomes
        """
        if files is None:
            files = list(self.find_leftovers())
            session = self.session
        else:
            files = [str(f) for f in files]
            session = RecoverySession([])
            session.found_files = list(files)
            self.session = session

        if overwrite is None:
            overwrite = bool(self.config.get("overwrite", False))

        session.destination = Path(destination)
        session.outcomes = self.copier.recover(destination, overwrite, files, progress_cb=progress_cb)
        self.logger.info(f"Session {session.session_id}: {session.copied_count} copied, "
                         f"{session.skipped_count} skipped")
        return session

    def write_report(self, report_path: Union[str, Path]) -> Path:
        """
        Write the current session as JSON.

        Raises:
            RuntimeError: If nothing has been run yet
        """
        if self.session is None:
            raise RuntimeError("No session to report")
        report_path = Path(report_path)
        report_path.parent.mkdir(parents=True, exist_ok=True)
        with open(report_path, 'w') as f:
            json.dump(self.session.to_dict(), f, indent=2)
        self.logger.info(f"Report written: {report_path}")
        return report_path
