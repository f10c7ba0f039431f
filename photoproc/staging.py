"""
StagingArea - Per-invocation scratch directories with guaranteed cleanup.
"""

import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional


@dataclass(frozen=True)
class ScratchDir:
    """A private working directory for one pipeline invocation."""
    path: str

    def file(self, name: str) -> str:
        """Path of a file inside the scratch directory."""
        return os.path.join(self.path, name)


class StagingArea:
    """
    Provisions uniquely named scratch directories under a temporary root.
    """

    def __init__(
        self,
        root: Optional[str] = None,
        prefix: str = 'proc-',
        logger: Optional[logging.Logger] = None
    ):
        """
        Args:
            root: Parent directory (default: system temp directory)
            prefix: Name prefix for each scratch directory
            logger: Optional logger instance
        """
        self.root = root
        self.prefix = prefix
        self.logger = logger or logging.getLogger(__name__)

    @contextmanager
    def acquire(self) -> Iterator[ScratchDir]:
        """
        Yield a fresh scratch directory; it is removed on every exit path.
        """
        path = tempfile.mkdtemp(prefix=self.prefix, dir=self.root)
        self.logger.debug(f"Created scratch directory {path}")
        try:
            yield ScratchDir(path)
        finally:
            self.release(path)

    def release(self, path: str) -> None:
        """Remove a scratch directory recursively; a missing directory is fine."""
        if not os.path.isdir(path):
            return
        try:
            shutil.rmtree(path)
            self.logger.debug(f"Removed scratch directory {path}")
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.warning(f"Could not delete {path}: {e}")
