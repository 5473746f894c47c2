"""Allow-listed directory cleanup."""

import os
import shutil
from pathlib import Path
from typing import Iterable, Union

from wazuh_restore.restore.errors import CleanupFailure, PolicyViolation


ALLOWED_CLEANUP_TARGETS = frozenset({
    '/var/lib/wazuh-indexer',
    '/usr/share/wazuh-dashboard/data',
    '/var/ossec',
})


def normalize_dir(path: Union[str, Path]) -> str:
    """
    Absolute, separator-terminated form of ``path`` for prefix comparison.

    Purely lexical: symlinks are not resolved, so a symlink that lives inside
    an allowed directory is matched by where it sits, not where it points.
    """
    normalized = os.path.normpath(os.path.abspath(str(path)))
    if not normalized.endswith(os.sep):
        normalized += os.sep
    return normalized


def is_allowed_target(path: Union[str, Path], allowed: Iterable[str] = ALLOWED_CLEANUP_TARGETS) -> bool:
    candidate = normalize_dir(path)
    return any(candidate.startswith(normalize_dir(entry)) for entry in allowed)


class SafeCleaner:
    """Empties allow-listed directories, never the directory itself."""

    def __init__(self, logger, dry_run: bool = False, allowed_targets: Iterable[str] = ALLOWED_CLEANUP_TARGETS):
        self.logger = logger
        self.dry_run = dry_run
        self.allowed_targets = frozenset(str(t) for t in allowed_targets)

    def clean(self, path: Union[str, Path]) -> int:
        """
        Remove every direct child of ``path``.

        Returns the number of entries removed (0 for a skipped or dry-run
        clean). Raises PolicyViolation before touching anything when ``path``
        is outside the allowed targets.
        """
        path = Path(path)
        if not path.is_dir():
            self.logger.warning(f"Directory does not exist (skip clean): {path}")
            return 0

        if not is_allowed_target(path, self.allowed_targets):
            self.logger.error(f"Refusing to clean unsafe path: {path}")
            raise PolicyViolation(f"Refusing to clean unsafe path: {path}")

        if self.dry_run:
            self.logger.info(f"[DRY-RUN] remove contents of {path}")
            return 0

        self.logger.info(f"Removing contents of {path}")
        try:
            children = sorted(path.iterdir())
        except OSError as e:
            self.logger.error(f"Cannot list {path}: {e}")
            raise CleanupFailure(f"Failed to clean {path}: {e}")

        removed = 0
        for child in children:
            try:
                if child.is_symlink() or not child.is_dir():
                    child.unlink()
                else:
                    shutil.rmtree(child)
            except OSError as e:
                self.logger.error(f"Failed to remove {child}: {e}")
                raise CleanupFailure(f"Failed to clean {path}: could not remove {child}: {e}")
            removed += 1

        self.logger.info(f"Removed {removed} entries from {path}")
        return removed
