"""Backup integrity verification against a sha256sum manifest."""

import hashlib
import re
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import List, Tuple

from tqdm import tqdm

from wazuh_restore.restore.errors import IntegrityFailure


MANIFEST_NAME = 'backup_checksums.sha256'

# "<digest>  <name>" (text mode) or "<digest> *<name>" (binary mode)
MANIFEST_LINE = re.compile(r'^(?P<digest>[0-9a-fA-F]{64}) [ *](?P<name>.+)$')


class VerificationResult(Enum):
    PASSED = 'passed'
    UNVERIFIED = 'unverified'
    DRY_RUN = 'dry-run'
    FAILED = 'failed'


def sha256_file(path: Path, chunk_size: int = 1 << 20) -> str:
    hasher = hashlib.sha256()
    with path.open('rb') as f:
        for chunk in iter(lambda: f.read(chunk_size), b''):
            hasher.update(chunk)
    return hasher.hexdigest()


def parse_manifest(manifest: Path) -> List[Tuple[str, str]]:
    """
    Parse a sha256sum manifest into (digest, relative name) pairs.

    Raises IntegrityFailure on malformed lines, on names that would escape
    the backup directory, and on a manifest with no entries.
    """
    entries = []
    try:
        lines = manifest.read_text(encoding='utf-8').splitlines()
    except UnicodeDecodeError:
        raise IntegrityFailure(f"Checksum manifest {manifest.name} is not a text file")
    except OSError as e:
        raise IntegrityFailure(f"Cannot read checksum manifest {manifest.name}: {e}")

    for lineno, raw in enumerate(lines, 1):
        line = raw.rstrip('\r\n')
        if not line.strip() or line.lstrip().startswith('#'):
            continue
        match = MANIFEST_LINE.match(line)
        if not match:
            raise IntegrityFailure(f"Malformed checksum line {lineno} in {manifest.name}: {line!r}")
        name = match.group('name')
        relative = PurePosixPath(name)
        if relative.is_absolute() or '..' in relative.parts:
            raise IntegrityFailure(f"Checksum entry escapes backup directory: {name}")
        entries.append((match.group('digest').lower(), name))

    if not entries:
        raise IntegrityFailure(f"Checksum manifest {manifest.name} lists no files")
    return entries


class IntegrityVerifier:
    """Gate that runs before any destructive restore step."""

    def __init__(self, logger, dry_run: bool = False, manifest_name: str = MANIFEST_NAME):
        self.logger = logger
        self.dry_run = dry_run
        self.manifest_name = manifest_name

    def verify(self, source_dir) -> VerificationResult:
        source_dir = Path(source_dir)
        manifest = source_dir / self.manifest_name
        self.logger.info("Verifying backup integrity...")

        if not manifest.is_file():
            self.logger.warning("Checksum file not found in backup; continuing without verification.")
            return VerificationResult.UNVERIFIED

        if self.dry_run:
            self.logger.info(f"[DRY-RUN] sha256sum -c {manifest}")
            return VerificationResult.DRY_RUN

        entries = parse_manifest(manifest)
        failures = []
        for expected, name in tqdm(entries, desc="Verifying checksums", unit=' files'):
            target = source_dir / name
            if not target.is_file():
                self.logger.error(f"{name}: FAILED open or read (file missing)")
                failures.append(name)
                continue
            try:
                actual = sha256_file(target)
            except OSError as e:
                self.logger.error(f"{name}: FAILED open or read ({e.strerror or e})")
                failures.append(name)
                continue
            if actual != expected:
                self.logger.error(f"{name}: FAILED (expected {expected}, got {actual})")
                failures.append(name)
            else:
                self.logger.info(f"{name}: OK")

        if failures:
            self.logger.error("Checksum verification failed")
            raise IntegrityFailure(
                f"Checksum verification failed for {len(failures)} of {len(entries)} files: "
                + ', '.join(failures)
            )

        self.logger.info(f"Checksum verification OK ({len(entries)} files).")
        return VerificationResult.PASSED
