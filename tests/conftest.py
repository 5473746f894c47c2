"""
Pytest configuration and shared fixtures for wazuh-restore tests.

Commands never reach the host: subprocess.run is patched and records every
argument list it receives. Components used by the end-to-end tests point at
directories under tmp_path.
"""

import hashlib
import subprocess
from pathlib import Path
from typing import Dict, List
from unittest.mock import patch

import pytest

from wazuh_restore.restore.components import ComponentSpec, ExtractionTask
from wazuh_restore.restore.logger import RestoreLogger
from wazuh_restore.utils.config import RestoreConfig


class FakeHost:
    """Stand-in for subprocess.run that records commands and fakes results."""

    def __init__(self):
        self.calls: List[List[str]] = []
        self.failures: Dict[tuple, int] = {}
        self.inactive = set()
        self.listening = ':9200'

    def fail(self, *prefix, returncode=1):
        self.failures[tuple(prefix)] = returncode

    def __call__(self, cmd, **kwargs):
        cmd = [str(part) for part in cmd]
        self.calls.append(cmd)
        for prefix, returncode in self.failures.items():
            if tuple(cmd[:len(prefix)]) == prefix:
                return subprocess.CompletedProcess(cmd, returncode, '', f"{cmd[0]}: simulated failure\n")
        if cmd[:2] == ['systemctl', 'is-active']:
            return subprocess.CompletedProcess(cmd, 3 if cmd[-1] in self.inactive else 0, '', '')
        if cmd[:1] == ['ss']:
            stdout = f"State  Recv-Q Send-Q Local Address:Port\nLISTEN 0 4096 *{self.listening} *:*\n"
            return subprocess.CompletedProcess(cmd, 0, stdout, '')
        return subprocess.CompletedProcess(cmd, 0, '', '')

    def commands(self, program):
        return [c for c in self.calls if c[0] == program]

    def mutating(self):
        """Commands that would change the host (everything except read-only probes)."""
        return [c for c in self.calls
                if c[:2] != ['systemctl', 'is-active'] and c[:1] != ['ss']]


@pytest.fixture
def fake_host():
    host = FakeHost()
    with patch('wazuh_restore.utils.subprocess_utils.subprocess.run', side_effect=host) as mock_run:
        host.mock = mock_run
        yield host


@pytest.fixture
def ss_available():
    with patch('wazuh_restore.restore.health.shutil.which', return_value='/usr/bin/ss'):
        yield


@pytest.fixture
def as_root():
    with patch('wazuh_restore.restore.orchestrator.os.geteuid', return_value=0):
        yield


@pytest.fixture
def log_path(tmp_path) -> Path:
    return tmp_path / 'logs' / 'restore.log'


@pytest.fixture
def restore_logger(log_path):
    logger = RestoreLogger(log_path, name='wazuh_restore.test')
    yield logger
    logger.close()


@pytest.fixture
def read_log(log_path):
    def _read():
        return log_path.read_text() if log_path.exists() else ''
    return _read


@pytest.fixture
def backup_dir(tmp_path) -> Path:
    path = tmp_path / 'backup'
    path.mkdir()
    return path


def write_archive(directory: Path, name: str, content: bytes = None) -> Path:
    """Write a placeholder archive; tar itself is faked."""
    path = directory / name
    path.write_bytes(content if content is not None else f"archive {name}".encode())
    return path


def write_manifest(directory: Path, names, name: str = 'backup_checksums.sha256') -> Path:
    lines = []
    for entry in names:
        digest = hashlib.sha256((directory / entry).read_bytes()).hexdigest()
        lines.append(f"{digest}  {entry}")
    manifest = directory / name
    manifest.write_text('\n'.join(lines) + '\n')
    return manifest


@pytest.fixture
def sandbox(tmp_path):
    """Two components whose directories all live under tmp_path."""
    root = tmp_path / 'host'
    config_root = root / 'etc'
    data_dir = root / 'var' / 'lib' / 'search-data'
    state_dir = root / 'var' / 'state'
    for path in (config_root, data_dir, state_dir):
        path.mkdir(parents=True)
    (data_dir / 'old-index').mkdir()
    (data_dir / 'old-index' / 'segment').write_text('stale')
    (state_dir / 'queue.db').write_text('stale')

    search = ComponentSpec(
        name='search',
        service='search-svc',
        tasks=(
            ExtractionTask('search_config.tar.gz', str(config_root), 'Search config'),
            ExtractionTask('search_data.tar.gz', str(data_dir.parent), 'Search data',
                           cleanup_target=str(data_dir)),
        ),
        owner='search:search',
        owned_paths=(str(config_root / 'search'), str(data_dir)),
    )
    core = ComponentSpec(
        name='core',
        service='core-svc',
        tasks=(
            ExtractionTask('core_config.tar.gz', str(config_root), 'Core config'),
            ExtractionTask('core_state.tar.gz', str(state_dir), 'Core state',
                           cleanup_target=str(state_dir)),
        ),
        owner='core:core',
        owned_paths=(str(state_dir),),
    )
    return {
        'components': (search, core),
        'allowed': (str(data_dir), str(state_dir)),
        'data_dir': data_dir,
        'state_dir': state_dir,
        'archives': ['search_config.tar.gz', 'search_data.tar.gz',
                     'core_config.tar.gz', 'core_state.tar.gz'],
    }


@pytest.fixture
def make_config(tmp_path, backup_dir):
    def _make(**overrides):
        values = {
            'backup_dir': backup_dir,
            'log_dir': tmp_path / 'logs',
            'lock_file': tmp_path / 'run' / 'wazuh-restore.lock',
        }
        values.update(overrides)
        return RestoreConfig(**values)
    return _make
