"""Configuration loader for the Wazuh restore system."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv


DEFAULT_LOG_DIR = '/var/log'
DEFAULT_LOCK_FILE = '/var/run/wazuh-restore.lock'
DEFAULT_COMMAND_TIMEOUT = 3600
DEFAULT_HEALTH_PORT = 9200


@dataclass(frozen=True)
class RestoreConfig:
    """Resolved settings for one restore run. Read-only once built."""

    backup_dir: Path
    force: bool = False
    dry_run: bool = False
    skip_health: bool = False
    log_dir: Path = Path(DEFAULT_LOG_DIR)
    lock_file: Path = Path(DEFAULT_LOCK_FILE)
    command_timeout: int = DEFAULT_COMMAND_TIMEOUT
    health_port: int = DEFAULT_HEALTH_PORT

    def describe_flags(self) -> str:
        return (f"FORCE: {self.force} | DRY-RUN: {self.dry_run} | "
                f"SKIP-HEALTH: {self.skip_health}")


def _int_setting(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        print(f"WARNING: Invalid {name} '{raw}', using {default}")
        return default
    if value < 1:
        print(f"WARNING: {name} must be >= 1, using {default}")
        return default
    return value


def load_config(backup_dir: str,
                force: bool = False,
                dry_run: bool = False,
                skip_health: bool = False,
                env_file: Optional[str] = None) -> RestoreConfig:
    """
    Build a RestoreConfig from command line values and the environment.

    Ambient settings (log directory, lock file, timeouts) come from the
    environment, optionally seeded from a .env file in the operator's working
    directory. The backup directory is taken as given; its existence is
    checked by the orchestrator prechecks so the failure lands in the run log.
    """
    if env_file:
        if not os.path.exists(env_file):
            raise FileNotFoundError(f"Environment file not found: {env_file}")
        load_dotenv(env_file)
    else:
        load_dotenv(find_dotenv(usecwd=True))

    return RestoreConfig(
        backup_dir=Path(backup_dir),
        force=force,
        dry_run=dry_run,
        skip_health=skip_health,
        log_dir=Path(os.getenv('WAZUH_RESTORE_LOG_DIR', DEFAULT_LOG_DIR)),
        lock_file=Path(os.getenv('WAZUH_RESTORE_LOCK_FILE', DEFAULT_LOCK_FILE)),
        command_timeout=_int_setting('WAZUH_RESTORE_COMMAND_TIMEOUT', DEFAULT_COMMAND_TIMEOUT),
        health_port=_int_setting('WAZUH_RESTORE_HEALTH_PORT', DEFAULT_HEALTH_PORT),
    )
