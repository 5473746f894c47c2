#!/usr/bin/env python3
"""
Wazuh Central Components Restore

Restores the Wazuh indexer, dashboard and manager on a single node from a
directory of backup archives.
"""

import sys
from argparse import ArgumentParser

from wazuh_restore.restore.logger import RestoreLogger, default_log_file
from wazuh_restore.restore.orchestrator import RestoreOrchestrator
from wazuh_restore.utils.config import load_config


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog='wazuh-restore',
        description='Restore Wazuh central components from backup archives'
    )
    parser.add_argument('backup_dir', metavar='backup-directory',
                        help='Path to the backup folder')
    parser.add_argument('--force', action='store_true',
                        help='Skip confirmation prompt (dangerous)')
    parser.add_argument('--dry-run', action='store_true',
                        help='Show actions without executing them')
    parser.add_argument('--skip-health', action='store_true',
                        help='Skip post-restore health checks')
    return parser


def main(argv=None) -> int:
    """Main restore program."""
    args = build_parser().parse_args(argv)

    config = load_config(args.backup_dir, force=args.force,
                         dry_run=args.dry_run, skip_health=args.skip_health)

    log_file = default_log_file(config.log_dir)
    with RestoreLogger(log_file) as logger:
        exit_code = 1
        try:
            outcome = RestoreOrchestrator(config, logger).run()
            exit_code = outcome.exit_code
        except KeyboardInterrupt:
            logger.warning("Restore interrupted by user; no rollback performed")
        except Exception as e:
            logger.error(f"Unexpected error: {e}", exc_info=True)
        finally:
            where = logger.log_file or 'console only'
            logger.info(f"Restore finished (exit code: {exit_code}). See log: {where}")
        return exit_code


if __name__ == '__main__':
    sys.exit(main())
