"""Static component table and the per-component restore routine."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from wazuh_restore.restore.cleaner import ALLOWED_CLEANUP_TARGETS, is_allowed_target
from wazuh_restore.restore.errors import CommandFailed, PolicyViolation
from wazuh_restore.restore.runner import FailurePolicy


@dataclass(frozen=True)
class ExtractionTask:
    archive: str
    destination: str
    label: str
    cleanup_target: Optional[str] = None


@dataclass(frozen=True)
class ComponentSpec:
    name: str
    service: str
    tasks: Tuple[ExtractionTask, ...]
    owner: str
    owned_paths: Tuple[str, ...]

    @property
    def title(self) -> str:
        return f"Wazuh {self.name.capitalize()}"


INDEXER = ComponentSpec(
    name='indexer',
    service='wazuh-indexer',
    tasks=(
        ExtractionTask('wazuh_indexer_config.tar.gz', '/etc/', 'Indexer config'),
        ExtractionTask('wazuh_indexer_security.tar.gz',
                       '/usr/share/wazuh-indexer/plugins/opensearch-security/', 'Indexer security'),
        ExtractionTask('wazuh_indexer_data.tar.gz', '/var/lib/', 'Indexer data',
                       cleanup_target='/var/lib/wazuh-indexer'),
    ),
    owner='wazuh-indexer:wazuh-indexer',
    owned_paths=('/etc/wazuh-indexer', '/var/lib/wazuh-indexer',
                 '/usr/share/wazuh-indexer/plugins/opensearch-security'),
)

DASHBOARD = ComponentSpec(
    name='dashboard',
    service='wazuh-dashboard',
    tasks=(
        ExtractionTask('wazuh_dashboard_config.tar.gz', '/etc/', 'Dashboard config'),
        ExtractionTask('wazuh_dashboard_data.tar.gz', '/usr/share/wazuh-dashboard/data/', 'Dashboard data',
                       cleanup_target='/usr/share/wazuh-dashboard/data'),
    ),
    owner='wazuh-dashboard:wazuh-dashboard',
    owned_paths=('/etc/wazuh-dashboard', '/usr/share/wazuh-dashboard/data'),
)

MANAGER = ComponentSpec(
    name='manager',
    service='wazuh-manager',
    tasks=(
        ExtractionTask('wazuh_manager_config.tar.gz', '/etc/', 'Manager config'),
        ExtractionTask('wazuh_manager_var.tar.gz', '/var/ossec/', 'Manager var',
                       cleanup_target='/var/ossec'),
        ExtractionTask('wazuh_rules_decoders.tar.gz', '/var/ossec/', 'Rules/decoders'),
    ),
    owner='wazuh:wazuh',
    owned_paths=('/etc/wazuh', '/var/ossec'),
)

# Restore order: indexer, then dashboard, then the manager that feeds both
COMPONENTS = (INDEXER, DASHBOARD, MANAGER)


def check_cleanup_targets(components=COMPONENTS, allowed=ALLOWED_CLEANUP_TARGETS):
    """Every cleanup target must sit inside the allow-list."""
    for component in components:
        for task in component.tasks:
            if task.cleanup_target and not is_allowed_target(task.cleanup_target, allowed):
                raise PolicyViolation(
                    f"{component.name}: cleanup target {task.cleanup_target} is not an allowed cleanup directory"
                )


check_cleanup_targets()


class ComponentState(Enum):
    PENDING = 'pending'
    SUCCESS = 'success'
    PARTIAL = 'partial'
    FAILED = 'failed'


@dataclass
class ComponentReport:
    name: str
    state: ComponentState = ComponentState.PENDING
    extracted: list = field(default_factory=list)
    missing: list = field(default_factory=list)
    warnings: list = field(default_factory=list)


class ComponentRestorer:
    """
    Restores one component from the backup directory.

    Sequence: stop service, then for each archive present clean its target
    (if any) and extract it, then fix ownership and start the service.
    Stop, start and ownership failures are warnings. Cleanup and extraction
    failures for present archives are fatal. Absent archives are skipped
    with a warning.
    """

    def __init__(self, runner, cleaner, logger, backup_dir):
        self.runner = runner
        self.cleaner = cleaner
        self.logger = logger
        self.backup_dir = Path(backup_dir)

    def restore(self, spec: ComponentSpec) -> ComponentReport:
        report = ComponentReport(spec.name)
        self.logger.info(f"Restoring {spec.title}...")

        self._warned(report, self.runner.run(['systemctl', 'stop', spec.service], FailurePolicy.WARN,
                                             description=f"Stop {spec.service}"))

        for task in spec.tasks:
            self._extract(task, report)

        self._warned(report, self.runner.run(['chown', '-R', spec.owner, *spec.owned_paths],
                                             FailurePolicy.WARN, description=f"chown {spec.name}"))
        self._warned(report, self.runner.run(['systemctl', 'start', spec.service], FailurePolicy.WARN,
                                             description=f"Start {spec.service}"))

        if report.missing or report.warnings:
            report.state = ComponentState.PARTIAL
        else:
            report.state = ComponentState.SUCCESS
        self.logger.info(f"{spec.name.capitalize()} restore complete.")
        return report

    def _extract(self, task: ExtractionTask, report: ComponentReport):
        archive = self.backup_dir / task.archive
        if not archive.is_file():
            self.logger.warning(f"{task.label} archive missing")
            report.missing.append(task.archive)
            return

        if task.cleanup_target:
            self.cleaner.clean(task.cleanup_target)

        if not self.runner.dry_run:
            try:
                Path(task.destination).mkdir(parents=True, exist_ok=True)
            except OSError as e:
                self.logger.error(f"Cannot create extraction directory {task.destination}: {e}")
                raise CommandFailed(f"Extract {task.archive}: cannot create {task.destination}: {e}")
        self.runner.run(['tar', '-xzf', str(archive), '-C', task.destination], FailurePolicy.FATAL,
                        description=f"Extract {task.archive}")
        report.extracted.append(task.archive)

    @staticmethod
    def _warned(report: ComponentReport, result):
        if not result.ok:
            report.warnings.append(result.command)
