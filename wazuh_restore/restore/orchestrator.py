"""Top-level restore sequence and run outcome."""

import os
from dataclasses import dataclass, field
from typing import Dict, Optional

from wazuh_restore.restore.cleaner import SafeCleaner
from wazuh_restore.restore.components import COMPONENTS, ComponentReport, ComponentRestorer, ComponentState
from wazuh_restore.restore.errors import PrecheckFailure, RestoreError
from wazuh_restore.restore.health import HealthChecker, HealthResult
from wazuh_restore.restore.integrity import IntegrityVerifier, VerificationResult
from wazuh_restore.restore.runner import CommandRunner
from wazuh_restore.utils.lock import FileLock


CONFIRM_PROMPT = "This will overwrite existing Wazuh data. Type 'yes' to continue: "
CONFIRM_TOKEN = 'yes'


@dataclass
class RestoreOutcome:
    components: Dict[str, ComponentReport] = field(default_factory=dict)
    verification: Optional[VerificationResult] = None
    health: Optional[HealthResult] = None
    aborted: bool = False
    error: Optional[str] = None
    exit_code: int = 0


class RestoreOrchestrator:
    """
    Drives one restore run.

    Prechecks -> confirmation -> integrity -> indexer -> dashboard ->
    manager -> health. Any RestoreError ends the run with exit code 1 and
    no rollback; warnings are collected on the outcome.
    """

    def __init__(self, config, logger, runner=None, cleaner=None, verifier=None,
                 health_checker=None, components=COMPONENTS):
        self.config = config
        self.logger = logger
        self.runner = runner or CommandRunner(logger, dry_run=config.dry_run,
                                              timeout=config.command_timeout)
        self.cleaner = cleaner or SafeCleaner(logger, dry_run=config.dry_run)
        self.verifier = verifier or IntegrityVerifier(logger, dry_run=config.dry_run)
        self.health_checker = health_checker or HealthChecker(self.runner, logger,
                                                              services=[c.service for c in components],
                                                              port=config.health_port)
        self.components = components
        self.restorer = ComponentRestorer(self.runner, self.cleaner, logger, config.backup_dir)

    def prechecks(self):
        if os.geteuid() != 0:
            raise PrecheckFailure("This script must be run as root.")
        if not self.config.backup_dir.is_dir():
            raise PrecheckFailure(f"Backup directory not found: {self.config.backup_dir}")

    def confirm(self) -> bool:
        """Blocking operator confirmation. Skipped for --force and --dry-run."""
        if self.config.force or self.config.dry_run:
            return True
        try:
            answer = input(CONFIRM_PROMPT)
        except EOFError:
            answer = ''
        return answer == CONFIRM_TOKEN

    def run(self) -> RestoreOutcome:
        outcome = RestoreOutcome(
            components={c.name: ComponentReport(c.name) for c in self.components}
        )
        try:
            self.prechecks()
            self.logger.info(f"Starting Wazuh restore from: {self.config.backup_dir}")
            self.logger.info(f"Options -> {self.config.describe_flags()}")

            if not self.confirm():
                self.logger.info("Aborted by user.")
                outcome.aborted = True
                return outcome

            if self.config.dry_run:
                self._restore(outcome)
            else:
                with FileLock(self.config.lock_file):
                    self._restore(outcome)

        except RestoreError as e:
            self.logger.error(str(e))
            if any(r.state is not ComponentState.PENDING for r in outcome.components.values()):
                self.logger.error("Restore stopped part way; no rollback performed. "
                                  "Fix the cause and re-run the restore.")
            outcome.error = str(e)
            outcome.exit_code = 1
        finally:
            self.log_summary(outcome)
        return outcome

    def _restore(self, outcome: RestoreOutcome):
        self.logger.section("Verifying backup")
        # Placeholders stay FAILED if the step raises
        outcome.verification = VerificationResult.FAILED
        outcome.verification = self.verifier.verify(self.config.backup_dir)

        for spec in self.components:
            self.logger.section(f"Restoring {spec.title}")
            outcome.components[spec.name].state = ComponentState.FAILED
            outcome.components[spec.name] = self.restorer.restore(spec)

        if not self.config.skip_health:
            self.logger.section("Health checks")
        outcome.health = self.health_checker.check(skip=self.config.skip_health)

    def log_summary(self, outcome: RestoreOutcome):
        if outcome.aborted or outcome.verification is None:
            return
        self.logger.section("Restore summary")
        if outcome.verification:
            self.logger.info(f"  Integrity: {outcome.verification.value}")
        for name, report in outcome.components.items():
            line = f"  {name}: {report.state.value}"
            if report.missing:
                line += f" (missing: {', '.join(report.missing)})"
            if report.state is ComponentState.PARTIAL and report.warnings:
                line += f" ({len(report.warnings)} warned steps)"
            self.logger.info(line)
        if outcome.health:
            self.logger.info(f"  Health: {outcome.health.value}")
