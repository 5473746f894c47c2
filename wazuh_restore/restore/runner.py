"""Command execution with dry-run support and per-call failure policy."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from wazuh_restore.restore.errors import CommandFailed
from wazuh_restore.utils.subprocess_utils import SubprocessRunner, format_command


class FailurePolicy(Enum):
    FATAL = 'fatal'
    WARN = 'warn'


class ActionStatus(Enum):
    SUCCESS = 'success'
    DRY_RUN = 'dry-run'
    FAILED = 'failed'


@dataclass
class ActionResult:
    """Outcome of one CommandRunner invocation."""

    status: ActionStatus
    command: str
    policy: FailurePolicy = FailurePolicy.FATAL
    returncode: Optional[int] = None
    output: str = ''
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is not ActionStatus.FAILED


class CommandRunner:
    """
    Runs external commands on behalf of the restore steps.

    In dry-run mode nothing is executed; each planned command is logged as a
    single "[DRY-RUN]" line and reported as DRY_RUN. Every call site states
    whether a failure is fatal (raise CommandFailed) or only warned.
    """

    def __init__(self, logger, dry_run: bool = False, timeout: int = 3600):
        self.logger = logger
        self.dry_run = dry_run
        self.subprocess = SubprocessRunner(timeout=timeout)

    def run(self, cmd: List[str], on_failure: FailurePolicy = FailurePolicy.FATAL,
            description: Optional[str] = None) -> ActionResult:
        command = format_command(cmd)
        if self.dry_run:
            self.logger.info(f"[DRY-RUN] {command}")
            return ActionResult(ActionStatus.DRY_RUN, command, on_failure)

        self.logger.info(f"RUN: {command}")
        result = self.subprocess.run_command(cmd)
        output = (result['stdout'] or '') + (result['stderr'] or '')
        if output:
            self.logger.output(output)

        if result['success']:
            return ActionResult(ActionStatus.SUCCESS, command, on_failure,
                                returncode=result['returncode'], output=output)

        label = description or command
        error = result['error'] or 'unknown error'
        if on_failure is FailurePolicy.FATAL:
            self.logger.error(f"Command failed: {command}")
            raise CommandFailed(f"{label}: {error.splitlines()[0]}",
                                command=command, returncode=result['returncode'])

        self.logger.warning(f"{label} failed (continuing): {error.splitlines()[0]}")
        return ActionResult(ActionStatus.FAILED, command, on_failure,
                            returncode=result['returncode'], output=output, error=error)

    def query(self, cmd: List[str]) -> ActionResult:
        """Run a read-only probe. Executes even in dry-run and never raises."""
        command = format_command(cmd)
        result = self.subprocess.run_command(cmd)
        output = (result['stdout'] or '') + (result['stderr'] or '')
        status = ActionStatus.SUCCESS if result['success'] else ActionStatus.FAILED
        return ActionResult(status, command, FailurePolicy.WARN,
                            returncode=result['returncode'], output=output,
                            error=result['error'])
