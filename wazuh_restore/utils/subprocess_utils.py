"""Common subprocess utilities shared by the restore steps."""

import shlex
import subprocess
from typing import Dict, List, Union


class SubprocessRunner:
    """Common subprocess execution with consistent error handling."""

    def __init__(self, timeout: int = 3600):
        self.timeout = timeout

    def run_command(self, cmd: List[str]) -> Dict[str, Union[bool, str, int]]:
        """
        Execute command with consistent error handling.

        Returns dict with keys: success, error, returncode, stdout, stderr
        """
        result = {
            'success': False,
            'error': None,
            'returncode': -1,
            'stdout': '',
            'stderr': ''
        }

        try:
            process = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
            result['returncode'] = process.returncode
            result['stdout'] = process.stdout or ''
            result['stderr'] = process.stderr or ''

            if process.returncode == 0:
                result['success'] = True
            else:
                result['error'] = f"Command failed with exit code {process.returncode}"
                if process.stderr:
                    result['error'] += f"\nSTDERR: {process.stderr.strip()}"

        except subprocess.TimeoutExpired as e:
            result['error'] = f"Command timed out after {self.timeout} seconds"
            if e.stdout:
                result['stdout'] = e.stdout.decode('utf-8', errors='replace') if isinstance(e.stdout, bytes) else str(e.stdout)
            if e.stderr:
                result['stderr'] = e.stderr.decode('utf-8', errors='replace') if isinstance(e.stderr, bytes) else str(e.stderr)
        except FileNotFoundError:
            result['error'] = f"Command not found: {cmd[0] if cmd else 'unknown'}"
        except OSError as e:
            result['error'] = f"Unexpected error: {str(e)}"

        return result


def format_command(cmd: List[str]) -> str:
    """Render an argument list the way an operator would type it."""
    return ' '.join(shlex.quote(str(part)) for part in cmd)
