"""Post-restore health checks. Findings are advisory only."""

import re
import shutil
from enum import Enum

from wazuh_restore.restore.components import COMPONENTS


class HealthResult(Enum):
    HEALTHY = 'healthy'
    DEGRADED = 'degraded'
    SKIPPED = 'skipped'


class HealthChecker:
    def __init__(self, runner, logger, services=None, port=9200):
        self.runner = runner
        self.logger = logger
        self.services = services or [c.service for c in COMPONENTS]
        self.port = port

    def check(self, skip: bool = False) -> HealthResult:
        if skip:
            self.logger.info("Skipping post-restore health checks (skipped by flag).")
            return HealthResult.SKIPPED

        self.logger.info("Running post-restore health checks...")
        healthy = True
        for service in self.services:
            if self.runner.query(['systemctl', 'is-active', '--quiet', service]).ok:
                self.logger.info(f"Service {service}: active")
            else:
                self.logger.warning(f"Service {service}: not active")
                healthy = False

        if not self.port_listening():
            healthy = False

        return HealthResult.HEALTHY if healthy else HealthResult.DEGRADED

    def port_listening(self) -> bool:
        """Probe the indexer port with ss. Treated as passing when ss is unavailable."""
        if not shutil.which('ss'):
            self.logger.info(f"ss not available; skipping port {self.port} check")
            return True

        result = self.runner.query(['ss', '-ltn'])
        if result.ok and re.search(rf':{self.port}\b', result.output):
            self.logger.info(f"Port {self.port} listening (indexer/opensearch likely up)")
            return True

        self.logger.warning(f"Port {self.port} not listening (indexer may not be fully ready)")
        return False
