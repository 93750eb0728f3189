"""Status service: read-only diagnostics for one environment"""

import logging
from pathlib import Path
from typing import Optional

from .deploy_service import verify_connectivity
from ..api.exceptions import ConnectivityError
from ..core.changeset_resolver import ChangeSetResolver
from ..core.remote_state import ExecutorFactory, RemoteStateTracker
from ..core.validation_engine import InputValidator
from ..models import EnvironmentConfig, StatusReport
from ..remote import SSHExecutor
from ..utils.git_utils import GitRepository

logger = logging.getLogger(__name__)


class StatusReporter:
    """Collect local and remote state without changing anything"""

    def __init__(self,
                 repo_root: Path,
                 repository: Optional[GitRepository] = None,
                 executor_factory: Optional[ExecutorFactory] = None):
        self.repo_root = Path(repo_root)
        self.repository = repository or GitRepository(self.repo_root)
        self.executor_factory = executor_factory or SSHExecutor

        self.validator = InputValidator(self.repo_root)
        self.resolver = ChangeSetResolver(self.repository, self.repo_root)
        self.state_tracker = RemoteStateTracker(self.repository, self.executor_factory)

    def report(self, environment: EnvironmentConfig) -> StatusReport:
        """
        Build a status report

        Args:
            environment: Environment to inspect

        Returns:
            StatusReport

        Raises:
            ValidationError: If the environment is misconfigured
        """
        self.validator.validate(environment)

        local_path = self.repo_root
        if environment.sync_root:
            local_path = local_path / environment.sync_root.strip("/")

        report = StatusReport(
            environment=environment.name,
            ssh_command=environment.ssh_command,
            local_path=str(local_path),
            remote_directory=environment.remote_directory,
            branch=self.repository.current_branch(),
            head_revision=self.repository.current_revision(),
            is_dirty=self.repository.is_dirty(),
        )

        try:
            verify_connectivity(environment, self.executor_factory(environment))
        except ConnectivityError as e:
            logger.info(f"Connectivity check for {environment.name} failed: {e}")
            report.connection_error = str(e)
            return report
        report.can_connect = True

        report.remote_revision = self.state_tracker.read(environment)
        if report.remote_revision:
            report.remote_revision_known = self.repository.revision_exists(report.remote_revision)

        if report.is_dirty:
            report.change_set_unavailable_reason = (
                "Repository has uncommitted changes. Please commit first."
            )
        elif report.remote_revision and not report.remote_revision_known:
            report.change_set_unavailable_reason = "Unknown remote commit id."
        else:
            report.change_set = self.resolver.resolve_for(
                environment, report.remote_revision, target=report.head_revision
            )

        return report
