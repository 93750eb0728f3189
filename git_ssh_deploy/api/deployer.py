"""Deployer API for environment operations"""

import logging
from pathlib import Path
from typing import List, Optional

from ..core import InputValidator, RemoteCommandBuilder, RemoteStateTracker
from ..core.remote_state import ExecutorFactory
from ..models import DeployResult, EnvironmentConfig, StatusReport
from ..remote import SSHExecutor
from ..services import ConfigService, DeploymentOrchestrator, StatusReporter
from ..services.deploy_service import ProgressCallback
from ..utils.git_utils import GitRepository, find_repository_root
from .exceptions import GitError

logger = logging.getLogger(__name__)


class Deployer:
    """Deployer class bound to one local repository"""

    def __init__(self,
                 repo_root: Optional[Path] = None,
                 executor_factory: Optional[ExecutorFactory] = None,
                 progress: Optional[ProgressCallback] = None):
        """
        Initialize deployer

        Args:
            repo_root: Repository root (detected from the current directory if omitted)
            executor_factory: Creates the remote executor for an environment
            progress: Optional callback receiving deployment stage messages

        Raises:
            GitError: If no repository root can be found
        """
        if repo_root is None:
            repo_root = find_repository_root()
            if repo_root is None:
                raise GitError("This command must be run inside a Git repository.")

        self.repo_root = Path(repo_root)
        self.repository = GitRepository(self.repo_root)
        self.executor_factory = executor_factory or SSHExecutor

        self.config_service = ConfigService(self.repo_root, self.repository)
        self.validator = InputValidator(self.repo_root)
        self.state_tracker = RemoteStateTracker(self.repository, self.executor_factory)
        self.orchestrator = DeploymentOrchestrator(
            self.repo_root,
            repository=self.repository,
            executor_factory=self.executor_factory,
            progress=progress,
        )
        self.status_reporter = StatusReporter(
            self.repo_root,
            repository=self.repository,
            executor_factory=self.executor_factory,
        )

    def environment(self, name: str) -> EnvironmentConfig:
        """Load an environment configuration (unvalidated)"""
        configured = self.environments()
        if name not in configured:
            logger.warning(
                f"Environment {name} is not configured in {self.config_service.config_path}. "
                f"Configured environments: {', '.join(configured) or 'none'}"
            )
        return self.config_service.get_environment(name)

    def environments(self) -> List[str]:
        """List configured environment names"""
        return self.config_service.list_environments()

    def init_config(self, name: str) -> Path:
        """
        Add the default config block for an environment

        Returns:
            Path of the updated config file
        """
        return self.config_service.init_config(name)

    def status(self, name: str) -> StatusReport:
        """
        Inspect local and remote state of an environment

        Raises:
            ValidationError: If the environment is misconfigured
        """
        return self.status_reporter.report(self.environment(name))

    def push_all(self, name: str) -> DeployResult:
        """Upload all tracked files and set the remote commit ID"""
        return self.orchestrator.push_all(self.environment(name))

    def push(self, name: str) -> DeployResult:
        """Push changes since the remote commit ID"""
        return self.orchestrator.push(self.environment(name))

    def write_marker(self, name: str, revision: Optional[str] = None) -> str:
        """
        Set the remote commit ID without transferring files

        Args:
            name: Environment name
            revision: Full commit ID (defaults to HEAD)

        Returns:
            Revision written
        """
        environment = self.environment(name)
        self.validator.validate(environment)
        return self.state_tracker.write(environment, revision)

    def remove_marker(self, name: str) -> str:
        """
        Delete the remote commit ID file

        Returns:
            Remote path of the removed file
        """
        environment = self.environment(name)
        self.validator.validate(environment)
        self.state_tracker.remove(environment)
        return RemoteCommandBuilder(environment).marker_path


def deploy(environment: str,
           full: bool = False,
           repo_root: Optional[Path] = None,
           progress: Optional[ProgressCallback] = None) -> DeployResult:
    """
    Convenience function for deploying an environment

    Args:
        environment: Environment name
        full: Upload every tracked file (push_all) instead of the changes
        repo_root: Repository root (detected if omitted)
        progress: Optional stage message callback

    Returns:
        DeployResult
    """
    deployer = Deployer(repo_root, progress=progress)
    if full:
        return deployer.push_all(environment)
    return deployer.push(environment)
