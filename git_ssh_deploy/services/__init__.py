"""Service layer for git-ssh-deploy"""

from .config_service import ConfigService
from .deploy_service import DeploymentOrchestrator, verify_connectivity
from .status_service import StatusReporter

__all__ = [
    "ConfigService",
    "DeploymentOrchestrator",
    "StatusReporter",
    "verify_connectivity",
]
