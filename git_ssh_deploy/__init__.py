"""git-ssh-deploy - Incremental deployment of a Git work tree over SSH.

Only the files that changed since the last deployed commit are uploaded;
the deployed commit ID is kept in a marker file on the remote server.
"""

from .__version__ import __version__, __version_info__, __author__, __license__

# Core API
from .api.exceptions import (
    GitSshDeployError,
    ConfigError,
    ValidationError,
    DirtyRepositoryError,
    ConnectivityError,
    UnknownRevisionError,
    MarkerNotSetError,
    WriteVerificationError,
    RemovalVerificationError,
    ArchiveError,
    TransferError,
    HookError,
    HealthCheckError,
)
from .api.deployer import Deployer, deploy

# Data models
from .models import (
    EnvironmentConfig,
    ChangeSet,
    DeployResult,
    StatusReport,
    Stage,
)

# Components
from .core import ChangeSetResolver, InputValidator, RemoteStateTracker
from .services import DeploymentOrchestrator, StatusReporter

__all__ = [
    # Version information
    "__version__",
    "__version_info__",
    "__author__",
    "__license__",

    # Main classes
    "Deployer",
    "deploy",

    # Components
    "ChangeSetResolver",
    "InputValidator",
    "RemoteStateTracker",
    "DeploymentOrchestrator",
    "StatusReporter",

    # Data models
    "EnvironmentConfig",
    "ChangeSet",
    "DeployResult",
    "StatusReport",
    "Stage",

    # Exceptions
    "GitSshDeployError",
    "ConfigError",
    "ValidationError",
    "DirtyRepositoryError",
    "ConnectivityError",
    "UnknownRevisionError",
    "MarkerNotSetError",
    "WriteVerificationError",
    "RemovalVerificationError",
    "ArchiveError",
    "TransferError",
    "HookError",
    "HealthCheckError",
]
