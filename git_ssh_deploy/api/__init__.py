# git_ssh_deploy/api/__init__.py
"""API layer for git-ssh-deploy"""

from .exceptions import (
    GitSshDeployError,
    ConfigError,
    ValidationError,
    DirtyRepositoryError,
    GitError,
    ConnectivityError,
    TransportError,
    UnknownRevisionError,
    MarkerNotSetError,
    WriteVerificationError,
    RemovalVerificationError,
    ArchiveError,
    TransferError,
    ExtractionError,
    HookError,
    HealthCheckError,
)
from .deployer import Deployer, deploy

__all__ = [
    # Main classes
    "Deployer",

    # Convenience functions
    "deploy",

    # Exceptions
    "GitSshDeployError",
    "ConfigError",
    "ValidationError",
    "DirtyRepositoryError",
    "GitError",
    "ConnectivityError",
    "TransportError",
    "UnknownRevisionError",
    "MarkerNotSetError",
    "WriteVerificationError",
    "RemovalVerificationError",
    "ArchiveError",
    "TransferError",
    "ExtractionError",
    "HookError",
    "HealthCheckError",
]
