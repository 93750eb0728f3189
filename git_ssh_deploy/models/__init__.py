# git_ssh_deploy/models/__init__.py
"""Data models for git-ssh-deploy"""

from .config import EnvironmentConfig, split_path_list
from .changeset import ChangeKind, DiffEntry, ChangeSet
from .result import (
    OperationStatus,
    Stage,
    DeployMode,
    DeployRun,
    DeployResult,
    StatusReport,
)

__all__ = [
    # Config models
    "EnvironmentConfig",
    "split_path_list",

    # Change set models
    "ChangeKind",
    "DiffEntry",
    "ChangeSet",

    # Result models
    "OperationStatus",
    "Stage",
    "DeployMode",
    "DeployRun",
    "DeployResult",
    "StatusReport",
]
