"""Core functionality for git-ssh-deploy"""

from .validation_engine import (
    ValidationEngine,
    ValidationResult,
    InputValidator,
    is_valid_environment_name,
    is_valid_revision_id,
)
from .command_builder import RemoteCommandBuilder
from .changeset_resolver import ChangeSetResolver
from .remote_state import RemoteStateTracker
from .compression import TarProcessor

__all__ = [
    "ValidationEngine",
    "ValidationResult",
    "InputValidator",
    "is_valid_environment_name",
    "is_valid_revision_id",
    "RemoteCommandBuilder",
    "ChangeSetResolver",
    "RemoteStateTracker",
    "TarProcessor",
]
