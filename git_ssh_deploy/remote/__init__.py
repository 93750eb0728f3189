"""Remote transport for git-ssh-deploy"""

from .base import RemoteExecutor, CommandResult
from .ssh import SSHExecutor

__all__ = [
    "RemoteExecutor",
    "CommandResult",
    "SSHExecutor",
]
