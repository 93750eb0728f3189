# git_ssh_deploy/remote/base.py
"""Remote executor abstract base class"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass
class CommandResult:
    """Outcome of one remote command"""

    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        """Check if the command exited zero"""
        return self.exit_code == 0


class RemoteExecutor(ABC):
    """Blocking command execution and file copy on one remote host"""

    @abstractmethod
    def run(self, command: str) -> CommandResult:
        """
        Execute a shell command on the remote host

        Args:
            command: Command line, already quoted by the caller

        Returns:
            CommandResult with exit code and captured output

        Raises:
            TransportError: If the command could not be carried out at all
        """
        pass

    @abstractmethod
    def copy_file(self, local_path: Path, remote_path: str) -> None:
        """
        Copy a local file to the remote host

        Args:
            local_path: Local file path
            remote_path: Remote destination (file or directory)

        Raises:
            TransferError: If the copy failed
        """
        pass
