# git_ssh_deploy/remote/ssh.py
"""SSH transport using the system ssh/scp clients"""

import logging
import subprocess
from pathlib import Path
from typing import List

from .base import CommandResult, RemoteExecutor
from ..api.exceptions import TransferError, TransportError
from ..constants import DEFAULT_COMMAND_TIMEOUT, DEFAULT_CONNECT_TIMEOUT
from ..models.config import EnvironmentConfig

logger = logging.getLogger(__name__)


class SSHExecutor(RemoteExecutor):
    """Remote executor over key-based SSH

    Authentication is expected to work non-interactively; BatchMode makes
    ssh fail instead of prompting for a password.
    """

    def __init__(self,
                 environment: EnvironmentConfig,
                 timeout: float = DEFAULT_COMMAND_TIMEOUT,
                 connect_timeout: int = DEFAULT_CONNECT_TIMEOUT):
        """
        Initialize SSH executor

        Args:
            environment: Validated environment configuration
            timeout: Upper bound for every remote call, in seconds
            connect_timeout: SSH connection timeout, in seconds
        """
        self.environment = environment
        self.timeout = timeout
        self.connect_timeout = connect_timeout

    def _common_options(self) -> List[str]:
        return [
            "-o", "BatchMode=yes",
            "-o", f"ConnectTimeout={self.connect_timeout}",
        ]

    def ssh_command(self, command: str) -> List[str]:
        """Build the ssh argument vector for a remote command"""
        return [
            "ssh",
            "-p", str(self.environment.port),
            *self._common_options(),
            self.environment.ssh_target,
            command,
        ]

    def scp_command(self, local_path: Path, remote_path: str) -> List[str]:
        """Build the scp argument vector for a file copy"""
        return [
            "scp",
            "-q",
            "-P", str(self.environment.port),
            *self._common_options(),
            str(local_path),
            f"{self.environment.ssh_target}:{remote_path}",
        ]

    def run(self, command: str) -> CommandResult:
        logger.debug(f"[{self.environment.ssh_target}] {command}")

        try:
            result = subprocess.run(
                self.ssh_command(command),
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise TransportError(
                f"SSH command timed out after {self.timeout}s on "
                f"{self.environment.ssh_target}: {command}"
            ) from e
        except OSError as e:
            raise TransportError(f"Could not run ssh: {e}") from e

        if result.returncode != 0:
            logger.debug(
                f"[{self.environment.ssh_target}] exit {result.returncode}: "
                f"{result.stderr.strip()}"
            )

        return CommandResult(
            exit_code=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )

    def copy_file(self, local_path: Path, remote_path: str) -> None:
        logger.debug(f"Copying {local_path} to {self.environment.ssh_target}:{remote_path}")

        try:
            result = subprocess.run(
                self.scp_command(local_path, remote_path),
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise TransferError(
                f"Upload of {local_path.name} timed out after {self.timeout}s"
            ) from e
        except OSError as e:
            raise TransferError(f"Could not run scp: {e}") from e

        if result.returncode != 0:
            raise TransferError(
                f"Could not upload {local_path.name} to remote server: "
                f"{result.stderr.strip() or f'scp exited {result.returncode}'}"
            )
