# git_ssh_deploy/core/remote_state.py
"""Remote marker holding the last deployed revision"""

import logging
from typing import Callable, Optional

from .command_builder import RemoteCommandBuilder
from .validation_engine import is_valid_revision_id
from ..api.exceptions import (
    MarkerNotSetError,
    RemovalVerificationError,
    TransportError,
    UnknownRevisionError,
    ValidationError,
    WriteVerificationError,
)
from ..models.config import EnvironmentConfig
from ..remote.base import RemoteExecutor
from ..utils.git_utils import GitRepository

logger = logging.getLogger(__name__)

ExecutorFactory = Callable[[EnvironmentConfig], RemoteExecutor]


def parse_marker_content(content: str) -> Optional[str]:
    """
    Extract a revision ID from marker file content

    A single trailing newline is ignored; anything that is not a full
    commit ID reads as absent.
    """
    if content.endswith("\n"):
        content = content[:-1]
    return content if is_valid_revision_id(content) else None


class RemoteStateTracker:
    """Read, write and delete the remote marker file"""

    def __init__(self, repository: GitRepository, executor_factory: ExecutorFactory):
        """
        Initialize tracker

        Args:
            repository: VCS collaborator (for HEAD and revision lookups)
            executor_factory: Creates the remote executor for an environment
        """
        self.repository = repository
        self.executor_factory = executor_factory

    def read(self, environment: EnvironmentConfig) -> Optional[str]:
        """
        Read the remote marker

        Args:
            environment: Validated environment

        Returns:
            Revision ID, or None when the marker is missing, unreadable or invalid
        """
        builder = RemoteCommandBuilder(environment)
        try:
            result = self.executor_factory(environment).run(builder.read_marker())
        except TransportError as e:
            logger.warning(f"Could not read remote commit ID: {e}")
            return None

        if not result.ok:
            return None

        revision = parse_marker_content(result.stdout)
        if revision is None:
            logger.debug(f"Ignoring invalid remote commit ID content: {result.stdout!r}")
        return revision

    def write(self, environment: EnvironmentConfig, revision: Optional[str] = None) -> str:
        """
        Write the remote marker and verify it by reading it back

        Args:
            environment: Validated environment
            revision: Revision to record (defaults to local HEAD)

        Returns:
            The revision written

        Raises:
            ValidationError: If the revision is not a full commit ID
            UnknownRevisionError: If the revision is not in the local history
            WriteVerificationError: If the readback differs
        """
        if revision is None:
            revision = self.repository.current_revision()
        elif not is_valid_revision_id(revision):
            raise ValidationError(
                "Invalid commit ID. Please provide the complete 40-character commit ID."
            )

        if not self.repository.revision_exists(revision):
            raise UnknownRevisionError(revision)

        builder = RemoteCommandBuilder(environment)
        try:
            self.executor_factory(environment).run(builder.write_marker(revision))
        except TransportError as e:
            raise WriteVerificationError(
                f"Could not create file {builder.marker_path}: {e}"
            ) from e

        # The exit status alone is not trusted; only the readback counts
        if self.read(environment) != revision:
            raise WriteVerificationError(
                f"Could not create file {builder.marker_path}. Check permissions."
            )

        logger.info(f"Remote commit ID for {environment.name} set to {revision}")
        return revision

    def remove(self, environment: EnvironmentConfig) -> None:
        """
        Delete the remote marker

        Raises:
            MarkerNotSetError: If no valid marker exists
            RemovalVerificationError: If the marker is still readable afterwards
        """
        builder = RemoteCommandBuilder(environment)

        if self.read(environment) is None:
            raise MarkerNotSetError(
                f"Remote commit ID not set. Does the file {builder.marker_path} exist?"
            )

        try:
            result = self.executor_factory(environment).run(builder.remove_marker())
        except TransportError as e:
            raise RemovalVerificationError(
                f"Could not remove file {builder.marker_path}: {e}"
            ) from e

        if not result.ok or self.read(environment) is not None:
            raise RemovalVerificationError(f"Could not remove file {builder.marker_path}.")

        logger.info(f"Remote commit ID for {environment.name} removed")
