# git_ssh_deploy/core/command_builder.py
"""Builder for remote shell commands"""

import posixpath
import shlex

from ..constants import (
    CONNECTION_CHECK_OUTPUT,
    MARKER_FILE_NAME,
    PRUNE_STOP_EXIT_CODE,
    REVISION_ID_PATTERN,
)
from .validation_engine import has_parent_segment
from ..models.config import EnvironmentConfig


class RemoteCommandBuilder:
    """Build remote command strings for one validated environment

    Every path argument is shell-quoted; revision IDs are re-checked
    against the commit ID pattern before being embedded.
    """

    def __init__(self, environment: EnvironmentConfig):
        self.environment = environment
        self.remote_root = environment.remote_root

    @property
    def marker_path(self) -> str:
        """Absolute path of the remote marker file"""
        return posixpath.join(self.remote_root, MARKER_FILE_NAME)

    def remote_path_for(self, repo_path: str) -> str:
        """
        Map a repository-relative path to its absolute remote path

        Args:
            repo_path: Path relative to the repository root, inside the sync root

        Returns:
            Absolute remote path

        Raises:
            ValueError: If the path would leave the remote directory
        """
        prefix = self.environment.sync_prefix
        relative = repo_path[len(prefix):] if prefix and repo_path.startswith(prefix) else repo_path
        relative = relative.lstrip("/")

        if not relative or has_parent_segment(relative):
            raise ValueError(f"Refusing remote path for {repo_path!r}")

        return posixpath.join(self.remote_root, relative)

    def connection_check(self) -> str:
        return f"echo {shlex.quote(CONNECTION_CHECK_OUTPUT)}"

    def directory_exists(self, path: str = None) -> str:
        return f"test -d {shlex.quote(path or self.remote_root)}"

    def directory_writable(self, path: str = None) -> str:
        return f"test -w {shlex.quote(path or self.remote_root)}"

    def read_marker(self) -> str:
        return f"cat {shlex.quote(self.marker_path)}"

    def write_marker(self, revision: str) -> str:
        if not REVISION_ID_PATTERN.fullmatch(revision):
            raise ValueError(f"Not a commit ID: {revision!r}")
        return f"printf '%s\\n' {revision} > {shlex.quote(self.marker_path)}"

    def remove_marker(self) -> str:
        return f"rm {shlex.quote(self.marker_path)}"

    def remove_file(self, remote_path: str) -> str:
        return f"rm -f {shlex.quote(remote_path)}"

    def extract_archive(self, remote_archive: str) -> str:
        """Extract an uploaded archive into the remote root, then delete it"""
        archive = shlex.quote(remote_archive)
        return f"tar -xzf {archive} -C {shlex.quote(self.remote_root)} && rm {archive}"

    def remove_directory_if_empty(self, remote_dir: str) -> str:
        """Remove a directory only if it exists and is empty

        Exits with PRUNE_STOP_EXIT_CODE when the directory is missing or not empty.
        """
        directory = shlex.quote(remote_dir)
        return (
            f"if [ -d {directory} ] && [ -z \"$(ls -A {directory})\" ]; "
            f"then rmdir {directory}; else exit {PRUNE_STOP_EXIT_CODE}; fi"
        )
