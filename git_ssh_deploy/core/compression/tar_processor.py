# git_ssh_deploy/core/compression/tar_processor.py
"""Tar archive creation for uploads"""

import fnmatch
import logging
import posixpath
import tarfile
import time
from pathlib import Path
from typing import List, Optional, Sequence

from ...api.exceptions import ArchiveError
from ..command_builder import RemoteCommandBuilder
from ...constants import ARCHIVE_EXCLUDE_PATTERNS, ARCHIVE_FILE_PATTERN, ARCHIVE_PREFIX

logger = logging.getLogger(__name__)


def archive_name(timestamp: Optional[int] = None) -> str:
    """Get the archive file name for a unix timestamp (defaults to now)"""
    if timestamp is None:
        timestamp = int(time.time())
    return ARCHIVE_FILE_PATTERN.format(prefix=ARCHIVE_PREFIX, timestamp=timestamp)


def is_excluded_artifact(member: str,
                         patterns: Sequence[str] = ARCHIVE_EXCLUDE_PATTERNS) -> bool:
    """Check if a member's file name matches an editor/OS metadata pattern"""
    name = posixpath.basename(member)
    return any(fnmatch.fnmatch(name, pattern) for pattern in patterns)


class TarProcessor:
    """Create gzip tar archives from a list of relative paths"""

    def __init__(self, exclude_patterns: Sequence[str] = ARCHIVE_EXCLUDE_PATTERNS):
        """
        Initialize tar processor

        Args:
            exclude_patterns: File name patterns never added to an archive
        """
        self.exclude_patterns = list(exclude_patterns)

    def create(self,
               base_dir: Path,
               member_paths: Sequence[str],
               output_dir: Path,
               name: Optional[str] = None) -> Path:
        """
        Pack files into a gzip tar archive

        Args:
            base_dir: Directory the member paths are relative to
            member_paths: POSIX paths relative to ``base_dir``; stored as-is
            output_dir: Directory receiving the archive
            name: Archive file name (defaults to a timestamped name)

        Returns:
            Path of the created archive

        Raises:
            ArchiveError: If a member is missing or the archive cannot be written
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        archive_path = output_dir / (name or archive_name())
        added = 0

        try:
            with tarfile.open(archive_path, "w:gz") as tar:
                for member in member_paths:
                    if is_excluded_artifact(member, self.exclude_patterns):
                        logger.debug(f"Skipping metadata artifact: {member}")
                        continue

                    source = base_dir / member
                    if not source.exists() and not source.is_symlink():
                        raise ArchiveError(f"Could not create tar-file: {member} does not exist.")

                    tar.add(str(source), arcname=member, recursive=False)
                    added += 1
        except (OSError, tarfile.TarError) as e:
            archive_path.unlink(missing_ok=True)
            raise ArchiveError(f"Could not create tar-file: {e}") from e
        except ArchiveError:
            archive_path.unlink(missing_ok=True)
            raise

        logger.info(f"Created {archive_path.name} with {added} file(s)")
        return archive_path

    def extract_command(self, builder: RemoteCommandBuilder, remote_archive: str) -> str:
        """Get the remote command that unpacks an uploaded archive into the remote root"""
        return builder.extract_archive(remote_archive)

    def list_members(self, archive_path: Path) -> List[str]:
        """
        List member names of an archive

        Args:
            archive_path: Archive file path

        Returns:
            Member names in archive order
        """
        try:
            with tarfile.open(archive_path, "r:gz") as tar:
                return tar.getnames()
        except (OSError, tarfile.TarError) as e:
            raise ArchiveError(f"Could not read tar-file {archive_path}: {e}") from e
