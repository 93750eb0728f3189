"""Git operation utilities"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..api.exceptions import GitError
from ..models.changeset import ChangeKind, DiffEntry

logger = logging.getLogger(__name__)


def find_repository_root(start_path: Optional[Path] = None) -> Optional[Path]:
    """
    Find the top-level directory of the Git work tree

    Args:
        start_path: Starting directory (defaults to current directory)

    Returns:
        Repository root or None if not inside a work tree
    """
    try:
        result = subprocess.run(
            ['git', 'rev-parse', '--show-toplevel'],
            cwd=start_path or Path.cwd(),
            capture_output=True,
            text=True
        )
    except (OSError, ValueError):
        return None

    if result.returncode != 0 or not result.stdout.strip():
        return None
    return Path(result.stdout.strip())


def parse_name_status(output: str) -> List[DiffEntry]:
    """
    Parse ``git diff --name-status -z`` output

    Args:
        output: NUL separated diff output

    Returns:
        List of diff entries
    """
    tokens = output.split('\0')
    entries = []
    index = 0

    while index < len(tokens):
        status = tokens[index]
        index += 1
        if not status:
            continue

        code = status[0]
        if code in ('R', 'C'):
            old_path, new_path = tokens[index], tokens[index + 1]
            index += 2
            if code == 'R':
                entries.append(DiffEntry(ChangeKind.RENAMED, old_path, new_path))
            else:
                # Copy keeps the source; only the new path is a change
                entries.append(DiffEntry(ChangeKind.ADDED, new_path))
            continue

        path = tokens[index]
        index += 1
        if code == 'A':
            entries.append(DiffEntry(ChangeKind.ADDED, path))
        elif code in ('M', 'T'):
            entries.append(DiffEntry(ChangeKind.MODIFIED, path))
        elif code == 'D':
            entries.append(DiffEntry(ChangeKind.DELETED, path))
        else:
            logger.debug(f"Ignoring diff entry with status {status}: {path}")

    return entries


class GitRepository:
    """Read-only access to a local Git repository"""

    def __init__(self, root: Union[str, Path]):
        """
        Initialize repository wrapper

        Args:
            root: Work tree root
        """
        self.root = Path(root)

    @classmethod
    def find_root(cls, start_path: Optional[Path] = None) -> Optional['GitRepository']:
        """Get a repository for the work tree containing ``start_path``, or None"""
        root = find_repository_root(start_path)
        return cls(root) if root else None

    def _git(self, *args: str, check: bool = True) -> subprocess.CompletedProcess:
        cmd = ['git', *args]
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                cwd=self.root,
                capture_output=True,
                text=True
            )
        except OSError as e:
            raise GitError(f"Could not run git: {e}") from e

        if check and result.returncode != 0:
            raise GitError(
                f"git {' '.join(args)} failed: {result.stderr.strip() or result.returncode}"
            )
        return result

    def current_revision(self) -> str:
        """Get the full commit ID of HEAD"""
        return self._git('rev-parse', 'HEAD').stdout.strip()

    def current_branch(self) -> Optional[str]:
        """Get current branch name, or None if it cannot be determined"""
        result = self._git('rev-parse', '--abbrev-ref', 'HEAD', check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def is_dirty(self) -> bool:
        """Check if the work tree has uncommitted or untracked changes"""
        return bool(self._git('status', '--porcelain').stdout.strip())

    def revision_exists(self, revision: str) -> bool:
        """Check if a commit exists in the local history"""
        result = self._git('cat-file', '-e', f'{revision}^{{commit}}', check=False)
        return result.returncode == 0

    def list_tracked_files(self, revision: str = 'HEAD') -> List[str]:
        """
        List every file in the tree of a revision

        Args:
            revision: Revision to list

        Returns:
            Repository-relative paths
        """
        output = self._git('ls-tree', '-r', '--name-only', '-z', revision).stdout
        return [path for path in output.split('\0') if path]

    def diff(self, from_revision: str, to_revision: str = 'HEAD') -> List[DiffEntry]:
        """
        Get path-level changes between two revisions, with rename detection

        Args:
            from_revision: Baseline revision
            to_revision: Target revision

        Returns:
            List of diff entries
        """
        output = self._git(
            'diff', '--find-renames', '--name-status', '-z',
            from_revision, to_revision
        ).stdout
        return parse_name_status(output)

    def config_entries(self, pattern: str) -> List[Tuple[str, str]]:
        """
        Read git config variables whose names match a regular expression

        Args:
            pattern: Regular expression passed to ``git config --get-regexp``

        Returns:
            List of (name, value) pairs in file order; empty if nothing matches
        """
        result = self._git('config', '-z', '--get-regexp', pattern, check=False)
        # git config exits 1 when no variable matches
        if result.returncode == 1:
            return []
        if result.returncode != 0:
            raise GitError(f"git config failed: {result.stderr.strip() or result.returncode}")

        entries = []
        for record in result.stdout.split('\0'):
            if not record:
                continue
            name, _, value = record.partition('\n')
            entries.append((name, value))
        return entries
