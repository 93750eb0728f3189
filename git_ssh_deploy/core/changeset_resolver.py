# git_ssh_deploy/core/changeset_resolver.py
"""Change set resolution between the remote baseline and the local revision"""

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .validation_engine import has_parent_segment
from ..models.changeset import ChangeKind, ChangeSet
from ..models.config import EnvironmentConfig
from ..utils.file_utils import list_files_under
from ..utils.git_utils import GitRepository
from ..constants import GIT_DIR_NAME

logger = logging.getLogger(__name__)

PathPredicate = Callable[[str], bool]
DirectoryLister = Callable[[str], List[str]]


def normalize_sync_root(sync_root: Optional[str]) -> str:
    """Get the sync root as a prefix with one trailing slash, or empty"""
    root = (sync_root or "").strip("/")
    return f"{root}/" if root else ""


def filter_by_sync_root(paths: Iterable[str], sync_root: Optional[str]) -> List[str]:
    """
    Keep only paths inside the sync root

    The match is on whole path segments: ``webroot2/a.txt`` is not inside
    ``webroot``.
    """
    prefix = normalize_sync_root(sync_root)
    if not prefix:
        return list(paths)
    return [path for path in paths if path.startswith(prefix)]


def filter_excludes(paths: Iterable[str],
                    sync_root: Optional[str],
                    excludes: Sequence[str],
                    is_dir: PathPredicate,
                    is_file: PathPredicate) -> List[str]:
    """
    Drop excluded paths

    Each entry is resolved relative to the sync root. A directory entry
    drops everything below it, a file entry drops exactly that path, and an
    entry that exists as neither is ignored.
    """
    prefix = normalize_sync_root(sync_root)
    directories = []
    files = set()

    for entry in excludes:
        target = prefix + entry.strip("/")
        if is_dir(target):
            directories.append(target + "/")
        elif is_file(target):
            files.add(target)
        else:
            logger.debug(f"Exclude entry {entry} matches nothing locally, ignoring")

    if not directories and not files:
        return list(paths)

    return [
        path for path in paths
        if path not in files and not any(path.startswith(d) for d in directories)
    ]


def apply_includes(paths: Iterable[str],
                   sync_root: Optional[str],
                   includes: Sequence[str],
                   is_dir: PathPredicate,
                   is_file: PathPredicate,
                   list_directory: DirectoryLister) -> List[str]:
    """
    Add forced inclusions to an upload list

    Directory entries add every file below them, file entries add the file.
    Entries that exist as neither are ignored.
    """
    prefix = normalize_sync_root(sync_root)
    result = list(paths)

    for entry in includes:
        target = prefix + entry.strip("/")
        if is_dir(target):
            result.extend(list_directory(target))
        elif is_file(target):
            result.append(target)
        else:
            logger.debug(f"Include entry {entry} matches nothing locally, ignoring")

    return result


def is_repository_metadata(path: str) -> bool:
    """Check if a path lies inside a ``.git`` directory"""
    return GIT_DIR_NAME in path.split("/")


def sanitize(paths: Iterable[str]) -> List[str]:
    """Deduplicate, sort, and drop empty, absolute, ``..`` or ``.git`` paths"""
    clean = set()
    metadata = 0

    for path in paths:
        if not path or path.startswith("/") or has_parent_segment(path):
            if path:
                logger.warning(f"Dropping unsafe path from change set: {path}")
            continue
        if is_repository_metadata(path):
            logger.debug(f"Dropping repository metadata from change set: {path}")
            metadata += 1
            continue
        clean.add(path)

    if metadata:
        logger.warning(f"Dropped {metadata} file(s) inside .git from the change set")

    return sorted(clean)


class ChangeSetResolver:
    """Turn a baseline revision into upload and delete lists"""

    def __init__(self, repository: GitRepository, repo_root: Optional[Path] = None):
        """
        Initialize resolver

        Args:
            repository: VCS collaborator
            repo_root: Work tree used to resolve exclude/include entries
                (defaults to the repository root)
        """
        self.repository = repository
        self.repo_root = Path(repo_root) if repo_root else repository.root

    def _is_dir(self, path: str) -> bool:
        return (self.repo_root / path).is_dir()

    def _is_file(self, path: str) -> bool:
        return (self.repo_root / path).is_file()

    def _list_directory(self, path: str) -> List[str]:
        return list_files_under(self.repo_root / path, self.repo_root)

    def collect(self,
                baseline: Optional[str],
                target: str) -> Tuple[List[str], List[str]]:
        """
        Collect raw upload and delete lists before any filtering

        Args:
            baseline: Revision the remote reflects, None for a full deploy
            target: Local revision to deploy

        Returns:
            Tuple of (to_upload, to_remove)
        """
        if baseline is None:
            return self.repository.list_tracked_files(target), []

        to_upload = []
        to_remove = []

        for entry in self.repository.diff(baseline, target):
            if entry.kind in (ChangeKind.ADDED, ChangeKind.MODIFIED):
                to_upload.append(entry.path)
            elif entry.kind == ChangeKind.DELETED:
                to_remove.append(entry.path)
            elif entry.kind == ChangeKind.RENAMED:
                to_remove.append(entry.path)
                to_upload.append(entry.new_path)

        return to_upload, to_remove

    def resolve(self,
                baseline: Optional[str],
                sync_root: Optional[str] = "",
                excludes: Sequence[str] = (),
                includes: Sequence[str] = (),
                target: Optional[str] = None) -> ChangeSet:
        """
        Resolve the change set between a baseline and the local revision

        Args:
            baseline: Revision the remote reflects, None for a full deploy
            sync_root: Repository subdirectory that is synchronized
            excludes: Paths (relative to the sync root) never uploaded or deleted
            includes: Paths (relative to the sync root) always uploaded
            target: Local revision (defaults to HEAD)

        Returns:
            ChangeSet with sorted, deduplicated paths
        """
        target = target or self.repository.current_revision()

        if baseline is not None and baseline == target:
            return ChangeSet()

        to_upload, to_remove = self.collect(baseline, target)
        logger.debug(f"Raw change set: {len(to_upload)} to upload, {len(to_remove)} to remove")

        to_upload = filter_by_sync_root(to_upload, sync_root)
        to_remove = filter_by_sync_root(to_remove, sync_root)

        to_upload = filter_excludes(to_upload, sync_root, excludes, self._is_dir, self._is_file)
        to_remove = filter_excludes(to_remove, sync_root, excludes, self._is_dir, self._is_file)

        to_upload = apply_includes(
            to_upload, sync_root, includes,
            self._is_dir, self._is_file, self._list_directory
        )

        upload_set = sanitize(to_upload)
        uploaded = set(upload_set)
        # A path being uploaded exists locally, so it must not be deleted
        remove_set = [path for path in sanitize(to_remove) if path not in uploaded]

        return ChangeSet.from_paths(upload_set, remove_set)

    def resolve_for(self,
                    environment: EnvironmentConfig,
                    baseline: Optional[str],
                    target: Optional[str] = None) -> ChangeSet:
        """Resolve using an environment's sync root, excludes and includes"""
        return self.resolve(
            baseline,
            sync_root=environment.sync_root,
            excludes=environment.excluded_paths,
            includes=environment.included_paths,
            target=target,
        )
