"""Configuration data models"""

import posixpath
from dataclasses import dataclass, field
from typing import Dict, Mapping, Tuple

from ..constants import (
    DEFAULT_PORT,
    LIST_SEPARATOR,
    KEY_HOST,
    KEY_USER,
    KEY_PORT,
    KEY_REMOTE_DIRECTORY,
    KEY_SYNC_ROOT,
    KEY_EXCLUDED_PATHS,
    KEY_INCLUDED_PATHS,
    KEY_PRE_DEPLOY_COMMAND,
    KEY_POST_DEPLOY_COMMAND,
    KEY_HEALTH_CHECK_URL,
)


def split_path_list(value: str) -> Tuple[str, ...]:
    """Split a comma separated path list, dropping blank entries"""
    if not value:
        return ()
    return tuple(
        entry.strip() for entry in value.split(LIST_SEPARATOR) if entry.strip()
    )


@dataclass
class EnvironmentConfig:
    """One deployment target

    Values are kept as configured; InputValidator decides whether they are
    safe before anything is derived from them.
    """

    name: str
    host: str = ""
    user: str = ""
    port: str = DEFAULT_PORT
    remote_directory: str = ""
    sync_root: str = ""
    excluded_paths: Tuple[str, ...] = field(default_factory=tuple)
    included_paths: Tuple[str, ...] = field(default_factory=tuple)
    pre_deploy_command: str = ""
    post_deploy_command: str = ""
    health_check_url: str = ""

    @property
    def remote_root(self) -> str:
        """Remote directory without trailing slash"""
        if not self.remote_directory:
            return ""
        return posixpath.normpath(self.remote_directory)

    @property
    def sync_prefix(self) -> str:
        """Sync root with exactly one trailing slash, or empty"""
        root = self.sync_root.strip("/")
        return f"{root}/" if root else ""

    @property
    def ssh_target(self) -> str:
        """SSH destination (user@host)"""
        return f"{self.user}@{self.host}"

    @property
    def ssh_command(self) -> str:
        """Equivalent interactive ssh command, for display"""
        return f"ssh -p {self.port} {self.ssh_target}"

    def to_mapping(self) -> Dict[str, str]:
        """Convert to configuration key/value pairs"""
        return {
            KEY_HOST: self.host,
            KEY_USER: self.user,
            KEY_PORT: self.port,
            KEY_REMOTE_DIRECTORY: self.remote_directory,
            KEY_SYNC_ROOT: self.sync_root,
            KEY_EXCLUDED_PATHS: LIST_SEPARATOR.join(self.excluded_paths),
            KEY_INCLUDED_PATHS: LIST_SEPARATOR.join(self.included_paths),
            KEY_PRE_DEPLOY_COMMAND: self.pre_deploy_command,
            KEY_POST_DEPLOY_COMMAND: self.post_deploy_command,
            KEY_HEALTH_CHECK_URL: self.health_check_url,
        }

    @classmethod
    def from_mapping(cls, name: str, data: Mapping[str, str]) -> 'EnvironmentConfig':
        """Create from configuration key/value pairs"""
        return cls(
            name=name,
            host=data.get(KEY_HOST, ""),
            user=data.get(KEY_USER, ""),
            port=data.get(KEY_PORT) or DEFAULT_PORT,
            remote_directory=data.get(KEY_REMOTE_DIRECTORY, ""),
            sync_root=data.get(KEY_SYNC_ROOT, ""),
            excluded_paths=split_path_list(data.get(KEY_EXCLUDED_PATHS, "")),
            included_paths=split_path_list(data.get(KEY_INCLUDED_PATHS, "")),
            pre_deploy_command=data.get(KEY_PRE_DEPLOY_COMMAND, ""),
            post_deploy_command=data.get(KEY_POST_DEPLOY_COMMAND, ""),
            health_check_url=data.get(KEY_HEALTH_CHECK_URL, ""),
        )
