# git_ssh_deploy/core/validation_engine.py
"""Validation engine for environment configuration"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from ..api.exceptions import ValidationError
from ..constants import (
    ENVIRONMENT_NAME_PATTERN,
    REVISION_ID_PATTERN,
    HOST_PATTERN,
    USER_PATTERN,
    PORT_PATTERN,
    PATH_PATTERN,
    HEALTH_CHECK_URL_PATTERN,
)
from ..models.config import EnvironmentConfig


def is_valid_environment_name(name: Optional[str]) -> bool:
    """Check environment name against ``[A-Za-z0-9_-]+``"""
    return bool(name) and ENVIRONMENT_NAME_PATTERN.fullmatch(name) is not None


def is_valid_revision_id(revision: Optional[str]) -> bool:
    """Check for a full 40 character lowercase hex commit ID"""
    return bool(revision) and REVISION_ID_PATTERN.fullmatch(revision) is not None


def has_parent_segment(path: str) -> bool:
    """Check if any segment of a slash separated path is ``..``"""
    return ".." in path.split("/")


@dataclass
class ValidationResult:
    """Validation result container"""
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add error message"""
        self.errors.append(message)
        self.is_valid = False


class ValidationEngine:
    """Execute environment validation checks

    Checks run in a fixed order and stop at the first error.
    """

    def validate_environment(self,
                             environment: EnvironmentConfig,
                             repo_root: Path) -> ValidationResult:
        """
        Validate an environment configuration

        Args:
            environment: Environment to validate
            repo_root: Local repository root

        Returns:
            ValidationResult holding at most one error
        """
        result = ValidationResult()

        checks = (
            lambda: self._check_name(environment),
            lambda: self._check_required_fields(environment),
            lambda: self._check_characters(environment),
            lambda: self._check_relative_paths(environment),
            lambda: self._check_parent_segments(environment),
            lambda: self._check_port(environment),
            lambda: self._check_health_check_url(environment),
            lambda: self._check_local_directory(environment, repo_root),
        )

        for check in checks:
            error = check()
            if error:
                result.add_error(error)
                break

        return result

    def _check_name(self, env: EnvironmentConfig) -> Optional[str]:
        if not is_valid_environment_name(env.name):
            return (
                f"Environment name {env.name} contains invalid characters. "
                "Only alphanumeric characters, dashes and underscores are allowed."
            )
        return None

    def _check_required_fields(self, env: EnvironmentConfig) -> Optional[str]:
        missing = [
            key for key, value in (
                ("host", env.host),
                ("user", env.user),
                ("remotedirectory", env.remote_directory),
            ) if not value
        ]
        if missing:
            return (
                f"Environment {env.name} is not properly configured. "
                f"Missing: {', '.join(missing)}."
            )
        return None

    def _check_characters(self, env: EnvironmentConfig) -> Optional[str]:
        if not HOST_PATTERN.fullmatch(env.host):
            return (
                f"Host {env.host} contains invalid characters. Only alphanumeric "
                "characters, dots, underscores and dashes are allowed."
            )
        if not USER_PATTERN.fullmatch(env.user):
            return (
                f"User {env.user} contains invalid characters. Only alphanumeric "
                "characters, dashes and underscores are allowed."
            )
        if not PATH_PATTERN.fullmatch(env.remote_directory):
            return (
                f"Remote directory {env.remote_directory} contains invalid characters. "
                "Only alphanumeric characters, dots, dashes, underscores and slashes are allowed."
            )
        if not env.remote_directory.startswith("/"):
            return f"Remote directory {env.remote_directory} must be an absolute path."
        if env.sync_root and not PATH_PATTERN.fullmatch(env.sync_root):
            return (
                f"Sync root {env.sync_root} contains invalid characters. "
                "Only alphanumeric characters, dots, dashes, underscores and slashes are allowed."
            )
        for label, entries in (("Excluded", env.excluded_paths),
                               ("Included", env.included_paths)):
            bad = self._first_invalid_path(entries)
            if bad is not None:
                return (
                    f"{label} path {bad} contains invalid characters. "
                    "Only alphanumeric characters, dots, dashes, underscores and slashes are allowed."
                )
        return None

    def _check_relative_paths(self, env: EnvironmentConfig) -> Optional[str]:
        candidates = [("Sync root", env.sync_root)]
        candidates += [("Excluded path", p) for p in env.excluded_paths]
        candidates += [("Included path", p) for p in env.included_paths]

        for label, value in candidates:
            if value.startswith("/"):
                return f"{label} {value} must be relative to the repository root."
        return None

    def _check_parent_segments(self, env: EnvironmentConfig) -> Optional[str]:
        candidates = [
            ("Remote directory", env.remote_directory),
            ("Sync root", env.sync_root),
        ]
        candidates += [("Excluded path", p) for p in env.excluded_paths]
        candidates += [("Included path", p) for p in env.included_paths]

        for label, value in candidates:
            if value and has_parent_segment(value):
                return f"{label} {value} must not contain '..' segments."
        return None

    def _check_port(self, env: EnvironmentConfig) -> Optional[str]:
        port = str(env.port)
        if not PORT_PATTERN.fullmatch(port) or not 0 < int(port) < 65536:
            return f"Port {env.port} is not a valid number."
        return None

    def _check_health_check_url(self, env: EnvironmentConfig) -> Optional[str]:
        if env.health_check_url and not HEALTH_CHECK_URL_PATTERN.fullmatch(env.health_check_url):
            return f"Health check URL {env.health_check_url} is not a valid URL."
        return None

    def _check_local_directory(self, env: EnvironmentConfig, repo_root: Path) -> Optional[str]:
        directory = repo_root / env.sync_root if env.sync_root else repo_root
        if not directory.is_dir():
            return f"Sync directory {directory} does not exist."
        if not os.access(directory, os.W_OK):
            return f"Directory {directory} is not writable."
        return None

    @staticmethod
    def _first_invalid_path(entries: Iterable[str]) -> Optional[str]:
        for entry in entries:
            if not PATH_PATTERN.fullmatch(entry):
                return entry
        return None


class InputValidator:
    """Gate for every environment-scoped operation"""

    def __init__(self, repo_root: Path, engine: Optional[ValidationEngine] = None):
        self.repo_root = Path(repo_root)
        self.engine = engine or ValidationEngine()

    def validate(self, environment: EnvironmentConfig) -> None:
        """
        Validate an environment before any side effect

        Raises:
            ValidationError: On the first failed check
        """
        result = self.engine.validate_environment(environment, self.repo_root)
        if not result.is_valid:
            raise ValidationError(result.errors[0])
