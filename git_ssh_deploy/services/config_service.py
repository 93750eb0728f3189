"""Configuration management service"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from ..api.exceptions import ConfigError, ValidationError
from ..core.validation_engine import is_valid_environment_name
from ..models.config import EnvironmentConfig
from ..utils.git_utils import GitRepository
from ..constants import (
    CONFIG_DEFAULTS,
    CONFIG_KEYS,
    CONFIG_NAMESPACE,
    DEFAULT_CONFIG_TEMPLATE,
    GIT_CONFIG_FILE,
)

logger = logging.getLogger(__name__)


class ConfigService:
    """Service for reading environment configuration from git config

    Variables live under ``git-ssh-deploy.<environment>.<key>``.
    """

    def __init__(self, project_root: Path, repository: Optional[GitRepository] = None):
        """Initialize config service

        Args:
            project_root: Repository root directory
            repository: Git collaborator (created from project_root if omitted)
        """
        self.project_root = Path(project_root)
        self.repository = repository or GitRepository(self.project_root)
        self.config_path = self.project_root / GIT_CONFIG_FILE

    def _read_all(self) -> Dict[str, Dict[str, str]]:
        """Read every namespaced variable, grouped by environment"""
        environments: Dict[str, Dict[str, str]] = {}
        prefix = f"{CONFIG_NAMESPACE}."

        for name, value in self.repository.config_entries(f"^{CONFIG_NAMESPACE}\\."):
            if not name.startswith(prefix):
                continue
            subsection, dot, key = name[len(prefix):].rpartition(".")
            if not dot or not subsection:
                continue
            # Later entries override earlier ones, as git does
            environments.setdefault(subsection, {})[key.lower()] = value

        return environments

    def list_environments(self) -> List[str]:
        """List configured environment names

        Returns:
            Sorted environment names
        """
        return sorted(self._read_all())

    def get_values(self, name: str) -> Dict[str, str]:
        """Get raw configuration values for an environment, with defaults applied

        Args:
            name: Environment name

        Returns:
            Mapping of every known key to its value
        """
        configured = self._read_all().get(name, {})
        values = {}

        for key in CONFIG_KEYS:
            value = configured.get(key)
            values[key] = value if value else CONFIG_DEFAULTS.get(key, "")

        unknown = set(configured) - set(CONFIG_KEYS)
        if unknown:
            logger.debug(f"Ignoring unknown keys for {name}: {', '.join(sorted(unknown))}")

        return values

    def get_environment(self, name: str) -> EnvironmentConfig:
        """Load an environment configuration

        The result is not validated; pass it through InputValidator first.

        Args:
            name: Environment name

        Returns:
            EnvironmentConfig
        """
        values = self.get_values(name)
        logger.debug(f"Loaded config for {name}: {values}")
        return EnvironmentConfig.from_mapping(name, values)

    def init_config(self, name: str) -> Path:
        """Append a commented default block for an environment to .git/config

        Args:
            name: Environment name

        Returns:
            Path of the config file written

        Raises:
            ValidationError: If the name is invalid
            ConfigError: If the config file is missing or the environment exists
        """
        if not is_valid_environment_name(name):
            raise ValidationError("Invalid environment name.")

        if not self.config_path.is_file():
            raise ConfigError(f"Config file {self.config_path} does not exist.")

        if name in self._read_all():
            raise ConfigError(
                f"Environment {name} is already configured in {self.config_path}."
            )

        block = DEFAULT_CONFIG_TEMPLATE.format(namespace=CONFIG_NAMESPACE, name=name)
        try:
            with open(self.config_path, 'a') as f:
                f.write(block)
        except OSError as e:
            raise ConfigError(f"Could not write {self.config_path}: {e}") from e

        logger.info(f"Added default config for {name} to {self.config_path}")
        return self.config_path
