"""Tests for the Deployer facade"""

import logging
from unittest.mock import patch

import pytest

from git_ssh_deploy import Deployer, deploy
from git_ssh_deploy.api.exceptions import GitError, RemovalVerificationError, ValidationError
from git_ssh_deploy.models import OperationStatus

from .conftest import REMOTE_ROOT


@pytest.fixture
def deployer(git_repo, remote):
    for key, value in (("host", "example.com"), ("user", "deploy"),
                       ("remotedirectory", REMOTE_ROOT)):
        git_repo.git("config", f"git-ssh-deploy.production.{key}", value)
    git_repo.write("index.html")
    git_repo.commit()
    return Deployer(git_repo.root, executor_factory=lambda env: remote)


class TestDeployer:
    """Deployer"""

    def test_outside_repository(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(GitError, match="inside a Git repository"):
            Deployer()

    def test_environments(self, deployer):
        assert deployer.environments() == ["production"]
        assert deployer.environment("production").host == "example.com"

    def test_write_and_remove_marker(self, deployer, git_repo, remote):
        assert deployer.write_marker("production") == git_repo.head()
        assert remote.marker == git_repo.head() + "\n"

        marker_path = deployer.remove_marker("production")

        assert marker_path == f"{REMOTE_ROOT}/.git-ssh-deploy-state-commit-id.log"
        assert remote.marker is None

    def test_remove_marker_verifies(self, deployer, remote):
        deployer.write_marker("production")
        remote.fail_remove.add(f"{REMOTE_ROOT}/.git-ssh-deploy-state-commit-id.log")

        with pytest.raises(RemovalVerificationError):
            deployer.remove_marker("production")

    def test_marker_commands_validate_environment(self, deployer, remote):
        with pytest.raises(ValidationError):
            deployer.write_marker("unconfigured")
        assert remote.commands == []

    def test_deploy_function(self, deployer, git_repo, remote):
        with patch('git_ssh_deploy.api.deployer.SSHExecutor', lambda env: remote):
            result = deploy("production", full=True, repo_root=git_repo.root)

        assert result.status == OperationStatus.SUCCESS
        assert remote.marker == git_repo.head() + "\n"

    def test_unknown_environment_names_configured_ones(self, deployer, caplog):
        with caplog.at_level(logging.WARNING, logger="git_ssh_deploy.api.deployer"):
            env = deployer.environment("staging")

        assert env.host == ""
        assert "Environment staging is not configured" in caplog.text
        assert "Configured environments: production" in caplog.text

    def test_configured_environment_logs_nothing(self, deployer, caplog):
        with caplog.at_level(logging.WARNING, logger="git_ssh_deploy.api.deployer"):
            deployer.environment("production")

        assert caplog.text == ""
