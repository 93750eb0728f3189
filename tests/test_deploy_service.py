"""Tests for the deployment pipeline against a real repository and a fake host"""

import dataclasses
from unittest.mock import Mock

import pytest

from git_ssh_deploy.api.exceptions import (
    ConnectivityError,
    DirtyRepositoryError,
    ExtractionError,
    HealthCheckError,
    HookError,
    MarkerNotSetError,
    TransferError,
    UnknownRevisionError,
)
from git_ssh_deploy.constants import ExitCode, MSG_NO_CHANGES
from git_ssh_deploy.models import OperationStatus, Stage
from git_ssh_deploy.remote.base import CommandResult
from git_ssh_deploy.services import DeploymentOrchestrator, verify_connectivity

from .conftest import REMOTE_ROOT


@pytest.fixture
def work_dir(tmp_path):
    return tmp_path / "work"


@pytest.fixture
def make_orchestrator(git_repo, remote, work_dir):
    def factory(**kwargs):
        return DeploymentOrchestrator(
            git_repo.root,
            executor_factory=lambda env: remote,
            work_dir=work_dir,
            **kwargs
        )
    return factory


@pytest.fixture
def site(git_repo):
    """Repository with a small committed site"""
    git_repo.write("index.html", "<html>\n")
    git_repo.write("css/site.css", "body {}\n")
    git_repo.write("old/deep/file.txt", "old\n")
    git_repo.commit("initial")
    return git_repo


def remote_path(path):
    return f"{REMOTE_ROOT}/{path}"


class TestVerifyConnectivity:
    """verify_connectivity"""

    def test_passes(self, environment, remote):
        verify_connectivity(environment, remote)

    def test_unreachable_host(self, environment, remote):
        remote.reachable = False
        with pytest.raises(ConnectivityError, match="Could not connect"):
            verify_connectivity(environment, remote)

    def test_missing_directory(self, environment, remote):
        env = dataclasses.replace(environment, remote_directory="/srv/missing")
        with pytest.raises(ConnectivityError, match="does not exist"):
            verify_connectivity(env, remote)

    def test_unwritable_directory(self, environment, remote):
        remote.readonly.add(REMOTE_ROOT)
        with pytest.raises(ConnectivityError, match="not writable by user deploy"):
            verify_connectivity(environment, remote)


class TestPushAll:
    """Full deployments"""

    def test_uploads_every_tracked_file(self, site, environment, remote,
                                        make_orchestrator, work_dir):
        result = make_orchestrator().push_all(environment)

        assert result.status == OperationStatus.SUCCESS
        assert result.exit_code == ExitCode.SUCCESS
        assert result.run.stage == Stage.DONE
        for path in ("index.html", "css/site.css", "old/deep/file.txt"):
            assert remote_path(path) in remote.files
        assert remote.marker == site.head() + "\n"

        # Archive removed on both sides
        assert not list(work_dir.glob("*.tar.gz"))
        assert not any(p.endswith(".tar.gz") for p in remote.files)

    def test_records_skipped_stages(self, site, environment, make_orchestrator):
        result = make_orchestrator().push_all(environment)

        assert result.run.completed_stages == [
            Stage.CONNECTIVITY_CHECKED,
            Stage.CHANGESET_COMPUTED,
            Stage.BUNDLED,
            Stage.TRANSFERRED,
            Stage.APPLIED,
            Stage.MARKER_UPDATED,
            Stage.DONE,
        ]
        assert result.run.skipped_stages == [
            Stage.PRE_HOOK_RUN,
            Stage.PRUNED,
            Stage.POST_HOOK_RUN,
            Stage.HEALTH_CHECKED,
        ]

    def test_sync_root_maps_onto_remote_root(self, git_repo, environment, remote,
                                             make_orchestrator):
        git_repo.write("README.md")
        git_repo.write("webroot/index.html")
        git_repo.write("webroot/img/logo.svg")
        git_repo.commit()
        env = dataclasses.replace(environment, sync_root="webroot")

        result = make_orchestrator().push_all(env)

        assert result.is_success
        archive = next(iter(remote.archives.values()))
        assert sorted(archive) == ["img/logo.svg", "index.html"]
        assert remote_path("index.html") in remote.files
        assert remote_path("README.md") not in remote.files

    def test_remote_only_files_are_kept(self, site, environment, remote, make_orchestrator):
        remote.add_file(remote_path("uploads/user.png"), "png")

        make_orchestrator().push_all(environment)

        assert remote_path("uploads/user.png") in remote.files
        assert not any(c.startswith("rm -f") for c in remote.commands)

    def test_bundle_message_counts_packed_files(self, git_repo, environment,
                                                make_orchestrator):
        git_repo.write("index.html")
        git_repo.write(".DS_Store")
        git_repo.commit()
        progress = Mock()

        make_orchestrator(progress=progress).push_all(environment)

        bundled = [call.args[1] for call in progress.call_args_list
                   if call.args[0] == Stage.BUNDLED]
        assert bundled == [bundled[0]]
        assert bundled[0].endswith("for added/changed/renamed 1 file(s).")

    def test_progress_callback(self, site, environment, make_orchestrator):
        progress = Mock()

        make_orchestrator(progress=progress).push_all(environment)

        stages = [call.args[0] for call in progress.call_args_list]
        assert stages[0] == Stage.CHANGESET_COMPUTED
        assert stages[-1] == Stage.DONE
        assert Stage.TRANSFERRED in stages


class TestPush:
    """Incremental deployments"""

    def test_deploys_diff_since_marker(self, site, environment, remote, make_orchestrator):
        orchestrator = make_orchestrator()
        orchestrator.push_all(environment)

        site.write("index.html", "<html>v2\n")
        site.write("about.html")
        site.move("css/site.css", "css/main.css")
        site.commit("second")
        remote.archives.clear()

        result = orchestrator.push(environment)

        assert result.status == OperationStatus.SUCCESS
        assert result.run.change_set.to_upload == ("about.html", "css/main.css", "index.html")
        assert result.run.change_set.to_remove == ("css/site.css",)
        assert sorted(next(iter(remote.archives.values()))) == [
            "about.html", "css/main.css", "index.html",
        ]
        assert remote_path("css/site.css") not in remote.files
        assert remote_path("css/main.css") in remote.files
        assert remote.marker == site.head() + "\n"

    def test_prunes_emptied_directories(self, site, environment, remote, make_orchestrator):
        orchestrator = make_orchestrator()
        orchestrator.push_all(environment)
        site.remove("old/deep/file.txt")
        site.commit("cleanup")

        result = orchestrator.push(environment)

        assert result.is_success
        assert Stage.PRUNED in result.run.completed_stages
        assert Stage.BUNDLED in result.run.skipped_stages
        assert Stage.TRANSFERRED in result.run.skipped_stages
        assert remote_path("old/deep/file.txt") not in remote.files
        assert remote_path("old/deep") not in remote.dirs
        assert remote_path("old") not in remote.dirs
        assert REMOTE_ROOT in remote.dirs

    def test_prune_stops_at_non_empty_directory(self, site, environment, remote,
                                                 make_orchestrator):
        orchestrator = make_orchestrator()
        orchestrator.push_all(environment)
        remote.add_file(remote_path("old/keep.txt"), "remote only")
        site.remove("old/deep/file.txt")
        site.commit("cleanup")

        orchestrator.push(environment)

        assert remote_path("old/deep") not in remote.dirs
        assert remote_path("old") in remote.dirs

    def test_failed_removal_still_checks_parents(self, site, environment, remote,
                                                  make_orchestrator):
        orchestrator = make_orchestrator()
        orchestrator.push_all(environment)
        remote.fail_remove.add(remote_path("old/deep/file.txt"))
        site.remove("old/deep/file.txt")
        site.commit("cleanup")

        result = orchestrator.push(environment)

        assert result.is_success
        assert any("old/deep/file.txt" in w for w in result.warnings)
        assert any(c.startswith(f"if [ -d {remote_path('old/deep')} ]")
                   for c in remote.commands)
        assert remote_path("old/deep") in remote.dirs

    def test_failed_removal_is_a_warning(self, site, environment, remote, make_orchestrator):
        orchestrator = make_orchestrator()
        orchestrator.push_all(environment)
        remote.fail_remove.add(remote_path("index.html"))
        site.remove("index.html")
        site.commit("drop index")

        result = orchestrator.push(environment)

        assert result.status == OperationStatus.SUCCESS
        assert any("index.html" in w for w in result.warnings)
        assert remote.marker == site.head() + "\n"

    def test_no_changes_mutates_nothing(self, site, environment, remote, make_orchestrator):
        orchestrator = make_orchestrator()
        orchestrator.push_all(environment)
        remote.commands.clear()
        remote.copies.clear()

        result = orchestrator.push(environment)

        assert result.status == OperationStatus.SKIPPED
        assert result.is_success
        assert result.message == MSG_NO_CHANGES
        assert remote.mutating_commands() == []
        assert remote.copies == []

    def test_requires_marker(self, site, environment, remote, make_orchestrator):
        result = make_orchestrator().push(environment)

        assert result.status == OperationStatus.FAILED
        assert isinstance(result.error, MarkerNotSetError)
        assert "push_all" in result.message
        assert result.exit_code == ExitCode.FAILURE
        assert remote.mutating_commands() == []

    def test_unknown_marker(self, site, environment, remote, make_orchestrator):
        remote.add_file(remote_path(".git-ssh-deploy-state-commit-id.log"), "f" * 40 + "\n")

        result = make_orchestrator().push(environment)

        assert isinstance(result.error, UnknownRevisionError)
        assert result.message == f"Remote commit ID {'f' * 40} not found locally."
        assert result.exit_code == ExitCode.FAILURE


class TestPushWithSyncRoot:
    """Removals and directory pruning below a sync root"""

    @pytest.fixture
    def webroot_site(self, git_repo):
        git_repo.write("README.md")
        git_repo.write("webroot/index.html")
        git_repo.write("webroot/old/deep/file.txt")
        git_repo.commit("initial")
        return git_repo

    @pytest.fixture
    def webroot_env(self, environment):
        return dataclasses.replace(environment, sync_root="webroot")

    def test_prunes_up_to_remote_root(self, webroot_site, webroot_env, remote,
                                      make_orchestrator):
        orchestrator = make_orchestrator()
        orchestrator.push_all(webroot_env)
        assert remote_path("old/deep/file.txt") in remote.files
        webroot_site.remove("webroot/old/deep/file.txt")
        webroot_site.commit("cleanup")

        result = orchestrator.push(webroot_env)

        assert result.status == OperationStatus.SUCCESS
        assert result.run.change_set.to_remove == ("webroot/old/deep/file.txt",)
        assert f"rm -f {remote_path('old/deep/file.txt')}" in remote.commands
        assert remote_path("old/deep/file.txt") not in remote.files
        assert remote_path("old/deep") not in remote.dirs
        assert remote_path("old") not in remote.dirs
        assert REMOTE_ROOT in remote.dirs
        assert remote_path("index.html") in remote.files

    def test_keeps_directory_with_remaining_file(self, webroot_site, webroot_env, remote,
                                                 make_orchestrator):
        webroot_site.write("webroot/old/keep.txt")
        webroot_site.commit("keep")
        orchestrator = make_orchestrator()
        orchestrator.push_all(webroot_env)
        webroot_site.remove("webroot/old/deep/file.txt")
        webroot_site.commit("cleanup")

        result = orchestrator.push(webroot_env)

        assert result.is_success
        assert remote_path("old/deep") not in remote.dirs
        assert remote_path("old") in remote.dirs
        assert remote_path("old/keep.txt") in remote.files


class TestGuards:
    """Failures before anything is changed"""

    def test_dirty_repository(self, site, environment, remote, make_orchestrator):
        site.write("untracked.txt")

        result = make_orchestrator().push_all(environment)

        assert isinstance(result.error, DirtyRepositoryError)
        assert result.failed_stage == Stage.IDLE
        assert result.inconsistent_state == "Nothing was changed on the remote server."
        assert remote.commands == []

    def test_invalid_environment(self, site, environment, remote, make_orchestrator):
        env = dataclasses.replace(environment, host="bad host")

        result = make_orchestrator().push_all(env)

        assert result.status == OperationStatus.FAILED
        assert result.exit_code == ExitCode.FAILURE
        assert remote.commands == []

    def test_unreachable_host(self, site, environment, remote, make_orchestrator):
        remote.reachable = False

        result = make_orchestrator().push_all(environment)

        assert isinstance(result.error, ConnectivityError)
        assert result.failed_stage == Stage.CONNECTIVITY_CHECKED
        assert result.exit_code == ExitCode.FAILURE


class TestStageFailures:
    """Exit codes and reported state per failing stage"""

    def test_pre_hook_failure(self, site, environment, remote, make_orchestrator):
        env = dataclasses.replace(environment, pre_deploy_command="make prepare")
        remote.hook_results["make prepare"] = CommandResult(1, "", "boom")

        result = make_orchestrator().push_all(env)

        assert isinstance(result.error, HookError)
        assert result.exit_code == ExitCode.PRE_DEPLOY_HOOK_FAILED
        assert result.failed_stage == Stage.PRE_HOOK_RUN
        assert "pre-deploy command may have partially run" in result.inconsistent_state
        assert remote.copies == []
        assert remote.marker is None

    def test_transfer_failure_keeps_archive(self, site, environment, remote,
                                            make_orchestrator, work_dir):
        remote.fail_copy = True

        result = make_orchestrator().push_all(environment)

        assert isinstance(result.error, TransferError)
        assert result.exit_code == ExitCode.TRANSFER_FAILED
        assert result.failed_stage == Stage.TRANSFERRED
        assert result.run.archive_path.exists()
        assert str(result.run.archive_path) in result.inconsistent_state
        assert remote.marker is None

    def test_extraction_failure(self, site, environment, remote, make_orchestrator):
        remote.copy_file = lambda local_path, path: remote.copies.append(path)

        result = make_orchestrator().push_all(environment)

        assert isinstance(result.error, ExtractionError)
        assert result.exit_code == ExitCode.TRANSFER_FAILED
        assert result.failed_stage == Stage.APPLIED
        assert "may be partially updated" in result.inconsistent_state
        assert remote.marker is None

    def test_post_hook_failure(self, site, environment, remote, make_orchestrator):
        env = dataclasses.replace(environment, post_deploy_command="service app reload")
        remote.hook_results["service app reload"] = CommandResult(7, "", "failed")

        result = make_orchestrator().push_all(env)

        assert isinstance(result.error, HookError)
        assert result.error.remote_exit_code == 7
        assert str(result.error).startswith("Post-deploy command failed")
        assert result.exit_code == ExitCode.POST_DEPLOY_HOOK_FAILED
        assert result.failed_stage == Stage.POST_HOOK_RUN
        assert Stage.APPLIED in result.run.completed_stages
        assert Stage.MARKER_UPDATED in result.run.completed_stages
        assert remote.marker == site.head() + "\n"
        assert site.head() in result.inconsistent_state

    def test_hooks_run_around_transfer(self, site, environment, remote, make_orchestrator):
        env = dataclasses.replace(
            environment,
            pre_deploy_command="make prepare",
            post_deploy_command="service app reload",
        )

        result = make_orchestrator().push_all(env)

        assert result.is_success
        pre = remote.commands.index("make prepare")
        post = remote.commands.index("service app reload")
        extract = next(i for i, c in enumerate(remote.commands) if c.startswith("tar "))
        assert pre < extract < post

    def test_health_check_failure(self, site, environment, remote, make_orchestrator):
        url = "https://example.com/health"
        env = dataclasses.replace(environment, health_check_url=url)
        checker = Mock(side_effect=HealthCheckError(url, "Health check failed"))

        result = make_orchestrator(health_checker=checker).push_all(env)

        checker.assert_called_once_with(url)
        assert result.exit_code == ExitCode.HEALTH_CHECK_FAILED
        assert result.failed_stage == Stage.HEALTH_CHECKED
        assert remote.marker == site.head() + "\n"
        assert result.inconsistent_state.endswith("but the health check failed.")

    def test_health_check_success(self, site, environment, make_orchestrator):
        env = dataclasses.replace(environment, health_check_url="https://example.com/")
        checker = Mock(return_value=200)

        result = make_orchestrator(health_checker=checker).push_all(env)

        assert result.status == OperationStatus.SUCCESS
        assert Stage.HEALTH_CHECKED in result.run.completed_stages

    def test_marker_write_failure_is_a_warning(self, site, environment, remote,
                                               make_orchestrator):
        remote.fail_marker_write = True

        result = make_orchestrator().push_all(environment)

        assert result.status == OperationStatus.SUCCESS
        assert Stage.MARKER_UPDATED in result.run.skipped_stages
        assert any("write_remote_commit_id production" in w for w in result.warnings)
        assert remote.marker is None
