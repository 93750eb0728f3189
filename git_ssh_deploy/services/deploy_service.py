"""Deploy service: the incremental push pipeline"""

import logging
import posixpath
import tempfile
from pathlib import Path
from typing import Callable, Optional

from ..api.exceptions import (
    ConnectivityError,
    DirtyRepositoryError,
    ExtractionError,
    GitSshDeployError,
    HookError,
    MarkerNotSetError,
    TransportError,
    UnknownRevisionError,
)
from ..core.changeset_resolver import ChangeSetResolver
from ..core.command_builder import RemoteCommandBuilder
from ..core.compression import TarProcessor
from ..core.remote_state import ExecutorFactory, RemoteStateTracker
from ..core.validation_engine import InputValidator
from ..models import (
    DeployMode,
    DeployResult,
    DeployRun,
    EnvironmentConfig,
    OperationStatus,
    Stage,
)
from ..remote import RemoteExecutor, SSHExecutor
from ..utils.file_utils import format_size, remove_file_quietly
from ..utils.git_utils import GitRepository
from ..utils.http_utils import check_health
from ..constants import (
    CONNECTION_CHECK_OUTPUT,
    PRUNE_STOP_EXIT_CODE,
    MSG_DEPLOY_SUCCESS,
    MSG_NO_CHANGES,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[Stage, str], None]


def verify_connectivity(environment: EnvironmentConfig, executor: RemoteExecutor) -> None:
    """
    Check that the host answers and the remote directory is a writable directory

    Args:
        environment: Validated environment
        executor: Remote executor for the environment

    Raises:
        ConnectivityError: On the first failing check
    """
    builder = RemoteCommandBuilder(environment)

    try:
        check = executor.run(builder.connection_check())
    except TransportError as e:
        raise ConnectivityError(f"Could not connect to the server: {e}") from e

    if not check.ok or CONNECTION_CHECK_OUTPUT not in check.stdout:
        raise ConnectivityError(
            "Could not connect to the server. Please make sure the host, port and user "
            f"are correct and that calling '{environment.ssh_command}' works and host "
            "identification is established."
        )

    try:
        if not executor.run(builder.directory_exists()).ok:
            raise ConnectivityError(
                f"Remote directory {environment.remote_root} does not exist."
            )
        if not executor.run(builder.directory_writable()).ok:
            raise ConnectivityError(
                f"Remote directory {environment.remote_root} is not writable "
                f"by user {environment.user}."
            )
    except TransportError as e:
        raise ConnectivityError(f"Could not inspect remote directory: {e}") from e


class DeploymentOrchestrator:
    """Run push_all/push deployments for one repository

    Stages run strictly in order. A stage either advances the run or raises;
    the first raised error aborts the run and nothing already applied on the
    remote side is undone.
    """

    def __init__(self,
                 repo_root: Path,
                 repository: Optional[GitRepository] = None,
                 executor_factory: Optional[ExecutorFactory] = None,
                 archiver: Optional[TarProcessor] = None,
                 health_checker: Callable[[str], int] = check_health,
                 progress: Optional[ProgressCallback] = None,
                 work_dir: Optional[Path] = None):
        """Initialize orchestrator

        Args:
            repo_root: Repository root directory
            repository: Git collaborator
            executor_factory: Creates a remote executor per environment
            archiver: Archive builder
            health_checker: Callable raising HealthCheckError for a failing URL
            progress: Optional callback receiving (stage, message) updates
            work_dir: Directory for local archives (defaults to the system temp dir)
        """
        self.repo_root = Path(repo_root)
        self.repository = repository or GitRepository(self.repo_root)
        self.executor_factory = executor_factory or SSHExecutor
        self.archiver = archiver or TarProcessor()
        self.health_checker = health_checker
        self.progress = progress
        self.work_dir = Path(work_dir) if work_dir else Path(tempfile.gettempdir())

        self.validator = InputValidator(self.repo_root)
        self.resolver = ChangeSetResolver(self.repository, self.repo_root)
        self.state_tracker = RemoteStateTracker(self.repository, self.executor_factory)

    def push_all(self, environment: EnvironmentConfig) -> DeployResult:
        """Upload every tracked file under the sync root and set the remote commit ID

        Remote files that are not tracked locally are left alone.
        """
        return self._deploy(environment, DeployMode.PUSH_ALL)

    def push(self, environment: EnvironmentConfig) -> DeployResult:
        """Deploy the changes between the remote commit ID and HEAD"""
        return self._deploy(environment, DeployMode.PUSH)

    def _report(self, stage: Stage, message: str) -> None:
        logger.info(message)
        if self.progress:
            self.progress(stage, message)

    def _warn(self, run: DeployRun, message: str) -> None:
        logger.warning(message)
        run.add_warning(message)

    def _deploy(self, environment: EnvironmentConfig, mode: DeployMode) -> DeployResult:
        run = DeployRun(environment=environment, mode=mode)
        result = DeployResult(status=OperationStatus.IN_PROGRESS, run=run)
        attempting = Stage.IDLE

        try:
            self._guard(run)
            executor = self.executor_factory(environment)

            attempting = Stage.CONNECTIVITY_CHECKED
            self._check_connectivity(run, executor)

            attempting = Stage.CHANGESET_COMPUTED
            self._compute_change_set(run)

            if run.change_set.is_empty:
                run.advance(Stage.DONE)
                self._report(Stage.DONE, MSG_NO_CHANGES)
                result.message = MSG_NO_CHANGES
                result.complete(OperationStatus.SKIPPED)
                return result

            self._report(Stage.CHANGESET_COMPUTED, f"Deploying to {environment.name}.")

            steps = [
                (Stage.BUNDLED, self._bundle),
                (Stage.PRE_HOOK_RUN, self._run_pre_hook),
                (Stage.TRANSFERRED, self._transfer),
                (Stage.APPLIED, self._apply),
                (Stage.PRUNED, self._prune),
                (Stage.MARKER_UPDATED, self._update_marker),
                (Stage.POST_HOOK_RUN, self._run_post_hook),
                (Stage.HEALTH_CHECKED, self._check_health),
            ]
            for stage, step in steps:
                attempting = stage
                step(run, executor)

            run.advance(Stage.DONE)

        except GitSshDeployError as e:
            run.abort()
            result.error = e
            result.failed_stage = attempting
            result.exit_code = e.exit_code
            result.message = str(e)
            result.inconsistent_state = self._describe_inconsistency(run, attempting)
            logger.error(f"Deployment to {environment.name} aborted at {attempting.value}: {e}")
            result.complete(OperationStatus.FAILED)
            return result

        result.message = MSG_DEPLOY_SUCCESS.format(environment=environment.name)
        self._report(Stage.DONE, result.message)
        result.complete(OperationStatus.SUCCESS)
        return result

    def _guard(self, run: DeployRun) -> None:
        environment = run.environment
        self.validator.validate(environment)

        if self.repository.is_dirty():
            raise DirtyRepositoryError()

        run.source_revision = self.repository.current_revision()

        if run.mode == DeployMode.PUSH:
            baseline = self.state_tracker.read(environment)
            if baseline is None:
                raise MarkerNotSetError(
                    "Remote commit ID not set. Please run 'push_all' to start from scratch "
                    "or manually set the remote id using 'write_remote_commit_id' first."
                )
            if not self.repository.revision_exists(baseline):
                raise UnknownRevisionError(
                    baseline, f"Remote commit ID {baseline} not found locally."
                )
            run.baseline_revision = baseline

    def _check_connectivity(self, run: DeployRun, executor: RemoteExecutor) -> None:
        verify_connectivity(run.environment, executor)
        run.advance(Stage.CONNECTIVITY_CHECKED)

    def _compute_change_set(self, run: DeployRun) -> None:
        run.change_set = self.resolver.resolve_for(
            run.environment, run.baseline_revision, target=run.source_revision
        )
        run.advance(Stage.CHANGESET_COMPUTED)

        uploads, removals = run.change_set.counts
        logger.debug(f"Files to upload: {list(run.change_set.to_upload)}")
        logger.debug(f"Files to remove: {list(run.change_set.to_remove)}")
        self._report(
            Stage.CHANGESET_COMPUTED,
            f"{uploads} file(s) to upload, {removals} file(s) to remove."
        )

    def _bundle(self, run: DeployRun, executor: RemoteExecutor) -> None:
        change_set = run.change_set
        if not change_set.to_upload:
            run.advance(Stage.BUNDLED, skipped=True)
            return

        prefix = run.environment.sync_prefix
        members = [path[len(prefix):] for path in change_set.to_upload]
        base_dir = self.repo_root / prefix if prefix else self.repo_root

        run.archive_path = self.archiver.create(base_dir, members, self.work_dir)
        packed = len(self.archiver.list_members(run.archive_path))
        run.advance(Stage.BUNDLED)
        self._report(
            Stage.BUNDLED,
            f"Created tar file ({run.archive_path.name}) for added/changed/renamed "
            f"{packed} file(s)."
        )

    def _run_hook(self, run: DeployRun, executor: RemoteExecutor, hook: str, command: str) -> None:
        label = "Pre-deploy" if hook == "pre" else "Post-deploy"
        stage = Stage.PRE_HOOK_RUN if hook == "pre" else Stage.POST_HOOK_RUN

        if not command:
            run.advance(stage, skipped=True)
            return

        self._report(stage, f"Executing {label.lower()} command.")
        try:
            result = executor.run(command)
        except TransportError as e:
            raise HookError(f"{label} command failed: {e}", hook) from e

        if result.stdout.strip():
            logger.info(result.stdout.rstrip())
        if not result.ok:
            if result.stderr.strip():
                logger.error(result.stderr.rstrip())
            raise HookError(
                f"{label} command failed with exit code {result.exit_code}.",
                hook,
                result.exit_code,
            )

        run.advance(stage)
        self._report(stage, f"{label} command completed.")

    def _run_pre_hook(self, run: DeployRun, executor: RemoteExecutor) -> None:
        self._run_hook(run, executor, "pre", run.environment.pre_deploy_command)

    def _run_post_hook(self, run: DeployRun, executor: RemoteExecutor) -> None:
        self._run_hook(run, executor, "post", run.environment.post_deploy_command)

    def _transfer(self, run: DeployRun, executor: RemoteExecutor) -> None:
        if run.archive_path is None:
            run.advance(Stage.TRANSFERRED, skipped=True)
            return

        archive = run.archive_path
        remote_archive = posixpath.join(run.environment.remote_root, archive.name)
        self._report(
            Stage.TRANSFERRED,
            f"Uploading tar-file to remote server. Size: {format_size(archive.stat().st_size)}."
        )

        executor.copy_file(archive, remote_archive)
        run.remote_archive_path = remote_archive
        run.advance(Stage.TRANSFERRED)

        if remove_file_quietly(archive):
            run.archive_path = None
        else:
            self._warn(run, f"Could not remove local tar-file {archive}. Please do that manually.")

    def _apply(self, run: DeployRun, executor: RemoteExecutor) -> None:
        if run.remote_archive_path is None:
            run.advance(Stage.APPLIED, skipped=True)
            return

        builder = RemoteCommandBuilder(run.environment)
        command = self.archiver.extract_command(builder, run.remote_archive_path)
        self._report(Stage.APPLIED, "Extracting tar-file on remote server and removing it.")

        try:
            result = executor.run(command)
        except TransportError as e:
            raise ExtractionError(f"Could not extract tar-file on remote server: {e}") from e

        if not result.ok:
            raise ExtractionError(
                "Could not extract and remove tar-file on remote server: "
                f"{result.stderr.strip() or f'exit code {result.exit_code}'}"
            )
        run.advance(Stage.APPLIED)

    def _prune(self, run: DeployRun, executor: RemoteExecutor) -> None:
        to_remove = run.change_set.to_remove
        if not to_remove:
            run.advance(Stage.PRUNED, skipped=True)
            return

        builder = RemoteCommandBuilder(run.environment)
        self._report(
            Stage.PRUNED,
            f"Removing {len(to_remove)} file(s) that were deleted or renamed locally."
        )

        for path in to_remove:
            try:
                remote_path = builder.remote_path_for(path)
            except ValueError as e:
                self._warn(run, str(e))
                continue

            try:
                removed = executor.run(builder.remove_file(remote_path)).ok
            except TransportError as e:
                logger.debug(f"rm -f {remote_path}: {e}")
                removed = False
            if not removed:
                self._warn(
                    run,
                    f"Could not remove file {remote_path} on remote server. "
                    "Please do that manually."
                )

            self._remove_empty_parents(run, executor, builder, remote_path)

        run.advance(Stage.PRUNED)

    def _remove_empty_parents(self,
                              run: DeployRun,
                              executor: RemoteExecutor,
                              builder: RemoteCommandBuilder,
                              remote_path: str) -> None:
        """Remove now-empty parent directories, stopping below the remote root"""
        root = builder.remote_root
        directory = posixpath.dirname(remote_path)

        while directory not in (root, "/") and directory.startswith(root.rstrip("/") + "/"):
            try:
                result = executor.run(builder.remove_directory_if_empty(directory))
            except TransportError as e:
                self._warn(run, f"Could not check directory {directory}: {e}")
                return

            if result.exit_code == PRUNE_STOP_EXIT_CODE:
                return
            if not result.ok:
                self._warn(run, f"Could not remove empty directory {directory}.")
                return

            logger.debug(f"Removed empty directory {directory}")
            directory = posixpath.dirname(directory)

    def _update_marker(self, run: DeployRun, executor: RemoteExecutor) -> None:
        self._report(Stage.MARKER_UPDATED, "Writing remote commit ID.")
        try:
            self.state_tracker.write(run.environment, run.source_revision)
        except GitSshDeployError as e:
            self._warn(
                run,
                f"Could not write remote commit ID: {e} Please do that manually "
                f"(write_remote_commit_id {run.environment.name} {run.source_revision})."
            )
            run.advance(Stage.MARKER_UPDATED, skipped=True)
            return
        run.advance(Stage.MARKER_UPDATED)

    def _check_health(self, run: DeployRun, executor: RemoteExecutor) -> None:
        url = run.environment.health_check_url
        if not url:
            run.advance(Stage.HEALTH_CHECKED, skipped=True)
            return

        self._report(Stage.HEALTH_CHECKED, f"Performing health check. URL: {url}")
        status_code = self.health_checker(url)
        run.advance(Stage.HEALTH_CHECKED)
        self._report(Stage.HEALTH_CHECKED, f"Health check passed: {url} answered {status_code}.")

    def _describe_inconsistency(self, run: DeployRun, failed_stage: Stage) -> str:
        """Describe what is left inconsistent after an abort at ``failed_stage``"""
        environment = run.environment
        marker = run.baseline_revision or "not set"

        if failed_stage.order <= Stage.BUNDLED.order:
            return "Nothing was changed on the remote server."

        if failed_stage == Stage.PRE_HOOK_RUN:
            return (
                "No files were transferred, but the pre-deploy command may have "
                "partially run on the remote server."
            )

        if failed_stage == Stage.TRANSFERRED:
            state = "No remote files were changed"
            if run.archive_path is not None:
                state += f"; the local tar-file was kept at {run.archive_path}"
            return state + "."

        if failed_stage == Stage.APPLIED:
            return (
                f"Remote files in {environment.remote_root} may be partially updated "
                f"from {run.remote_archive_path}, which may still exist. The remote "
                f"commit ID still reads {marker}."
            )

        if run.has_completed(Stage.MARKER_UPDATED):
            marker_state = f"the remote commit ID was set to {run.source_revision}"
        else:
            marker_state = f"the remote commit ID still reads {marker}"

        if failed_stage == Stage.POST_HOOK_RUN:
            return (
                f"Files are deployed and {marker_state}, but the post-deploy command "
                "failed. The deployment is not finalized."
            )

        return f"Files are deployed and {marker_state}, but the health check failed."
