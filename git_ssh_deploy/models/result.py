"""Operation result models"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from .changeset import ChangeSet
from .config import EnvironmentConfig
from ..constants import ExitCode


class OperationStatus(Enum):
    """Operation status"""
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"
    IN_PROGRESS = "in_progress"


class Stage(Enum):
    """Deployment pipeline stages, in execution order"""
    IDLE = "idle"
    CONNECTIVITY_CHECKED = "connectivity_checked"
    CHANGESET_COMPUTED = "changeset_computed"
    BUNDLED = "bundled"
    PRE_HOOK_RUN = "pre_hook_run"
    TRANSFERRED = "transferred"
    APPLIED = "applied"
    PRUNED = "pruned"
    MARKER_UPDATED = "marker_updated"
    POST_HOOK_RUN = "post_hook_run"
    HEALTH_CHECKED = "health_checked"
    DONE = "done"
    ABORTED = "aborted"

    @property
    def order(self) -> int:
        return _STAGE_ORDER.index(self)


_STAGE_ORDER = list(Stage)


class DeployMode(Enum):
    """How the baseline is chosen"""
    PUSH_ALL = "push_all"
    PUSH = "push"


@dataclass
class DeployRun:
    """Execution context of one deployment

    Threaded through every pipeline stage; never persisted.
    """

    environment: EnvironmentConfig
    mode: DeployMode
    source_revision: Optional[str] = None
    baseline_revision: Optional[str] = None
    change_set: Optional[ChangeSet] = None
    stage: Stage = Stage.IDLE
    completed_stages: List[Stage] = field(default_factory=list)
    skipped_stages: List[Stage] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    archive_path: Optional[Path] = None
    remote_archive_path: Optional[str] = None

    def advance(self, stage: Stage, skipped: bool = False) -> None:
        """Move the run forward to ``stage``

        Raises:
            ValueError: If ``stage`` is not after the current stage
        """
        if self.stage == Stage.ABORTED:
            raise ValueError("Cannot advance an aborted run")
        if stage.order <= self.stage.order:
            raise ValueError(
                f"Cannot move from {self.stage.value} back to {stage.value}"
            )
        self.stage = stage
        if skipped:
            self.skipped_stages.append(stage)
        else:
            self.completed_stages.append(stage)

    def abort(self) -> None:
        """Mark the run as aborted"""
        self.stage = Stage.ABORTED

    def add_warning(self, message: str) -> None:
        """Add a warning"""
        self.warnings.append(message)

    def has_completed(self, stage: Stage) -> bool:
        """Check if ``stage`` actually ran (not skipped)"""
        return stage in self.completed_stages


@dataclass
class DeployResult:
    """Result of a push_all/push operation"""

    status: OperationStatus
    run: DeployRun
    message: str = ""
    error: Optional[Exception] = None
    failed_stage: Optional[Stage] = None
    inconsistent_state: Optional[str] = None
    exit_code: int = ExitCode.SUCCESS
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None

    @property
    def is_success(self) -> bool:
        """Check if deployment succeeded or had nothing to do"""
        return self.status in (OperationStatus.SUCCESS, OperationStatus.SKIPPED)

    @property
    def warnings(self) -> List[str]:
        return self.run.warnings

    @property
    def duration(self) -> Optional[float]:
        """Get operation duration in seconds"""
        if self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    def complete(self, status: Optional[OperationStatus] = None) -> None:
        """Mark operation as complete"""
        self.end_time = datetime.now()
        if status:
            self.status = status

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = {
            "status": self.status.value,
            "environment": self.run.environment.name,
            "mode": self.run.mode.value,
            "source_revision": self.run.source_revision,
            "baseline_revision": self.run.baseline_revision,
            "stage": self.run.stage.value,
            "completed_stages": [s.value for s in self.run.completed_stages],
            "skipped_stages": [s.value for s in self.run.skipped_stages],
            "warnings": self.run.warnings,
            "exit_code": self.exit_code,
            "duration": self.duration,
        }

        if self.run.change_set is not None:
            data["change_set"] = self.run.change_set.to_dict()
        if self.error:
            data["error"] = str(self.error)
            data["error_code"] = getattr(self.error, "error_code", None)
        if self.failed_stage:
            data["failed_stage"] = self.failed_stage.value
        if self.inconsistent_state:
            data["inconsistent_state"] = self.inconsistent_state

        return data


@dataclass
class StatusReport:
    """Read-only diagnostics for one environment"""

    environment: str
    ssh_command: str
    local_path: str
    remote_directory: str
    branch: Optional[str] = None
    head_revision: Optional[str] = None
    is_dirty: bool = False
    can_connect: bool = False
    connection_error: Optional[str] = None
    remote_revision: Optional[str] = None
    remote_revision_known: bool = False
    change_set: Optional[ChangeSet] = None
    change_set_unavailable_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = {
            "config": {
                "environment": self.environment,
                "ssh_command": self.ssh_command,
                "path_mapping": f"{self.local_path} -> {self.remote_directory}",
            },
            "local": {
                "branch": self.branch,
                "head": self.head_revision,
                "has_uncommitted_changes": self.is_dirty,
            },
            "remote": {
                "can_connect": self.can_connect,
            },
        }

        if self.can_connect:
            data["remote"]["commit_id"] = self.remote_revision
            if self.remote_revision:
                data["remote"]["commit_id_found_locally"] = self.remote_revision_known
            if self.change_set is not None:
                data["changes"] = self.change_set.to_dict()
            else:
                data["changes"] = None
                data["changes_unavailable_reason"] = self.change_set_unavailable_reason
        elif self.connection_error:
            data["remote"]["error"] = self.connection_error

        return data
