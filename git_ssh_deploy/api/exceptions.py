"""Exception definitions for git-ssh-deploy API"""

from typing import Optional

from ..constants import ErrorCode, ExitCode


class GitSshDeployError(Exception):
    """Base exception for git-ssh-deploy"""

    exit_code = ExitCode.FAILURE

    def __init__(self, message: str, error_code: str = None):
        super().__init__(message)
        self.error_code = error_code


class ConfigError(GitSshDeployError):
    """Configuration store error"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.CONFIG_ERROR)


class ValidationError(GitSshDeployError):
    """Malformed or unsafe configuration value"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.VALIDATION_FAILED)


class DirtyRepositoryError(GitSshDeployError):
    """Local repository has uncommitted changes"""

    def __init__(self, message: str = None):
        if message is None:
            message = (
                "The local repository has uncommitted changes. "
                "Please commit or stash them before proceeding."
            )
        super().__init__(message, ErrorCode.DIRTY_REPOSITORY)


class GitError(GitSshDeployError):
    """Git command failed"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.GIT_COMMAND_FAILED)


class ConnectivityError(GitSshDeployError):
    """Remote host or remote directory unreachable or unwritable"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.CONNECTIVITY_FAILED)


class TransportError(GitSshDeployError):
    """Remote call could not be carried out (timeout, missing ssh binary)"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.TRANSPORT_FAILED)


class UnknownRevisionError(GitSshDeployError):
    """Revision not present in the local history"""

    def __init__(self, revision: str, message: str = None):
        if message is None:
            message = f"Commit ID {revision} does not exist locally."
        super().__init__(message, ErrorCode.UNKNOWN_REVISION)
        self.revision = revision


class MarkerNotSetError(GitSshDeployError):
    """No valid remote marker exists"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.MARKER_NOT_SET)


class WriteVerificationError(GitSshDeployError):
    """Remote marker readback differs from what was written"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.WRITE_VERIFICATION_FAILED)


class RemovalVerificationError(GitSshDeployError):
    """Remote marker still readable after removal"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.REMOVAL_VERIFICATION_FAILED)


class ArchiveError(GitSshDeployError):
    """Archive creation failed"""

    exit_code = ExitCode.TRANSFER_FAILED

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.ARCHIVE_FAILED)


class TransferError(GitSshDeployError):
    """Archive copy to the remote host failed"""

    exit_code = ExitCode.TRANSFER_FAILED

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.TRANSFER_FAILED)


class ExtractionError(GitSshDeployError):
    """Remote archive extraction failed"""

    exit_code = ExitCode.TRANSFER_FAILED

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.EXTRACTION_FAILED)


class HookError(GitSshDeployError):
    """Pre- or post-deploy command exited non-zero"""

    def __init__(self, message: str, hook: str, remote_exit_code: Optional[int] = None):
        super().__init__(message, ErrorCode.HOOK_FAILED)
        self.hook = hook
        self.remote_exit_code = remote_exit_code
        if hook == "post":
            self.exit_code = ExitCode.POST_DEPLOY_HOOK_FAILED
        else:
            self.exit_code = ExitCode.PRE_DEPLOY_HOOK_FAILED


class HealthCheckError(GitSshDeployError):
    """Health check URL did not answer with a 2xx status"""

    exit_code = ExitCode.HEALTH_CHECK_FAILED

    def __init__(self, url: str, message: str):
        super().__init__(message, ErrorCode.HEALTH_CHECK_FAILED)
        self.url = url
