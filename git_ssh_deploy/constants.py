"""Global constants for git-ssh-deploy"""

import re

APP_NAME = "git-ssh-deploy"
LOG_FORMAT = "%(message)s"

# Configuration store
CONFIG_NAMESPACE = "git-ssh-deploy"
GIT_DIR_NAME = ".git"
GIT_CONFIG_FILE = ".git/config"

# Remote marker
MARKER_FILE_NAME = ".git-ssh-deploy-state-commit-id.log"

# Archive naming
ARCHIVE_PREFIX = "git-ssh-deploy"
ARCHIVE_FILE_PATTERN = "{prefix}-{timestamp}.tar.gz"

# Local editor/OS artifacts never shipped inside an archive
ARCHIVE_EXCLUDE_PATTERNS = [
    "._*",
    ".DS_Store",
]

# Configuration keys (lowercase, as git normalizes variable names)
KEY_HOST = "host"
KEY_USER = "user"
KEY_PORT = "port"
KEY_REMOTE_DIRECTORY = "remotedirectory"
KEY_SYNC_ROOT = "syncroot"
KEY_EXCLUDED_PATHS = "excludedpaths"
KEY_INCLUDED_PATHS = "includedpaths"
KEY_PRE_DEPLOY_COMMAND = "predeploycommand"
KEY_POST_DEPLOY_COMMAND = "postdeploycommand"
KEY_HEALTH_CHECK_URL = "healthcheckurl"

CONFIG_KEYS = [
    KEY_HOST,
    KEY_USER,
    KEY_PORT,
    KEY_REMOTE_DIRECTORY,
    KEY_PRE_DEPLOY_COMMAND,
    KEY_POST_DEPLOY_COMMAND,
    KEY_HEALTH_CHECK_URL,
    KEY_SYNC_ROOT,
    KEY_EXCLUDED_PATHS,
    KEY_INCLUDED_PATHS,
]

# Default configuration values
DEFAULT_PORT = "22"
CONFIG_DEFAULTS = {
    KEY_PORT: DEFAULT_PORT,
    KEY_PRE_DEPLOY_COMMAND: "",
    KEY_POST_DEPLOY_COMMAND: "",
    KEY_HEALTH_CHECK_URL: "",
    KEY_SYNC_ROOT: "",
    KEY_EXCLUDED_PATHS: "",
    KEY_INCLUDED_PATHS: "",
}
LIST_SEPARATOR = ","

DEFAULT_CONFIG_TEMPLATE = """
[{namespace} "{name}"]
    host =
    user =
    port = 22
    # Directory on the remote server where the files will be uploaded. No trailing slash.
    remotedirectory = /var/www/html
    # Command to run on the remote server before deploying the files. Can be empty. Run multiple commands using "&&" for example.
    predeploycommand =
    # Command to run on the remote server after deploying the files. Can be empty. Run multiple commands using "&&" for example.
    postdeploycommand =
    # URL to check after deployment. Can be empty. Wrap the URL in double quotes if it contains special characters.
    healthcheckurl =
    # Local directory to sync with the remote server. If empty, the root of the repository is used. No trailing slash.
    syncroot =
    # Comma-separated list of paths to exclude from upload. Paths can be directories or files. Paths must be relative to syncroot if syncroot is set. Otherwise repository root is used. No starting or trailing slashes. No spaces after commas.
    excludedpaths =
    # Comma-separated list of paths to include in every upload. Paths can be directories or files. Paths must be relative to syncroot if syncroot is set. Otherwise repository root is used. No starting or trailing slashes. No spaces after commas. Includes are run after excludes.
    includedpaths =
"""

# Remote transport
DEFAULT_COMMAND_TIMEOUT = 300  # seconds
DEFAULT_CONNECT_TIMEOUT = 10  # seconds
DEFAULT_HEALTH_CHECK_TIMEOUT = 30  # seconds
CONNECTION_CHECK_OUTPUT = "Connection successful."

# Exit status of the remote empty-directory check meaning "stop walking up"
PRUNE_STOP_EXIT_CODE = 2

# Validation patterns
ENVIRONMENT_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
REVISION_ID_PATTERN = re.compile(r"^[0-9a-f]{40}$")
HOST_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")
USER_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
PORT_PATTERN = re.compile(r"^[0-9]+$")
PATH_PATTERN = re.compile(r"^[A-Za-z0-9_./-]+$")
HEALTH_CHECK_URL_PATTERN = re.compile(r"^https?://[A-Za-z0-9_.:/?&=%-]+$")


# Error codes
class ErrorCode:
    CONFIG_ERROR = "GSD001"
    VALIDATION_FAILED = "GSD002"
    DIRTY_REPOSITORY = "GSD003"
    GIT_COMMAND_FAILED = "GSD004"
    CONNECTIVITY_FAILED = "GSD005"
    TRANSPORT_FAILED = "GSD006"
    UNKNOWN_REVISION = "GSD007"
    MARKER_NOT_SET = "GSD008"
    WRITE_VERIFICATION_FAILED = "GSD009"
    REMOVAL_VERIFICATION_FAILED = "GSD010"
    ARCHIVE_FAILED = "GSD011"
    TRANSFER_FAILED = "GSD012"
    EXTRACTION_FAILED = "GSD013"
    HOOK_FAILED = "GSD014"
    HEALTH_CHECK_FAILED = "GSD015"


# Process exit codes
class ExitCode:
    SUCCESS = 0
    FAILURE = 1
    TRANSFER_FAILED = 2
    PRE_DEPLOY_HOOK_FAILED = 3
    POST_DEPLOY_HOOK_FAILED = 4
    HEALTH_CHECK_FAILED = 5
    INTERRUPTED = 130


# Display constants
EMOJI_SUCCESS = "✓"
EMOJI_ERROR = "✗"
EMOJI_WARNING = "⚠"
EMOJI_INFO = "ℹ"
EMOJI_ARROW = "→"
EMOJI_ROCKET = "🚀"

# Messages templates
MSG_NO_CHANGES = f"{EMOJI_INFO} No changes to deploy."
MSG_DEPLOY_SUCCESS = f"{EMOJI_SUCCESS} Deployment to {{environment}} completed."
MSG_MARKER_SET = f"{EMOJI_SUCCESS} Remote commit ID set to {{revision}}."
MSG_MARKER_REMOVED = f"{EMOJI_SUCCESS} Remote commit ID log file removed from file {{path}}."
MSG_CONFIG_ADDED = f"{EMOJI_SUCCESS} Default config added to {{path}}."
