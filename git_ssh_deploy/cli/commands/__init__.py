# git_ssh_deploy/cli/commands/__init__.py
"""CLI commands"""

from . import init_config
from . import status
from . import push_all
from . import push
from . import remote_commit_id

__all__ = [
    "init_config",
    "status",
    "push_all",
    "push",
    "remote_commit_id",
]
