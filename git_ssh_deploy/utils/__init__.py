# git_ssh_deploy/utils/__init__.py
"""Utility functions for git-ssh-deploy"""

from .file_utils import (
    list_files_under,
    remove_file_quietly,
    format_size,
)

from .git_utils import (
    GitRepository,
    find_repository_root,
    parse_name_status,
)

from .http_utils import check_health

__all__ = [
    # File utilities
    'list_files_under',
    'remove_file_quietly',
    'format_size',

    # Git utilities
    'GitRepository',
    'find_repository_root',
    'parse_name_status',

    # HTTP utilities
    'check_health',
]
