"""Compression module for git-ssh-deploy"""

from .tar_processor import TarProcessor, archive_name, is_excluded_artifact

__all__ = [
    "TarProcessor",
    "archive_name",
    "is_excluded_artifact",
]
