"""File operation utilities"""

import os
from pathlib import Path
from typing import List


def list_files_under(directory: Path, relative_to: Path) -> List[str]:
    """
    List every regular file below a directory

    Args:
        directory: Directory to walk
        relative_to: Base the returned paths are relative to

    Returns:
        Sorted POSIX paths relative to ``relative_to``
    """
    files = []

    for dirpath, _dirnames, filenames in os.walk(directory):
        for filename in filenames:
            full_path = Path(dirpath) / filename
            if full_path.is_file():
                files.append(full_path.relative_to(relative_to).as_posix())

    return sorted(files)


def remove_file_quietly(file_path: Path) -> bool:
    """
    Remove a file, reporting instead of raising

    Args:
        file_path: File to remove

    Returns:
        True if the file is gone afterwards
    """
    try:
        file_path.unlink()
    except FileNotFoundError:
        return True
    except OSError:
        return False
    return True


def format_size(size: float) -> str:
    """
    Format file size in human-readable format

    Args:
        size: Size in bytes

    Returns:
        Formatted size string
    """
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0
    return f"{size:.2f} PB"
