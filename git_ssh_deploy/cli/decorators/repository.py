"""Repository context decorator for CLI commands"""

from functools import wraps
from typing import Callable

import click

from ..utils.output import print_error
from ...utils.git_utils import find_repository_root


def require_repository(func: Callable) -> Callable:
    """Decorator that ensures command runs inside a Git work tree

    The repository root is stored on the CLI context as ``repo_root``.

    Args:
        func: Command function to decorate

    Returns:
        Decorated function
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        ctx = click.get_current_context()

        repo_root = find_repository_root()
        if repo_root is None:
            print_error("This command must be run inside a Git repository.")
            ctx.exit(1)

        ctx.obj.repo_root = repo_root
        return func(*args, **kwargs)

    return wrapper
