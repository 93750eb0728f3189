"""CLI decorators"""

from .repository import require_repository

__all__ = [
    'require_repository',
]
