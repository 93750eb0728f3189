"""CLI utility functions"""

from .output import (
    console,
    format_deploy_result,
    format_status_report,
    format_json,
    format_yaml,
    print_error,
    print_stage,
    print_success,
    print_warning,
)

__all__ = [
    'console',
    'format_deploy_result',
    'format_status_report',
    'format_json',
    'format_yaml',
    'print_error',
    'print_stage',
    'print_success',
    'print_warning',
]
