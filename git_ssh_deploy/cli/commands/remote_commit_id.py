"""Remote commit ID commands: write_remote_commit_id, catchup, remove_remote_commit_id"""

from typing import Optional

import click

from ..decorators import require_repository
from ..utils.output import print_error, print_success
from ...api import Deployer
from ...api.exceptions import GitSshDeployError
from ...constants import MSG_MARKER_REMOVED, MSG_MARKER_SET


def _write(ctx: click.Context, environment: str, revision: Optional[str]) -> None:
    try:
        written = Deployer(ctx.obj.repo_root).write_marker(environment, revision)
    except GitSshDeployError as e:
        print_error(str(e))
        ctx.exit(e.exit_code)

    print_success(MSG_MARKER_SET.format(revision=written))


@click.command(name='write_remote_commit_id')
@click.argument('environment')
@click.argument('revision', required=False)
@click.pass_context
@require_repository
def write_remote_commit_id(ctx, environment, revision):
    """Set remote commit ID without pushing any files

    REVISION must be a complete 40-character commit ID that exists
    locally. If omitted, the HEAD commit ID is used.

    Examples:

        git-ssh-deploy write_remote_commit_id production 3f1c...e9a0
    """
    _write(ctx, environment, revision)


@click.command(name='catchup')
@click.argument('environment')
@click.argument('revision', required=False)
@click.pass_context
@require_repository
def catchup(ctx, environment, revision):
    """Alias for write_remote_commit_id

    Without REVISION this states that the server is up to date with the
    local HEAD.
    """
    _write(ctx, environment, revision)


@click.command(name='remove_remote_commit_id')
@click.argument('environment')
@click.pass_context
@require_repository
def remove_remote_commit_id(ctx, environment):
    """Remove remote commit ID log file

    The next push for ENVIRONMENT will then require push_all or
    write_remote_commit_id first.
    """
    try:
        marker_path = Deployer(ctx.obj.repo_root).remove_marker(environment)
    except GitSshDeployError as e:
        print_error(str(e))
        ctx.exit(e.exit_code)

    print_success(MSG_MARKER_REMOVED.format(path=marker_path))
