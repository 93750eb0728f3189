"""push_all command implementation"""

import click

from .push import run_deploy
from ..decorators import require_repository


@click.command(name='push_all')
@click.argument('environment')
@click.pass_context
@require_repository
def push_all(ctx, environment):
    """Upload all tracked files from scratch and set remote commit ID

    Files on the server that are not tracked locally are not removed.

    Examples:

        git-ssh-deploy push_all production
    """
    run_deploy(ctx, environment, full=True)
