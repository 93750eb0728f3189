"""push command implementation"""

import click

from ..decorators import require_repository
from ..utils.output import format_deploy_result, print_error, print_stage
from ...api import Deployer
from ...api.exceptions import GitSshDeployError


def run_deploy(ctx: click.Context, environment: str, full: bool) -> None:
    """Run push/push_all and exit with the result's exit code on failure"""
    try:
        deployer = Deployer(ctx.obj.repo_root, progress=print_stage)
        if full:
            result = deployer.push_all(environment)
        else:
            result = deployer.push(environment)
    except GitSshDeployError as e:
        print_error(str(e))
        ctx.exit(e.exit_code)

    format_deploy_result(result)

    if not result.is_success:
        ctx.exit(result.exit_code)


@click.command()
@click.argument('environment')
@click.pass_context
@require_repository
def push(ctx, environment):
    """Push changes based on Git diff and update remote commit ID

    Uploads files added or changed since the remote commit ID, removes
    files deleted or renamed away, then records HEAD as the new remote
    commit ID. Requires a clean work tree and a remote commit ID that
    exists locally.

    Examples:

        git-ssh-deploy push production
    """
    run_deploy(ctx, environment, full=False)
