"""init_config command implementation"""

import click

from ..decorators import require_repository
from ..utils.output import print_error, print_success
from ...api import Deployer
from ...api.exceptions import GitSshDeployError
from ...constants import MSG_CONFIG_ADDED


@click.command(name='init_config')
@click.argument('environment')
@click.pass_context
@require_repository
def init_config(ctx, environment):
    """Add default config block to .git/config

    Appends a commented git-ssh-deploy block for ENVIRONMENT. Fill in
    host, user and remotedirectory before deploying.

    Examples:

        git-ssh-deploy init_config production
    """
    try:
        config_path = Deployer(ctx.obj.repo_root).init_config(environment)
    except GitSshDeployError as e:
        print_error(str(e))
        ctx.exit(e.exit_code)

    print_success(MSG_CONFIG_ADDED.format(path=config_path))
