"""status command implementation"""

import click

from ..decorators import require_repository
from ..utils.output import format_json, format_status_report, format_yaml, print_error
from ...api import Deployer
from ...api.exceptions import GitSshDeployError


@click.command()
@click.argument('environment')
@click.option('--format', 'output_format', type=click.Choice(['text', 'json', 'yaml']),
              default='text', help='Output format')
@click.pass_context
@require_repository
def status(ctx, environment, output_format):
    """Show state and connection information for ENVIRONMENT

    Nothing is changed locally or remotely.

    Examples:

        git-ssh-deploy status production

        git-ssh-deploy status production --format json
    """
    try:
        report = Deployer(ctx.obj.repo_root).status(environment)
    except GitSshDeployError as e:
        print_error(str(e))
        ctx.exit(e.exit_code)

    if output_format == 'json':
        format_json(report.to_dict())
    elif output_format == 'yaml':
        format_yaml(report.to_dict())
    else:
        format_status_report(report)
