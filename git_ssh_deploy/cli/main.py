# git_ssh_deploy/cli/main.py
"""Main CLI entry point for git-ssh-deploy"""

import sys
import logging
from pathlib import Path
from typing import Optional

import click
from rich.logging import RichHandler

from ..__version__ import __version__
from ..constants import APP_NAME, LOG_FORMAT, ExitCode
from .utils.output import console

# Import all commands
from .commands import (
    init_config,
    status,
    push_all,
    push,
    remote_commit_id,
)

CONTEXT_SETTINGS = dict(help_option_names=['-h', '--help'])


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Setup logging configuration

    Args:
        verbose: Enable verbose output (INFO level)
        debug: Enable debug output (DEBUG level)
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    # Configure rich handler
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            RichHandler(
                console=console,
                show_time=debug,
                show_path=debug,
                rich_tracebacks=True,
                tracebacks_suppress=[click]
            )
        ],
        force=True
    )

    # Adjust third-party loggers
    logging.getLogger("urllib3").setLevel(logging.WARNING)


class Context:
    """CLI context object

    ``repo_root`` is filled in by ``require_repository`` for commands
    that need a work tree.
    """

    def __init__(self):
        self.verbose: bool = False
        self.debug: bool = False
        self.repo_root: Optional[Path] = None


@click.group(name=APP_NAME, context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, prog_name=APP_NAME)
@click.option('-v', '--verbose', is_flag=True, help='Enable verbose output')
@click.option('-d', '--debug', is_flag=True, help='Enable debug output')
@click.option('-q', '--quiet', is_flag=True, help='Suppress log output')
@click.pass_context
def cli(ctx, verbose, debug, quiet):
    """git-ssh-deploy - Deploy a Git work tree to a server over SSH

    Only files changed since the last deployment are uploaded. The deployed
    commit ID is stored in a file in the remote directory, and every
    environment is configured in .git/config under git-ssh-deploy.<env>.*
    """
    # Setup logging
    if quiet:
        logging.disable(logging.CRITICAL)
    else:
        logging.disable(logging.NOTSET)
        setup_logging(verbose=verbose, debug=debug)

    ctx.obj = Context()
    ctx.obj.verbose = verbose
    ctx.obj.debug = debug


# Register commands
cli.add_command(init_config.init_config)
cli.add_command(status.status)
cli.add_command(push_all.push_all)
cli.add_command(push.push)
cli.add_command(remote_commit_id.write_remote_commit_id)
cli.add_command(remote_commit_id.catchup)
cli.add_command(remote_commit_id.remove_remote_commit_id)


def main():
    """Main entry point for the CLI application

    This function handles:
    - Keyboard interrupts
    - Unexpected exceptions with proper error display
    """
    try:
        exit_code = cli.main(prog_name=APP_NAME, standalone_mode=False)

    except (KeyboardInterrupt, click.exceptions.Abort):
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(ExitCode.INTERRUPTED)

    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)

    except Exception as e:
        console.print(f"[red]Unexpected error: {e}[/red]")
        if '--debug' in sys.argv or '-d' in sys.argv:
            console.print_exception()
        sys.exit(ExitCode.FAILURE)

    sys.exit(exit_code if isinstance(exit_code, int) else ExitCode.SUCCESS)


if __name__ == "__main__":
    main()
