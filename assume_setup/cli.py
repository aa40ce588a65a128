#!/usr/bin/env python3
"""
Assume Setup CLI
Keeps assume-role shortcuts per AWS profile and copies temporary credentials to the clipboard
"""

import functools
import logging
import sys
from typing import List, Optional

import click
from click.core import ParameterSource
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from assume_setup import clipboard, config_store, constants, prompts
from assume_setup.sts_client import AuthError, RoleAssumptionClient

console = Console(soft_wrap=True)

# Exit codes for scripts wrapping the CLI
class ExitCodes:
    SUCCESS = 0
    GENERAL_ERROR = 1
    CONFIG_ERROR = 2
    VALIDATION_ERROR = 3
    AWS_ERROR = 4


COMMAND_ALIASES = {
    "i": "init",
    "a": "add",
    "e": "edit",
    "d": "delete",
    "l": "list",
    "ls": "list",
    "s": "assume",
    "w": "whoami",
    "v": "version",
}


class AliasedGroup(click.Group):
    """Group that also resolves the short command aliases."""

    def get_command(self, ctx, cmd_name):
        return super().get_command(ctx, COMMAND_ALIASES.get(cmd_name, cmd_name))


def setup_logging(log_level: str, json_output: bool = False) -> logging.Logger:
    """Configure logging with optional JSON output for CI systems."""
    logger = logging.getLogger()
    logger.handlers.clear()

    if json_output:
        formatter = logging.Formatter(
            '{"timestamp":"%(asctime)s","level":"%(levelname)s","module":"%(name)s","message":"%(message)s"}'
        )
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
    else:
        handler = RichHandler(console=console, show_time=False, show_path=False)

    logger.addHandler(handler)
    logger.setLevel(getattr(logging, log_level.upper()))

    # Suppress verbose library logs
    for name in ("boto3", "botocore", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


def fail(message: str, code: int):
    console.print(f"❌ {message}", style="red", markup=False, highlight=False)
    sys.exit(code)


def cancel(message: str):
    console.print(message, style="yellow", markup=False, highlight=False)
    sys.exit(ExitCodes.SUCCESS)


def handle_errors(func):
    """Turn the package's exceptions into a printed message and an exit code."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        ctx = click.get_current_context()
        logger = ctx.obj["logger"]
        try:
            return func(*args, **kwargs)
        except config_store.ConfigError as e:
            logger.debug(f"Config error in '{ctx.info_name}': {e}")
            fail(str(e), ExitCodes.CONFIG_ERROR)
        except AuthError as e:
            logger.debug(f"AWS error in '{ctx.info_name}': {e}")
            fail(f"AWS error: {e}", ExitCodes.AWS_ERROR)
        except clipboard.ClipboardError as e:
            fail(str(e), ExitCodes.GENERAL_ERROR)
        except KeyboardInterrupt:
            cancel("Interrupted by user")
        except Exception as e:
            if logger.level == logging.DEBUG:
                import traceback
                traceback.print_exc()
            fail(f"Unexpected error: {e}", ExitCodes.GENERAL_ERROR)

    return wrapper


def _boto_profile(ctx) -> Optional[str]:
    # Only an implicit default goes through the plain credential chain, so env-only credentials work
    source = ctx.find_root().get_parameter_source("profile")
    if source == ParameterSource.DEFAULT:
        return None
    return ctx.obj["profile"]


def _unique_keys(entry: config_store.ProfileEntry) -> List[str]:
    return list(dict.fromkeys(entry.keys()))


def _load_entry(ctx):
    entries = config_store.load(ctx.obj["config_file"])
    entry = config_store.require_profile(entries, ctx.obj["profile"])
    return entries, entry


@click.group(cls=AliasedGroup, invoke_without_command=True)
@click.version_option(version=constants.VERSION, prog_name=constants.PROG_NAME)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="WARNING",
    envvar=constants.LOG_LEVEL_ENVVAR,
    help=f"Set logging level (env: {constants.LOG_LEVEL_ENVVAR})"
)
@click.option(
    "--json-output",
    is_flag=True,
    envvar="ASSUME_SETUP_JSON_OUTPUT",
    help="Output structured JSON logs (env: ASSUME_SETUP_JSON_OUTPUT)"
)
@click.option(
    "--profile",
    default=constants.DEFAULT_PROFILE,
    envvar="AWS_PROFILE",
    show_default=True,
    help="AWS profile whose credentials and roles are used (env: AWS_PROFILE)"
)
@click.option(
    "--region",
    envvar="AWS_REGION",
    help="AWS region for the STS endpoint (env: AWS_REGION)"
)
@click.option(
    "--config",
    "config_file",
    default=lambda: constants.DEFAULT_CONFIG_FILE,
    envvar=constants.CONFIG_FILE_ENVVAR,
    type=click.Path(dir_okay=False),
    help=f"Path of the role list file (env: {constants.CONFIG_FILE_ENVVAR})"
)
@click.pass_context
def cli(ctx, log_level: str, json_output: bool, profile: str, region: Optional[str], config_file: str):
    """Assume AWS IAM roles from saved shortcuts.

    Runs `assume` when no command is given.
    """
    ctx.ensure_object(dict)
    ctx.obj["logger"] = setup_logging(log_level, json_output)
    ctx.obj["profile"] = profile
    ctx.obj["region"] = region
    ctx.obj["config_file"] = config_file

    if ctx.invoked_subcommand is None:
        ctx.invoke(assume)


@cli.command()
@click.option("--session-name", help="RoleSessionName used when assuming roles")
@click.pass_context
@handle_errors
def init(ctx, session_name: Optional[str]):
    """Create the role list for the active profile."""
    session_name = session_name or prompts.ask_text("Your session name")
    if session_name is None:
        cancel("init has been canceled")

    config_store.init_profile(ctx.obj["config_file"], ctx.obj["profile"], session_name)
    console.print(
        f"✅ Profile '{ctx.obj['profile']}' initialized in {ctx.obj['config_file']}",
        style="green", markup=False
    )


@cli.command()
@click.argument("key", required=False)
@click.option("--role-arn", help="ARN of the IAM role to register")
@click.pass_context
@handle_errors
def add(ctx, key: Optional[str], role_arn: Optional[str]):
    """Register a new role under KEY."""
    entries, entry = _load_entry(ctx)

    key = key or prompts.ask_text("Key")
    if key is None:
        cancel("add has been canceled")

    role_arn = role_arn or prompts.ask_text("Role ARN")
    if role_arn is None:
        fail("you have to specify ARN of IAM role", ExitCodes.VALIDATION_ERROR)

    entry.add_role(key, role_arn)
    config_store.save(entries, ctx.obj["config_file"])
    console.print(f"✅ {key} has been added", style="green", markup=False)


@cli.command()
@click.argument("key", required=False)
@click.option("--role-arn", help="New ARN for the role")
@click.pass_context
@handle_errors
def edit(ctx, key: Optional[str], role_arn: Optional[str]):
    """Change the role ARN stored under KEY."""
    entries, entry = _load_entry(ctx)
    if not entry.roles:
        cancel(f"No roles registered for profile '{entry.profile_id}'")

    key = key or prompts.select("Choose account to edit", _unique_keys(entry))
    if key is None:
        cancel("edit has been canceled")
    if entry.find_role(key) is None:
        fail(f"Unknown key '{key}'", ExitCodes.VALIDATION_ERROR)

    role_arn = role_arn or prompts.ask_text("New role ARN")
    if role_arn is None:
        fail("you have to specify assume role ARN", ExitCodes.VALIDATION_ERROR)

    entry.edit_role(key, role_arn)
    config_store.save(entries, ctx.obj["config_file"])
    console.print(f"✅ Role ARN of {key} has been updated", style="green", markup=False)


@cli.command()
@click.argument("key", required=False)
@click.pass_context
@handle_errors
def delete(ctx, key: Optional[str]):
    """Remove every role stored under KEY."""
    entries, entry = _load_entry(ctx)
    if not entry.roles:
        cancel(f"No roles registered for profile '{entry.profile_id}'")

    key = key or prompts.select("Choose account to delete", _unique_keys(entry))
    if key is None:
        cancel("delete has been canceled")

    if entry.delete_role(key) == 0:
        fail(f"Unknown key '{key}', nothing deleted", ExitCodes.VALIDATION_ERROR)

    config_store.save(entries, ctx.obj["config_file"])
    console.print(f"✅ {key} is deleted", style="green", markup=False)


@cli.command(name="list")
@click.pass_context
@handle_errors
def list_roles(ctx):
    """Show the roles registered for the active profile."""
    _, entry = _load_entry(ctx)

    if not entry.roles:
        console.print(f"📭 No roles registered for profile '{entry.profile_id}'", style="yellow", markup=False)
        return

    table = Table(title=escape(f"{entry.profile_id} ({entry.session_name})"))
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Role ARN", style="green", overflow="fold")
    for role in entry.roles:
        table.add_row(Text(role.key), Text(role.role_arn))
    console.print(table)


@cli.command()
@click.argument("key", required=False)
@click.option(
    "--duration",
    type=int,
    default=constants.DEFAULT_DURATION_SECONDS,
    show_default=True,
    help="Lifetime of the temporary credentials in seconds"
)
@click.option("--print", "print_only", is_flag=True, help="Write the exports to stdout instead of the clipboard")
@click.pass_context
@handle_errors
def assume(ctx, key: Optional[str], duration: int, print_only: bool):
    """Assume the role stored under KEY and copy its credentials."""
    logger = ctx.obj["logger"]
    _, entry = _load_entry(ctx)

    key = key or prompts.select("Choose account", _unique_keys(entry))
    if key is None:
        cancel("changing context has been canceled")

    role = entry.find_role(key)
    if role is None:
        fail(f"Unknown key '{key}'. please check `{constants.PROG_NAME} list`", ExitCodes.VALIDATION_ERROR)

    client = RoleAssumptionClient(
        profile_name=_boto_profile(ctx),
        region_name=ctx.obj["region"],
    )
    credentials = client.assume_role(role.role_arn, entry.session_name, duration)
    exports = credentials.to_exports()

    if print_only:
        click.echo(exports, nl=False)
        return

    clipboard.copy_to_clipboard(exports)
    logger.info(f"Credentials for {role.role_arn} copied to clipboard")
    console.print("Assume Credentials copied to clipboard, please paste it.", style="blue")
    if credentials.expiration is not None:
        console.print(f"🕐 Expires: {credentials.expiration}", markup=False)


@cli.command()
@click.pass_context
@handle_errors
def whoami(ctx):
    """Show the identity behind the active profile."""
    client = RoleAssumptionClient(
        profile_name=_boto_profile(ctx),
        region_name=ctx.obj["region"],
    )
    identity = client.get_caller_identity()

    table = Table()
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green", overflow="fold")
    table.add_row("Profile", Text(ctx.obj["profile"]))
    for field in ("Account", "Arn", "UserId"):
        table.add_row(field, Text(str(identity.get(field))))
    console.print(table)


@cli.command()
def version():
    """Check version of assume-setup."""
    console.print(f"v{constants.VERSION}", style="blue", highlight=False)


if __name__ == "__main__":
    cli()
