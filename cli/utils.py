# cli/utils.py
import click
from core.context import CurrentUser
from core.errors import Err, Result

# Identity used for administrative commands run from a shell
CLI_ADMIN = CurrentUser(id="cli", email="cli@localhost", name="Readloom CLI", points=0, is_admin=True)

def get_database(ctx: click.Context):
    return ctx.find_root().obj["db"]

def echo_result(result: Result, success: str = None) -> object:
    """Print an Err in red and exit non-zero, otherwise echo success and return the value"""
    if isinstance(result, Err):
        click.echo(click.style(f"{result.kind.value}: {result.message}", fg='red'), err=True)
        raise SystemExit(1)
    if success:
        click.echo(click.style(success, fg='green'))
    return result.value

def echo_field(label: str, value) -> None:
    click.echo(click.style(f"{label}: ", fg='blue') + click.style(str(value), fg='cyan'))
