import click
from ..utils import get_database

@click.group()
def db():
    """Database management commands"""
    pass

@db.command()
@click.pass_context
def init(ctx):
    """Create all tables"""
    database = get_database(ctx)
    database.init_db()
    click.echo(click.style(f"Initialized database at {database.connection_string}", fg='green'))

@db.command()
@click.confirmation_option(prompt='This deletes every table and row. Continue?')
@click.pass_context
def drop(ctx):
    """Drop all tables"""
    get_database(ctx).drop_db()
    click.echo(click.style("Dropped all tables", fg='yellow'))
