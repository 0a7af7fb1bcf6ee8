# cli/main.py
import click
from core.config import configure_logging
from core.sa.database import Database
from .commands.db import db
from .commands.admin import admin
from .commands.points import points
from .commands.exchange_points import exchange_points
from .commands.books import books
from .commands.serve import serve

@click.group()
@click.option('--database-url', envvar='DATABASE_URL', default=None, help='Database URL (defaults to DATABASE_URL)')
@click.option('--log-level', default=None, help='Logging level (defaults to LOG_LEVEL)')
@click.pass_context
def cli(ctx, database_url: str, log_level: str):
    """Readloom CLI"""
    configure_logging(log_level)
    ctx.ensure_object(dict)
    ctx.obj["db"] = Database(database_url)

cli.add_command(db)
cli.add_command(admin)
cli.add_command(points)
cli.add_command(exchange_points)
cli.add_command(books)
cli.add_command(serve)

def main():
    """Entry point for the CLI"""
    cli()

if __name__ == '__main__':
    main()
