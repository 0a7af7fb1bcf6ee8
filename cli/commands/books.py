import click
from core.services.book_service import BookService
from ..utils import echo_field, echo_result, get_database

@click.group()
def books():
    """Book catalog commands"""
    pass

@books.command()
@click.option('--book-id', default=None, help='Revalue a single book')
@click.pass_context
def revalue(ctx, book_id: str):
    """Recompute heuristic points costs from condition, demand and rarity

    Books with an explicit cost or an exchange in progress keep their cost.
    """
    with get_database(ctx).session_scope() as session:
        service = BookService(session)
        if book_id:
            book = echo_result(service.revalue_book(book_id))
            echo_field(book.title, f"{book.points_cost} points")
        else:
            changed = service.revalue_all()
            click.echo(click.style(f"Updated {changed} books", fg='green'))
