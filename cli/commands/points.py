import uuid
import click
from core.sa.repositories import UserRepository
from core.services.points_service import PointsService
from ..utils import echo_field, echo_result, get_database

@click.group()
def points():
    """Points ledger commands"""
    pass

@points.command()
@click.argument('email')
@click.argument('amount', type=int)
@click.option('--ref', default=None, help='Unique reference; a credit with the same reference is applied once')
@click.pass_context
def credit(ctx, email: str, amount: int, ref: str):
    """Credit AMOUNT points to the account with EMAIL

    Example:
        readloom points credit reader@example.com 50 --ref support-ticket-123
    """
    with get_database(ctx).session_scope() as session:
        user = UserRepository(session).get_by_email(email)
        if user is None:
            click.echo(click.style(f"No user with email {email}", fg='red'), err=True)
            raise SystemExit(1)
        source_ref = f"manual:{ref or uuid.uuid4()}"
        balance = echo_result(
            PointsService(session).credit_points(user.id, amount, source_ref),
            f"Credited {amount} points"
        )
        echo_field("Balance", balance)

@points.command()
@click.argument('email')
@click.pass_context
def balance(ctx, email: str):
    """Show the balance of the account with EMAIL"""
    with get_database(ctx).session_scope() as session:
        user = UserRepository(session).get_by_email(email)
        if user is None:
            click.echo(click.style(f"No user with email {email}", fg='red'), err=True)
            raise SystemExit(1)
        echo_field("Points", user.points)
        echo_field("Escrow", user.escrow_points)
