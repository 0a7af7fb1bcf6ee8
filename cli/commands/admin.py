import click
from core.services.auth_service import AuthService
from ..utils import echo_field, echo_result, get_database

@click.group()
def admin():
    """Administrator account commands"""
    pass

@admin.command()
@click.option('--email', required=True, help='Email address for the new admin')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password (prompted when omitted)')
@click.option('--name', default=None, help='Display name')
@click.pass_context
def create(ctx, email: str, password: str, name: str):
    """Create a new administrator account

    Example:
        readloom admin create --email admin@example.com --name "Site Admin"
    """
    with get_database(ctx).session_scope() as session:
        user = echo_result(AuthService(session).create_admin(email, password, name), "Admin created")
        echo_field("ID", user.id)
        echo_field("Email", user.email)

@admin.command()
@click.argument('email')
@click.pass_context
def promote(ctx, email: str):
    """Grant admin rights to an existing account"""
    with get_database(ctx).session_scope() as session:
        echo_result(AuthService(session).promote(email), f"{email} is now an admin")
