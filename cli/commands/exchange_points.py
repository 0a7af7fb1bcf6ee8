import click
from core.services.exchange_point_service import ExchangePointService
from ..utils import CLI_ADMIN, echo_field, echo_result, get_database

@click.group(name='exchange-points')
def exchange_points():
    """Exchange point management commands"""
    pass

@exchange_points.command()
@click.option('--name', required=True, help='Display name')
@click.option('--address', required=True, help='Street address')
@click.option('--city', required=True, help='City')
@click.option('--lat', 'latitude', required=True, type=float, help='Latitude (-90 to 90)')
@click.option('--lng', 'longitude', required=True, type=float, help='Longitude (-180 to 180)')
@click.option('--country', default=None, help='Country (defaults to DEFAULT_COUNTRY)')
@click.option('--description', default=None, help='Optional description')
@click.pass_context
def add(ctx, name, address, city, latitude, longitude, country, description):
    """Add an exchange point

    Example:
        readloom exchange-points add --name "Central Library" --address "1 Mall Rd" --city Lahore --lat 31.55 --lng 74.34
    """
    with get_database(ctx).session_scope() as session:
        point = echo_result(
            ExchangePointService(session).create(
                CLI_ADMIN,
                name=name,
                address=address,
                city=city,
                latitude=latitude,
                longitude=longitude,
                country=country,
                description=description
            ),
            "Exchange point created"
        )
        echo_field("ID", point.id)

@exchange_points.command(name='list')
@click.option('--all/--active', 'show_all', default=False, help='Include inactive points')
@click.pass_context
def list_points(ctx, show_all: bool):
    """List exchange points"""
    with get_database(ctx).session_scope() as session:
        service = ExchangePointService(session)
        result = service.list_all(CLI_ADMIN) if show_all else service.list_active()
        for point in echo_result(result):
            status = "" if point.is_active else click.style(" [inactive]", fg='yellow')
            click.echo(
                click.style(point.name, fg='cyan') +
                f" - {point.address}, {point.city}, {point.country} ({point.latitude}, {point.longitude})" +
                status
            )
