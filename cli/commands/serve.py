import click
import uvicorn

@click.command()
@click.option('--host', default='127.0.0.1', help='Interface to bind')
@click.option('--port', default=8000, type=int, help='Port to listen on')
@click.option('--reload/--no-reload', default=False, help='Reload on code changes')
def serve(host: str, port: int, reload: bool):
    """Run the HTTP API with uvicorn"""
    uvicorn.run("api.main:app", host=host, port=port, reload=reload)
