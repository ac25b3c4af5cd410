# cli/main.py
import logging
import click
from .commands.db import db
from .commands.users import users
from .commands.borrowings import borrowings

@click.group()
@click.option('--verbose/--no-verbose', default=False, help='Show debug logging')
def cli(verbose: bool):
    """University library circulation CLI"""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)

@cli.command()
@click.option('--host', default='0.0.0.0', help='Interface to bind')
@click.option('--port', default=8000, type=int, help='Port to listen on')
@click.option('--reload/--no-reload', default=False, help='Reload on code changes')
def serve(host: str, port: int, reload: bool):
    """Run the HTTP API with uvicorn"""
    import uvicorn

    uvicorn.run("api.main:app", host=host, port=port, reload=reload, reload_dirs=["api", "core"] if reload else None)

cli.add_command(db)
cli.add_command(users)
cli.add_command(borrowings)

def main():
    """Entry point for the CLI"""
    cli()

if __name__ == '__main__':
    main()
