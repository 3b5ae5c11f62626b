from typer import Typer

from . import APP_NAME
from .cli.commands import info, merge


def create_app() -> Typer:
    app = Typer(name=APP_NAME, add_completion=False, no_args_is_help=True)
    app.command(no_args_is_help=True)(info)
    app.command(no_args_is_help=True)(merge)
    return app


def main():
    create_app()()
