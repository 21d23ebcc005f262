"""
coderoom CLI.

- main:  start, run, languages
- rooms: list, describe, join
"""

import typer

from coderoom.cli._http import _http_get, _http_post  # noqa: F401
from coderoom.cli.main import configure_logging, register_commands
from coderoom.cli.rooms import rooms_app

app = typer.Typer(help="coderoom - collaborative code rooms with sandboxed runs")


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging (DEBUG level)"
    ),
):
    """
    coderoom - collaborative code rooms with sandboxed runs.
    """
    configure_logging(verbose)


register_commands(app)
app.add_typer(rooms_app, name="rooms")

if __name__ == "__main__":
    app()
