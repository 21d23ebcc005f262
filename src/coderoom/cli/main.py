"""
Top-level CLI commands: start, run, languages.
"""

import os
from pathlib import Path
from typing import Optional

import typer

from coderoom.cli._http import _http_get, _http_post
from coderoom.config import CONFIG

EXTENSIONS = {".java": "java", ".py": "python"}


def configure_logging(verbose: bool = False):
    """Configure logging for the CLI."""
    from coderoom.logger import setup_logging

    setup_logging(level="DEBUG" if verbose else "WARNING")


def register_commands(app: typer.Typer) -> None:
    """Attach the top-level commands to ``app``."""

    @app.command()
    def start(
        host: str = typer.Option(None, "--host", help="Bind address"),
        port: int = typer.Option(None, "--port", "-p", help="Port to listen on"),
        runtime: Optional[str] = typer.Option(
            None, "--runtime", help="Sandbox runtime: docker or local"
        ),
    ):
        """Start the coderoom server."""
        if runtime:
            os.environ["CODEROOM_SANDBOX_RUNTIME"] = runtime
            CONFIG.reload()

        from coderoom.server import run

        run(host=host, port=port)

    @app.command("run")
    def run_file(
        file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Source file"),
        language: Optional[str] = typer.Option(
            None, "--language", "-l", help="Language (inferred from extension)"
        ),
        stdin: str = typer.Option("", "--stdin", "-i", help="Input fed to the program"),
    ):
        """Run a source file in the server's sandbox."""
        language = language or EXTENSIONS.get(file.suffix.lower())
        if not language:
            typer.echo(f"❌ Cannot infer language for {file.name}; pass --language")
            raise typer.Exit(code=1)

        data = _http_post(
            "/run",
            {
                "code": file.read_text(encoding="utf-8"),
                "language": language,
                "input": stdin,
            },
        )
        typer.echo(data.get("output", ""), nl=False)

        status = data.get("status", "success")
        if status != "success":
            typer.echo(f"\n[{status}]", err=True)
            raise typer.Exit(code=1)

    @app.command()
    def languages():
        """List supported execution languages."""
        data = _http_get("/languages")
        default = data.get("default")
        for lang in data.get("languages", []):
            marker = " (default)" if lang == default else ""
            typer.echo(f"  {lang}{marker}")
