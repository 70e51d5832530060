"""CLI module for application management."""

import typer

from collectibles.cli.reports import app as reports_app
from collectibles.cli.users import app as users_app

app = typer.Typer(
    name="collectibles",
    help="Collectibles catalog - CLI management tool",
    no_args_is_help=True,
)

app.add_typer(users_app, name="users", help="Manage user accounts")
app.add_typer(reports_app, name="reports", help="Print valuation reports")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload"),
) -> None:
    """Start the API server."""
    import uvicorn

    uvicorn.run("collectibles.main:app", host=host, port=port, reload=reload)


@app.command()
def version() -> None:
    """Show the application version."""
    from importlib.metadata import PackageNotFoundError, version as get_version

    try:
        ver = get_version("collectibles-catalog")
    except PackageNotFoundError:
        ver = "0.1.0 (development)"
    typer.echo(f"collectibles-catalog version {ver}")


if __name__ == "__main__":
    app()
