"""CLI commands for account management."""

import typer
from rich.table import Table
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from collectibles.auth.models import User
from collectibles.auth.schemas import Credentials
from collectibles.auth.service import AuthService
from collectibles.cli.runner import console, error_console, handle_db_error, run_async
from collectibles.core.exceptions import APIError
from collectibles.db.session import get_session_factory

app = typer.Typer(help="Manage user accounts")


@app.command("create")
def create_user(
    email: str = typer.Option(..., "--email", "-e", help="Email address"),
    password: str = typer.Option(
        ...,
        "--password",
        prompt=True,
        hide_input=True,
        confirmation_prompt=True,
        help="Password (prompted when omitted)",
    ),
) -> None:
    """Create an account that can sign in and edit the collection."""

    async def _create() -> None:
        try:
            async with get_session_factory()() as db:
                user = await AuthService.sign_up(
                    db, Credentials(email=email, password=password)
                )
                await db.commit()
                console.print(f"[bold green]User created:[/bold green] {user.email}")
                console.print(f"[bold]ID:[/bold] {user.id}")
        except APIError as e:
            error_console.print(f"[red]Error: {e.message}[/red]")
            raise typer.Exit(1) from None
        except SQLAlchemyError as e:
            handle_db_error(e)

    run_async(_create())


@app.command("list")
def list_users() -> None:
    """List all accounts."""

    async def _list() -> None:
        try:
            async with get_session_factory()() as db:
                result = await db.execute(select(User).order_by(User.created_at))
                users = list(result.scalars().all())
        except SQLAlchemyError as e:
            handle_db_error(e)
            return

        if not users:
            console.print("[yellow]No users found.[/yellow]")
            return

        table = Table(title=f"Users ({len(users)} total)")
        table.add_column("ID", style="cyan")
        table.add_column("Email")
        table.add_column("Created")
        for user in users:
            table.add_row(user.id, user.email, user.created_at.strftime("%Y-%m-%d %H:%M"))
        console.print(table)

    run_async(_list())
