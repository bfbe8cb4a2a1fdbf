"""CLI commands for VectorLab.

Commands:
- init-db: Create the SQLite schema
- set-role: Make a user an admin (or a student again)
- tree: Show the unit/theme/subtheme hierarchy with exercise counts
- progress: Show a user's progress per unit, theme and subtheme
- serve: Run the Web API with uvicorn
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from vectorlab.config import load_app_config
from vectorlab.core.progress import compute_progress, profile_stats
from vectorlab.db import init_db as do_init_db
from vectorlab.db.attempts_repository import list_attempts_for_user
from vectorlab.db.exercises_repository import list_all_exercises, list_published_exercises
from vectorlab.db.profiles_repository import set_role as do_set_role
from vectorlab.db.structure_repository import list_subthemes, list_themes, list_units

app = typer.Typer(
    name="vectorlab",
    help="Linear algebra exercises: authoring, grading and progress.",
    no_args_is_help=True,
)

console = Console()

DB_OPTION = typer.Option(None, "--db", help="SQLite file (defaults to the configured path)")


def _open_db(db_path: Optional[Path]) -> Path:
    path = db_path or load_app_config().database.resolved_path()
    do_init_db(path)
    return path


@app.command(name="init-db")
def init_db(db_path: Optional[Path] = DB_OPTION) -> None:
    """Create the database schema (idempotent)."""
    path = _open_db(db_path)
    console.print(f"[green]✓ Database ready[/green] [dim]{path}[/dim]")


@app.command(name="set-role")
def set_role(
    user_id: str = typer.Argument(..., help="User ID (as sent in X-User-Id)"),
    role: str = typer.Argument(..., help="student or admin"),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Set a user's role, creating the profile if needed."""
    _open_db(db_path)

    try:
        do_set_role(user_id, role)
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ {user_id} is now {role}[/green]")


@app.command()
def tree(db_path: Optional[Path] = DB_OPTION) -> None:
    """Show the content hierarchy with published/total exercise counts."""
    _open_db(db_path)

    units = list_units()
    if not units:
        console.print("[yellow]No units yet.[/yellow]")
        return

    themes = list_themes()
    subthemes = list_subthemes()

    total_by_subtheme: dict[str, int] = {}
    published_by_subtheme: dict[str, int] = {}
    for exercise in list_all_exercises():
        sid = exercise.subtheme_id
        total_by_subtheme[sid] = total_by_subtheme.get(sid, 0) + 1
        if exercise.is_published:
            published_by_subtheme[sid] = published_by_subtheme.get(sid, 0) + 1

    root = Tree("[bold]Units[/bold]")
    for unit in units:
        unit_node = root.add(f"[cyan]{unit.title}[/cyan] [dim]({unit.slug})[/dim]")
        for theme in (t for t in themes if t.unit_id == unit.id):
            theme_node = unit_node.add(f"{theme.title} [dim]({theme.slug})[/dim]")
            for subtheme in (s for s in subthemes if s.theme_id == theme.id):
                published = published_by_subtheme.get(subtheme.id, 0)
                total = total_by_subtheme.get(subtheme.id, 0)
                theme_node.add(
                    f"{subtheme.title} [dim]({subtheme.slug})[/dim] "
                    f"[green]{published}[/green]/{total} published"
                )

    console.print(root)


@app.command()
def progress(
    user_id: str = typer.Argument(..., help="User ID"),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Show a user's solved/total published exercises per node."""
    _open_db(db_path)

    attempts = list_attempts_for_user(user_id)
    report = compute_progress(
        list_units(),
        list_themes(),
        list_subthemes(),
        list_published_exercises(),
        attempts,
    )
    stats = profile_stats(attempts)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Level")
    table.add_column("Title")
    table.add_column("Solved", justify="right")
    table.add_column("%", justify="right")

    for level, nodes in (
        ("unit", report.units),
        ("theme", report.themes),
        ("subtheme", report.subthemes),
    ):
        for node in nodes.values():
            table.add_row(level, node.title, f"{node.solved}/{node.total}", f"{node.percent}")

    console.print(table)
    console.print(
        f"  [dim]attempts:[/dim] {stats.total_attempts}  "
        f"[dim]correct:[/dim] {stats.correct_attempts}  "
        f"[dim]accuracy:[/dim] {stats.accuracy}%"
    )


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int = typer.Option(8000, help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the Web API."""
    import uvicorn

    console.print(f"[blue]Serving on http://{host}:{port}[/blue]")
    uvicorn.run("vectorlab.web.api:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
