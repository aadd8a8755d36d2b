"""CLI interface for folio."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from folio.config import FolioConfig, load_config, merge_cli_overrides
from folio.content import ContentStore, Post, Project, SiteSettings
from folio.errors import FolioError, PublishReport
from folio.markup import CONVERTERS, get_converter
from folio.server import SiteServer
from folio.site import PublishOrchestrator, SiteTree

app = typer.Typer(
    name="folio",
    help="Publish a blog and portfolio as a static site and preview it locally.",
    no_args_is_help=True,
)
post_app = typer.Typer(help="Manage blog posts.", no_args_is_help=True)
project_app = typer.Typer(help="Manage portfolio projects.", no_args_is_help=True)
settings_app = typer.Typer(help="Show or change site settings.", no_args_is_help=True)
app.add_typer(post_app, name="post")
app.add_typer(project_app, name="project")
app.add_typer(settings_app, name="settings")

console = Console()


@dataclass
class _Session:
    """Objects shared by every command of one invocation."""

    config: FolioConfig
    store: ContentStore

    def orchestrator(self, settings: SiteSettings | None = None) -> PublishOrchestrator:
        settings = settings or self.store.get_settings()
        return PublishOrchestrator(
            self.store,
            SiteTree(self.config.output_dir(settings)),
            page_size=self.config.index.page_size,
            max_slug_attempts=self.config.slugs.max_attempts,
        )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from folio import __version__

        console.print(f"folio {__version__}")
        raise typer.Exit()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable debug logging.")
    ] = False,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .folio.toml file."),
    ] = None,
    content_dir: Annotated[
        Optional[Path],
        typer.Option("--content-dir", help="Directory holding the content store."),
    ] = None,
    output_dir: Annotated[
        Optional[Path],
        typer.Option("--output-dir", "-o", help="Directory for the generated site."),
    ] = None,
) -> None:
    """folio - static blog and portfolio publisher."""
    _setup_logging(verbose)
    config = merge_cli_overrides(
        load_config(config_path),
        content_directory=str(content_dir) if content_dir else None,
        output_directory=str(output_dir) if output_dir else None,
    )
    ctx.obj = _Session(config=config, store=ContentStore(Path(config.content.directory)))


def _session(ctx: typer.Context) -> _Session:
    return ctx.obj


def _fail(exc: object) -> typer.Exit:
    console.print(f"[red]Error:[/red] {exc}")
    return typer.Exit(1)


def _print_report(report: PublishReport) -> None:
    colour = "green" if report.ok else "yellow"
    console.print(f"[{colour}]{report.summary()}[/{colour}]")
    for failure in report.failed:
        console.print(f"  [red]✗[/red] {failure.action} {failure.path}: {failure.error}")


def _read_markup(path: Path | None, markup: str) -> str:
    if path is None:
        return ""
    return get_converter(markup)(path.read_text(encoding="utf-8"))


def _read_image(path: Path | None) -> bytes | None:
    return path.read_bytes() if path is not None else None


def _changes(**fields: object) -> dict[str, object]:
    """Keep only the fields given on the command line."""
    return {key: value for key, value in fields.items() if value is not None}


def _aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _status(record: Post | Project) -> str:
    return "[green]published[/green]" if record.is_published else "[dim]draft[/dim]"


MarkupOption = Annotated[
    str,
    typer.Option("--format", "-f", help=f"Body markup: {', '.join(CONVERTERS)}."),
]
ImageOption = Annotated[
    Optional[Path],
    typer.Option("--image", help="Image file.", exists=True, dir_okay=False),
]


# ── Site ─────────────────────────────────────────────────────────


@app.command()
def init(ctx: typer.Context) -> None:
    """Create default settings and the site shell."""
    session = _session(ctx)
    settings = session.store.get_settings()
    orchestrator = session.orchestrator(settings)
    try:
        report = orchestrator.ensure_shell()
    except FolioError as exc:
        raise _fail(exc) from exc
    console.print(f"Content store: {session.store.path}")
    console.print(f"Site root: {orchestrator.tree.root}")
    _print_report(report)


@app.command()
def build(ctx: typer.Context) -> None:
    """Regenerate every page of the site."""
    report = _session(ctx).orchestrator().regenerate_all()
    _print_report(report)
    if not report.ok:
        raise typer.Exit(1)


@app.command()
def serve(
    ctx: typer.Context,
    host: Annotated[Optional[str], typer.Option("--host", help="Bind address.")] = None,
    port: Annotated[
        Optional[int], typer.Option("--port", "-p", help="Port; 0 picks a free one.", min=0, max=65535)
    ] = None,
) -> None:
    """Serve the generated site until interrupted."""
    session = _session(ctx)
    config = merge_cli_overrides(session.config, server_host=host, server_port=port)
    settings = session.store.get_settings()
    server = SiteServer(
        config.output_dir(settings),
        config.server.host,
        config.server_port(settings),
        landing=settings.landing_page,
    )
    try:
        server.start()
    except FolioError as exc:
        raise _fail(exc) from exc
    console.print(f"[green]Serving[/green] {server.root} at {server.url} (Ctrl-C to stop)")
    server.serve_until_interrupted()


# ── Posts ────────────────────────────────────────────────────────


@post_app.command("new")
def post_new(
    ctx: typer.Context,
    title: Annotated[str, typer.Option("--title", "-t", help="Post title.")],
    subtitle: Annotated[str, typer.Option("--subtitle", help="Post subtitle.")] = "",
    body_file: Annotated[
        Optional[Path],
        typer.Option("--body-file", help="File holding the post body.", exists=True, dir_okay=False),
    ] = None,
    markup: MarkupOption = "text",
    author: Annotated[
        Optional[str], typer.Option("--author", help="Defaults to the site author.")
    ] = None,
    image: ImageOption = None,
) -> None:
    """Create a draft post."""
    store = _session(ctx).store
    try:
        body = _read_markup(body_file, markup)
    except ValueError as exc:
        raise _fail(exc) from exc
    post = Post(
        title=title,
        subtitle=subtitle,
        body=body,
        author=author if author is not None else store.get_settings().author,
        image=_read_image(image),
    )
    store.save_post(post)
    console.print(f"Created draft post [bold]{post.id}[/bold]")


@post_app.command("list")
def post_list(ctx: typer.Context) -> None:
    """List posts, newest first."""
    posts = sorted(_session(ctx).store.list_posts(), key=lambda p: p.published_at, reverse=True)
    if not posts:
        console.print("[yellow]No posts.[/yellow]")
        return
    table = Table("ID", "Title", "Status", "Slug", "Published")
    for post in posts:
        table.add_row(
            post.id, post.title, _status(post), post.slug or "", post.published_at.date().isoformat()
        )
    console.print(table)


@post_app.command("edit")
def post_edit(
    ctx: typer.Context,
    post_id: str,
    title: Annotated[Optional[str], typer.Option("--title", "-t", help="New title.")] = None,
    subtitle: Annotated[Optional[str], typer.Option("--subtitle", help="New subtitle.")] = None,
    body_file: Annotated[
        Optional[Path],
        typer.Option("--body-file", help="File holding the new body.", exists=True, dir_okay=False),
    ] = None,
    markup: MarkupOption = "text",
    author: Annotated[Optional[str], typer.Option("--author", help="New author.")] = None,
    image: ImageOption = None,
    published_at: Annotated[
        Optional[datetime],
        typer.Option("--published-at", help="Publication date; UTC when no offset is given."),
    ] = None,
) -> None:
    """Edit a post; a published post's pages are rewritten in place."""
    session = _session(ctx)
    try:
        post = session.store.get_post(post_id)
        body = _read_markup(body_file, markup) if body_file is not None else None
    except (FolioError, ValueError) as exc:
        raise _fail(exc) from exc
    changes = _changes(
        title=title,
        subtitle=subtitle,
        body=body,
        author=author,
        image=_read_image(image),
        published_at=_aware(published_at),
    )
    _run(lambda o: o.update_post(post.model_copy(update=changes)), ctx)


@post_app.command("publish")
def post_publish(ctx: typer.Context, post_id: str) -> None:
    """Publish a draft post."""
    _run(lambda o: o.publish_post(post_id), ctx)


@post_app.command("unpublish")
def post_unpublish(ctx: typer.Context, post_id: str) -> None:
    """Return a published post to draft."""
    _run(lambda o: o.unpublish_post(post_id), ctx)


@post_app.command("delete")
def post_delete(ctx: typer.Context, post_id: str) -> None:
    """Delete a post and its pages."""
    _run(lambda o: o.delete_post(post_id), ctx)


# ── Projects ─────────────────────────────────────────────────────


@project_app.command("new")
def project_new(
    ctx: typer.Context,
    title: Annotated[str, typer.Option("--title", "-t", help="Project title.")],
    subtitle: Annotated[str, typer.Option("--subtitle", help="Project subtitle.")] = "",
    tech: Annotated[
        Optional[list[str]], typer.Option("--tech", help="Technology tag; repeatable.")
    ] = None,
    url: Annotated[str, typer.Option("--url", help="External project link.")] = "",
    order: Annotated[int, typer.Option("--order", help="Display order, ascending.")] = 0,
    description_file: Annotated[
        Optional[Path],
        typer.Option(
            "--description-file", help="File holding the description.", exists=True, dir_okay=False
        ),
    ] = None,
    markup: MarkupOption = "text",
    image: ImageOption = None,
) -> None:
    """Create a draft project."""
    try:
        description = _read_markup(description_file, markup)
    except ValueError as exc:
        raise _fail(exc) from exc
    project = Project(
        title=title,
        subtitle=subtitle,
        description=description,
        technologies=list(tech or []),
        url=url,
        display_order=order,
        image=_read_image(image),
    )
    _session(ctx).store.save_project(project)
    console.print(f"Created draft project [bold]{project.id}[/bold]")


@project_app.command("list")
def project_list(ctx: typer.Context) -> None:
    """List projects in display order."""
    projects = sorted(_session(ctx).store.list_projects(), key=lambda p: p.display_order)
    if not projects:
        console.print("[yellow]No projects.[/yellow]")
        return
    table = Table("ID", "Title", "Status", "Slug", "Order", "Technologies")
    for project in projects:
        table.add_row(
            project.id,
            project.title,
            _status(project),
            project.slug or "",
            str(project.display_order),
            ", ".join(project.technologies),
        )
    console.print(table)


@project_app.command("edit")
def project_edit(
    ctx: typer.Context,
    project_id: str,
    title: Annotated[Optional[str], typer.Option("--title", "-t", help="New title.")] = None,
    subtitle: Annotated[Optional[str], typer.Option("--subtitle", help="New subtitle.")] = None,
    tech: Annotated[
        Optional[list[str]], typer.Option("--tech", help="Replaces the technology tags; repeatable.")
    ] = None,
    url: Annotated[Optional[str], typer.Option("--url", help="New external link.")] = None,
    order: Annotated[Optional[int], typer.Option("--order", help="New display order.")] = None,
    description_file: Annotated[
        Optional[Path],
        typer.Option(
            "--description-file", help="File holding the new description.", exists=True, dir_okay=False
        ),
    ] = None,
    markup: MarkupOption = "text",
    image: ImageOption = None,
) -> None:
    """Edit a project; a published project's pages are rewritten in place."""
    session = _session(ctx)
    try:
        project = session.store.get_project(project_id)
        description = (
            _read_markup(description_file, markup) if description_file is not None else None
        )
    except (FolioError, ValueError) as exc:
        raise _fail(exc) from exc
    changes = _changes(
        title=title,
        subtitle=subtitle,
        technologies=list(tech) if tech else None,
        url=url,
        display_order=order,
        description=description,
        image=_read_image(image),
    )
    _run(lambda o: o.update_project(project.model_copy(update=changes)), ctx)


@project_app.command("publish")
def project_publish(ctx: typer.Context, project_id: str) -> None:
    """Publish a draft project."""
    _run(lambda o: o.publish_project(project_id), ctx)


@project_app.command("unpublish")
def project_unpublish(ctx: typer.Context, project_id: str) -> None:
    """Return a published project to draft."""
    _run(lambda o: o.unpublish_project(project_id), ctx)


@project_app.command("delete")
def project_delete(ctx: typer.Context, project_id: str) -> None:
    """Delete a project and its pages."""
    _run(lambda o: o.delete_project(project_id), ctx)


# ── Settings ─────────────────────────────────────────────────────


@settings_app.command("show")
def settings_show(ctx: typer.Context) -> None:
    """Print every site setting."""
    settings = _session(ctx).store.get_settings()
    table = Table("Setting", "Value")
    for key, value in settings.model_dump(mode="json").items():
        table.add_row(key, str(value))
    console.print(table)


@settings_app.command("set")
def settings_set(ctx: typer.Context, key: str, value: str) -> None:
    """Change one setting and rebuild the site."""
    session = _session(ctx)
    current = session.store.get_settings()
    if key not in SiteSettings.model_fields:
        console.print(f"[red]Error:[/red] Unknown setting: {key}")
        console.print(f"Known settings: {', '.join(SiteSettings.model_fields)}")
        raise typer.Exit(1)
    try:
        updated = SiteSettings.model_validate({**current.model_dump(), key: value})
    except ValidationError as exc:
        raise _fail(f"Invalid value for {key}: {exc.errors()[0]['msg']}") from exc
    try:
        report = session.orchestrator(updated).update_settings(updated)
    except FolioError as exc:
        raise _fail(exc) from exc
    console.print(f"Set {key} = {getattr(updated, key)}")
    _print_report(report)


def _run(command, ctx: typer.Context) -> None:
    try:
        report = command(_session(ctx).orchestrator())
    except FolioError as exc:
        raise _fail(exc) from exc
    _print_report(report)
