"""modreg CLI — the command-line front end of the moderation registry."""

import sys
from dataclasses import dataclass

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from modreg import __version__
from modreg.bootstrap import Services, build_services
from modreg.core.config import Settings
from modreg.core.logging import configure_logging
from modreg.registry.errors import ModerationError
from modreg.registry.events import EVENT_NAMES
from modreg.registry.models import Content, ContentStatus

console = Console()

STATUS_NAMES = [s.value for s in ContentStatus]

_STATUS_STYLE = {
    ContentStatus.Active: "green",
    ContentStatus.UnderReview: "yellow",
    ContentStatus.Flagged: "magenta",
    ContentStatus.Removed: "red",
}


@dataclass
class CliContext:
    data_dir: str | None
    identity: str | None
    _services: Services | None = None

    @property
    def services(self) -> Services:
        if self._services is None:
            self._services = build_services(Settings.from_env(self.data_dir))
        return self._services

    def caller(self) -> str:
        if not self.identity or not self.identity.strip():
            console.print("[red]No caller identity. Pass --as or set MODREG_IDENTITY.[/]")
            sys.exit(2)
        return self.identity


pass_ctx = click.make_pass_decorator(CliContext)


def _fail(error: ModerationError) -> None:
    console.print(f"[red]Rejected ({error.kind}):[/] {error.message}")
    sys.exit(1)


def _status_text(status: ContentStatus) -> str:
    return f"[{_STATUS_STYLE[status]}]{status.value}[/]"


def _content_table(title: str, contents: list[Content]) -> Table:
    table = Table(title=title)
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Author", style="cyan")
    table.add_column("Hash")
    table.add_column("Reports", justify="right")
    table.add_column("Status")
    table.add_column("Active", justify="center")
    for c in contents:
        table.add_row(
            str(c.id),
            c.author,
            c.content_hash[:40],
            str(c.report_count),
            _status_text(c.status),
            "[green]Y[/]" if c.is_active else "[red]N[/]",
        )
    return table


@click.group()
@click.version_option(version=__version__)
@click.option("--data-dir", "-d", envvar="MODREG_DATA_DIR", default=None, help="Registry data directory")
@click.option("--as", "identity", envvar="MODREG_IDENTITY", default=None, help="Caller identity")
@click.option("--verbose", "-v", is_flag=True, help="Log registry activity to stderr")
@click.pass_context
def main(ctx: click.Context, data_dir: str | None, identity: str | None, verbose: bool):
    """modreg — community content-moderation registry.

    Submit content references, report them, and let moderators decide
    their status. Every command acts as the identity given with --as.
    """
    settings = Settings.from_env(data_dir)
    configure_logging(settings.log_level if verbose else "WARNING", settings.json_logs)
    ctx.obj = CliContext(data_dir=data_dir, identity=identity)


# ── Content ──────────────────────────────────────────────────────────


@main.command()
@click.argument("content_hash")
@pass_ctx
def submit(ctx: CliContext, content_hash: str):
    """Submit a content reference (e.g. an IPFS hash)."""
    try:
        content_id = ctx.services.registry.submit_content(ctx.caller(), content_hash)
    except ModerationError as e:
        _fail(e)
        return
    console.print(f"  [green]Submitted[/] content #{content_id}")


@main.command()
@click.argument("content_id", type=int)
@click.argument("reason")
@pass_ctx
def report(ctx: CliContext, content_id: int, reason: str):
    """Report a piece of content."""
    registry = ctx.services.registry
    try:
        filed = registry.report_content(ctx.caller(), content_id, reason)
    except ModerationError as e:
        _fail(e)
        return
    content = registry.get_content(content_id)
    console.print(
        f"  [green]Filed[/] report #{filed.id} against content #{content_id} "
        f"({content.report_count} reports, {_status_text(content.status)})"
    )


@main.command()
@click.argument("content_id", type=int)
@click.argument("status", type=click.Choice(STATUS_NAMES))
@pass_ctx
def moderate(ctx: CliContext, content_id: int, status: str):
    """Set the status of a piece of content (moderators only)."""
    try:
        content = ctx.services.registry.moderate_content(ctx.caller(), content_id, status)
    except ModerationError as e:
        _fail(e)
        return
    console.print(f"  Content #{content_id} is now {_status_text(content.status)}")
    if not content.is_active:
        console.print("  [dim]Content is inactive; no further reports or decisions.[/]")


@main.command()
@click.argument("content_id", type=int)
@click.option("--reports", "show_reports", is_flag=True, help="List the reports filed against it")
@pass_ctx
def show(ctx: CliContext, content_id: int, show_reports: bool):
    """Show a content record."""
    registry = ctx.services.registry
    try:
        c = registry.get_content(content_id)
    except ModerationError as e:
        _fail(e)
        return

    body = (
        f"Author:   {c.author}\n"
        f"Hash:     {c.content_hash}\n"
        f"Created:  {c.timestamp}\n"
        f"Status:   {_status_text(c.status)}\n"
        f"Active:   {c.is_active}\n"
        f"Reports:  {c.report_count}\n"
        f"Needs moderation: {registry.needs_moderation(content_id)}"
    )
    console.print(Panel(body, title=f"Content #{c.id}"))

    if show_reports:
        table = Table(title="Reports")
        table.add_column("ID", justify="right", style="dim")
        table.add_column("Reporter", style="cyan")
        table.add_column("Reason")
        table.add_column("Filed")
        for r in registry.reports_for_content(content_id):
            table.add_row(str(r.id), r.reporter, r.reason[:60], r.timestamp)
        console.print(table)


@main.command(name="show-report")
@click.argument("report_id", type=int)
@pass_ctx
def show_report(ctx: CliContext, report_id: int):
    """Show a single report."""
    try:
        r = ctx.services.registry.get_report(report_id)
    except ModerationError as e:
        _fail(e)
        return
    body = (
        f"Content:  #{r.content_id}\n"
        f"Reporter: {r.reporter}\n"
        f"Reason:   {r.reason}\n"
        f"Filed:    {r.timestamp}\n"
        f"Processed: {r.is_processed}"
    )
    console.print(Panel(body, title=f"Report #{r.id}"))


@main.command(name="contents")
@click.option("--status", type=click.Choice(STATUS_NAMES), default=None)
@pass_ctx
def list_contents(ctx: CliContext, status: str | None):
    """List content records."""
    contents = ctx.services.registry.list_contents(ContentStatus(status) if status else None)
    if not contents:
        console.print("[yellow]No content found.[/]")
        return
    console.print(_content_table(f"Content ({len(contents)})", contents))


@main.command()
@pass_ctx
def queue(ctx: CliContext):
    """List content awaiting a moderator decision."""
    contents = ctx.services.registry.moderation_queue()
    if not contents:
        console.print("[green]Moderation queue is empty.[/]")
        return
    console.print(_content_table(f"Moderation queue ({len(contents)})", contents))


# ── Moderators ───────────────────────────────────────────────────────


@main.group()
def moderators():
    """Manage the moderator set (owner only)."""


@moderators.command(name="add")
@click.argument("address")
@pass_ctx
def add_moderator(ctx: CliContext, address: str):
    """Grant moderator rights to ADDRESS."""
    try:
        ctx.services.registry.add_moderator(ctx.caller(), address)
    except ModerationError as e:
        _fail(e)
        return
    console.print(f"  [green]Added[/] moderator {address}")


@moderators.command(name="remove")
@click.argument("address")
@pass_ctx
def remove_moderator(ctx: CliContext, address: str):
    """Revoke moderator rights from ADDRESS."""
    try:
        ctx.services.registry.remove_moderator(ctx.caller(), address)
    except ModerationError as e:
        _fail(e)
        return
    console.print(f"  [green]Removed[/] moderator {address}")


@moderators.command(name="list")
@pass_ctx
def list_moderators(ctx: CliContext):
    """List moderators."""
    registry = ctx.services.registry
    for address in registry.list_moderators():
        marker = " [bold](owner)[/]" if address == registry.owner else ""
        console.print(f"  [cyan]{address}[/]{marker}")


# ── Events ───────────────────────────────────────────────────────────


@main.command()
@click.option("--event", "event_name", type=click.Choice(EVENT_NAMES), default=None)
@click.option("--content-id", type=int, default=None)
@click.option("--actor", default=None)
@click.option("--limit", default=50, show_default=True)
@click.option("--export", "fmt", type=click.Choice(["json", "csv"]), default=None, help="Print an export instead of a table")
@pass_ctx
def events(ctx: CliContext, event_name: str | None, content_id: int | None, actor: str | None, limit: int, fmt: str | None):
    """Show the event journal, newest first."""
    journal = ctx.services.journal
    filters = {"event": event_name, "content_id": content_id, "actor": actor, "limit": limit}

    if fmt:
        click.echo(journal.export_entries(fmt, **filters))
        return

    entries = journal.get_entries(**filters)
    if not entries:
        console.print("[yellow]No events recorded.[/]")
        return

    table = Table(title=f"Events ({len(entries)})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Time")
    table.add_column("Event", style="cyan")
    table.add_column("Actor")
    table.add_column("Payload")
    for e in entries:
        payload = ", ".join(f"{k}={v}" for k, v in e.payload.items())
        table.add_row(str(e.sequence), e.timestamp, e.event, e.actor, payload[:60])
    console.print(table)


# ── Webhooks ─────────────────────────────────────────────────────────


@main.group()
def webhooks():
    """Manage webhooks that forward events to indexers."""


@webhooks.command(name="add")
@click.argument("url")
@click.option("--event", "-e", "event_names", multiple=True, type=click.Choice(EVENT_NAMES), help="Subscribe to an event (default: all)")
@click.option("--secret", default="", help="HMAC signing secret")
@click.option("--name", default="", help="Display name")
@pass_ctx
def add_webhook(ctx: CliContext, url: str, event_names: tuple, secret: str, name: str):
    """Register a webhook endpoint."""
    try:
        wh = ctx.services.webhooks.register_webhook(url, list(event_names), secret=secret, name=name)
    except ValueError as e:
        console.print(f"[red]{e}[/]")
        sys.exit(1)
    console.print(f"  [green]Registered[/] webhook {wh.id} -> {wh.url}")


@webhooks.command(name="list")
@pass_ctx
def list_webhooks(ctx: CliContext):
    """List registered webhooks."""
    hooks = ctx.services.webhooks.list_webhooks()
    if not hooks:
        console.print("[yellow]No webhooks registered.[/]")
        return
    table = Table(title=f"Webhooks ({len(hooks)})")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("URL", overflow="fold")
    table.add_column("Events")
    table.add_column("Active", justify="center")
    for wh in hooks:
        table.add_row(wh.id, wh.name, wh.url, ", ".join(wh.events), "[green]Y[/]" if wh.active else "[red]N[/]")
    console.print(table)


@webhooks.command(name="remove")
@click.argument("webhook_id")
@pass_ctx
def remove_webhook(ctx: CliContext, webhook_id: str):
    """Delete a webhook."""
    if not ctx.services.webhooks.delete_webhook(webhook_id):
        console.print(f"[red]Webhook {webhook_id} not found.[/]")
        sys.exit(1)
    console.print(f"  [green]Removed[/] webhook {webhook_id}")


@webhooks.command(name="deliveries")
@click.option("--webhook-id", default=None)
@click.option("--limit", default=20, show_default=True)
@pass_ctx
def list_deliveries(ctx: CliContext, webhook_id: str | None, limit: int):
    """Show recent delivery attempts."""
    deliveries = ctx.services.webhooks.get_deliveries(webhook_id, limit=limit)
    if not deliveries:
        console.print("[yellow]No deliveries recorded.[/]")
        return
    for d in deliveries:
        status = "[green]OK[/]" if d.success else "[red]FAIL[/]"
        console.print(f"  {status} {d.event} -> {d.webhook_id} ({d.response_status}, {d.duration_ms}ms)")


if __name__ == "__main__":
    main()
