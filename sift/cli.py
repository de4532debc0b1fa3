"""Sift CLI — analyze and moderate comments from the command line."""

import json
import logging

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from sift import __version__

console = Console()

_ACTION_STYLES = {
    "approve": "green",
    "review": "yellow",
    "auto_hide": "magenta",
    "reject": "red",
}


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load(ctx: click.Context):
    """Load configuration once per invocation, reporting errors in red."""
    from sift.config import ConfigError, load_config
    from sift.moderation.policy import PolicyError

    if "config" not in ctx.obj:
        try:
            config = load_config(ctx.obj["config_path"])
            if ctx.obj["log_level"]:
                config.log_level = ctx.obj["log_level"].upper()
            config.load_decision_policy()
        except (ConfigError, PolicyError, OSError) as e:
            console.print(f"[red]Configuration error:[/] {e}")
            ctx.exit(2)
        _configure_logging(config.log_level)
        ctx.obj["config"] = config
    return ctx.obj["config"]


def _engine(ctx: click.Context):
    from sift.moderation.engine import ModerationEngine

    config = _load(ctx)
    return ModerationEngine.from_config(config)


def _print_analysis(analysis, title: str = "Analysis") -> None:
    action = analysis.recommended_action.value
    style = _ACTION_STYLES[action]

    table = Table(show_header=False, box=None)
    table.add_column("Field", style="dim")
    table.add_column("Value")
    table.add_row("Action", f"[{style}]{action}[/]")
    table.add_row("Sentiment", f"{analysis.sentiment_score:+.2f}")
    table.add_row("Toxicity", f"{analysis.toxicity_score:.2f}")
    table.add_row("Confidence", f"{analysis.confidence:.2f}")
    table.add_row("Language", analysis.language)
    table.add_row("Topics", ", ".join(analysis.topics) or "-")
    table.add_row("Mentions", ", ".join(f"@{m}" for m in analysis.mentions) or "-")
    console.print(Panel(table, title=title))

    for flag in analysis.flags:
        console.print(f"  [{style}]![/] {escape(f'[{flag.kind.value}]')} {escape(flag.reason)} ({flag.confidence:.2f})")


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", default=None, help="YAML config file (default: $SIFT_CONFIG)")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Override the configured log level",
)
@click.pass_context
def main(ctx: click.Context, config_path: str | None, log_level: str | None):
    """Sift — inline comment moderation.

    Scores comments for sentiment, toxicity and spam, extracts topics,
    mentions and language, and recommends approve / review / auto_hide /
    reject.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["log_level"] = log_level


# ── Analyze ──────────────────────────────────────────────────────────


@main.command()
@click.argument("text")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.pass_context
def analyze(ctx: click.Context, text: str, as_json: bool):
    """Analyze a single comment and print the full breakdown."""
    engine = _engine(ctx)
    try:
        result = engine.analyze_comment(text)
    finally:
        engine.close()

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return
    _print_analysis(result)


# ── Moderate ─────────────────────────────────────────────────────────


@main.command()
@click.argument("text")
@click.pass_context
def moderate(ctx: click.Context, text: str):
    """Real-time pass/fail check. Exits with status 1 when not approved."""
    engine = _engine(ctx)
    try:
        decision = engine.moderate_realtime(text)
    finally:
        engine.close()

    if decision.approved:
        console.print("[green]APPROVED[/]")
        return
    action = decision.analysis.recommended_action.value
    console.print(f"[{_ACTION_STYLES[action]}]{action.upper()}[/] {escape(decision.reason or '')}")
    ctx.exit(1)


# ── Batch ────────────────────────────────────────────────────────────


@main.command()
@click.argument("path", type=click.File("r", encoding="utf-8"))
@click.option("--workers", "-w", default=None, type=int, help="Worker threads (default: config)")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.pass_context
def batch(ctx: click.Context, path, workers: int | None, as_json: bool):
    """Analyze a file of comments, one per line. Use '-' for stdin."""
    texts = [line.rstrip("\n") for line in path if line.strip()]
    if not texts:
        console.print("[yellow]No comments to analyze.[/]")
        return

    engine = _engine(ctx)
    try:
        results = engine.analyze_comments(texts, max_workers=workers)
    finally:
        engine.close()

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in results], indent=2))
        return

    table = Table(title=f"Batch Results ({len(results)} comments)")
    table.add_column("#", style="dim", width=4)
    table.add_column("Action")
    table.add_column("Sentiment", justify="right")
    table.add_column("Toxicity", justify="right")
    table.add_column("Flags")
    table.add_column("Comment")

    for i, (text, r) in enumerate(zip(texts, results), start=1):
        action = r.recommended_action.value
        table.add_row(
            str(i),
            f"[{_ACTION_STYLES[action]}]{action}[/]",
            f"{r.sentiment_score:+.2f}",
            f"{r.toxicity_score:.2f}",
            ", ".join(f.kind.value for f in r.flags) or "-",
            escape(text[:40]),
        )

    console.print(table)


# ── Policy ───────────────────────────────────────────────────────────


@main.command()
@click.option("--policy", "policy_path", default=None, help="Policy YAML to inspect")
@click.pass_context
def policy(ctx: click.Context, policy_path: str | None):
    """Show the decision thresholds in effect."""
    from sift.moderation.policy import PolicyError, load_policy

    if policy_path:
        try:
            decision_policy = load_policy(policy_path)
        except (PolicyError, OSError) as e:
            console.print(f"[red]Invalid policy:[/] {e}")
            ctx.exit(2)
    else:
        decision_policy = _load(ctx).load_decision_policy()

    table = Table(title="Decision Policy")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", justify="right")
    for key, value in decision_policy.to_dict().items():
        table.add_row(key, str(value))
    console.print(table)


# ── Audit ────────────────────────────────────────────────────────────


def _audit_sink(ctx: click.Context):
    from sift.audit.audit_log import JsonlAuditSink

    config = _load(ctx)
    if config.audit_url:
        console.print("[yellow]Audit records are sent to a REST endpoint; nothing to read locally.[/]")
        ctx.exit(1)
    return JsonlAuditSink(config.audit_dir or None)


@main.group()
def audit():
    """Inspect the local audit log."""


@audit.command(name="list")
@click.option("--action", "-a", default=None, type=click.Choice(list(_ACTION_STYLES)))
@click.option("--language", "-l", default=None, help="Filter by language code")
@click.option("--limit", "-n", default=20, help="Maximum records to show")
@click.pass_context
def list_records(ctx: click.Context, action: str | None, language: str | None, limit: int):
    """List recent audit records, newest first."""
    sink = _audit_sink(ctx)
    records = sink.get_records(action=action, language=language, limit=limit)

    if not records:
        console.print("[yellow]No audit records found.[/]")
        return

    table = Table(title=f"Audit Records ({len(records)})")
    table.add_column("Analyzed", style="dim")
    table.add_column("Hash", style="cyan")
    table.add_column("Action")
    table.add_column("Toxicity", justify="right")
    table.add_column("Sentiment", justify="right")
    table.add_column("Lang")
    table.add_column("Flags")

    for r in records:
        table.add_row(
            r.analyzed_at[:19],
            r.content_hash[:12],
            f"[{_ACTION_STYLES.get(r.recommended_action, 'white')}]{r.recommended_action}[/]",
            f"{r.toxicity_score:.2f}",
            f"{r.sentiment_score:+.2f}",
            r.language,
            ", ".join(f.get("type", "") for f in r.flags) or "-",
        )

    console.print(table)


@audit.command(name="export")
@click.option("--format", "fmt", default="json", type=click.Choice(["json", "csv"]))
@click.option("--action", "-a", default=None, type=click.Choice(list(_ACTION_STYLES)))
@click.pass_context
def export_records(ctx: click.Context, fmt: str, action: str | None):
    """Export the audit log to stdout."""
    sink = _audit_sink(ctx)
    click.echo(sink.export_records(fmt, action=action))


@audit.command()
@click.pass_context
def stats(ctx: click.Context):
    """Count recorded analyses per recommended action."""
    sink = _audit_sink(ctx)
    counts = sink.action_counts()
    total = sum(counts.values())

    table = Table(title=f"Audit Stats ({total} analyses)")
    table.add_column("Action")
    table.add_column("Count", justify="right")
    table.add_column("Share", justify="right")
    for action, style in _ACTION_STYLES.items():
        count = counts.get(action, 0)
        share = f"{count / total:.0%}" if total else "-"
        table.add_row(f"[{style}]{action}[/]", str(count), share)
    console.print(table)


if __name__ == "__main__":
    main()
