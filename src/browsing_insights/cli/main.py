"""CLI entry point for browsing-insights.

Invoked as::

    browsing-insights [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m browsing_insights.cli.main

All inputs are JSON files.

Commands
--------
- version — Show version information
- history — Session / ranking / batching over visit records
- chat    — Freshness scoring of recent user chat messages
- shortcuts — Shortcut scoring, weight learning and sticky reordering

History sub-commands
--------------------
- history sessions — Show how visits split into sessions
- history rank     — Show the ranked domains, titles and searches
- history batches  — Show the token-budget batches of a run

Shortcuts sub-commands
----------------------
- shortcuts score  — Score candidates with a saved model state
- shortcuts learn  — Update model weights from click/impression feedback
- shortcuts sticky — Reorder guids to keep clicked shortcuts in place
"""
from __future__ import annotations

import json
import logging
import random
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Input helpers
# ---------------------------------------------------------------------------


def _load_json(path: str) -> object:
    """Read and decode a JSON file, exiting with a red message on failure."""
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except (ValueError, OSError) as exc:
        console.print(f"[red]Failed to read {path}:[/red] {exc}")
        sys.exit(1)


def _load_visits(
    path: str,
    raw: bool,
    insights: object,
    last_run_ms: float | None = None,
    now: float | None = None,
) -> list[object]:
    """Load visit records, or raw history rows when ``raw`` is set.

    Raw rows are windowed by ``insights`` before their frecency percentiles
    are computed.
    """
    from browsing_insights.history.records import VisitRecord

    data = _load_json(path)
    if not isinstance(data, list):
        console.print(f"[red]Expected a JSON list of visits in {path}[/red]")
        sys.exit(1)
    try:
        if raw:
            return insights.collect(data, last_run_ms=last_run_ms, now=now)  # type: ignore[attr-defined]
        return [VisitRecord.model_validate(item) for item in data]
    except ValueError as exc:
        console.print(f"[red]Invalid visit record:[/red] {exc}")
        sys.exit(1)


def _load_state(path: str | None) -> object:
    """Load a model state file, or return an empty state when ``path`` is None."""
    from browsing_insights.state import ModelState, ModelStateSerializer

    if path is None:
        return ModelState()
    fmt = "yaml" if path.endswith((".yaml", ".yml")) else "json"
    try:
        raw = Path(path).read_text(encoding="utf-8")
        return ModelStateSerializer().deserialize(raw, format=fmt)
    except (ValueError, OSError) as exc:
        console.print(f"[red]Failed to load model state:[/red] {exc}")
        sys.exit(1)


def _save_state(state: object, path: str) -> None:
    from browsing_insights.state import ModelStateSerializer

    fmt = "yaml" if path.endswith((".yaml", ".yml")) else "json"
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(ModelStateSerializer().serialize(state, format=fmt), encoding="utf-8")  # type: ignore[arg-type]
    console.print(f"[green]Model state saved:[/green] {path}")


def _ranked_table(title: str, rows: list[tuple[str, float]]) -> Table:
    table = Table(title=title, show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Key", style="cyan")
    table.add_column("Rank", justify="right")
    for index, (key, rank) in enumerate(rows, start=1):
        table.add_row(str(index), key, f"{rank:.2f}")
    return table


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="browsing-insights")
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="YAML configuration file.",
)
@click.option("--verbose", is_flag=True, help="Log pipeline stages to stderr.")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """Session aggregation and ranking over browsing history and chats"""
    from browsing_insights.config import ConfigError, load_config

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = load_config(config_path)
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from browsing_insights import __version__

    console.print(f"[bold]browsing-insights[/bold] v{__version__}")


# ---------------------------------------------------------------------------
# history command group
# ---------------------------------------------------------------------------


@cli.group(name="history")
def history_group() -> None:
    """Browsing-history aggregation commands."""


@history_group.command(name="sessions")
@click.argument("visits_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--raw", is_flag=True, help="Input holds raw history rows with frecency values.")
@click.pass_context
def history_sessions(ctx: click.Context, visits_file: str, raw: bool) -> None:
    """Show how the visits in VISITS_FILE split into sessions."""
    from browsing_insights.history.sessionizer import sessionize_visits

    config = ctx.obj["config"]
    visits = _load_visits(visits_file, raw, config.history_insights())
    sessionized = sessionize_visits(visits, config.session)  # type: ignore[arg-type]
    if not sessionized:
        console.print("[yellow]No visits with valid timestamps.[/yellow]")
        return

    groups: dict[int, list[object]] = {}
    for visit in sessionized:
        groups.setdefault(visit.session_id, []).append(visit)

    table = Table(title="Sessions", show_lines=False)
    table.add_column("Session ID", style="cyan")
    table.add_column("Started (UTC)")
    table.add_column("Visits", justify="right")
    table.add_column("Domains")

    for session_id, visits in groups.items():
        domains = sorted({visit.domain for visit in visits if visit.domain})  # type: ignore[attr-defined]
        table.add_row(
            str(session_id),
            visits[0].session_start_iso,  # type: ignore[attr-defined]
            str(len(visits)),
            ", ".join(domains[:5]) + (" ..." if len(domains) > 5 else ""),
        )

    console.print(table)
    console.print(f"\n[dim]{len(sessionized)} visits in {len(groups)} sessions.[/dim]")


@history_group.command(name="rank")
@click.argument("visits_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--raw", is_flag=True, help="Input holds raw history rows with frecency values.")
@click.option(
    "--last-run-ms",
    default=None,
    type=float,
    help="Time of the previous run in ms; selects a delta run.",
)
@click.option("--now", default=None, type=float, help="Reference time in seconds or ms.")
@click.option("--json-output", is_flag=True, help="Output raw JSON instead of tables.")
@click.pass_context
def history_rank(
    ctx: click.Context,
    visits_file: str,
    raw: bool,
    last_run_ms: float | None,
    now: float | None,
    json_output: bool,
) -> None:
    """Rank the domains, titles and searches in VISITS_FILE."""
    insights = ctx.obj["config"].history_insights()
    result = insights.run(
        _load_visits(visits_file, raw, insights, last_run_ms, now),
        last_run_ms=last_run_ms,
        now=now,
    )

    if json_output:
        console.print_json(json.dumps(result.aggregates.to_dict()))
        return

    if not result.has_any_history():
        console.print("[yellow]No history to rank.[/yellow]")
        return

    aggregates = result.aggregates
    console.print(f"[bold]{result.mode.value}[/bold] run over {result.visit_count} visits")
    console.print(_ranked_table("Domains", aggregates.domains))
    console.print(_ranked_table("Titles", aggregates.titles))

    searches = Table(title="Searches", show_lines=False)
    searches.add_column("Session", style="cyan")
    searches.add_column("Count", justify="right")
    searches.add_column("Rank", justify="right")
    searches.add_column("Queries")
    for item in aggregates.searches:
        searches.add_row(str(item.sid), str(item.cnt), f"{item.r:.2f}", "; ".join(item.q))
    console.print(searches)


@history_group.command(name="batches")
@click.argument("visits_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--raw", is_flag=True, help="Input holds raw history rows with frecency values.")
@click.option("--last-run-ms", default=None, type=float, help="Time of the previous run in ms.")
@click.option("--now", default=None, type=float, help="Reference time in seconds or ms.")
@click.pass_context
def history_batches(
    ctx: click.Context,
    visits_file: str,
    raw: bool,
    last_run_ms: float | None,
    now: float | None,
) -> None:
    """Show the token-budget batches produced for VISITS_FILE."""
    insights = ctx.obj["config"].history_insights()
    result = insights.run(
        _load_visits(visits_file, raw, insights, last_run_ms, now),
        last_run_ms=last_run_ms,
        now=now,
    )

    if not result.batches:
        console.print("[yellow]No batches produced.[/yellow]")
        return

    table = Table(title=f"Batches (budget {insights.token_budget} tokens)", show_lines=False)
    table.add_column("Batch", justify="right", style="cyan")
    table.add_column("Domains", justify="right")
    table.add_column("Titles", justify="right")
    table.add_column("Searches", justify="right")
    for index, batch in enumerate(result.batches, start=1):
        table.add_row(str(index), str(len(batch.domains)), str(len(batch.titles)), str(len(batch.searches)))
    console.print(table)


# ---------------------------------------------------------------------------
# chat command group
# ---------------------------------------------------------------------------


@cli.group(name="chat")
def chat_group() -> None:
    """Chat message commands."""


@chat_group.command(name="score")
@click.argument("chats_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--start-ms", default=0, show_default=True, type=int, help="Earliest creation time in ms.")
@click.option("--max-results", default=None, type=int, help="Override the configured result cap.")
@click.option("--half-life-days", default=None, type=float, help="Override the configured half-life.")
@click.option("--now-ms", default=None, type=int, help="Reference time in ms.")
@click.pass_context
def chat_score(
    ctx: click.Context,
    chats_file: str,
    start_ms: int,
    max_results: int | None,
    half_life_days: float | None,
    now_ms: int | None,
) -> None:
    """Score the recent user messages in CHATS_FILE by freshness."""
    from browsing_insights.chat.freshness import ChatMessage, score_recent_chats

    chat_config = ctx.obj["config"].chat
    data = _load_json(chats_file)
    if not isinstance(data, list):
        console.print(f"[red]Expected a JSON list of messages in {chats_file}[/red]")
        sys.exit(1)
    try:
        messages = [ChatMessage.model_validate(item) for item in data]
    except ValueError as exc:
        console.print(f"[red]Invalid chat message:[/red] {exc}")
        sys.exit(1)

    scored = score_recent_chats(
        messages,
        start_ms=start_ms,
        max_results=chat_config.max_results if max_results is None else max_results,
        half_life_days=chat_config.half_life_days if half_life_days is None else half_life_days,
        now=now_ms,
    )
    if not scored:
        console.print("[yellow]No recent user messages.[/yellow]")
        return

    for item in scored:
        header = f"[green]USER[/green] | freshness={item.freshness_score:.3f} | created_ms={item.message.created_ms}"
        console.print(Panel(item.message.content or "", title=header, expand=False))


# ---------------------------------------------------------------------------
# shortcuts command group
# ---------------------------------------------------------------------------


@cli.group(name="shortcuts")
def shortcuts_group() -> None:
    """Smart shortcut ranking commands."""


@shortcuts_group.command(name="score")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--state", "state_file", default=None, type=click.Path(dir_okay=False), help="Model state file.")
@click.option("--save-state", default=None, type=click.Path(dir_okay=False), help="Write the updated state here.")
@click.option("--seed", default=None, type=int, help="Seed for Thompson sampling.")
@click.option("--json-output", is_flag=True, help="Output the raw score map as JSON.")
@click.pass_context
def shortcuts_score(
    ctx: click.Context,
    input_file: str,
    state_file: str | None,
    save_state: str | None,
    seed: int | None,
    json_output: bool,
) -> None:
    """Score the candidates described in INPUT_FILE."""
    from browsing_insights.shortcuts.ranker import ShortcutRanker
    from browsing_insights.shortcuts.scoring import ShortcutScoringInput

    try:
        inputs = ShortcutScoringInput.model_validate(_load_json(input_file))
    except ValueError as exc:
        console.print(f"[red]Invalid scoring input:[/red] {exc}")
        sys.exit(1)

    state = _load_state(state_file)
    rng = random.Random(seed) if seed is not None else None
    ranker = ShortcutRanker(config=ctx.obj["config"].shortcuts, rng=rng)
    result = ranker.score(inputs, state)  # type: ignore[arg-type]

    if json_output:
        console.print_json(json.dumps(result.to_dict()))
    else:
        table = Table(title="Shortcut scores", show_lines=False)
        table.add_column("#", justify="right", style="dim")
        table.add_column("GUID", style="cyan")
        table.add_column("Score", justify="right")
        for index, candidate in enumerate(result.ranked(), start=1):
            table.add_row(str(index), candidate.guid, f"{candidate.final_score:.4f}")
        console.print(table)

    if save_state:
        _save_state(state.updated(norms=result.norms), save_state)  # type: ignore[attr-defined]


@shortcuts_group.command(name="learn")
@click.argument("feedback_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--state", "state_file", default=None, type=click.Path(dir_okay=False), help="Model state file.")
@click.option("--output", "output_file", required=True, type=click.Path(dir_okay=False), help="Where to write the new state.")
@click.pass_context
def shortcuts_learn(
    ctx: click.Context,
    feedback_file: str,
    state_file: str | None,
    output_file: str,
) -> None:
    """Update weights from FEEDBACK_FILE.

    FEEDBACK_FILE holds ``{"feedback": {guid: {clicks, impressions}},
    "scores": {guid: {feature: value, "final": value}}}``.
    """
    from browsing_insights.shortcuts.learning import FeedbackCounts
    from browsing_insights.shortcuts.ranker import ShortcutRanker

    data = _load_json(feedback_file)
    if not isinstance(data, dict):
        console.print(f"[red]Expected a JSON object in {feedback_file}[/red]")
        sys.exit(1)
    try:
        feedback = {
            guid: FeedbackCounts.model_validate(counts)
            for guid, counts in dict(data.get("feedback") or {}).items()
        }
        scores = {
            guid: {name: float(value) for name, value in values.items()}
            for guid, values in dict(data.get("scores") or {}).items()
        }
    except (ValueError, TypeError, AttributeError) as exc:
        console.print(f"[red]Invalid feedback file:[/red] {exc}")
        sys.exit(1)

    state = _load_state(state_file)
    ranker = ShortcutRanker(config=ctx.obj["config"].shortcuts)
    new_state = ranker.learn(feedback, scores, state)  # type: ignore[arg-type]

    table = Table(title="Weights", show_lines=False)
    table.add_column("Feature", style="cyan")
    table.add_column("Before", justify="right")
    table.add_column("After", justify="right")
    for feature in sorted(new_state.weights):
        before = state.weights.get(feature, 0.0)  # type: ignore[attr-defined]
        table.add_row(feature, f"{before:.4f}", f"{new_state.weights[feature]:.4f}")
    console.print(table)
    _save_state(new_state, output_file)


@shortcuts_group.command(name="sticky")
@click.option("--guids", required=True, help="Comma-separated guids in ranked order.")
@click.option(
    "--positions",
    required=True,
    help="Comma-separated last-click positions aligned with --guids; empty means none.",
)
@click.option("--num-sponsored", default=0, show_default=True, type=int, help="Sponsored tiles ahead.")
def shortcuts_sticky(guids: str, positions: str, num_sponsored: int) -> None:
    """Reorder guids so clicked shortcuts keep their positions."""
    from browsing_insights.shortcuts.sticky import apply_sticky_clicks

    guid_list = [guid.strip() for guid in guids.split(",") if guid.strip()]
    try:
        position_list = [int(p) if p.strip() else None for p in positions.split(",")]
    except ValueError as exc:
        console.print(f"[red]Invalid positions:[/red] {exc}")
        sys.exit(1)

    ordered = apply_sticky_clicks(position_list, guid_list, num_sponsored)
    console.print(", ".join(ordered))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


if __name__ == "__main__":
    cli()
