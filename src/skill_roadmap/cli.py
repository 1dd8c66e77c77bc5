"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from skill_roadmap.cache.analysis_cache import ContentHashAnalysisCache
from skill_roadmap.cache.occupation_manager import OccupationCacheManager
from skill_roadmap.cache.occupation_store import OccupationCacheStore
from skill_roadmap.clients.llm_client import LLMClient
from skill_roadmap.clients.onet_client import RateLimitedOccupationClient
from skill_roadmap.config import AppConfig, load_config
from skill_roadmap.errors import InvalidInputError, SkillRoadmapError
from skill_roadmap.parsers.resume_parser import load_resume
from skill_roadmap.pipeline.orchestrator import PipelineResult, SkillGapPipeline
from skill_roadmap.scoring.scorer import CATEGORY_LABELS, MultiFactorScorer
from skill_roadmap.telemetry.run_store import RunLogStore

app = typer.Typer(
    name="skill-roadmap",
    help="Résumé skill-gap analysis against O*NET occupations",
    no_args_is_help=True,
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _build_manager(config: AppConfig) -> OccupationCacheManager:
    store = OccupationCacheStore(
        db_path=config.cache.resolved_db_path,
        ttl_days=config.cache.ttl_days,
    )
    client = RateLimitedOccupationClient(
        base_url=config.onet.base_url,
        timeout=config.onet.timeout,
        min_request_interval=config.onet.min_request_interval_ms / 1000,
        cache_version=config.onet.cache_version,
        search_limit=config.onet.search_limit,
    )
    return OccupationCacheManager(
        store,
        client,
        batch_size=config.onet.batch_size,
        cache_version=config.onet.cache_version,
    )


def _parse_skill_option(value: str | None) -> list[dict] | None:
    """"Python:30, SQL:advanced" -> [{"name": "Python", "level": "30"}, ...]."""
    if not value:
        return None
    skills = []
    for part in value.split(","):
        name, _, level = part.strip().partition(":")
        if name:
            skills.append({"name": name.strip(), "level": level.strip() or None})
    return skills


def _load_resume_or_exit(path: Path):
    try:
        return load_resume(path)
    except InvalidInputError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)


@app.command()
def analyze(
    resume: Path = typer.Argument(help="Résumé file (JSON/PDF/DOCX/TXT/MD)"),
    code: str = typer.Option(None, "--code", "-c", help="Target O*NET occupation code"),
    role: str = typer.Option(None, "--role", "-r", help="Target role, searched when no code is given"),
    current_role: str = typer.Option("", "--current-role", help="Your current job title"),
    skills: str = typer.Option(None, "--skills", help='Current skills, e.g. "Python:30,SQL:advanced"'),
    hours: float = typer.Option(None, "--hours", help="Study hours per week"),
    subject: str = typer.Option("anonymous", "--subject", help="Subject id for caching and history"),
    as_json: bool = typer.Option(False, "--json", help="Print the gap analysis as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Analyze a résumé against a target occupation and print a roadmap."""
    _setup_logging(verbose)
    if not code and not role:
        console.print("[red]Give --code or --role.[/red]")
        raise typer.Exit(1)

    config = load_config()
    document = _load_resume_or_exit(resume)
    manager = _build_manager(config)
    llm = LLMClient.from_config(config.llm)
    pipeline = SkillGapPipeline(
        manager,
        analysis_cache=ContentHashAnalysisCache(
            config.cache.resolved_analysis_db_path,
            retention=config.cache.analysis_retention,
        ),
        llm=llm,
        run_store=RunLogStore(config.cache.resolved_runs_db_path),
        config=config,
    )

    async def _run() -> PipelineResult:
        async with manager.client:
            return await pipeline.analyze(
                document,
                subject_id=subject,
                occupation_code=code,
                target_role=role,
                current_role=current_role,
                current_skills=_parse_skill_option(skills),
                weekly_hours=hours,
            )

    try:
        with console.status("Analyzing..."):
            result = asyncio.run(_run())
    except SkillRoadmapError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)

    if as_json:
        console.print_json(result.gap_analysis.model_dump_json())
        return
    _print_result(result)


def _print_result(result: PipelineResult) -> None:
    gap = result.gap_analysis
    source = result.occupation.source
    style = "yellow" if result.degraded else "green"
    console.print(Panel(
        f"[bold]{gap.occupation_title}[/bold] ({gap.occupation_code})\n"
        f"Data source: [{style}]{source}[/{style}]  "
        f"Résumé score: [bold]{result.score.overall}[/bold]/100"
        f"{' (cached)' if result.score_cached else ''}\n"
        f"Transition: {result.transition_type}  "
        f"Current skills: {len(result.current_skills)} ({result.skill_source})",
        title="Skill gap analysis",
    ))

    if gap.gaps:
        table = Table(title="Gaps by priority")
        table.add_column("Skill")
        table.add_column("Type")
        table.add_column("Criticality")
        table.add_column("Current", justify="right")
        table.add_column("Target", justify="right")
        table.add_column("Priority", justify="right")
        table.add_column("Time")
        table.add_column("Phase", justify="right")
        for g in gap.gaps:
            name = f"{g.skill_name} *" if g.quick_win else g.skill_name
            table.add_row(
                name,
                g.requirement_type,
                g.criticality.value,
                str(g.current_level),
                str(g.target_level),
                f"{g.priority_score:.1f}",
                g.time_estimate.label,
                str(g.phase),
            )
        console.print(table)
        if gap.quick_wins:
            console.print("[dim]* quick win[/dim]")
    else:
        console.print("[green]No gaps: you meet every requirement.[/green]")

    for phase in gap.roadmap:
        console.print(
            f"[bold]Phase {phase.phase}[/bold] ({phase.horizon}) {phase.milestone_title}: "
            f"{', '.join(phase.skills)}  [dim]{phase.total_hours}h, ~{phase.estimated_weeks} weeks[/dim]"
        )

    if gap.transferable_skills:
        names = ", ".join(t.skill_name for t in gap.transferable_skills)
        console.print(f"[green]Already meets:[/green] {names}")
    for warning in result.warnings:
        console.print(f"[yellow]! {warning}[/yellow]")


@app.command()
def score(
    resume: Path = typer.Argument(help="Résumé file (JSON/PDF/DOCX/TXT/MD)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Score a résumé without occupation data."""
    _setup_logging(verbose)
    config = load_config()
    document = _load_resume_or_exit(resume)
    report = MultiFactorScorer(config.scoring).score(document)

    table = Table(title=f"Résumé score: {report.overall}/100")
    table.add_column("Category")
    table.add_column("Score", justify="right")
    table.add_column("Normalized", justify="right")
    for name, cat in report.categories.items():
        table.add_row(CATEGORY_LABELS[name], f"{cat.score}/{cat.max_score}", f"{cat.normalized:.0f}%")
    console.print(table)
    for rec in report.recommendations:
        console.print(f"[bold]{rec.priority.upper()}[/bold] {rec.title}")
        for action in rec.actions:
            console.print(f"  - {action}")


@app.command()
def occupation(
    code: str = typer.Argument(help="O*NET occupation code, e.g. 15-1252.00"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Show an occupation's requirements (cache first)."""
    _setup_logging(verbose)
    manager = _build_manager(load_config())

    async def _run():
        async with manager.client:
            return await manager.resolve(code)

    resolution = asyncio.run(_run())
    record = resolution.record
    table = Table(title=f"{record.title} ({record.code}) [{resolution.source}]")
    table.add_column("Requirement")
    table.add_column("Kind")
    table.add_column("Importance", justify="right")
    table.add_column("Level", justify="right")
    for s in record.skills:
        table.add_row(s.name, s.category, str(s.importance), str(s.level))
    for k in record.knowledge_areas:
        table.add_row(k.name, "Knowledge", str(k.importance), str(k.level))
    for a in record.abilities:
        table.add_row(a.name, "Ability", str(a.importance), str(a.level))
    console.print(table)
    for error in resolution.errors:
        console.print(f"[yellow]! {error}[/yellow]")


@app.command()
def search(
    query: str = typer.Argument(help="Occupation title keywords"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Search occupations by title."""
    _setup_logging(verbose)
    manager = _build_manager(load_config())

    async def _run():
        async with manager.client:
            return await manager.search_occupations(query)

    results = asyncio.run(_run())
    if not results:
        console.print("[yellow]No occupations found.[/yellow]")
        return
    for summary in results:
        console.print(f"  [bold]{summary.code}[/bold] {summary.title}")


@app.command("cache-stats")
def cache_stats() -> None:
    """Show cache and run statistics."""
    config = load_config()
    try:
        store = OccupationCacheStore(config.cache.resolved_db_path, ttl_days=config.cache.ttl_days)
        analyses = ContentHashAnalysisCache(config.cache.resolved_analysis_db_path).stats()
        runs = RunLogStore(config.cache.resolved_runs_db_path).get_stats()
        occ = store.stats()
    except (SkillRoadmapError, sqlite3.Error) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)
    console.print(Panel(
        f"Occupations: {occ['active']} active, {occ['expired']} expired\n"
        f"Analyses: {analyses['total']}\n"
        f"Runs: {runs['total_runs']}  "
        f"occupation cache hit rate {runs['occupation_cache_hit_rate']:.0f}%  "
        f"degraded {runs['degraded_rate']:.0f}%  "
        f"score cache hit rate {runs['score_cache_hit_rate']:.0f}%\n"
        f"LLM cost: ${runs['total_cost_usd']:.4f}",
        title="Cache statistics",
    ))


@app.command("cache-sweep")
def cache_sweep() -> None:
    """Delete expired occupation records."""
    config = load_config()
    try:
        store = OccupationCacheStore(config.cache.resolved_db_path, ttl_days=config.cache.ttl_days)
        deleted = store.sweep_expired()
    except (SkillRoadmapError, sqlite3.Error) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Deleted {deleted} expired records.[/green]")


@app.command()
def history(
    subject: str = typer.Option("anonymous", "--subject", help="Subject id"),
    limit: int = typer.Option(10, "--limit", "-n", help="Number of runs to show"),
    as_json: bool = typer.Option(False, "--json", help="Print as JSON"),
) -> None:
    """Show recent analysis runs for a subject."""
    config = load_config()
    try:
        logs = RunLogStore(config.cache.resolved_runs_db_path).get_logs(subject_id=subject, limit=limit)
    except (SkillRoadmapError, sqlite3.Error) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)
    if as_json:
        console.print_json(json.dumps([log.model_dump(mode="json") for log in logs]))
        return
    if not logs:
        console.print("[yellow]No runs recorded.[/yellow]")
        return
    table = Table(title=f"Runs for {subject}")
    table.add_column("When")
    table.add_column("Occupation")
    table.add_column("Source")
    table.add_column("Score", justify="right")
    table.add_column("Gaps", justify="right")
    table.add_column("Transition")
    for log in logs:
        table.add_row(
            log.timestamp.strftime("%Y-%m-%d %H:%M"),
            f"{log.occupation_title} ({log.occupation_code})",
            log.occupation_source or "-",
            str(log.overall_score if log.overall_score is not None else "-"),
            str(log.gap_count),
            log.transition_type or "-",
        )
    console.print(table)


if __name__ == "__main__":
    app()
