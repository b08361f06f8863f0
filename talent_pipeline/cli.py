"""
Talent Pipeline Command Line Interface

Provides CLI commands for moving applications through the hiring
pipeline, inspecting their history, and scoring candidates against jobs.
"""

import json
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

app = typer.Typer(
    name="talent-pipeline",
    help="Application pipeline and match-scoring CLI",
    add_completion=False,
)
console = Console()


@app.callback()
def main():
    """Configure logging before any command runs."""
    from talent_pipeline.utils.logger import setup_logging

    setup_logging()


@app.command()
def version():
    """Show application version."""
    from talent_pipeline import __app_name__, __version__

    console.print(f"[bold blue]{__app_name__}[/bold blue] version [green]{__version__}[/green]")


@app.command()
def info():
    """Show configuration."""
    from talent_pipeline.utils.config import get_settings

    settings = get_settings()

    table = Table(title="Talent Pipeline Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Environment", settings.environment)
    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Database Host", settings.database.host)
    table.add_row("Database Name", settings.database.name)
    table.add_row("Notifications", "enabled" if settings.notifications.enabled else "disabled")
    table.add_row(
        "Scoring Weights",
        ", ".join(f"{d}={w:.2f}" for d, w in settings.scoring.weights.items()),
    )
    table.add_row("Log Level", settings.logging.level)

    console.print(table)


@app.command()
def init_db():
    """Initialize the database with required indexes."""
    console.print("[yellow]Initializing database...[/yellow]")

    db_manager = _require_db()
    console.print("  [green]✓[/green] Connected to MongoDB")

    try:
        db_manager.ensure_indexes()
    except Exception as e:
        console.print(f"[red]Error creating indexes: {e}[/red]")
        raise typer.Exit(1)

    console.print("  [green]✓[/green] Indexes created")
    console.print("\n[green]Database initialized successfully![/green]")


@app.command()
def stages():
    """List the pipeline stages."""
    from talent_pipeline.core.pipeline import get_stage_registry

    table = Table(title="Pipeline Stages")
    table.add_column("Rank", justify="right", style="dim")
    table.add_column("Stage", style="cyan")
    table.add_column("Label")
    table.add_column("Description")
    table.add_column("Terminal", justify="center")

    for stage in get_stage_registry().list_stages():
        table.add_row(
            str(stage.rank) if stage.rank is not None else "-",
            stage.id.value,
            stage.label,
            stage.description,
            "✓" if stage.terminal else "",
        )

    console.print(table)


@app.command()
def create_application(
    job_id: str = typer.Argument(..., help="Job posting ID"),
    candidate_id: str = typer.Argument(..., help="Candidate ID"),
):
    """Register a submitted application in the PENDING stage."""
    from talent_pipeline.core.pipeline import PersistenceError
    from talent_pipeline.data.models import ApplicationCreate
    from talent_pipeline.data.repositories import get_application_repository

    _require_db()

    try:
        application = get_application_repository().create_from_schema(
            ApplicationCreate(job_id=job_id, candidate_id=candidate_id)
        )
    except PersistenceError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(
        f"[green]✓ Application created:[/green] [cyan]{application.application_id}[/cyan]"
    )


@app.command()
def move_stage(
    application_id: str = typer.Argument(..., help="Application ID"),
    stage: str = typer.Argument(..., help="Target stage (e.g. REVIEWED, SHORTLISTED)"),
    message: Optional[str] = typer.Option(None, "--message", "-m", help="Note for the candidate"),
    actor: str = typer.Option(..., "--actor", "-a", help="ID of the employer making the change"),
):
    """Move an application to another stage."""
    _execute(lambda service: service.move_stage(application_id, stage, message, actor_id=actor))


@app.command()
def advance(
    application_id: str = typer.Argument(..., help="Application ID"),
    message: Optional[str] = typer.Option(None, "--message", "-m", help="Note for the candidate"),
    actor: str = typer.Option(..., "--actor", "-a", help="ID of the employer making the change"),
):
    """Move an application to the next stage."""
    _execute(lambda service: service.advance(application_id, message, actor_id=actor))


@app.command()
def shortlist(
    application_id: str = typer.Argument(..., help="Application ID"),
    message: Optional[str] = typer.Option(None, "--message", "-m", help="Note for the candidate"),
    actor: str = typer.Option(..., "--actor", "-a", help="ID of the employer making the change"),
):
    """Shortlist a candidate."""
    _execute(lambda service: service.shortlist(application_id, message, actor_id=actor))


@app.command()
def reject(
    application_id: str = typer.Argument(..., help="Application ID"),
    reason: str = typer.Option(..., "--reason", "-r", help="Rejection reason"),
    feedback: Optional[str] = typer.Option(None, "--feedback", "-f", help="Feedback for the candidate"),
    allow_reapply: bool = typer.Option(False, "--allow-reapply", help="Allow the candidate to apply again"),
    actor: str = typer.Option(..., "--actor", "-a", help="ID of the employer making the change"),
):
    """Reject an application."""
    from talent_pipeline.data.models import RejectionDetails
    from talent_pipeline.utils.constants import REJECTION_REASONS

    try:
        details = RejectionDetails(
            reason=reason, feedback=feedback, allow_reapplication=allow_reapply
        )
    except ValidationError:
        console.print(f"[red]Error: Unknown rejection reason: {reason}[/red]")
        console.print("[dim]Valid reasons:[/dim]")
        for valid in REJECTION_REASONS:
            console.print(f"  - {valid}")
        raise typer.Exit(1)

    _execute(lambda service: service.reject(application_id, details, actor_id=actor))


@app.command()
def history(
    application_id: str = typer.Argument(..., help="Application ID"),
):
    """Show the stage history of an application."""
    from talent_pipeline.data.repositories import get_application_repository, get_audit_repository

    _require_db()

    application = get_application_repository().get_by_id(application_id)
    if not application:
        console.print(f"[red]Error: Application not found: {application_id}[/red]")
        raise typer.Exit(1)

    conflicts = get_audit_repository().count_conflicts(application.application_id)

    console.print(
        Panel(
            f"Job: [cyan]{application.job_id}[/cyan]\n"
            f"Candidate: [cyan]{application.candidate_id}[/cyan]\n"
            f"Current stage: [bold]{application.current_stage}[/bold]\n"
            f"Version: {application.version}\n"
            f"Lost concurrent updates: {conflicts}",
            title=f"Application {application.application_id}",
        )
    )

    if not application.history:
        console.print("[dim]No stage changes yet.[/dim]")
        return

    table = Table(title="Stage History")
    table.add_column("When", style="dim", width=19)
    table.add_column("From")
    table.add_column("To", style="cyan")
    table.add_column("Type")
    table.add_column("By")
    table.add_column("Message")

    for event in application.history:
        table.add_row(
            event.occurred_at.strftime("%Y-%m-%d %H:%M:%S"),
            event.from_stage,
            event.to_stage,
            event.classification,
            event.actor_id,
            event.message or "",
        )

    console.print(table)


@app.command()
def audit_logs(
    application_id: str = typer.Argument(..., help="Application ID"),
    limit: int = typer.Option(20, "--limit", "-l", help="Maximum logs to show"),
):
    """View the audit trail of an application."""
    from talent_pipeline.data.repositories import get_audit_repository

    _require_db()

    logs = get_audit_repository().get_for_application(application_id, limit=limit)
    _print_audit_logs(logs, "Audit Logs")


@app.command()
def compliance_logs(
    job_id: Optional[str] = typer.Option(None, "--job", "-j", help="Only decisions for this job"),
    limit: int = typer.Option(20, "--limit", "-l", help="Maximum logs to show"),
):
    """View final hiring decisions (acceptances and rejections)."""
    from talent_pipeline.data.repositories import get_audit_repository

    _require_db()

    logs = get_audit_repository().get_compliance_logs(job_id=job_id, limit=limit)
    _print_audit_logs(logs, "Hiring Decisions")


@app.command()
def applications(
    job_id: str = typer.Argument(..., help="Job posting ID"),
    stage: Optional[str] = typer.Option(None, "--stage", "-s", help="Only applications in this stage"),
    limit: int = typer.Option(50, "--limit", "-l", help="Maximum applications to show"),
):
    """Show the pipeline of a job: stage counts and its applications."""
    from talent_pipeline.core.pipeline import UnknownStageError, get_stage_registry
    from talent_pipeline.data.repositories import get_application_repository

    registry = get_stage_registry()
    stage_id = None
    if stage:
        try:
            stage_id = registry.get_stage(stage).id
        except UnknownStageError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)

    _require_db()
    repository = get_application_repository()

    counts = repository.get_stage_counts(job_id)
    summary = Table(title=f"Pipeline for job {job_id}")
    summary.add_column("Stage", style="cyan")
    summary.add_column("Applications", justify="right")
    for s in registry.list_stages():
        summary.add_row(s.label, str(counts.get(s.id.value, 0)))
    console.print(summary)

    found = repository.get_by_job(job_id, stage=stage_id, limit=limit)
    if not found:
        console.print("[yellow]No applications found.[/yellow]")
        return

    table = Table(title=f"Applications ({len(found)})")
    table.add_column("Application", style="dim")
    table.add_column("Candidate", style="cyan")
    table.add_column("Stage")
    table.add_column("Updated", width=19)

    for application in found:
        table.add_row(
            application.application_id,
            application.candidate_id,
            application.current_stage,
            application.updated_at.strftime("%Y-%m-%d %H:%M:%S"),
        )

    console.print(table)


@app.command()
def score(
    candidate_file: Path = typer.Argument(..., help="JSON file with the candidate profile"),
    job_file: Path = typer.Argument(..., help="JSON file with the job posting"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
):
    """Score a job posting against a candidate profile."""
    from talent_pipeline.core.matching import get_matching_engine
    from talent_pipeline.data.models import CandidateProfile, JobPosting
    from talent_pipeline.utils.constants import AuditAction
    from talent_pipeline.utils.logger import audit_log

    candidate = _load_json_model(candidate_file, CandidateProfile)
    job = _load_json_model(job_file, JobPosting)

    result = get_matching_engine().score(candidate, job)
    audit_log(
        AuditAction.CANDIDATE_SCORED.value,
        {
            "candidate_id": candidate.candidate_id,
            "job_id": job.job_id,
            "overall_score": result.overall_score,
        },
        audit_type="SCORING",
    )

    if as_json:
        console.print_json(json.dumps(result.to_dict()))
        return

    score_color = _score_color(result.overall_score)
    console.print(
        f"\n[bold]{job.title or job.job_id}[/bold]: "
        f"[{score_color}]{result.overall_score:.1f}% match[/{score_color}] "
        f"({result.score_level.value})"
    )

    table = Table(title="Score Breakdown")
    table.add_column("Dimension", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Weight", justify="right", style="dim")

    for dimension, value in result.sub_scores.items():
        table.add_row(dimension, f"{value:.1f}", f"{result.weights_used[dimension]:.2f}")
    for dimension in result.excluded_dimensions:
        table.add_row(dimension, "[dim]n/a[/dim]", "-")

    console.print(table)

    if result.reasons:
        console.print("\n[bold]Why this job:[/bold]")
        for reason in result.reasons:
            console.print(f"  [green]✓[/green] {reason}")
    if result.skill_gaps:
        console.print(f"\n[bold]Skill gaps:[/bold] {', '.join(sorted(result.skill_gaps))}")
    console.print(f"\n[dim]{result.insights}[/dim]")


@app.command()
def rank(
    candidate_file: Path = typer.Argument(..., help="JSON file with the candidate profile"),
    jobs_file: Path = typer.Argument(..., help="JSON file with a list of job postings"),
    top_n: int = typer.Option(10, "--top", "-n", help="Number of jobs to show"),
):
    """Rank job postings for a candidate."""
    from talent_pipeline.core.matching import get_matching_engine
    from talent_pipeline.data.models import CandidateProfile, JobPosting

    candidate = _load_json_model(candidate_file, CandidateProfile)
    raw_jobs = _read_json(jobs_file)
    if not isinstance(raw_jobs, list):
        console.print(f"[red]Error: {jobs_file} must contain a JSON list of jobs[/red]")
        raise typer.Exit(1)

    try:
        jobs = [JobPosting.model_validate(item) for item in raw_jobs]
    except ValidationError as e:
        console.print(f"[red]Error: Invalid job posting in {jobs_file}:[/red]\n{e}")
        raise typer.Exit(1)

    ranked = get_matching_engine().rank_jobs(candidate, jobs)[:top_n]
    if not ranked:
        console.print("[yellow]No jobs to rank.[/yellow]")
        raise typer.Exit(0)

    table = Table(title=f"Top Jobs for {candidate.full_name or candidate.candidate_id}")
    table.add_column("Rank", justify="right", style="dim")
    table.add_column("Job", style="cyan")
    table.add_column("Company")
    table.add_column("Match", justify="right")
    table.add_column("Level")
    table.add_column("Top Reason")

    for position, (job, result) in enumerate(ranked, 1):
        color = _score_color(result.overall_score)
        table.add_row(
            str(position),
            job.title or job.job_id,
            job.company or "",
            f"[{color}]{result.overall_score:.1f}%[/{color}]",
            result.score_level.value,
            result.reasons[0] if result.reasons else "",
        )

    console.print(table)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _require_db():
    from talent_pipeline.data.database import get_database_manager

    db_manager = get_database_manager()
    if not db_manager.check_sync_connection():
        console.print("[red]Error: Could not connect to MongoDB.[/red]")
        console.print("[dim]Make sure MongoDB is running and connection settings are correct.[/dim]")
        raise typer.Exit(1)
    return db_manager


def _get_pipeline_service():
    from talent_pipeline.data.repositories import get_application_repository, get_audit_repository
    from talent_pipeline.services import ApplicationPipelineService

    _require_db()
    return ApplicationPipelineService(
        repository=get_application_repository(),
        audit_repository=get_audit_repository(),
    )


def _execute(operation) -> None:
    from talent_pipeline.core.pipeline import PersistenceError

    service = _get_pipeline_service()
    try:
        outcome = operation(service)
    except PersistenceError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    _print_outcome(outcome)


def _print_outcome(outcome) -> None:
    from talent_pipeline.core.pipeline import TransitionError

    if isinstance(outcome, TransitionError):
        console.print(f"[red]✗ {outcome.user_message}[/red]")
        console.print(f"[dim]{outcome}[/dim]")
        if outcome.retryable and outcome.revalidated is not None:
            verdict = "still allowed" if outcome.revalidated.ok else "no longer allowed"
            console.print(f"[yellow]Against the latest state this move is {verdict}.[/yellow]")
        raise typer.Exit(1)

    event = outcome.stage_event
    console.print(
        f"[green]✓ Application moved from {event.from_stage} to {event.to_stage}[/green] "
        f"[dim]({event.classification}, version {outcome.application.version})[/dim]"
    )
    if event.message:
        console.print(f"  Message: {event.message}")


def _print_audit_logs(logs, title: str) -> None:
    if not logs:
        console.print("[yellow]No audit logs found.[/yellow]")
        raise typer.Exit(0)

    table = Table(title=f"{title} ({len(logs)} entries)")
    table.add_column("Timestamp", style="dim", width=19)
    table.add_column("Action", style="cyan")
    table.add_column("Description")
    table.add_column("Actor")
    table.add_column("Compliance", justify="center")

    for log in logs:
        table.add_row(
            log.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            log.action,
            log.action_description,
            log.actor.actor_id or "system",
            "✓" if log.compliance_relevant else "",
        )

    console.print(table)


def _read_json(path: Path):
    if not path.exists():
        console.print(f"[red]Error: File does not exist: {path}[/red]")
        raise typer.Exit(1)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[red]Error: {path} is not valid JSON: {e}[/red]")
        raise typer.Exit(1)


def _load_json_model(path: Path, model_class):
    try:
        return model_class.model_validate(_read_json(path))
    except ValidationError as e:
        console.print(f"[red]Error: Invalid {model_class.__name__} in {path}:[/red]\n{e}")
        raise typer.Exit(1)


def _score_color(value: float) -> str:
    if value >= 70:
        return "green"
    if value >= 50:
        return "yellow"
    return "red"


if __name__ == "__main__":
    app()
