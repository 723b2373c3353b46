"""CLI commands for geetgatha using Typer and Rich.

Implements the CLI commands:
- compose: Run the full lyric pipeline with a live step table
- resolve: Show how AUTO settings resolve for a given emotion (offline)
- history: List stored chat messages
"""

import asyncio
import mimetypes
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table

from geetgatha.config import settings
from geetgatha.db import init_database
from geetgatha.errors import PipelineError
from geetgatha.knowledge.scenarios import load_scenarios
from geetgatha.orchestrator.pipeline import RunLog, run_pipeline
from geetgatha.orchestrator.settings_resolver import resolve_auto_settings
from geetgatha.orchestrator.state import ProgressSnapshot, ProgressTracker, StepStatus
from geetgatha.schemas.analysis import EmotionAnalysis
from geetgatha.schemas.generation import (
    AUTO,
    NO_CEREMONY,
    RESOLVABLE_FIELDS,
    GenerationConfiguration,
    LanguageProfile,
)
from geetgatha.schemas.messages import ChatMessage, ResultMessage
from geetgatha.services import history
from geetgatha.services.llm import MediaPart

app = typer.Typer(name="geetgatha", help="Multi-agent Indian song lyric generator")
console = Console()

_STATUS_STYLE = {
    StepStatus.PENDING: ("dim", "○"),
    StepStatus.ACTIVE: ("bold yellow", "●"),
    StepStatus.COMPLETED: ("green", "✓"),
}


def render_progress(snapshot: ProgressSnapshot) -> Group:
    """Render a tracker snapshot as a step table plus the status line."""
    table = Table(show_header=True, header_style="bold blue")
    table.add_column("", width=2)
    table.add_column("Step")
    table.add_column("Status")

    for step in snapshot.steps:
        style, icon = _STATUS_STYLE[step.status]
        table.add_row(f"[{style}]{icon}[/{style}]", step.label, f"[{style}]{step.status.value}[/{style}]")

    return Group(table, f"[bold green]{snapshot.message}")


def _read_media(path: Optional[Path], default_mime: str) -> Optional[MediaPart]:
    if path is None:
        return None
    if not path.is_file():
        console.print(f"[red]Error:[/red] File not found: {path}")
        raise typer.Exit(code=1)
    mime_type = mimetypes.guess_type(path.name)[0] or default_mime
    return MediaPart(data=path.read_bytes(), mime_type=mime_type)


def _print_result(message: ChatMessage) -> None:
    if not isinstance(message, ResultMessage):
        console.print(f"[red]{message.content}[/red]")
        return

    console.print(Panel(message.primary_content, title="[bold]Lyrics[/bold]", border_style="green"))
    console.print(Panel(message.alternate_format, title="[bold]Suno Format[/bold]", border_style="blue"))
    if message.style_prompt:
        console.print(f"[bold]Style prompt:[/bold] {message.style_prompt}")

    report = message.compliance_report
    score_color = "green" if report.originality_score >= settings.pipeline.originality_threshold else "yellow"
    info_lines = [
        f"[bold]Originality:[/bold] [{score_color}]{report.originality_score}%[/{score_color}]",
        f"[bold]Verdict:[/bold] {report.verdict}",
    ]
    if report.flagged_phrases:
        info_lines.append(f"[bold]Flagged:[/bold] {', '.join(report.flagged_phrases)}")
    if report.similar_songs:
        info_lines.append(f"[bold]Similar songs:[/bold] {', '.join(report.similar_songs)}")
    console.print(Panel("\n".join(info_lines), title="[bold]Compliance[/bold]", border_style="magenta"))


@app.command()
def compose(
    prompt: str = typer.Argument(..., help="What the song should be about"),
    primary: str = typer.Option("Telugu", "--primary", "-l", help="Primary language"),
    secondary: Optional[str] = typer.Option(None, "--secondary", help="Second language to mix in"),
    tertiary: Optional[str] = typer.Option(None, "--tertiary", help="Third language to mix in"),
    theme: str = typer.Option(AUTO, "--theme", help="Theme, Auto, or Custom"),
    mood: str = typer.Option(AUTO, "--mood", help="Mood, Auto, or Custom"),
    style: str = typer.Option(AUTO, "--style", "-s", help="Music style, Auto, or Custom"),
    complexity: str = typer.Option(AUTO, "--complexity", "-c", help="Simple, Poetic, Complex or Auto"),
    rhyme_scheme: str = typer.Option(AUTO, "--rhyme", help="AABB, ABAB, ABCB, AAAA, AABCCB, Auto or Custom"),
    singer_config: str = typer.Option(AUTO, "--singer", help="Singer configuration or Auto"),
    ceremony: str = typer.Option(NO_CEREMONY, "--ceremony", help="Scenario id, e.g. haldi or diwali"),
    custom_theme: Optional[str] = typer.Option(None, "--custom-theme"),
    custom_mood: Optional[str] = typer.Option(None, "--custom-mood"),
    custom_style: Optional[str] = typer.Option(None, "--custom-style"),
    custom_rhyme_scheme: Optional[str] = typer.Option(None, "--custom-rhyme"),
    image: Optional[Path] = typer.Option(None, "--image", help="Image to draw context from"),
    audio: Optional[Path] = typer.Option(None, "--audio", help="Audio clip to draw context from"),
    scenarios: Optional[Path] = typer.Option(None, "--scenarios", help="YAML scenario table"),
    api_key: Optional[str] = typer.Option(None, "--api-key", envvar="GEMINI_API_KEY", help="Model API key"),
):
    """Compose a song from a prompt.

    Runs all stages (multimodal, emotion, research, lyricist, compliance,
    review, formatter) and prints the lyrics with their compliance report.
    """
    language = LanguageProfile(
        primary=primary,
        secondary=secondary or primary,
        tertiary=tertiary or primary,
    )
    generation = GenerationConfiguration(
        theme=theme,
        mood=mood,
        style=style,
        complexity=complexity,
        rhyme_scheme=rhyme_scheme,
        singer_config=singer_config,
        ceremony=ceremony,
        custom_theme=custom_theme,
        custom_mood=custom_mood,
        custom_style=custom_style,
        custom_rhyme_scheme=custom_rhyme_scheme,
    )
    image_part = _read_media(image, "image/jpeg")
    audio_part = _read_media(audio, "audio/webm")
    scenario_table = load_scenarios(scenarios) if scenarios else None

    asyncio.run(_compose_async(prompt, language, generation, api_key, image_part, audio_part, scenario_table))


async def _compose_async(
    prompt: str,
    language: LanguageProfile,
    generation: GenerationConfiguration,
    api_key: Optional[str],
    image: Optional[MediaPart],
    audio: Optional[MediaPart],
    scenario_table,
):
    """Async implementation of compose command."""
    await init_database()

    credential = api_key or settings.gemini.api_key
    stages = None
    if credential:
        from geetgatha.pipeline.stages import build_stages
        from geetgatha.services.llm import get_adapter

        stages = build_stages(get_adapter(settings.models.text_model, credential), scenario_table)

    await history.save_message(ChatMessage(role="user", content=prompt, sender_agent="USER"))

    tracker = ProgressTracker()
    run_log = RunLog()
    received: list[ChatMessage] = []

    async def sink(message: ChatMessage) -> None:
        received.append(message)
        await history.save_message(message, run_id=run_log.run_id)

    try:
        with Live(render_progress(tracker.snapshot()), console=console, refresh_per_second=8) as live:
            unsubscribe = tracker.subscribe(lambda snap: live.update(render_progress(snap)))
            try:
                await run_pipeline(
                    prompt,
                    language,
                    generation,
                    sink,
                    credential,
                    tracker=tracker,
                    stages=stages,
                    image=image,
                    audio=audio,
                    app_settings=settings,
                    run_log=run_log,
                )
            finally:
                unsubscribe()
    except PipelineError as e:
        console.print(f"[red]✗ {e.message}[/red]")
        raise typer.Exit(code=1)

    await history.save_run(run_log, prompt, language.label)

    console.print()
    for message in received:
        _print_result(message)
    console.print(f"[dim]Run {run_log.run_id} {run_log.outcome} in {run_log.total_duration_seconds:.1f}s[/dim]")

    if run_log.outcome != "completed":
        raise typer.Exit(code=1)


@app.command()
def resolve(
    navarasa: str = typer.Option("Shanta", "--navarasa", "-n", help="Dominant rasa"),
    intensity: int = typer.Option(5, "--intensity", "-i", min=1, max=10, help="Emotional intensity 1-10"),
    sentiment: str = typer.Option("Neutral", "--sentiment", help="Positive, Negative or Neutral"),
    vibe: str = typer.Option("Balanced and calm", "--vibe", help="Vibe description"),
    theme: str = typer.Option(AUTO, "--theme"),
    mood: str = typer.Option(AUTO, "--mood"),
    style: str = typer.Option(AUTO, "--style", "-s"),
    complexity: str = typer.Option(AUTO, "--complexity", "-c"),
    rhyme_scheme: str = typer.Option(AUTO, "--rhyme"),
    singer_config: str = typer.Option(AUTO, "--singer"),
):
    """Show how AUTO settings resolve for an emotion, without calling a model."""
    emotion = EmotionAnalysis(
        sentiment=sentiment,
        navarasa=navarasa,
        intensity=intensity,
        vibe_description=vibe,
    )
    config = GenerationConfiguration(
        theme=theme,
        mood=mood,
        style=style,
        complexity=complexity,
        rhyme_scheme=rhyme_scheme,
        singer_config=singer_config,
    )
    resolved = resolve_auto_settings(config, emotion)

    table = Table(show_header=True, header_style="bold blue")
    table.add_column("Field")
    table.add_column("Requested")
    table.add_column("Resolved")
    for field in RESOLVABLE_FIELDS:
        requested = getattr(config, field)
        value = getattr(resolved, field)
        value_display = f"[green]{value}[/green]" if requested == AUTO else value
        table.add_row(field, requested, value_display)

    console.print(table)


@app.command(name="history")
def show_history(
    limit: int = typer.Option(20, "--limit", "-n", help="Number of messages to show"),
):
    """List stored chat messages."""
    asyncio.run(_history_async(limit))


async def _history_async(limit: int):
    """Async implementation of history command."""
    await init_database()
    records = await history.list_messages(limit)

    if not records:
        console.print("[yellow]No messages found[/yellow]")
        return

    table = Table(show_header=True, header_style="bold blue")
    table.add_column("Time", style="dim")
    table.add_column("Role")
    table.add_column("Content")

    for record in records:
        first_line = record.content.strip().splitlines()[0] if record.content.strip() else ""
        content_display = first_line if len(first_line) <= 60 else first_line[:57] + "..."
        role_display = f"[red]{record.role}[/red]" if record.error_kind else record.role
        table.add_row(record.timestamp.strftime("%Y-%m-%d %H:%M"), role_display, content_display)

    console.print(table)


if __name__ == "__main__":
    app()
