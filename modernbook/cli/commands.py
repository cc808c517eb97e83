"""CLI commands for the modernbook pipeline."""
import json
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
)
from rich.table import Table

from modernbook.clients.modernize import ModernizationResult, ModernizeClient
from modernbook.clients.tts import SpeechClient
from modernbook.config import (
    CHUNK_MAX_CHARS,
    DEFAULT_INSTRUCTIONS,
    DEFAULT_LLM_MODEL,
    DEFAULT_STYLE,
    DEFAULT_VOICE,
)
from modernbook.converters.book_markdown import EditionMarkdownConverter
from modernbook.converters.segments import segment_stats
from modernbook.estimates import (
    estimate_project,
    estimate_tts_cost,
    format_cost,
    format_duration,
    llm_cost_preview,
    select_range,
)
from modernbook.exceptions import ModernbookError
from modernbook.extractors.chapter_detector import ChapterDetector
from modernbook.extractors.chunker import build_chunks
from modernbook.extractors.loader import load_book_text
from modernbook.library import Library
from modernbook.logging_utils import configure_logging
from modernbook.models.book import ProjectConfig
from modernbook.models.voice import VOICE_CATALOG, get_voice
from modernbook.samples import seed_library

app = typer.Typer(
    name="modernbook",
    help="Public-domain book → modern English → narrated audio.",
    add_completion=False,
)
console = Console()

MAX_PARALLEL = 4  # concurrent LLM calls


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    configure_logging(verbose)


def _resolve_output_dir(output_dir: Optional[Path], book_path: Path) -> Path:
    """Resolve the output directory."""
    out = output_dir if output_dir else book_path.parent / "output"
    out.mkdir(parents=True, exist_ok=True)
    return out


def _fail(message: str, exc: Exception) -> None:
    console.print(f"[red]{message}:[/red] {exc}")
    raise typer.Exit(1)


def _load(book_path: Path):
    try:
        return load_book_text(book_path)
    except (ModernbookError, FileNotFoundError) as e:
        _fail("Could not load book", e)


# ─── ANALYZE ──────────────────────────────────────────────────

@app.command()
def analyze(
    book_path: Path = typer.Argument(..., help="Book file (.txt, .md or .pdf)", exists=True, dir_okay=False),
    start: float = typer.Option(0, "--start", help="Start of range, percent of the book"),
    end: float = typer.Option(100, "--end", help="End of range, percent of the book"),
    chunk_size: int = typer.Option(CHUNK_MAX_CHARS, "--chunk-size", "-c", help="Max characters per chunk"),
    voice: str = typer.Option(DEFAULT_VOICE, "--voice", help="Voice used for the TTS estimate"),
):
    """Estimate cost and listening time; show chunks and chapters."""
    loaded = _load(book_path)
    try:
        estimate = estimate_project(loaded.text, start, end)
        chunks = build_chunks(select_range(loaded.text, start, end), chunk_size)
        narrator = get_voice(voice)
    except ModernbookError as e:
        _fail("Analysis failed", e)

    chapters = ChapterDetector().detect(chunks)

    console.print(Panel(
        f"[bold]Book:[/bold] {loaded.title}\n"
        f"[bold]Author:[/bold] {loaded.author or 'Unknown Author'}\n"
        f"[bold]Words:[/bold] {estimate.selected_words:,} of {estimate.total_words:,}\n"
        f"[bold]Characters:[/bold] {estimate.selected_chars:,} of {estimate.total_chars:,}\n"
        f"[bold]Chunks:[/bold] {len(chunks)} (≤ {chunk_size:,} chars)\n"
        f"[bold]Tokens:[/bold] {estimate.total_tokens:,}\n\n"
        f"[bold]Modernization:[/bold] {format_cost(estimate.modernization_cost)}\n"
        f"[bold]Narration ({narrator.name}):[/bold] "
        f"{format_cost(estimate_tts_cost(estimate.tts_chars, narrator))}\n"
        f"[bold]Total:[/bold] {format_cost(estimate.total_cost)}\n"
        f"[bold]Listening time:[/bold] {estimate.duration}",
        title="modernbook analyze",
        border_style="cyan",
    ))

    preview = Table(title="LLM cost by share of pending chunks")
    preview.add_column("Share", justify="right")
    preview.add_column("Chunks", justify="right")
    preview.add_column("Tokens", justify="right")
    preview.add_column("Cost", justify="right")
    for p in llm_cost_preview(chunks):
        preview.add_row(f"{p.fraction:.0%}", str(p.chunk_count), f"{p.tokens:,}", format_cost(p.cost))
    console.print(preview)

    toc = Table(title=f"{len(chapters)} {'Chapter' if len(chapters) == 1 else 'Chapters'}")
    toc.add_column("Chunk", justify="right")
    toc.add_column("Title")
    for ch in chapters:
        toc.add_row(str(ch.chunk_index), ch.title)
    console.print(toc)


# ─── CHUNK ────────────────────────────────────────────────────

@app.command()
def chunk(
    book_path: Path = typer.Argument(..., help="Book file (.txt, .md or .pdf)", exists=True, dir_okay=False),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output JSON file"),
    chunk_size: int = typer.Option(CHUNK_MAX_CHARS, "--chunk-size", "-c", help="Max characters per chunk"),
):
    """Split a book into chunks and write them as JSON."""
    loaded = _load(book_path)
    try:
        chunks = build_chunks(loaded.text, chunk_size)
    except ModernbookError as e:
        _fail("Chunking failed", e)

    out = output or _resolve_output_dir(None, book_path) / f"{book_path.stem}_chunks.json"
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(
        json.dumps([c.model_dump() for c in chunks], indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    console.print(f"  [green]✓[/green] {len(chunks)} chunks → {out}")


# ─── MODERNIZE ────────────────────────────────────────────────

@app.command()
def modernize(
    book_path: Path = typer.Argument(..., help="Book file (.txt, .md or .pdf)", exists=True, dir_okay=False),
    style: str = typer.Option(DEFAULT_STYLE, "--style", "-s", help="Target style"),
    instructions: str = typer.Option(DEFAULT_INSTRUCTIONS, "--instructions", "-i", help="Extra instructions for the LLM"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=1, help="Only modernize the first N chunks"),
    chunk_size: int = typer.Option(CHUNK_MAX_CHARS, "--chunk-size", "-c", help="Max characters per chunk"),
    model: str = typer.Option(DEFAULT_LLM_MODEL, "--model", "-m", help="LLM model"),
    diff: bool = typer.Option(False, "--diff", help="Also write a word-level diff as JSON"),
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", "-o", help="Output directory"),
):
    """Rewrite a book in modern English, chunk by chunk, through the LLM."""
    loaded = _load(book_path)
    out = _resolve_output_dir(output_dir, book_path)

    try:
        client = ModernizeClient(model=model)
        chunks = build_chunks(loaded.text, chunk_size)
    except ModernbookError as e:
        _fail("Cannot start modernization", e)

    if limit is not None:
        chunks = chunks[:limit]
    if not chunks:
        console.print("[red]No text found in book.[/red]")
        raise typer.Exit(1)

    console.print(f"\n[bold]Modernizing {len(chunks)} chunks with {model} ({MAX_PARALLEL} parallel)...[/bold]\n")

    results: dict[int, ModernizationResult] = {}
    failures = 0

    def _process_one(c):
        return c.id, client.modernize(c.original_text, style, return_diff=diff, instructions=instructions)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        ptask = progress.add_task("Modernizing...", total=len(chunks))

        with ThreadPoolExecutor(max_workers=MAX_PARALLEL) as pool:
            futures = {pool.submit(_process_one, c): c for c in chunks}
            for future in as_completed(futures):
                c = futures[future]
                try:
                    chunk_id, result = future.result()
                    c.modernized_text = result.modernized
                    c.status = "completed"
                    results[chunk_id] = result
                except ModernbookError as e:
                    c.status = "failed"
                    c.error_message = str(e)
                    failures += 1
                    console.print(f"  [red]✗[/red] Chunk {c.id}: {e}")
                progress.advance(ptask)

    done = [c for c in chunks if c.status == "completed"]
    text_path = out / f"{book_path.stem}_modernized.md"
    text_path.write_text("\n\n".join(c.modernized_text for c in done) + "\n", encoding="utf-8")

    lines = [
        f"[green]Modernization complete![/green]\n",
        f"[bold]Chunks:[/bold] {len(done)}/{len(chunks)}",
        f"[bold]Failed:[/bold] {failures}",
        f"[bold]Output:[/bold] {text_path}",
    ]
    if diff:
        diff_path = out / f"{book_path.stem}_diff.json"
        diff_path.write_text(
            json.dumps(
                {str(k): results[k].model_dump() for k in sorted(results)},
                indent=2,
                ensure_ascii=False,
            ),
            encoding="utf-8",
        )
        lines.append(f"[bold]Diff:[/bold] {diff_path}")

    console.print(Panel("\n".join(lines), title="modernbook modernize", border_style="blue"))
    if failures and not done:
        raise typer.Exit(1)


# ─── SPEAK ────────────────────────────────────────────────────

@app.command()
def speak(
    text_path: Path = typer.Argument(..., help="Modernized text file", exists=True, dir_okay=False),
    voice: str = typer.Option(DEFAULT_VOICE, "--voice", help="Narrator voice"),
    audio_format: str = typer.Option("mp3", "--format", "-f", help="Audio format"),
    speed: float = typer.Option(1.0, "--speed", help="Playback speed (0.25-4.0)"),
    chunks_per_segment: int = typer.Option(5, "--chunks-per-segment", "-k", help="Chunks per TTS call"),
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", "-o", help="Output directory"),
):
    """Narrate an already modernized text, one audio file per segment."""
    out = _resolve_output_dir(output_dir, text_path)
    library = Library()

    try:
        get_voice(voice)
        client = SpeechClient()
        book = library.upload_file(text_path)
        chunks = library.configure_project(book.id, ProjectConfig(title=book.title))
        # the text is already modern; pass it through unchanged
        library.modernize_next(book.id, count=len(chunks), modernizer=lambda t: t)
        segments = library.build_segments(book.id, chunks_per_segment)
    except ModernbookError as e:
        _fail("Cannot start narration", e)

    if not segments:
        console.print("[red]No text found to narrate.[/red]")
        raise typer.Exit(1)

    stats = segment_stats(segments)
    console.print(
        f"\n[bold]Narrating {stats.total_segments} segments with {voice} "
        f"(~{format_duration(stats.total_duration)}, {format_cost(stats.total_cost)})...[/bold]\n"
    )

    def _synthesize(text: str) -> bytes:
        return client.synthesize(text, voice=voice, format=audio_format, speed=speed).audio

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task("Synthesizing audio...", total=None)
        library.generate_audio(book.id, segments, _synthesize, output_dir=out, audio_format=audio_format)

    for s in segments:
        if s.status == "completed":
            console.print(f"  [green]✓[/green] {s.name} → {Path(s.audio_url).name}")
        else:
            console.print(f"  [red]✗[/red] {s.name}: {s.error_message}")

    stats = segment_stats(segments)
    console.print(Panel(
        f"[green]Narration complete![/green]\n\n"
        f"[bold]Segments:[/bold] {stats.completed}/{stats.total_segments}\n"
        f"[bold]Failed:[/bold] {stats.failed}\n"
        f"[bold]Output:[/bold] {out}",
        title="modernbook speak",
        border_style="magenta",
    ))
    if stats.completed == 0:
        raise typer.Exit(1)


# ─── PUBLISH ──────────────────────────────────────────────────

@app.command()
def publish(
    book_path: Path = typer.Argument(..., help="Book file (.txt, .md or .pdf)", exists=True, dir_okay=False),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Edition title"),
    author: Optional[str] = typer.Option(None, "--author", "-a", help="Book author"),
    summary: str = typer.Option("", "--summary", help="Edition summary"),
    tags: str = typer.Option("", "--tags", help="Comma separated tags"),
    private: bool = typer.Option(False, "--private", help="Keep the edition private"),
    llm: bool = typer.Option(False, "--llm", help="Modernize through the LLM instead of word substitution"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output markdown file"),
):
    """Modernize a book and write it out as a shareable edition."""
    library = Library()
    try:
        modernizer = ModernizeClient() if llm else None
        book = library.upload_file(book_path)
        config = ProjectConfig(title=title or book.title, author=author or "")
        chunks = library.configure_project(book.id, config)
        library.modernize_next(book.id, count=len(chunks), modernizer=modernizer)
        edition = library.create_edition(
            book.id,
            summary=summary,
            tags=tags,
            visibility="private" if private else "public",
        )
    except ModernbookError as e:
        _fail("Publishing failed", e)

    failed = library.search_chunks(book.id, status="failed")
    out = output or _resolve_output_dir(None, book_path) / f"{book.slug}_edition.md"
    EditionMarkdownConverter().convert_to_file(edition, out, library.chapters(book.id))

    console.print(Panel(
        f"[green]Edition ready![/green]\n\n"
        f"[bold]Title:[/bold] {edition.title}\n"
        f"[bold]Author:[/bold] {edition.author}\n"
        f"[bold]Visibility:[/bold] {edition.visibility}\n"
        f"[bold]Tags:[/bold] {', '.join(edition.tags) or '-'}\n"
        f"[bold]Failed chunks:[/bold] {len(failed)}\n"
        f"[bold]Output:[/bold] {out}",
        title="modernbook publish",
        border_style="green",
    ))


# ─── VOICES / FEED ────────────────────────────────────────────

@app.command()
def voices():
    """List the narrator voices."""
    table = Table(title="Voices")
    table.add_column("Id")
    table.add_column("Name")
    table.add_column("Gender")
    table.add_column("Style")
    table.add_column("$/1k chars", justify="right")
    for v in VOICE_CATALOG:
        table.add_row(v.id, v.name, v.gender, v.style, f"{v.cost_per_char * 1000:.3f}")
    console.print(table)


@app.command()
def feed(
    query: str = typer.Option("", "--query", "-q", help="Filter by title, author or tag"),
    sort_by: str = typer.Option("trending", "--sort", help="trending, recent or popular"),
):
    """Browse the sample public library and clip feed."""
    library = seed_library()
    try:
        editions = library.public_editions(query, sort_by)
    except ModernbookError as e:
        _fail("Cannot list editions", e)

    table = Table(title="Public editions")
    table.add_column("Title")
    table.add_column("Author")
    table.add_column("By")
    table.add_column("Tags")
    table.add_column("Listens", justify="right")
    table.add_column("Likes", justify="right")
    for e in editions:
        table.add_row(e.title, e.author, e.user_handle, ", ".join(e.tags), f"{e.listens:,}", f"{e.likes:,}")
    console.print(table)

    for clip in library.feed():
        console.print(Panel(
            f"[italic]“{clip.quote_text}”[/italic]\n\n"
            f"{clip.book_title} · {clip.user_handle} · {clip.duration:.0f}s · "
            f"♥ {clip.likes} · ↗ {clip.shares}",
            title=clip.title,
            border_style="magenta",
        ))


# ─── VERSION ──────────────────────────────────────────────────

@app.command()
def version():
    """Show version information."""
    console.print("[bold]modernbook[/bold] version 0.1.0")


if __name__ == "__main__":
    app()
