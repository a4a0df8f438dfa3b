"""Fretline — MIDI to guitar tablature, command-line entry point.

Commands:
    tab      – convert a MIDI file to fingered measures (JSON, optional MIDI)
    tunings  – list the tuning presets
    train    – fit cost weights to reference tablature
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from src.config import setup_environment
from src.tab_engine.tunings import DEFAULT_TUNING, TUNINGS, InvalidTuningError

app = typer.Typer(
    name="fretline",
    help="MIDI to guitar tablature with whole-track fingering optimisation",
    rich_markup_mode="markdown",
)
console = Console()


@app.command()
def tab(
    midi_path: Path = typer.Argument(..., help="Input .mid / .midi file"),
    tuning: str = typer.Option(DEFAULT_TUNING, "--tuning", "-t", help="Tuning preset"),
    track: Optional[int] = typer.Option(None, "--track", help="Process only this track"),
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", "-o", help="Output directory"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Cost-config YAML"),
    export_midi: bool = typer.Option(False, "--export-midi", help="Also write an annotated MIDI"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Convert a MIDI file into fingered, notated measures."""
    from src.tab_engine.annotate import annotate

    setup_environment(verbose)
    try:
        tracks = annotate(
            midi_path,
            output_dir=output_dir,
            tuning=tuning,
            track_index=track,
            config_path=config,
            export_midi=export_midi,
        )
    except (FileNotFoundError, ValueError, IndexError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    summary = Table(title=f"{midi_path.name} — {tuning}")
    summary.add_column("Track")
    summary.add_column("Measures", justify="right")
    summary.add_column("BPM", justify="right")
    summary.add_column("Time", justify="center")
    for processed in tracks:
        summary.add_row(
            processed.name,
            str(len(processed.measures)),
            f"{processed.bpm:.1f}",
            "/".join(str(x) for x in processed.time_signature),
        )
    console.print(summary)


@app.command()
def tunings() -> None:
    """List the available tuning presets."""
    table = Table(title="Tunings")
    table.add_column("Key")
    table.add_column("Name")
    table.add_column("Open strings (high → low)")
    for key, preset in TUNINGS.items():
        table.add_row(key, preset.name, " ".join(str(p) for p in preset.pitches))
    console.print(table)


@app.command()
def train(
    annotations_dir: Optional[Path] = typer.Option(None, help="Directory of *_ground_truth.json"),
    raw_dir: Optional[Path] = typer.Option(None, help="Directory of source MIDI files"),
    tuning: str = typer.Option(DEFAULT_TUNING, "--tuning", "-t", help="Tuning of the reference tabs"),
    rounds: int = typer.Option(3, "--rounds", help="Maximum coordinate-descent sweeps"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Learned YAML path"),
) -> None:
    """Fit the cost weights to reference tablature."""
    from src.ml_engine.dataset import load_training_set
    from src.ml_engine.trainer import train as train_weights

    setup_environment()
    try:
        if tuning not in TUNINGS:
            raise InvalidTuningError(f"Unknown tuning '{tuning}'")
        pairs = load_training_set(annotations_dir, raw_dir)
        result = train_weights(pairs, output_config_path=output, tuning=tuning, max_rounds=rounds)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    console.print(
        f"[green]Learned accuracy {result['learned_accuracy']:.4f}[/green] "
        f"(baseline {result['baseline_accuracy']:.4f})"
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
