"""
Spatium CLI - Command-line interface for the spatial-transform library.

Provides commands for running the randomized self-check, printing
environment diagnostics, and converting rotations between representations.
"""

import math
from pathlib import Path
import platform
from typing import Optional, Tuple

import numpy as np
import typer
from rich.console import Console
from rich.table import Table

from spatium.version import __version__

app = typer.Typer(
    name="spatium",
    help="Spatium - Spatial-transform algebra: vectors, quaternions, matrices and transforms.",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Spatium[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Spatium - Spatial-transform algebra toolkit."""
    pass


@app.command()
def selfcheck(
    config: Path = typer.Option(
        Path("configs/default.yaml"),
        "--config",
        "-c",
        help="Path to configuration file.",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Path for a YAML report of the results.",
    ),
) -> None:
    """Run the randomized property checks and report the results."""
    from spatium.config.loader import load_config
    from spatium.diagnostics.selfcheck import run_selfcheck
    from spatium.logging.setup import configure_logging
    from spatium.utils.io import save_yaml

    try:
        cfg = load_config(config)
        configure_logging(
            cfg.project.log_level.value, cfg.project.run_id, cfg.project.json_logs
        )
        console.print(f"[green]✓[/green] Loaded configuration from {config}")
        console.print(f"[green]✓[/green] Run ID: {cfg.project.run_id}")

        results = run_selfcheck(cfg)

        if output:
            save_yaml(
                {
                    "run_id": cfg.project.run_id,
                    "seed": cfg.selfcheck.seed,
                    "results": [r.to_dict() for r in results],
                },
                output,
            )
            console.print(f"[green]✓[/green] Report written to {output}")

    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    table = Table(title="Self-check Results")
    table.add_column("Check", style="cyan")
    table.add_column("Result")
    table.add_column("Worst Error", justify="right")
    table.add_column("Tolerance", justify="right")
    table.add_column("Time (ms)", justify="right")

    for r in results:
        status = "[green]PASS[/green]" if r.passed else "[red]FAIL[/red]"
        table.add_row(
            r.name.value,
            status,
            f"{r.worst_error:.3e}",
            f"{r.tolerance:.1e}",
            f"{r.elapsed_ms:.1f}",
        )

    console.print(table)

    failed = [r.name.value for r in results if not r.passed]
    if failed:
        console.print(f"[red]Failed checks:[/red] {', '.join(failed)}")
        raise typer.Exit(code=1)

    console.print("[bold green]All checks passed.[/bold green]")


@app.command()
def diagnostics(
    config: Path = typer.Option(
        Path("configs/default.yaml"),
        "--config",
        "-c",
        help="Path to configuration file.",
    ),
) -> None:
    """Show environment information and validate the configuration."""
    from spatium.config.loader import load_config

    console.print("[bold]Spatium Diagnostics[/bold]\n")

    table = Table(title="System Information")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")

    table.add_row("Spatium Version", __version__)
    table.add_row("Python", platform.python_version())
    table.add_row("NumPy", np.__version__)

    try:
        cfg = load_config(config)
        table.add_row("Configuration", f"✓ Valid ({config})")
        table.add_row("Log Level", cfg.project.log_level.value)
        table.add_row("Seed", str(cfg.selfcheck.seed))
        table.add_row("Samples", str(cfg.selfcheck.samples))
        table.add_row("Checks", ", ".join(c.value for c in cfg.selfcheck.checks))
    except FileNotFoundError:
        table.add_row("Configuration", f"⚠ Not found ({config})")
    except Exception as e:
        table.add_row("Configuration", f"✗ Error: {e}")

    console.print(table)


@app.command()
def convert(
    rotator: Optional[Tuple[float, float, float]] = typer.Option(
        None,
        "--rotator",
        "-r",
        help="Rotation as pitch, yaw and roll in degrees.",
    ),
    quat: Optional[Tuple[float, float, float, float]] = typer.Option(
        None,
        "--quat",
        "-q",
        help="Rotation as a quaternion x, y, z, w.",
    ),
) -> None:
    """Print a rotation in every supported representation."""
    from spatium.core.quat import Quaternion
    from spatium.core.rotator import Rotator

    if (rotator is None) == (quat is None):
        console.print("[red]Error:[/red] Pass exactly one of --rotator or --quat.")
        raise typer.Exit(code=1)

    if rotator is not None:
        rot = Rotator(*rotator)
        q = rot.to_quat()
    else:
        q = Quaternion(*quat).normalized()
        rot = q.to_rotator()

    axis, angle = q.to_axis_and_angle()
    m = q.to_matrix()

    table = Table(title="Rotation")
    table.add_column("Representation", style="cyan")
    table.add_column("Value")

    table.add_row("Rotator (P, Y, R)", f"({rot.pitch:.4f}, {rot.yaw:.4f}, {rot.roll:.4f})")
    table.add_row("Quaternion (X, Y, Z, W)", f"({q.x:.6f}, {q.y:.6f}, {q.z:.6f}, {q.w:.6f})")
    table.add_row("Axis", f"({axis.x:.6f}, {axis.y:.6f}, {axis.z:.6f})")
    table.add_row("Angle (deg)", f"{math.degrees(angle):.4f}")
    for i in range(3):
        row = m.m[i]
        table.add_row(f"Matrix row {i}", f"[{row[0]: .6f} {row[1]: .6f} {row[2]: .6f}]")

    console.print(table)


@app.command(name="version")
def show_version() -> None:
    """Show version information."""
    console.print(f"[bold blue]Spatium[/bold blue] v{__version__}")
    console.print("Spatial-transform algebra: vectors, quaternions, matrices and transforms.")


if __name__ == "__main__":
    app()
