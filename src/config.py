"""Project configuration for Fretline.

Holds the project-relative paths (cost configs, annotation data), logging
setup for command-line runs, and a small environment report.
The library modules never configure logging themselves; only entry points
call :func:`setup_logging`.
"""

import logging
import platform
import sys
from pathlib import Path


# ── Paths ─────────────────────────────────────────────────────
PROJECT_ROOT: Path = Path(__file__).resolve().parents[1]
CONFIG_DIR: Path = PROJECT_ROOT / "configs"
DEFAULT_COST_CONFIG: Path = CONFIG_DIR / "tab_costs.yaml"
LEARNED_COST_CONFIG: Path = CONFIG_DIR / "tab_costs_learned.yaml"
ANNOTATIONS_DIR: Path = PROJECT_ROOT / "data" / "annotations"
RAW_DIR: Path = PROJECT_ROOT / "data" / "raw"

LOG_FORMAT: str = "%(message)s"


def setup_logging(verbose: bool = False) -> None:
    """Route log records to a ``rich`` console handler.

    Args:
        verbose: Log at DEBUG level instead of INFO.
    """
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


def environment_info() -> dict:
    """Describe the current execution environment.

    Returns:
        dict with keys ``os``, ``arch``, ``python_version``.
    """
    return {
        "os": sys.platform,
        "arch": platform.machine(),
        "python_version": platform.python_version(),
    }


def setup_environment(verbose: bool = False) -> dict:
    """Configure logging and print the start-up banner.

    Returns:
        The :func:`environment_info` dict.
    """
    setup_logging(verbose)
    info = environment_info()

    print("──── Fretline — Environment ────")
    print(f"  OS            : {info['os']}")
    print(f"  Architecture  : {info['arch']}")
    print(f"  Python        : {info['python_version']}")
    print(f"  Cost config   : {DEFAULT_COST_CONFIG}")
    print("────────────────────────────────")
    return info
