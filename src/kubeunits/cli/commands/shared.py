"""Shared utilities for CLI commands.

This module provides common utilities used across all command modules,
including console output, logging setup and error handling.
"""

import sys
from collections.abc import Callable
from functools import wraps

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from kubeunits.errors import DeploymentError

# Shared console instance for consistent output
console = Console()

LOG_FORMAT = "<level>{level: <8}</level> {message}"


def configure_logging(verbose: bool = False) -> None:
    """Route loguru output to stderr at INFO, or DEBUG when verbose.

    Args:
        verbose: Show per-unit and per-command debug logs
    """
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO", format=LOG_FORMAT)


def handle_error(message: str, details: str | None = None, exit_code: int = 1) -> None:
    """Handle an error by printing a message and exiting.

    Args:
        message: Error message to display
        details: Optional additional details
        exit_code: Exit code to use
    """
    console.print(f"\n[bold red]❌ {escape(message)}[/bold red]\n")
    if details:
        console.print(Panel(escape(details), title="Details", border_style="red"))
    raise typer.Exit(exit_code)


def print_header(title: str, style: str = "blue") -> None:
    """Print a styled header panel.

    Args:
        title: Header title text
        style: Border style color
    """
    console.print(
        Panel.fit(
            f"[bold {style}]{title}[/bold {style}]",
            border_style=style,
        )
    )


def with_error_handling(func: Callable[..., None]) -> Callable[..., None]:
    """Decorator to wrap command functions with standard error handling.

    Catches deployment errors and formats them consistently.

    Args:
        func: The command function to wrap

    Returns:
        Wrapped function with error handling
    """

    @wraps(func)
    def wrapper(*args: object, **kwargs: object) -> None:
        try:
            func(*args, **kwargs)
        except DeploymentError as e:
            handle_error(e.message, e.details)
        except KeyboardInterrupt:
            console.print("\n[dim]Operation cancelled by user.[/dim]")
            raise typer.Exit(130) from None

    return wrapper
