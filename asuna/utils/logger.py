# Console and logging management for the Asuna panel assistant.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

import logging
from typing import Any, List, Mapping, MutableMapping, Tuple

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

# Sits between INFO (20) and WARNING (30): a panel operation went through
SUCCESS = 25

LOGGER_NAME = "Asuna"


def _register_success_level():
    logging.addLevelName(SUCCESS, "SUCCESS")

    def success(self: logging.Logger, message, *args, **kwargs):
        if self.isEnabledFor(SUCCESS):
            self._log(SUCCESS, message, args, **kwargs)

    if not hasattr(logging.Logger, "success"):
        setattr(logging.Logger, "success", success)


_register_success_level()


class PrefixedLogger(logging.LoggerAdapter):
    """Prepends '[prefix]' to every record, e.g. '[Provisioning Survival] ...'."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.extra['prefix']}] {msg}", kwargs


class ConsoleManager:
    """
    Owns console output for the assistant.

    Records go through a RichHandler on the 'Asuna' logger, so any standard
    logging handler (pytest's caplog included) sees them as well. The startup
    configuration report uses the panel and table helpers.
    """

    def __init__(self, logger_name: str = LOGGER_NAME):
        self._console = Console(theme=Theme({"logging.level.success": "bold green"}))
        self._logger = logging.getLogger(logger_name)
        if not self._logger.handlers:
            self._logger.setLevel(logging.INFO)
            handler = RichHandler(
                console=self._console,
                rich_tracebacks=True,
                show_path=False,
                markup=False,
                keywords=["SUCCESS", "Provisioning", "Tool"],
            )
            handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
            self._logger.addHandler(handler)

    def set_level(self, level: str):
        self._logger.setLevel(level.upper())

    def child(self, prefix: str) -> PrefixedLogger:
        return PrefixedLogger(self._logger, {"prefix": prefix})

    def debug(self, message: str):
        self._logger.debug(message)

    def info(self, message: str):
        self._logger.info(message)

    def success(self, message: str):
        self._logger.log(SUCCESS, message)

    def warning(self, message: str):
        self._logger.warning(message)

    def error(self, message: str):
        self._logger.error(message)

    def exception(self, message: str):
        self._logger.exception(message)

    def rule(self, title: str, style: str = "cyan"):
        self._console.rule(f"[bold {style}]{title}[/bold {style}]", style=style)

    def display_data_as_table(self, data: Mapping[str, object], title: str):
        """Renders a flat mapping (the public settings summary) as a two-column table."""
        table = Table(show_header=True, header_style="bold magenta", box=None, show_edge=False)
        table.add_column("Setting", style="cyan", no_wrap=True, width=28)
        table.add_column("Value")
        for key, value in data.items():
            table.add_row(key, "[dim]not set[/dim]" if value is None else str(value))
        self._console.print(Panel(table, title=f"[bold green]{title}[/bold green]", border_style="green"))

    def display_warning_panel(self, title: str, problems: List[str]):
        body = "\n".join(f"• {problem}" for problem in problems)
        self._console.print(Panel(body, title=f"[bold yellow]{title}[/bold yellow]", border_style="yellow"))


console = ConsoleManager()
