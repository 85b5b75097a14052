"""CLI renderer for Skiff."""

from __future__ import annotations

import json
from typing import Any

from prompt_toolkit import PromptSession
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console
from rich.markup import escape

PREVIEW_MAX_LEN = 240


def _preview(text: str) -> str:
    preview = text.strip().replace("\n", " | ")
    if not preview:
        return "(empty)"
    if len(preview) > PREVIEW_MAX_LEN:
        return preview[: PREVIEW_MAX_LEN - 3] + "..."
    return preview


class Renderer:
    """CLI renderer using Rich for terminal output."""

    def __init__(self, console: Console | None = None) -> None:
        self.console: Console = console or Console()
        self._show_debug: bool = False
        self._prompt_session: PromptSession[str] | None = None

    def toggle_debug(self) -> None:
        """Toggle debug mode to show/hide tool output."""
        self._show_debug = not self._show_debug
        status = "enabled" if self._show_debug else "disabled"
        self.console.print(f"[dim]Debug mode {status}[/dim]")

    @property
    def show_debug(self) -> bool:
        return self._show_debug

    def info(self, message: str) -> None:
        self.console.print(message)

    def error(self, message: str) -> None:
        self.console.print(f"[bold red]Error:[/bold red] {escape(message)}")

    def welcome(self, message: str = "[bold blue]Skiff[/bold blue] - type 'exit' or press Ctrl-C to quit.") -> None:
        self.console.print(message)

    def usage_info(self, workspace_path: str | None = None, model: str = "", tools: list[str] | None = None) -> None:
        if workspace_path:
            self.console.print(f"[bold]Working directory:[/bold] [cyan]{escape(workspace_path)}[/cyan]")
        if model:
            self.console.print(f"[bold]Model:[/bold] [magenta]{escape(model)}[/magenta]")
        if tools:
            self.console.print(f"[bold]Available tools:[/bold] [green]{', '.join(tools)}[/green]")

    def assistant_message(self, message: str) -> None:
        self.console.print(f"[bold yellow]Skiff:[/bold yellow] {escape(message)}")

    def tool_call(self, name: str, arguments: dict[str, Any]) -> None:
        rendered = json.dumps(arguments, ensure_ascii=False)
        self.console.print(f"[dim]-> {escape(name)} {escape(_preview(rendered))}[/dim]")

    def tool_result(self, name: str, ok: bool, output: str) -> None:
        if ok and not self._show_debug:
            return
        style = "dim" if ok else "red"
        self.console.print(f"[{style}]<- {escape(name)}: {escape(_preview(output))}[/{style}]")

    def schemas(self, schemas: list[dict[str, Any]]) -> None:
        self.console.print_json(json.dumps(schemas, ensure_ascii=False))

    def get_user_input(self) -> str:
        """Prompt user for one line of input."""
        if self._prompt_session is None:
            self._prompt_session = PromptSession()
        with patch_stdout(raw=True):
            return self._prompt_session.prompt("> ")


def create_cli_renderer() -> Renderer:
    """Create and return a Renderer instance."""
    return Renderer()
