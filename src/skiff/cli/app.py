"""CLI main module for Skiff."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer
from loguru import logger

from skiff.agent import Agent, AgentEvent, Context, RepublicModel
from skiff.agent.prompt import build_system_prompt
from skiff.cli.render import Renderer, create_cli_renderer
from skiff.config import Settings, get_settings, read_workspace_prompt, resolve_workspace
from skiff.errors import ConfigurationError
from skiff.logging_utils import configure_logging
from skiff.tools import build_default_registry

EXIT_COMMANDS = frozenset({"quit", "exit", "q"})

app = typer.Typer(
    name="skiff",
    help="A small agent for working inside a project directory.",
    add_completion=False,
    rich_markup_mode="rich",
)

WorkspaceOption = Annotated[
    Optional[Path],
    typer.Option("--workspace", "-w", help="Project directory the agent may access."),
]
ModelOption = Annotated[Optional[str], typer.Option("--model", "-m", help="Model in provider:model format.")]
MaxTokensOption = Annotated[Optional[int], typer.Option("--max-tokens", help="Generation limit per request.")]


@app.callback(invoke_without_command=True)
def main_callback(ctx: typer.Context) -> None:
    if ctx.invoked_subcommand is None:
        # Default to chat mode
        chat()


def _load_context(workspace: Optional[Path]) -> Context:
    workspace_path = resolve_workspace(workspace)
    return Context(workspace_path, get_settings(workspace_path))


def _create_agent(
    context: Context,
    model_override: Optional[str],
    max_tokens: Optional[int],
) -> tuple[Agent, RepublicModel]:
    """Create the agent and the model client it talks to."""
    settings: Settings = context.settings
    if model_override:
        settings = settings.model_copy(update={"model": model_override})
    model_name = settings.require_model()

    system_prompt = build_system_prompt(settings.system_prompt, read_workspace_prompt(context.workspace_path))
    model = RepublicModel(
        model_name,
        api_key=settings.api_key,
        api_base=settings.api_base,
        system_prompt=system_prompt,
    )
    registry = build_default_registry(context)
    agent = Agent(context, model, registry, max_tokens=max_tokens)
    return agent, model


def _create_event_handler(renderer: Renderer):
    def on_event(event: AgentEvent) -> None:
        if event.kind == "text":
            renderer.assistant_message(event.payload["text"])
        elif event.kind == "tool_call":
            renderer.tool_call(event.payload["name"], event.payload["input"])
        elif event.kind == "tool_result":
            renderer.tool_result(event.payload["name"], event.payload["ok"], event.payload["output"])

    return on_event


def _handle_special_commands(user_input: str, agent: Agent, renderer: Renderer) -> Optional[bool]:
    """Return True to stop the loop, False to skip the model, None otherwise."""
    cmd = user_input.strip().lower()
    if cmd in EXIT_COMMANDS:
        return True
    if cmd == "tools":
        renderer.usage_info(tools=agent.tool_names)
        return False
    if cmd == "debug":
        renderer.toggle_debug()
        return False
    return None


def _handle_chat_loop(agent: Agent, renderer: Renderer) -> None:
    """Read lines until the user quits or interrupts."""
    on_event = _create_event_handler(renderer)
    while True:
        try:
            user_input = renderer.get_user_input()
            if not user_input.strip():
                continue

            special = _handle_special_commands(user_input, agent, renderer)
            if special is True:
                break
            if special is False:
                continue

            result = agent.handle_input(user_input, on_event=on_event)
            if result.error:
                renderer.error(result.error)
        except (KeyboardInterrupt, EOFError):
            renderer.info("\nGoodbye!")
            break
    agent.terminate()


def _exit_with_error(renderer: Renderer, message: str) -> typer.Exit:
    renderer.error(message)
    return typer.Exit(1)


@app.command()
def chat(
    workspace: WorkspaceOption = None,
    model: ModelOption = None,
    max_tokens: MaxTokensOption = None,
) -> None:
    """Start interactive chat with Skiff."""
    renderer = create_cli_renderer()
    try:
        context = _load_context(workspace)
        configure_logging(profile="chat", level=context.settings.log_level)
        agent, client = _create_agent(context, model, max_tokens)
    except ConfigurationError as exc:
        raise _exit_with_error(renderer, str(exc)) from exc

    renderer.welcome()
    renderer.usage_info(workspace_path=str(context.workspace_path), model=client.name, tools=agent.tool_names)
    logger.debug("chat.start workspace={} model={}", context.workspace_path, client.name)
    _handle_chat_loop(agent, renderer)


@app.command()
def run(
    prompt: Annotated[str, typer.Argument(help="Message to send to the agent.")],
    workspace: WorkspaceOption = None,
    model: ModelOption = None,
    max_tokens: MaxTokensOption = None,
) -> None:
    """Send a single message and print the reply."""
    renderer = create_cli_renderer()
    try:
        context = _load_context(workspace)
        configure_logging(profile="default", level=context.settings.log_level)
        agent, _ = _create_agent(context, model, max_tokens)
    except ConfigurationError as exc:
        raise _exit_with_error(renderer, str(exc)) from exc

    try:
        result = agent.handle_input(prompt, on_event=_create_event_handler(renderer))
    except KeyboardInterrupt:
        renderer.info("\nGoodbye!")
        return
    finally:
        agent.terminate()
    if result.error:
        raise _exit_with_error(renderer, result.error)


@app.command()
def tools(workspace: WorkspaceOption = None) -> None:
    """Print the tool definitions published to the model."""
    renderer = create_cli_renderer()
    try:
        context = _load_context(workspace)
    except ConfigurationError as exc:
        raise _exit_with_error(renderer, str(exc)) from exc
    renderer.schemas(build_default_registry(context).schemas())


if __name__ == "__main__":
    app()
