"""Tool registry."""

from __future__ import annotations

import json
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from loguru import logger
from pydantic import BaseModel, ValidationError
from republic import Tool, tool_from_model

from .results import ToolFailure, ToolOutcome

ToolHandler = Callable[[Any], ToolOutcome]


def _shorten_text(text: str, width: int = 30, placeholder: str = "...") -> str:
    """Shorten text to width characters, cutting in the middle of words if needed."""
    if len(text) <= width:
        return text

    available = width - len(placeholder)
    if available <= 0:
        return placeholder

    return text[:available] + placeholder


def _format_validation_error(exc: ValidationError) -> str:
    parts: list[str] = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "input"
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)


@dataclass(frozen=True)
class ToolDescriptor:
    """Tool metadata and runtime handle."""

    name: str
    description: str
    input_model: type[BaseModel]
    handler: ToolHandler

    def input_schema(self) -> dict[str, Any]:
        return self.input_model.model_json_schema()

    def schema(self) -> dict[str, Any]:
        """Return the published ``{name, description, input_schema}`` shape."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema(),
        }

    def to_model_tool(self) -> Tool:
        """Build the republic tool handed to the model client."""

        def _handler(params: BaseModel) -> str:
            return self.handler(params).render()

        return tool_from_model(
            self.input_model,
            _handler,
            name=self.name,
            description=self.description,
        )


class ToolRegistry:
    """Ordered, name-addressed collection of tools."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolDescriptor] = {}

    def register(self, descriptor: ToolDescriptor) -> None:
        if descriptor.name in self._tools:
            raise ValueError(f"Duplicate tool name: {descriptor.name}")
        self._tools[descriptor.name] = descriptor

    def has(self, name: str) -> bool:
        return name in self._tools

    def get(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def descriptors(self) -> list[ToolDescriptor]:
        return list(self._tools.values())

    def schemas(self) -> list[dict[str, Any]]:
        return [descriptor.schema() for descriptor in self._tools.values()]

    def model_tools(self) -> list[Tool]:
        return [descriptor.to_model_tool() for descriptor in self._tools.values()]

    def __len__(self) -> int:
        return len(self._tools)

    def _log_tool_call(self, name: str, arguments: Mapping[str, Any]) -> None:
        params: list[str] = []
        for key, value in arguments.items():
            try:
                rendered = json.dumps(value, ensure_ascii=False)
            except TypeError:
                rendered = repr(value)
            params.append(f"{key}={_shorten_text(rendered)}")
        logger.info("tool.call.start name={} {{ {} }}", name, ", ".join(params))

    def execute(self, name: str, arguments: Mapping[str, Any] | None = None) -> ToolOutcome | None:
        """Run a tool by name.

        Returns None when no tool is registered under ``name``. Everything else,
        including argument validation errors and unexpected faults raised by the
        handler, comes back as a :class:`ToolOutcome`.
        """
        descriptor = self.get(name)
        if descriptor is None:
            return None

        arguments = dict(arguments or {})
        self._log_tool_call(name, arguments)
        start = time.monotonic()
        try:
            try:
                params = descriptor.input_model.model_validate(arguments)
            except ValidationError as exc:
                return ToolOutcome.fail(ToolFailure.INVALID_ARGUMENTS, _format_validation_error(exc))
            try:
                return descriptor.handler(params)
            except Exception as exc:
                logger.error("tool.call.error name={} error={}", name, exc)
                logger.opt(exception=True).debug("tool.call.error traceback name={}", name)
                return ToolOutcome.fail(ToolFailure.TOOL_ERROR, str(exc) or type(exc).__name__)
        finally:
            duration = time.monotonic() - start
            logger.info("tool.call.end name={} duration={:.3f}ms", name, duration * 1000)
