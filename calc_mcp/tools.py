"""Arithmetic tool executor.

Exposes 4 tools, each taking two numeric operands ``a`` and ``b``:
- add: a + b
- subtract: a - b
- multiply: a * b
- divide: a / b (division by zero is reported in the result text)

Results are plain text formatted to two decimals, e.g. ``Result: 5.00``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable, Protocol

from pydantic import BaseModel, ConfigDict, Field

from calc_mcp.exceptions import ToolArgumentError

logger = logging.getLogger(__name__)

DIVIDE_BY_ZERO_TEXT = "Error: Cannot divide by zero"


class ToolDescriptor(BaseModel):
    """Static metadata advertised for one tool in ``tools/list``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str
    input_schema: dict[str, Any] = Field(alias="inputSchema")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ToolExecutor(Protocol):
    """What the dispatcher needs from a tool backend."""

    @property
    def descriptors(self) -> tuple[ToolDescriptor, ...]: ...

    def execute(self, name: str, arguments: Any) -> str: ...


# ---------------------------------------------------------------------------
# Tool implementations
# ---------------------------------------------------------------------------


def _format(result: float) -> str:
    return f"Result: {result:.2f}"


def _add(a: float, b: float) -> str:
    result = a + b
    logger.debug("Addition: %s + %s = %s", a, b, result)
    return _format(result)


def _subtract(a: float, b: float) -> str:
    result = a - b
    logger.debug("Subtraction: %s - %s = %s", a, b, result)
    return _format(result)


def _multiply(a: float, b: float) -> str:
    result = a * b
    logger.debug("Multiplication: %s * %s = %s", a, b, result)
    return _format(result)


def _divide(a: float, b: float) -> str:
    if b == 0:
        logger.warning("Division error: cannot divide %s by zero", a)
        return DIVIDE_BY_ZERO_TEXT
    result = a / b
    logger.debug("Division: %s / %s = %s", a, b, result)
    return _format(result)


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------

def _binary_schema() -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "a": {"type": "number", "description": "First number"},
            "b": {"type": "number", "description": "Second number"},
        },
        "required": ["a", "b"],
    }


TOOLS: tuple[ToolDescriptor, ...] = (
    ToolDescriptor(name="add", description="Add two numbers together", input_schema=_binary_schema()),
    ToolDescriptor(
        name="subtract",
        description="Subtract the second number from the first number",
        input_schema=_binary_schema(),
    ),
    ToolDescriptor(name="multiply", description="Multiply two numbers together", input_schema=_binary_schema()),
    ToolDescriptor(
        name="divide",
        description="Divide the first number by the second number",
        input_schema=_binary_schema(),
    ),
)

_TOOL_DISPATCH: dict[str, Callable[[float, float], str]] = {
    "add": _add,
    "subtract": _subtract,
    "multiply": _multiply,
    "divide": _divide,
}


def _operand(tool_name: str, arguments: Mapping[str, Any], key: str) -> float:
    """Pull a numeric operand out of the arguments bag.

    Accepts JSON numbers and numeric strings. Booleans and null are rejected
    even though Python would happily coerce them.
    """
    if key not in arguments:
        raise ToolArgumentError(f"Missing required argument '{key}' for tool '{tool_name}'", tool_name=tool_name, argument=key)

    value = arguments[key]
    if isinstance(value, bool) or value is None:
        raise ToolArgumentError(f"Argument '{key}' must be a number", tool_name=tool_name, argument=key)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            pass
    raise ToolArgumentError(f"Argument '{key}' must be a number", tool_name=tool_name, argument=key)


class ArithmeticToolExecutor:
    """Executes the arithmetic tools by name."""

    def __init__(self, tools: tuple[ToolDescriptor, ...] = TOOLS) -> None:
        self._tools = tools

    @property
    def descriptors(self) -> tuple[ToolDescriptor, ...]:
        return self._tools

    def execute(self, name: str, arguments: Any) -> str:
        handler = _TOOL_DISPATCH.get(name)
        if handler is None:
            raise ToolArgumentError(f"Unknown tool: {name}", tool_name=name)
        if not isinstance(arguments, Mapping):
            raise ToolArgumentError(f"Arguments for tool '{name}' must be an object", tool_name=name)

        a = _operand(name, arguments, "a")
        b = _operand(name, arguments, "b")
        return handler(a, b)
