"""Base tool classes with Pydantic parameter validation."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel

from tradegraph.tool.truncation import truncate_output

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


@dataclass
class ToolResult:
    """Base result from a tool execution."""

    output: str = ""
    is_error: bool = False


@dataclass
class ToolOk(ToolResult):
    """Successful tool result."""

    is_error: bool = False


@dataclass
class ToolError(ToolResult):
    """Failed tool result."""

    is_error: bool = True


class BaseTool(ABC, Generic[T]):
    """Base class for all tools.

    A tool is a named capability the model can request with an
    ``Action:`` / ``Action Input:`` pair. Each tool declares its input as
    a Pydantic model (the type parameter T). Calling a tool never raises:
    validation and execution faults come back as error text the model can
    react to.

    Usage:
        class QuoteParams(BaseModel):
            symbol: str = ""

        class QuoteTool(BaseTool[QuoteParams]):
            name = "quote"
            description = 'Latest quote. Input: {"symbol": "TSLA"}'
            param_model = QuoteParams

            async def execute(self, params: QuoteParams) -> ToolResult:
                return ToolOk(output=self.to_json({"price": 1.0}))
    """

    name: ClassVar[str]
    description: ClassVar[str]
    param_model: ClassVar[type[BaseModel]]

    async def __call__(self, arguments: dict[str, Any]) -> str:
        """Validate arguments, execute, truncate output."""
        try:
            params = self.param_model.model_validate(arguments)
        except Exception as e:
            return f"Error: invalid parameters for {self.name}: {e}"

        try:
            result = await self.execute(params)  # type: ignore[arg-type]
        except Exception as e:
            logger.error("Tool %s execution error: %s", self.name, e, exc_info=True)
            return f"Error: tool '{self.name}' failed: {e}"

        return truncate_output(result.output)

    @abstractmethod
    async def execute(self, params: T) -> ToolResult:
        """Execute the tool with validated parameters."""
        ...

    def describe(self) -> str:
        """One-line capability listing for the system prompt."""
        return f"- {self.name}: {self.description}"

    @staticmethod
    def to_json(payload: Any) -> str:
        return json.dumps(payload, ensure_ascii=False, default=str)
