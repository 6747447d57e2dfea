"""
Tool definitions, schema validation and the tool registry

A tool is a name, a description, a pydantic model describing its arguments
and a callable. The chat model only ever sees the JSON schema of the model;
``Tool.run`` validates incoming arguments against it before executing.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Type

from pydantic import BaseModel, ValidationError

from ..shared.errors import ToolInputError
from ..shared.structured_logger import get_logger

logger = get_logger("ToolRegistry")


@dataclass
class Tool:
    """A callable tool exposed to the chat model"""
    name: str
    description: str
    input_schema: Optional[Type[BaseModel]]
    execute: Callable[..., Any]
    category: Optional[str] = None

    def json_schema(self) -> Dict[str, Any]:
        """JSON schema of the tool arguments"""
        if self.input_schema is None:
            return {}
        return self.input_schema.model_json_schema()

    def run(self, arguments: Optional[Mapping[str, Any]] = None) -> Any:
        """
        Validate arguments and execute the tool

        Raises:
            ToolInputError: Arguments do not match the input schema
        """
        if self.input_schema is None:
            raise ToolInputError(f"Tool '{self.name}' has no input schema")

        try:
            validated = self.input_schema.model_validate(dict(arguments or {}))
        except ValidationError as e:
            raise ToolInputError(
                f"Invalid arguments for tool '{self.name}'",
                details={"tool": self.name, "error_count": e.error_count()}
            ) from e

        return self.execute(**validated.model_dump())

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "input_schema": self.json_schema(),
        }


@dataclass
class ToolValidationResult:
    """Outcome of validating one tool definition"""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class ToolCollectionValidation:
    """Outcome of validating a name -> tool mapping"""
    valid_tools: Dict[str, Tool]
    invalid_tools: List[str]
    results: Dict[str, ToolValidationResult]


def _is_model_class(value: Any) -> bool:
    return isinstance(value, type) and issubclass(value, BaseModel)


def validate_tool_schema(tool: Tool, strict_mode: bool = False) -> ToolValidationResult:
    """
    Validate a tool definition

    Checks:
    - non-empty description
    - input schema is a pydantic model class whose JSON root is an object
    - execute is callable
    - object schema declares properties (warning, error in strict mode)

    Args:
        tool: Tool to check
        strict_mode: Promote the empty-properties warning to an error

    Returns:
        ToolValidationResult
    """
    errors: List[str] = []
    warnings: List[str] = []

    if not isinstance(tool.description, str) or not tool.description.strip():
        errors.append("Tool must have a non-empty description string")

    schema = tool.input_schema
    if schema is None:
        errors.append("Tool must have an input schema")
    elif not _is_model_class(schema):
        errors.append(f"Input schema must be a pydantic model class, got {type(schema).__name__}")
    else:
        try:
            json_schema = schema.model_json_schema()
        except Exception as e:
            errors.append(f"Failed to build JSON schema: {e}")
        else:
            root_type = json_schema.get("type")
            if root_type != "object":
                errors.append(f"Root schema type must be 'object', got '{root_type}'")
            elif not json_schema.get("properties"):
                if strict_mode:
                    errors.append("Object schema must have properties")
                else:
                    warnings.append("Object schema should have properties")

    if not callable(tool.execute):
        errors.append("Tool execute must be callable")

    if errors:
        logger.error("Tool failed validation", tool=tool.name, errors=errors)
    elif warnings:
        logger.warning("Tool has validation warnings", tool=tool.name, warnings=warnings)

    return ToolValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def validate_tools_collection(tools: Mapping[str, Tool], strict_mode: bool = False) -> ToolCollectionValidation:
    """Validate every tool and split the mapping into valid tools and invalid names"""
    valid_tools: Dict[str, Tool] = {}
    invalid_tools: List[str] = []
    results: Dict[str, ToolValidationResult] = {}

    for name, tool in tools.items():
        result = validate_tool_schema(tool, strict_mode=strict_mode)
        results[name] = result
        if result.is_valid:
            valid_tools[name] = tool
        else:
            invalid_tools.append(name)

    if invalid_tools:
        logger.warning(
            "Invalid tools dropped",
            valid_count=len(valid_tools),
            total_count=len(tools),
            invalid_tools=invalid_tools
        )

    return ToolCollectionValidation(valid_tools=valid_tools, invalid_tools=invalid_tools, results=results)


class ToolRegistry:
    """Name -> Tool mapping; registering an existing name replaces the old entry"""

    def __init__(self, tools: Optional[List[Tool]] = None):
        self._tools: Dict[str, Tool] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        if tool.name in self._tools:
            logger.debug("Replacing registered tool", tool=tool.name)
        self._tools[tool.name] = tool

    def get(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def names(self) -> List[str]:
        return list(self._tools.keys())

    def as_dict(self) -> Dict[str, Tool]:
        return dict(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[str]:
        return iter(self._tools)
