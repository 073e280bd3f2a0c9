"""Tool-related type definitions for the SDK.

These types describe callable functions to the model and, on the client side, pair each declaration with the
handler that answers the model's function calls.

- Docs: https://ai.google.dev/api/caching#Tool
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from .exceptions import DecodeError
from .json import JSONArray, JSONBool, JSONNull, JSONNumber, JSONObject, JSONObjectFields, JSONString, JSONValue

FunctionHandler = Callable[[dict[str, Any]], Union[Mapping[str, Any], Awaitable[Mapping[str, Any]]]]
"""Client-side implementation of a declared function.

Receives the call arguments as plain Python values and returns a mapping; may be sync or async and may raise.
"""


class DataType(str, Enum):
    """Type of a schema node."""

    STRING = "STRING"
    NUMBER = "NUMBER"
    INTEGER = "INTEGER"
    BOOLEAN = "BOOLEAN"
    ARRAY = "ARRAY"
    OBJECT = "OBJECT"


@dataclass(frozen=True)
class Schema:
    """A subset of an OpenAPI schema describing function parameters.

    Attributes:
        type: The data type of this node.
        format: Optional format hint, e.g. ``int32`` or ``enum``.
        description: Optional description shown to the model.
        nullable: Whether ``null`` is accepted.
        enum_values: Allowed values for ``STRING`` nodes.
        items: Element schema for ``ARRAY`` nodes.
        properties: Member schemas for ``OBJECT`` nodes.
        required: Member names that must be present for ``OBJECT`` nodes.
    """

    type: DataType
    format: Optional[str] = None
    description: Optional[str] = None
    nullable: Optional[bool] = None
    enum_values: Optional[tuple[str, ...]] = None
    items: Optional["Schema"] = None
    properties: Optional[Mapping[str, "Schema"]] = None
    required: Optional[tuple[str, ...]] = None

    def __post_init__(self) -> None:
        if self.enum_values is not None:
            object.__setattr__(self, "enum_values", tuple(self.enum_values))
        if self.required is not None:
            object.__setattr__(self, "required", tuple(self.required))

    def to_dict(self) -> dict[str, Any]:
        """Encode the schema into its wire object, omitting unset fields."""
        encoded: dict[str, Any] = {"type": self.type.value}
        if self.format is not None:
            encoded["format"] = self.format
        if self.description is not None:
            encoded["description"] = self.description
        if self.nullable is not None:
            encoded["nullable"] = self.nullable
        if self.enum_values is not None:
            encoded["enum"] = list(self.enum_values)
        if self.items is not None:
            encoded["items"] = self.items.to_dict()
        if self.properties is not None:
            encoded["properties"] = {name: schema.to_dict() for name, schema in self.properties.items()}
        if self.required is not None:
            encoded["required"] = list(self.required)
        return encoded

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Schema":
        """Decode a schema from its wire object.

        Raises:
            DecodeError: If the type is missing or not a known data type.
        """
        try:
            data_type = DataType(str(raw["type"]).upper())
        except (KeyError, ValueError) as e:
            raise DecodeError(f"schema_type=<{raw.get('type')}> | invalid schema type", e) from e

        items = raw.get("items")
        properties = raw.get("properties")
        return cls(
            type=data_type,
            format=raw.get("format"),
            description=raw.get("description"),
            nullable=raw.get("nullable"),
            enum_values=raw.get("enum"),
            items=cls.from_dict(items) if items is not None else None,
            properties={name: cls.from_dict(value) for name, value in properties.items()} if properties else None,
            required=raw.get("required"),
        )

    def validate(self, value: JSONValue, path: str = "$") -> list[str]:
        """Check a JSON value against this schema.

        Only the structural rules expressed by this schema are checked: type, nullability, enum membership,
        required members and the shape of nested items and properties.

        Args:
            value: The value to check.
            path: Location of ``value`` used in problem descriptions.

        Returns:
            A list of problems; empty when the value conforms.
        """
        if isinstance(value, JSONNull):
            return [] if self.nullable else [f"{path}: null is not allowed"]

        match self.type:
            case DataType.STRING:
                if not isinstance(value, JSONString):
                    return [f"{path}: expected STRING"]
                if self.enum_values is not None and value.value not in self.enum_values:
                    return [f"{path}: {value.value!r} is not one of {list(self.enum_values)}"]
                return []
            case DataType.NUMBER:
                return [] if isinstance(value, JSONNumber) else [f"{path}: expected NUMBER"]
            case DataType.INTEGER:
                if isinstance(value, JSONNumber) and value.value.is_integer():
                    return []
                return [f"{path}: expected INTEGER"]
            case DataType.BOOLEAN:
                return [] if isinstance(value, JSONBool) else [f"{path}: expected BOOLEAN"]
            case DataType.ARRAY:
                if not isinstance(value, JSONArray):
                    return [f"{path}: expected ARRAY"]
                if self.items is None:
                    return []
                problems: list[str] = []
                for index, item in enumerate(value.items):
                    problems.extend(self.items.validate(item, f"{path}[{index}]"))
                return problems
            case DataType.OBJECT:
                if not isinstance(value, JSONObject):
                    return [f"{path}: expected OBJECT"]
                return self.validate_object(value.fields, path)

        return [f"{path}: unsupported schema type {self.type}"]

    def validate_object(self, fields: JSONObjectFields, path: str = "$") -> list[str]:
        """Check the members of a JSON object against an ``OBJECT`` schema."""
        problems = [f"{path}.{name}: missing required property" for name in self.required or () if name not in fields]
        for name, schema in (self.properties or {}).items():
            if name in fields:
                problems.extend(schema.validate(fields[name], f"{path}.{name}"))
        return problems


@dataclass(frozen=True)
class FunctionDeclaration:
    """A function the model may ask the client to call.

    Attributes:
        name: The function name; function calls are routed by exact match on this name.
        description: What the function does, shown to the model.
        parameters: Schema of the function's arguments, or None for a function without parameters.
        function: The client-side handler. Never sent to the server.
    """

    name: str
    description: str
    parameters: Optional[Schema] = None
    function: Optional[FunctionHandler] = None

    def to_dict(self) -> dict[str, Any]:
        """Encode the declaration into its wire object."""
        encoded: dict[str, Any] = {"name": self.name, "description": self.description}
        if self.parameters is not None:
            encoded["parameters"] = self.parameters.to_dict()
        return encoded


@dataclass(frozen=True)
class CodeExecution:
    """Marker enabling the model to generate and run code. Encodes as an empty object."""

    def to_dict(self) -> dict[str, Any]:
        """Encode the marker into its wire object."""
        return {}


@dataclass(frozen=True)
class Tool:
    """A set of capabilities the model may use to produce a response.

    Attributes:
        function_declarations: Functions the model may call.
        code_execution: Enables code execution when set.
    """

    function_declarations: Optional[tuple[FunctionDeclaration, ...]] = None
    code_execution: Optional[CodeExecution] = None

    def __post_init__(self) -> None:
        if self.function_declarations is not None:
            object.__setattr__(self, "function_declarations", tuple(self.function_declarations))

    def to_dict(self) -> dict[str, Any]:
        """Encode the tool into its wire object."""
        encoded: dict[str, Any] = {}
        if self.function_declarations is not None:
            encoded["functionDeclarations"] = [declaration.to_dict() for declaration in self.function_declarations]
        if self.code_execution is not None:
            encoded["codeExecution"] = self.code_execution.to_dict()
        return encoded


class FunctionCallingMode(str, Enum):
    """How the model is allowed to use declared functions."""

    AUTO = "AUTO"
    ANY = "ANY"
    NONE = "NONE"


@dataclass(frozen=True)
class FunctionCallingConfig:
    """Configuration for function calling.

    Attributes:
        mode: The function calling mode.
        allowed_function_names: Restricts the callable functions when ``mode`` is ``ANY``.
    """

    mode: FunctionCallingMode = FunctionCallingMode.AUTO
    allowed_function_names: Optional[tuple[str, ...]] = None

    def to_dict(self) -> dict[str, Any]:
        """Encode the configuration into its wire object."""
        encoded: dict[str, Any] = {"mode": self.mode.value}
        if self.allowed_function_names is not None:
            encoded["allowedFunctionNames"] = list(self.allowed_function_names)
        return encoded


@dataclass(frozen=True)
class ToolConfig:
    """Tool configuration shared by every tool in a request."""

    function_calling_config: Optional[FunctionCallingConfig] = None

    def to_dict(self) -> dict[str, Any]:
        """Encode the configuration into its wire object."""
        encoded: dict[str, Any] = {}
        if self.function_calling_config is not None:
            encoded["functionCallingConfig"] = self.function_calling_config.to_dict()
        return encoded
