"""Function registry for the SDK.

This module keeps the client-side handlers of declared functions and invokes them on behalf of the model.
"""

import inspect
import logging
from typing import Any, Iterable, Mapping, Optional

from ..types.exceptions import DecodeError, FunctionCallProtocolError
from ..types.json import JSONObjectFields, object_from_python, to_python
from ..types.tools import FunctionDeclaration, Tool

logger = logging.getLogger(__name__)


class FunctionRegistry:
    """Central registry for declared functions and their handlers.

    Function calls are routed by exact name match.
    """

    def __init__(self, declarations: Iterable[FunctionDeclaration] = ()) -> None:
        """Initialize the registry.

        Args:
            declarations: Declarations to register.
        """
        self.registry: dict[str, FunctionDeclaration] = {}
        for declaration in declarations:
            self.register(declaration)

    @classmethod
    def from_tools(cls, tools: Optional[Iterable[Tool]]) -> "FunctionRegistry":
        """Create a registry holding every function declared by the given tools."""
        return cls(declaration for tool in tools or () for declaration in tool.function_declarations or ())

    def register(self, declaration: FunctionDeclaration) -> None:
        """Register a declaration.

        Args:
            declaration: The declaration to register.

        Raises:
            ValueError: If a function with the same name is already registered.
        """
        if declaration.name in self.registry:
            raise ValueError(f"Function name '{declaration.name}' already exists.")

        logger.debug("function_name=<%s> | registering function", declaration.name)
        self.registry[declaration.name] = declaration

    def get(self, name: str) -> Optional[FunctionDeclaration]:
        """Return the declaration registered under ``name``, if any."""
        return self.registry.get(name)

    @property
    def declarations(self) -> list[FunctionDeclaration]:
        """All registered declarations, in registration order."""
        return list(self.registry.values())

    @property
    def has_handlers(self) -> bool:
        """Whether any registered declaration has a client-side handler."""
        return any(declaration.function is not None for declaration in self.registry.values())

    async def invoke(self, name: str, args: JSONObjectFields) -> JSONObjectFields:
        """Invoke the handler of a declared function.

        Arguments are checked against the declared parameter schema before the handler runs. Handlers receive plain
        Python values and may be sync or async; their result must be a mapping.

        Args:
            name: The function name from the model's function call.
            args: The call arguments.

        Returns:
            The handler's result as JSON object fields.

        Raises:
            FunctionCallProtocolError: If no handler is registered under ``name``, the arguments violate the declared
                schema, or the handler fails or returns something other than a JSON object.
        """
        declaration = self.registry.get(name)
        if declaration is None or declaration.function is None:
            raise FunctionCallProtocolError(name, "no handler is registered for this function")

        if declaration.parameters is not None:
            problems = declaration.parameters.validate_object(args)
            if problems:
                raise FunctionCallProtocolError(name, f"invalid arguments: {'; '.join(problems)}")

        logger.debug("function_name=<%s> | invoking function", name)
        try:
            result: Any = declaration.function(to_python(args))
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.exception("function_name=<%s> | function handler failed", name)
            raise FunctionCallProtocolError(name, f"handler failed: {e}", e) from e

        if not isinstance(result, Mapping):
            raise FunctionCallProtocolError(name, f"handler returned {type(result).__name__}, expected a mapping")

        try:
            return object_from_python(result)
        except DecodeError as e:
            raise FunctionCallProtocolError(name, f"handler result is not JSON: {e}", e) from e
