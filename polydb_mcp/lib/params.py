"""Parameter descriptors and coercion for string-typed tool parameters.

Every tool parameter arrives as a string. A ``ParamSet`` declares the
parameters a tool accepts, checks presence of the required ones and turns
the raw strings into integers, booleans or decoded JSON.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from polydb_mcp.models.error_types import InvalidParameterError, MissingParameterError

STRING = "string"
INTEGER = "integer"
BOOLEAN = "boolean"
JSON = "json"

_KINDS = (STRING, INTEGER, BOOLEAN, JSON)
_INT_PREFIX = re.compile(r'\s*([+-]?\d+)')


def parse_int(value: str) -> Optional[int]:
    """Parse the leading integer of a string, ignoring trailing characters.

    Returns None when the string does not start with an integer.
    """
    match = _INT_PREFIX.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def is_present(value: Any) -> bool:
    """Absent, None and empty-string values all count as not supplied."""
    return value is not None and value != ""


@dataclass(frozen=True)
class Param:
    """A single tool parameter.

    Attributes:
        name: Parameter name as sent by the caller
        description: Human readable description shown to callers
        kind: Semantic type used for coercion (string, integer, boolean, json)
        required: Message to raise when absent, or None for optional params
        default: Value used when an optional parameter is absent
    """

    name: str
    description: str
    kind: str = STRING
    required: Optional[str] = None
    default: Any = None

    def __post_init__(self):
        if self.kind not in _KINDS:
            raise ValueError(f"Unknown parameter kind: {self.kind}")

    def schema(self) -> Dict[str, str]:
        return {"type": "string", "description": self.description}

    def coerce(self, raw: str) -> Any:
        if self.kind == INTEGER:
            number = parse_int(raw)
            if number is None:
                raise InvalidParameterError(self.name, f"Invalid integer for {self.name}: '{raw}'")
            return number
        if self.kind == BOOLEAN:
            return raw == "true"
        if self.kind == JSON:
            try:
                return json.loads(raw)
            except json.JSONDecodeError as e:
                raise InvalidParameterError(self.name, str(e)) from e
        return raw


class ParamSet:
    """Ordered collection of parameters for one tool."""

    def __init__(self, *params: Param):
        self.params = params
        names = [p.name for p in params]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate parameter names: {names}")

    def __iter__(self):
        return iter(self.params)

    def __len__(self):
        return len(self.params)

    def schema(self) -> Dict[str, Dict[str, str]]:
        """Advisory parameter schema: every parameter is declared as a string."""
        return {p.name: p.schema() for p in self.params}

    def parse(self, raw: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """Validate and coerce raw parameters.

        All required checks run, in declaration order, before any value is
        coerced so that a missing parameter is reported ahead of a malformed one.

        Args:
            raw: Parameter mapping as received from the caller

        Returns:
            Dictionary with one entry per declared parameter

        Raises:
            MissingParameterError: If a required parameter is absent
            InvalidParameterError: If a value cannot be coerced
        """
        raw = raw or {}

        for param in self.params:
            if param.required and not is_present(raw.get(param.name)):
                raise MissingParameterError(param.name, param.required)

        values: Dict[str, Any] = {}
        for param in self.params:
            value = raw.get(param.name)
            if not is_present(value):
                values[param.name] = False if param.kind == BOOLEAN and param.default is None else param.default
                continue
            # Non-string values from lenient clients are re-encoded as JSON text
            values[param.name] = param.coerce(value if isinstance(value, str) else json.dumps(value))
        return values
