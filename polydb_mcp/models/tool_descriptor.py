"""Tool descriptor models.

A ``ToolSpec`` is the static, service-independent definition of a tool as
declared in a tool table. Binding a spec to a backend service yields the
``ToolDescriptor`` that dispatchers see.
"""

from functools import partial
from typing import Any, Awaitable, Callable, Dict, Mapping

from pydantic import BaseModel, ConfigDict, Field

from polydb_mcp.lib.params import ParamSet

Handler = Callable[[Mapping[str, Any]], Awaitable[Any]]


class ParamInfo(BaseModel):
    """Advisory schema entry for one tool parameter."""

    model_config = ConfigDict(frozen=True)

    type: str = Field("string", description="Declared wire type; always 'string'")
    description: str = Field(..., description="Parameter description")


class ToolDescriptor(BaseModel):
    """A named, invocable tool bound to its backend."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., description="Tool name, unique across all backends")
    backend: str = Field(..., description="Name of the backend serving the tool")
    description: str = Field(..., description="What the tool does")
    params: Dict[str, ParamInfo] = Field(default_factory=dict, description="Advisory parameter schema")
    handler: Handler = Field(..., exclude=True, repr=False)

    async def __call__(self, params: Mapping[str, Any] = None) -> Any:
        return await self.handler(params or {})

    def input_schema(self) -> Dict[str, Any]:
        """JSON schema of the tool input, every property typed as a string."""
        return {
            "type": "object",
            "properties": {
                name: {"type": info.type, "description": info.description}
                for name, info in self.params.items()
            },
        }


class ToolSpec:
    """Static tool table entry: description, parameters and handler.

    The handler takes the backend service as its first argument.
    """

    def __init__(self, description: str, params: ParamSet, handler: Callable[..., Awaitable[Any]]):
        self.description = description
        self.params = params
        self.handler = handler

    def bind(self, name: str, service) -> ToolDescriptor:
        return ToolDescriptor(
            name=name,
            backend=service.name,
            description=self.description,
            params={pname: ParamInfo(**info) for pname, info in self.params.schema().items()},
            handler=partial(self.handler, service),
        )
