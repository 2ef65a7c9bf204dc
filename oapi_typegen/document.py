"""
In-memory model of a normalized OpenAPI 3.0 / 3.1 document.

The loader builds these objects once per document. Schema nodes live in an
arena (`Document.nodes`) and carry their slot number in `SchemaNode.index`, so
visited sets throughout the package are plain sets of integers.
"""

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional


OPERATION_METHODS: tuple[str, ...] = (
    "get",
    "put",
    "post",
    "delete",
    "options",
    "head",
    "patch",
    "trace",
)

COMPONENT_SECTIONS: tuple[str, ...] = (
    "schemas",
    "parameters",
    "responses",
    "requestBodies",
    "headers",
    "securitySchemes",
    "examples",
    "links",
    "callbacks",
    "pathItems",
)


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass
class Discriminator:
    property_name: str
    mapping: dict[str, str] = field(default_factory=dict)


@dataclass
class AdditionalProperties:
    # has is None when the keyword is absent, True/False for the boolean form
    # and True when a sub-schema is given.
    has: Optional[bool] = None
    schema: Optional["SchemaRef"] = None


@dataclass(eq=False)
class SchemaNode:
    index: int = -1
    types: list[str] = field(default_factory=list)
    format: str = ""
    nullable: bool = False
    title: str = ""
    description: str = ""
    all_of: list["SchemaRef"] = field(default_factory=list)
    one_of: list["SchemaRef"] = field(default_factory=list)
    any_of: list["SchemaRef"] = field(default_factory=list)
    not_: Optional["SchemaRef"] = None
    items: Optional["SchemaRef"] = None
    properties: dict[str, "SchemaRef"] = field(default_factory=dict)
    required: list[str] = field(default_factory=list)
    additional_properties: AdditionalProperties = field(default_factory=AdditionalProperties)
    enum: list[Any] = field(default_factory=list)
    const: Any = UNSET
    discriminator: Optional[Discriminator] = None
    read_only: bool = False
    write_only: bool = False
    deprecated: bool = False
    default: Any = UNSET
    example: Any = UNSET
    constraints: dict[str, Any] = field(default_factory=dict)
    extensions: dict[str, Any] = field(default_factory=dict)

    def type_is(self, name: str) -> bool:
        return name in self.types

    def has_additional_properties(self) -> bool:
        return bool(self.additional_properties.has) or self.additional_properties.schema is not None

    def enum_values(self) -> list[Any]:
        if self.enum:
            return list(self.enum)
        if self.const is not UNSET:
            return [self.const]
        return []

    def children(self) -> Iterator["SchemaRef"]:
        """Yield every directly nested schema reference."""
        yield from self.all_of
        yield from self.one_of
        yield from self.any_of
        if self.not_ is not None:
            yield self.not_
        if self.items is not None:
            yield self.items
        yield from self.properties.values()
        if self.additional_properties.schema is not None:
            yield self.additional_properties.schema


@dataclass(eq=False)
class SchemaRef:
    ref: str = ""
    value: Optional[SchemaNode] = None
    # Annotations written next to the $ref at this usage site (unregistered node).
    site: Optional[SchemaNode] = None

    @property
    def is_resolved(self) -> bool:
        return self.value is not None


@dataclass(eq=False)
class ComponentRef:
    """Reference cell for non-schema objects (parameters, responses, ...)."""

    ref: str = ""
    value: Any = None


@dataclass
class Example:
    summary: str = ""
    value: Any = None
    external_value: str = ""


@dataclass
class MediaType:
    schema: Optional[SchemaRef] = None
    examples: dict[str, ComponentRef] = field(default_factory=dict)


@dataclass
class Header:
    description: str = ""
    required: bool = False
    schema: Optional[SchemaRef] = None
    content: dict[str, MediaType] = field(default_factory=dict)


@dataclass
class Parameter:
    name: str
    location: str
    required: bool = False
    description: str = ""
    style: str = ""
    explode: Optional[bool] = None
    schema: Optional[SchemaRef] = None
    content: dict[str, MediaType] = field(default_factory=dict)
    examples: dict[str, ComponentRef] = field(default_factory=dict)
    extensions: dict[str, Any] = field(default_factory=dict)


@dataclass
class RequestBody:
    description: str = ""
    required: bool = False
    content: dict[str, MediaType] = field(default_factory=dict)


@dataclass
class Link:
    operation_id: str = ""
    operation_ref: str = ""
    description: str = ""


@dataclass
class Response:
    description: str = ""
    headers: dict[str, ComponentRef] = field(default_factory=dict)
    content: dict[str, MediaType] = field(default_factory=dict)
    links: dict[str, ComponentRef] = field(default_factory=dict)


@dataclass
class Operation:
    operation_id: str = ""
    tags: list[str] = field(default_factory=list)
    summary: str = ""
    description: str = ""
    deprecated: bool = False
    parameters: list[ComponentRef] = field(default_factory=list)
    request_body: Optional[ComponentRef] = None
    responses: dict[str, ComponentRef] = field(default_factory=dict)
    callbacks: dict[str, ComponentRef] = field(default_factory=dict)
    extensions: dict[str, Any] = field(default_factory=dict)


@dataclass
class PathItem:
    summary: str = ""
    description: str = ""
    parameters: list[ComponentRef] = field(default_factory=list)
    operations: dict[str, Operation] = field(default_factory=dict)

    def set_operation(self, method: str, operation: Optional[Operation]) -> None:
        if operation is None:
            self.operations.pop(method, None)
        else:
            self.operations[method] = operation


@dataclass
class Callback:
    paths: dict[str, PathItem] = field(default_factory=dict)


@dataclass
class SecurityScheme:
    type: str = ""
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass
class Components:
    schemas: dict[str, SchemaRef] = field(default_factory=dict)
    parameters: dict[str, ComponentRef] = field(default_factory=dict)
    responses: dict[str, ComponentRef] = field(default_factory=dict)
    request_bodies: dict[str, ComponentRef] = field(default_factory=dict)
    headers: dict[str, ComponentRef] = field(default_factory=dict)
    security_schemes: dict[str, ComponentRef] = field(default_factory=dict)
    examples: dict[str, ComponentRef] = field(default_factory=dict)
    links: dict[str, ComponentRef] = field(default_factory=dict)
    callbacks: dict[str, ComponentRef] = field(default_factory=dict)
    path_items: dict[str, ComponentRef] = field(default_factory=dict)

    def section(self, name: str) -> dict[str, Any]:
        """Return the component map for an OpenAPI section key such as 'requestBodies'."""
        attr = {
            "schemas": "schemas",
            "parameters": "parameters",
            "responses": "responses",
            "requestBodies": "request_bodies",
            "headers": "headers",
            "securitySchemes": "security_schemes",
            "examples": "examples",
            "links": "links",
            "callbacks": "callbacks",
            "pathItems": "path_items",
        }[name]
        return getattr(self, attr)

    def count(self) -> int:
        return sum(len(self.section(name)) for name in COMPONENT_SECTIONS)


@dataclass
class Document:
    openapi: str = "3.0.0"
    info: dict[str, Any] = field(default_factory=dict)
    paths: dict[str, PathItem] = field(default_factory=dict)
    components: Components = field(default_factory=Components)
    webhooks: dict[str, PathItem] = field(default_factory=dict)
    json_schema_dialect: str = ""
    extensions: dict[str, Any] = field(default_factory=dict)
    nodes: list[SchemaNode] = field(default_factory=list)
    # Set when internal references were dereferenced at load time.
    inlined_refs: bool = False

    @property
    def is_openapi31(self) -> bool:
        return self.openapi.startswith("3.1")

    def new_node(self) -> SchemaNode:
        node = SchemaNode(index=len(self.nodes))
        self.nodes.append(node)
        return node

    def operations(self) -> Iterator[tuple[str, str, Operation]]:
        """Yield (path, method, operation) in document order."""
        for path, item in self.paths.items():
            for method in OPERATION_METHODS:
                op = item.operations.get(method)
                if op is not None:
                    yield path, method, op
