"""
Generation driver: filter and prune the document, compile every component
and operation into named type definitions, then render them as Go source.
"""

import json
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterator, Optional

from oapi_typegen.compiler import SchemaCompiler
from oapi_typegen.config import Configuration
from oapi_typegen.document import ComponentRef, Document, MediaType, Operation, Parameter, PathItem
from oapi_typegen.errors import TypeNameCollisionError
from oapi_typegen.filter import filter_operations
from oapi_typegen.names import (
    schema_name_to_type_name,
    sorted_schema_keys,
    string_with_type_name_to_go_comment,
    to_camel_case,
    unique_name,
)
from oapi_typegen.prune import prune_unused_components
from oapi_typegen.resolver import ReferenceResolver
from oapi_typegen.types import (
    EnumDefinition,
    Property,
    TypeDefinition,
    TypeDescriptor,
    gen_struct_from_schema,
    name_anonymous,
)

logger = logging.getLogger(__name__)

# Parameter locations that end up as fields of an operation's Params struct.
_OBJECT_PARAM_LOCATIONS = ("query", "header", "cookie")

_DEFAULT_STYLES = {"query": "form", "cookie": "form", "header": "simple", "path": "simple"}


@dataclass
class GenerationResult:
    type_definitions: list[TypeDefinition] = field(default_factory=list)
    # component schema name -> compiled descriptor
    schemas: dict[str, TypeDescriptor] = field(default_factory=dict)
    enums: list[EnumDefinition] = field(default_factory=list)


def is_json_media_type(media_type: str) -> bool:
    base = media_type.split(";", 1)[0].strip().lower()
    return base == "application/json" or base.endswith("+json")


def _media_type_tag(media_type: str) -> str:
    base = media_type.split(";", 1)[0].strip().lower()
    if base == "application/json":
        return "JSON"
    return to_camel_case(base.replace("/", "-"))


def _json_content(content: dict[str, MediaType]) -> list[tuple[str, MediaType]]:
    return [(name, content[name]) for name in sorted(content) if is_json_media_type(name)]


def generate(document: Document, config: Configuration) -> GenerationResult:
    """Compile document into type definitions; filters and prunes document in place."""
    filter_operations(document, config)
    if config.output_options.skip_prune:
        logger.debug("skipping prune: disabled by configuration")
    elif document.inlined_refs:
        # Nothing is referenced by $ref any more, so everything would look unused.
        logger.debug("skipping prune: references were inlined at load time")
    else:
        removed = prune_unused_components(document)
        logger.debug("pruned %d unused component(s)", removed)

    resolver = ReferenceResolver(document, config)
    compiler = SchemaCompiler(resolver, config)
    result = GenerationResult()

    definitions: list[TypeDefinition] = []
    definitions.extend(_schema_types(compiler, document, result.schemas))
    definitions.extend(_parameter_types(compiler, document))
    definitions.extend(_content_types(compiler, document, "responses"))
    definitions.extend(_content_types(compiler, document, "requestBodies"))
    definitions.extend(_operation_types(compiler, document))

    result.type_definitions = _dedupe(definitions)
    result.enums = compute_enums(result.type_definitions, config)
    logger.info(
        "generated %d type(s) and %d enum(s) from %d component schema(s)",
        len(result.type_definitions),
        len(result.enums),
        len(result.schemas),
    )
    return result


# -- components ---------------------------------------------------------------


def _schema_types(
    compiler: SchemaCompiler, document: Document, schemas: dict[str, TypeDescriptor]
) -> list[TypeDefinition]:
    out: list[TypeDefinition] = []
    for name in sorted_schema_keys(document.components.schemas):
        sref = document.components.schemas[name]
        schema = compiler.compile(sref, (name,), definition=True)
        schemas[name] = schema
        type_name = compiler.resolver.component_type_name("schemas", name)
        out.append(TypeDefinition(type_name=type_name, json_name=name, schema=schema))
        out.extend(schema.additional_types)
    return out


def _alias_to(type_name: str) -> TypeDescriptor:
    return TypeDescriptor(go_type=type_name, ref_type=type_name, define_via_alias=True)


def _parameter_types(compiler: SchemaCompiler, document: Document) -> list[TypeDefinition]:
    out: list[TypeDefinition] = []
    for name in sorted(document.components.parameters):
        cell = document.components.parameters[name]
        type_name = compiler.resolver.component_type_name("parameters", name)
        if cell.ref:
            schema = _alias_to(compiler.resolver.type_name_for_ref(cell.ref))
        elif cell.value is None:
            logger.warning("skipping unresolvable parameter component %s", name)
            continue
        else:
            schema = compiler.compile_parameter(cell.value, (name,))
        out.append(TypeDefinition(type_name=type_name, json_name=name, schema=schema))
        out.extend(schema.additional_types)
    return out


def _content_types(compiler: SchemaCompiler, document: Document, section: str) -> list[TypeDefinition]:
    """Types for the JSON content of response or request body components."""
    out: list[TypeDefinition] = []
    entries: dict[str, ComponentRef] = document.components.section(section)
    for name in sorted(entries):
        cell = entries[name]
        if cell.value is None:
            logger.warning("skipping unresolvable %s component %s", section, name)
            continue
        base_name = compiler.resolver.component_type_name(section, name)
        json_content = _json_content(cell.value.content)
        for media_type, media in json_content:
            type_name = base_name
            if len(json_content) > 1:
                type_name += _media_type_tag(media_type)
            if cell.ref:
                target = compiler.resolver.type_name_for_ref(cell.ref)
                if len(json_content) > 1:
                    target += _media_type_tag(media_type)
                schema = _alias_to(target)
            else:
                schema = compiler.compile(media.schema, (name,))
            out.append(TypeDefinition(type_name=type_name, json_name=name, schema=schema))
            out.extend(schema.additional_types)
    return out


# -- operations ---------------------------------------------------------------


def operation_type_prefix(path: str, method: str, op: Operation) -> str:
    """
    Go name prefix for an operation: its operationId, or one derived from the
    method and path ("get" + "/pets/{id}" -> "GetPetsId").
    """
    if op.operation_id:
        return schema_name_to_type_name(op.operation_id)
    parts = [method.lower()] + [p for p in path.split("/") if p]
    return to_camel_case("-".join(parts))


def _effective_parameters(item: PathItem, op: Operation) -> list[ComponentRef]:
    """Path-level parameters overridden by operation-level ones of the same name and location."""

    def key(cell: ComponentRef) -> Optional[tuple[str, str]]:
        param: Optional[Parameter] = cell.value
        return (param.name, param.location) if param is not None else None

    merged = list(item.parameters)
    for cell in op.parameters:
        k = key(cell)
        for i, existing in enumerate(merged):
            if k is not None and key(existing) == k:
                merged[i] = cell
                break
        else:
            merged.append(cell)
    return merged


def _params_type(
    compiler: SchemaCompiler, prefix: str, item: PathItem, op: Operation
) -> list[TypeDefinition]:
    type_name = f"{prefix}Params"
    out = TypeDescriptor(description=op.description)
    aux: list[TypeDefinition] = []
    for cell in _effective_parameters(item, op):
        param: Optional[Parameter] = cell.value
        if param is None or param.location not in _OBJECT_PARAM_LOCATIONS:
            continue
        if cell.ref:
            schema = _alias_to(compiler.resolver.type_name_for_ref(cell.ref))
        else:
            schema = compiler.compile_parameter(param, (type_name, param.name))
        prop = Property(
            json_name=param.name,
            schema=schema,
            required=param.required,
            description=param.description,
            needs_form_tag=(param.style or _DEFAULT_STYLES.get(param.location, "")) == "form",
            extensions=dict(param.extensions),
            path=(type_name, param.name),
        )
        if (schema.has_additional_properties or schema.union_elements) and not schema.ref_type:
            field_name = prop.go_field_name(compiler.config)
            name_anonymous(schema, f"{type_name}_{field_name}", f"{type_name}.{param.name}")
        aux.extend(schema.additional_types)
        out.properties.append(prop)

    if not out.properties:
        return []
    out.go_type = gen_struct_from_schema(out, compiler.config)
    return [*aux, TypeDefinition(type_name=type_name, json_name=type_name, schema=out)]


def _request_body_types(compiler: SchemaCompiler, prefix: str, op: Operation) -> list[TypeDefinition]:
    cell = op.request_body
    if cell is None or cell.value is None:
        return []
    out: list[TypeDefinition] = []
    for media_type, media in _json_content(cell.value.content):
        tag = _media_type_tag(media_type)
        alias_name = f"{prefix}{tag}RequestBody"
        if cell.ref:
            target = compiler.resolver.type_name_for_ref(cell.ref)
            out.append(TypeDefinition(type_name=alias_name, json_name=alias_name, schema=_alias_to(target)))
            continue

        body_name = f"{prefix}{tag}Body"
        schema = compiler.compile(media.schema, (body_name,))
        if schema.is_ref:
            out.extend(schema.additional_types)
            out.append(TypeDefinition(type_name=alias_name, json_name=alias_name, schema=_alias_to(schema.ref_type)))
            continue
        out.append(TypeDefinition(type_name=body_name, json_name=body_name, schema=schema))
        out.extend(schema.additional_types)
        out.append(TypeDefinition(type_name=alias_name, json_name=alias_name, schema=_alias_to(body_name)))
    return out


def _operation_types(compiler: SchemaCompiler, document: Document) -> list[TypeDefinition]:
    out: list[TypeDefinition] = []
    for path, item in document.paths.items():
        for method, op in item.operations.items():
            prefix = operation_type_prefix(path, method, op)
            out.extend(_params_type(compiler, prefix, item, op))
            out.extend(_request_body_types(compiler, prefix, op))
    return out


# -- post-processing ----------------------------------------------------------


def _same_definition(a: TypeDefinition, b: TypeDefinition) -> bool:
    return (
        a.schema.go_type == b.schema.go_type
        and a.schema.ref_type == b.schema.ref_type
        and a.schema.enum_values == b.schema.enum_values
    )


def _dedupe(definitions: list[TypeDefinition]) -> list[TypeDefinition]:
    """Drop repeated identical definitions; rename distinct ones that share a name."""
    out: list[TypeDefinition] = []
    by_name: dict[str, TypeDefinition] = {}
    for definition in definitions:
        existing = by_name.get(definition.type_name)
        if existing is not None:
            if _same_definition(existing, definition):
                continue
            renamed = unique_name(definition.type_name, by_name)
            if not renamed:
                raise TypeNameCollisionError(definition.type_name, definition.json_name)
            logger.warning(
                "type %s from %s collides with an existing type; renamed to %s",
                definition.type_name,
                definition.json_name or "<anonymous>",
                renamed,
            )
            definition = replace(definition, type_name=renamed)
        by_name[definition.type_name] = definition
        out.append(definition)
    return out


def compute_enums(definitions: list[TypeDefinition], config: Configuration) -> list[EnumDefinition]:
    """
    One EnumDefinition per enum type. Constant names are prefixed with the
    type name when they would clash with another enum's constants, with a
    type name, or with the enum's own name.
    """
    enums: list[EnumDefinition] = []
    seen: set[str] = set()
    for definition in definitions:
        schema = definition.schema
        if not schema.enum_values or definition.type_name in seen:
            continue
        seen.add(definition.type_name)
        enums.append(
            EnumDefinition(
                schema=schema,
                type_name=definition.type_name,
                value_wrapper='"' if schema.go_type == "string" else "",
                prefix_type_name=config.compatibility.always_prefix_enum_values,
            )
        )

    type_names = {d.type_name for d in definitions if not d.schema.enum_values}
    for i, e1 in enumerate(enums):
        for e2 in enums[i + 1 :]:
            if set(e1.get_values()) & set(e2.get_values()):
                e1.prefix_type_name = True
                e2.prefix_type_name = True
        if type_names & set(e1.get_values()):
            e1.prefix_type_name = True
        if e1.type_name in e1.get_values():
            e1.prefix_type_name = True
    return enums


# -- rendering ----------------------------------------------------------------

_STD_IMPORTS = (
    ("json.RawMessage", "encoding/json"),
    ("time.Time", "time"),
)

_RUNTIME_IMPORTS = (
    ("openapi_types.", 'openapi_types "github.com/oapi-codegen/runtime/types"'),
    ("nullable.Nullable", '"github.com/oapi-codegen/nullable"'),
)


def _descriptors(schema: TypeDescriptor, seen: set[int]) -> Iterator[TypeDescriptor]:
    if id(schema) in seen:
        return
    seen.add(id(schema))
    yield schema
    nested = [p.schema for p in schema.properties]
    if schema.array_type is not None:
        nested.append(schema.array_type)
    if schema.additional_properties_type is not None:
        nested.append(schema.additional_properties_type)
    for child in nested:
        yield from _descriptors(child, seen)


def _imports(result: GenerationResult, config: Configuration, body: str) -> list[str]:
    std = sorted({f'"{path}"' for marker, path in _STD_IMPORTS if marker in body})
    third_party = {spec for marker, spec in _RUNTIME_IMPORTS if marker in body}
    for go_import in config.external_imports().values():
        if go_import.name and f"{go_import.name}." in body:
            third_party.add(f'{go_import.name} "{go_import.path}"')

    seen: set[int] = set()
    for definition in result.type_definitions:
        for schema in _descriptors(definition.schema, seen):
            spec = schema.go_type_import
            if spec:
                third_party.add(f'{spec["name"]} "{spec["path"]}"' if spec["name"] else f'"{spec["path"]}"')

    lines = [f"\t{s}" for s in std]
    if std and third_party:
        lines.append("")
    lines.extend(f"\t{s}" for s in sorted(third_party))
    return lines


def _render_type(definition: TypeDefinition, config: Configuration) -> str:
    schema = definition.schema
    if schema.description:
        comment = string_with_type_name_to_go_comment(schema.description, definition.type_name)
    else:
        comment = f"// {definition.type_name} defines model for {definition.json_name or definition.type_name}."
    operator = " = " if definition.is_alias(config) else " "
    return f"{comment}\ntype {definition.type_name}{operator}{schema.type_decl}"


def _render_enum(enum: EnumDefinition) -> str:
    lines = [f"// Defines values for {enum.type_name}.", "const ("]
    values = enum.get_values()
    for name in sorted(values):
        value = json.dumps(values[name]) if enum.value_wrapper else values[name]
        lines.append(f"\t{name} {enum.type_name} = {value}")
    lines.append(")")
    return "\n".join(lines)


def render_declarations(result: GenerationResult, config: Configuration) -> str:
    """Go source for every type definition followed by the enum constant blocks."""
    blocks = [_render_type(d, config) for d in result.type_definitions]
    blocks.extend(_render_enum(e) for e in sorted(result.enums, key=lambda e: e.type_name))
    body = "\n\n".join(blocks)

    parts = [
        f"// Package {config.package} provides primitives to interact with the openapi HTTP API.",
        "//",
        "// Code generated by oapi-typegen. DO NOT EDIT.",
        f"package {config.package}",
        "",
    ]
    imports = _imports(result, config, body)
    if imports:
        parts.extend(["import (", *imports, ")", ""])
    if body:
        parts.append(body)
    return "\n".join(parts) + "\n"


def result_to_dict(result: GenerationResult, config: Configuration) -> dict[str, Any]:
    """JSON-friendly view of a GenerationResult."""
    return {
        "package": config.package,
        "types": [
            {
                "name": d.type_name,
                "json_name": d.json_name,
                "alias": d.is_alias(config),
                "declaration": d.schema.type_decl,
                "description": d.schema.description,
            }
            for d in result.type_definitions
        ],
        "schemas": {name: schema.type_decl for name, schema in result.schemas.items()},
        "enums": [
            {"type_name": e.type_name, "values": e.get_values(), "string": bool(e.value_wrapper)}
            for e in result.enums
        ],
    }
