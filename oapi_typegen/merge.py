"""
allOf flattening.

The default algorithm merges the member schemas into one synthetic schema
(property union, required union, more specific property wins) and compiles
that. The legacy algorithm (`compatibility.old-merge-schemas`) compiles every
member on its own and adds the resulting properties one by one, failing on
any conflicting duplicate.
"""

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Sequence

from oapi_typegen.document import SchemaNode, SchemaRef
from oapi_typegen.errors import PropertyConflictError, SchemaError, UnsupportedReferenceError
from oapi_typegen.types import TypeDescriptor, additional_properties_type, gen_struct_from_schema

if TYPE_CHECKING:
    from oapi_typegen.compiler import SchemaCompiler

logger = logging.getLogger(__name__)


def merge_schemas(compiler: "SchemaCompiler", all_of: Sequence[SchemaRef], path: Sequence[str]) -> TypeDescriptor:
    if compiler.config.compatibility.old_merge_schemas:
        return _merge_schemas_v1(compiler, all_of, path)
    return _merge_schemas(compiler, all_of, path)


def _merge_schemas(compiler: "SchemaCompiler", all_of: Sequence[SchemaRef], path: Sequence[str]) -> TypeDescriptor:
    path = tuple(path)
    if not all_of:
        raise SchemaError("no schemas to merge in allOf", path)
    if len(all_of) == 1:
        return compiler.compile(all_of[0], path)

    merged = _flattened(compiler, _value_with_propagated_ref(all_of[0], path), path, stack=())
    for sref in all_of[1:]:
        other = _flattened(compiler, _value_with_propagated_ref(sref, path), path, stack=())
        merged = merge_nodes(compiler, merged, other, path)
    return compiler.compile(SchemaRef(value=merged), path, restore=False)


def _value_with_propagated_ref(sref: SchemaRef, path: tuple[str, ...]) -> SchemaNode:
    """
    The member's schema; for a member living in another document, its local
    property references are re-prefixed with that document.
    """
    node = sref.value
    if node is None:
        logger.warning("unresolvable allOf member %s at %s; ignoring it", sref.ref or "<inline>", ".".join(path))
        return SchemaNode()
    if not sref.ref or sref.ref.startswith("#"):
        return node

    parts = sref.ref.split("#")
    if len(parts) > 2:
        raise UnsupportedReferenceError(f"unsupported reference: {sref.ref}", path)
    remote = parts[0]
    properties = {}
    for name, prop in node.properties.items():
        if prop.ref.startswith("#"):
            prop = SchemaRef(ref=remote + prop.ref, value=prop.value, site=prop.site)
        properties[name] = prop
    return replace(node, index=-1, properties=properties)


def _flattened(
    compiler: "SchemaCompiler", node: SchemaNode, path: tuple[str, ...], *, stack: tuple[int, ...]
) -> SchemaNode:
    """Fold a member's own allOf into it so nested compositions merge as well."""
    if not node.all_of:
        return node
    if node.index >= 0 and node.index in stack:
        raise SchemaError("cyclic allOf composition", path)
    stack = (*stack, node.index) if node.index >= 0 else stack

    members = [_flattened(compiler, _value_with_propagated_ref(m, path), path, stack=stack) for m in node.all_of]
    result = members[0]
    for inner in members[1:]:
        result = merge_nodes(compiler, result, inner, path)
    own = replace(node, index=-1, all_of=[])
    merged = merge_nodes(compiler, result, own, path)
    merged.description = node.description or merged.description
    return merged


def _is_generic_object(sref: SchemaRef) -> bool:
    node = sref.value
    return node is not None and node.types[:1] == ["object"]


def _is_concrete_array(sref: SchemaRef) -> bool:
    node = sref.value
    return node is not None and node.types[:1] == ["array"] and node.items is not None


def _has_enum(sref: SchemaRef) -> bool:
    return sref.value is not None and bool(sref.value.enum_values())


def _prefers(existing: SchemaRef, candidate: SchemaRef) -> bool:
    """True when candidate is the more specific definition of the same property."""
    if _has_enum(candidate) and not _has_enum(existing):
        return True
    return _is_generic_object(existing) and _is_concrete_array(candidate)


def _merge_pair(s1: SchemaNode, s2: SchemaNode) -> SchemaNode:
    result = replace(
        s1,
        index=-1,
        properties=dict(s1.properties),
        required=list(s1.required),
        types=list(s1.types or s2.types),
        one_of=list(s1.one_of or s2.one_of),
        any_of=list(s1.any_of or s2.any_of),
        discriminator=s1.discriminator or s2.discriminator,
        description=s1.description or s2.description,
        nullable=s1.nullable or s2.nullable,
    )
    if s1.additional_properties.has is None and s1.additional_properties.schema is None:
        result.additional_properties = s2.additional_properties
    for name, prop in s2.properties.items():
        existing = result.properties.get(name)
        if existing is None or _prefers(existing, prop):
            result.properties[name] = prop
    for name in s2.required:
        if name not in result.required:
            result.required.append(name)
    return result


def merge_nodes(compiler: "SchemaCompiler", s1: SchemaNode, s2: SchemaNode, path: Sequence[str]) -> SchemaNode:
    """
    Merge s2 into a copy of s1.

    A property defined on both sides keeps the more specific definition (enum
    over plain, concrete array over generic object); otherwise both
    definitions must compile to the same Go type.
    """
    path = tuple(path)
    for name, prop in s2.properties.items():
        existing = s1.properties.get(name)
        if existing is None or existing is prop or _prefers(existing, prop) or _prefers(prop, existing):
            continue
        prop_path = (*path, name)
        left = compiler.compile(existing, prop_path).type_decl
        right = compiler.compile(prop, prop_path).type_decl
        if left != right:
            raise PropertyConflictError(
                f"incompatible property redefinition: property {name!r} is {left} in one allOf member "
                f"and {right} in another",
                path,
            )
    return _merge_pair(s1, s2)


def _merge_schemas_v1(compiler: "SchemaCompiler", all_of: Sequence[SchemaRef], path: Sequence[str]) -> TypeDescriptor:
    path = tuple(path)
    out = TypeDescriptor()
    for sref in all_of:
        if sref.value is None:
            logger.warning("unresolvable allOf member %s at %s; ignoring it", sref.ref or "<inline>", ".".join(path))
            continue
        # Compile the member's body even when it is a reference, so its
        # properties can be merged.
        schema = compiler.compile(SchemaRef(value=sref.value), path, restore=False)
        for prop in schema.properties:
            out.add_property(prop, path=path)
        out.additional_types.extend(schema.additional_types)
        if schema.has_additional_properties:
            if out.has_additional_properties:
                if additional_properties_type(out) != additional_properties_type(schema):
                    raise PropertyConflictError("additional properties in allOf have incompatible types", path)
            else:
                out.has_additional_properties = True
                out.additional_properties_type = schema.additional_properties_type
    out.go_type = gen_struct_from_schema(out, compiler.config)
    return out
