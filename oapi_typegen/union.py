"""
oneOf / anyOf handling: every variant becomes a named union member, and an
optional discriminator maps payload values to member types.
"""

from typing import TYPE_CHECKING, Optional, Sequence

from oapi_typegen.document import Discriminator, SchemaRef
from oapi_typegen.errors import DiscriminatorError
from oapi_typegen.names import path_to_type_name, ref_path_to_obj_name, schema_name_to_type_name
from oapi_typegen.resolver import component_ref
from oapi_typegen.types import TypeDefinition, TypeDescriptor, UnionDiscriminator

if TYPE_CHECKING:
    from oapi_typegen.compiler import SchemaCompiler

_INT_TYPES = frozenset({"int", "int32", "int64"})


def _variant_suffix(schema: TypeDescriptor, index: int) -> str:
    if schema.array_type is not None:
        return "Array"
    if schema.enum_values:
        return "Enum"
    if schema.go_type == "string":
        return "String"
    if schema.go_type in _INT_TYPES:
        return "Int"
    if schema.go_type == "bool":
        return "Bool"
    return f"Variant{index}"


def _mapping_matches(target: str, ref: str) -> bool:
    if target == ref:
        return True
    # Mapping values may also be bare component names.
    return "#" not in target and "/" not in target and component_ref("schemas", target) == ref


def generate_union(
    compiler: "SchemaCompiler",
    out: TypeDescriptor,
    elements: Sequence[SchemaRef],
    discriminator: Optional[Discriminator],
    path: Sequence[str],
) -> None:
    """Add the variants in elements to out as union members, in place."""
    path = tuple(path)
    union_discriminator: Optional[UnionDiscriminator] = None
    explicit: dict[str, str] = {}
    if discriminator is not None:
        union_discriminator = UnionDiscriminator(property=discriminator.property_name)
        explicit = discriminator.mapping
        out.discriminator = union_discriminator

    used_names: set[str] = set()
    for i, element in enumerate(elements):
        element_path = (*path, str(i))
        element = compiler.restore(element, element_path) or element
        element_schema = compiler.compile(element, element_path, restore=False)

        if not element.ref:
            element_name = schema_name_to_type_name(path_to_type_name(element_path))
            if element_name in used_names:
                element_name += _variant_suffix(element_schema, i)
            used_names.add(element_name)

            if element_schema.type_decl != element_name:
                out.additional_types.append(
                    TypeDefinition(type_name=element_name, json_name=".".join(element_path), schema=element_schema)
                )
            out.additional_types.extend(element_schema.additional_types)
            element_type = element_name
        else:
            element_type = element_schema.go_type

        if union_discriminator is not None:
            if explicit and not element.ref:
                raise DiscriminatorError(
                    "ambiguous discriminator mapping: inline variant requires an explicit mapping entry; "
                    "replace the inline schema with a $ref",
                    element_path,
                )
            mapped = False
            for value, target in explicit.items():
                if _mapping_matches(target, element.ref):
                    union_discriminator.mapping[value] = element_type
                    mapped = True
                    break
            if not mapped:
                union_discriminator.mapping[ref_path_to_obj_name(element.ref)] = element_type

        if element_type not in out.union_elements:
            out.union_elements.append(element_type)

    if union_discriminator is not None and len(union_discriminator.mapping) != len(elements):
        raise DiscriminatorError("discriminator: not all schemas were mapped", path)
