"""
Schema-to-type compiler.

`SchemaCompiler.compile` turns one schema reference into a `TypeDescriptor`,
recursing through properties, array items, additional properties and
compositions. Anonymous nested schemas that need a name of their own (maps,
unions, enums below the top level) come back as auxiliary `TypeDefinition`s
in `TypeDescriptor.additional_types`; the caller decides where to emit them.
"""

import logging
from typing import Any, Optional, Sequence

from oapi_typegen import extensions as ext
from oapi_typegen.config import Configuration
from oapi_typegen.document import Parameter, SchemaNode, SchemaRef
from oapi_typegen.errors import InvalidFormatError, UnhandledTypeError, UnsupportedReferenceError
from oapi_typegen.merge import merge_schemas
from oapi_typegen.names import path_to_type_name, sanitize_enum_names, schema_name_to_type_name, sorted_schema_keys
from oapi_typegen.resolver import ReferenceResolver, component_ref, is_go_type_reference
from oapi_typegen.types import (
    ANY_TYPE,
    Property,
    TypeDefinition,
    TypeDescriptor,
    any_type,
    gen_struct_from_schema,
    name_anonymous,
)
from oapi_typegen.union import generate_union

logger = logging.getLogger(__name__)

_INT_FORMATS = frozenset({"int", "int8", "int16", "int32", "int64", "uint", "uint8", "uint16", "uint32", "uint64"})

_STRING_FORMATS: dict[str, str] = {
    "byte": "[]byte",
    "email": "openapi_types.Email",
    "date": "openapi_types.Date",
    "date-time": "time.Time",
    "json": "json.RawMessage",
    "uuid": "openapi_types.UUID",
    "binary": "openapi_types.File",
}


def enum_literal(value: Any) -> str:
    """Text form of a decoded enum literal, as it appears in the document."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _literal_type(values: Sequence[Any]) -> str:
    if all(isinstance(v, str) for v in values):
        return "string"
    if all(isinstance(v, bool) for v in values):
        return "boolean"
    if all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        return "integer"
    if all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in values):
        return "number"
    return ""


def _enum_literals(node: SchemaNode) -> list[Any]:
    return [v for v in node.enum_values() if v is not None]


def _effective_types(node: SchemaNode) -> list[str]:
    """Declared types, or the ones implied by `items` / enum literals when `type` is absent."""
    if node.types:
        return node.types
    if node.items is not None:
        return ["array"]
    literals = _enum_literals(node)
    if literals:
        inferred = _literal_type(literals)
        return [inferred] if inferred else []
    return []


def _usage_extensions(sref: SchemaRef, node: SchemaNode) -> dict[str, Any]:
    """Extensions of node, overlaid with the ones written next to its $ref."""
    if sref.site is None:
        return node.extensions
    return {**node.extensions, **sref.site.extensions}


def _property(
    name: str, sref: SchemaRef, schema: TypeDescriptor, *, required: bool, path: tuple[str, ...]
) -> Property:
    # Annotations next to a $ref win over the referenced schema's own.
    annotated = [n for n in (sref.value, sref.site) if n is not None]
    descriptions = [n.description for n in reversed(annotated) if n.description]
    extensions: dict[str, Any] = {}
    for n in annotated:
        extensions.update(n.extensions)
    return Property(
        json_name=name,
        schema=schema,
        required=required,
        nullable=any(n.nullable for n in annotated),
        read_only=any(n.read_only for n in annotated),
        write_only=any(n.write_only for n in annotated),
        deprecated=any(n.deprecated for n in annotated),
        description=descriptions[0] if descriptions else "",
        extensions=extensions,
        path=path,
    )


class SchemaCompiler:
    def __init__(self, resolver: ReferenceResolver, config: Configuration) -> None:
        self.resolver = resolver
        self.config = config
        # Node indices currently being compiled, for cycle detection.
        self._in_progress: set[int] = set()

    def restore(self, sref: Optional[SchemaRef], path: Sequence[str]) -> Optional[SchemaRef]:
        return self.resolver.restore(sref, tuple(path))

    def compile(
        self,
        sref: Optional[SchemaRef],
        path: Sequence[str] = (),
        *,
        restore: bool = True,
        definition: bool = False,
    ) -> TypeDescriptor:
        """
        Compile sref found at path.

        definition marks the defining occurrence of a schema component, whose
        path is its own name.
        """
        path = tuple(path)
        if sref is None:
            return any_type()
        if restore:
            sref = self.resolver.restore(sref, path) or sref

        node, ok = self.resolver.resolve(sref)
        if not ok or node is None:
            return self._unresolved(sref, path)

        skip_pointer = self.config.output_options.prefer_skip_optional_pointer
        override = ext.ext_bool(_usage_extensions(sref, node), ext.GO_TYPE_SKIP_OPTIONAL_POINTER, path=path)
        if override is not None:
            skip_pointer = override

        if is_go_type_reference(sref.ref):
            # The defining occurrence of a component must get its own body,
            # never `type X = X`.
            defining = definition and len(path) == 1 and sref.ref == component_ref("schemas", path[0])
            if not defining:
                ref_type = self._type_name_for_ref(sref.ref, path)
                return TypeDescriptor(
                    go_type=ref_type,
                    ref_type=ref_type,
                    description=node.description,
                    define_via_alias=True,
                    skip_optional_pointer=skip_pointer,
                    node=node,
                )

        if node.index >= 0 and node.index in self._in_progress:
            return self._cycle_stub(node, path)
        if node.index >= 0:
            self._in_progress.add(node.index)
        try:
            return self._compile_node(node, path, skip_pointer)
        finally:
            self._in_progress.discard(node.index)

    def _type_name_for_ref(self, ref: str, path: tuple[str, ...]) -> str:
        try:
            return self.resolver.type_name_for_ref(ref)
        except UnsupportedReferenceError as e:
            raise UnsupportedReferenceError(f"error turning reference ({ref}) into a Go type: {e.reason}", path) from e

    def _unresolved(self, sref: SchemaRef, path: tuple[str, ...]) -> TypeDescriptor:
        if sref.ref:
            try:
                ref_type = self.resolver.type_name_for_ref(sref.ref)
            except UnsupportedReferenceError:
                ref_type = ""
            if ref_type:
                logger.warning("unresolved reference %s at %s; using type %s", sref.ref, ".".join(path), ref_type)
                return TypeDescriptor(go_type=ref_type, ref_type=ref_type)
        logger.warning("unresolved schema %s at %s; using %s", sref.ref or "<inline>", ".".join(path), ANY_TYPE)
        return TypeDescriptor(go_type=ANY_TYPE, ref_type=ANY_TYPE, skip_optional_pointer=True)

    def _cycle_stub(self, node: SchemaNode, path: tuple[str, ...]) -> TypeDescriptor:
        name = self.resolver.component_name_for(node)
        if name:
            type_name = self.resolver.component_type_name("schemas", name)
            logger.warning("cycle at %s; referring to %s", ".".join(path), type_name)
            return TypeDescriptor(go_type=type_name, ref_type=type_name, define_via_alias=True, node=node)
        logger.warning("cycle at %s through an anonymous schema; using %s", ".".join(path), ANY_TYPE)
        out = any_type()
        out.skip_optional_pointer = True
        return out

    # -- schema bodies ------------------------------------------------------

    def _compile_node(self, node: SchemaNode, path: tuple[str, ...], skip_pointer: bool) -> TypeDescriptor:
        out = TypeDescriptor(description=node.description, skip_optional_pointer=skip_pointer, node=node)

        if node.all_of:
            merged = self._compile_all_of(node, path)
            merged.description = node.description or merged.description
            merged.skip_optional_pointer = merged.skip_optional_pointer or skip_pointer
            merged.node = node
            return merged

        go_type = ext.ext_string(node.extensions, ext.GO_TYPE, path=path)
        if go_type is not None:
            out.go_type = go_type
            out.go_type_import = ext.type_import(node.extensions, path=path)
            out.define_via_alias = True
            return out

        types = _effective_types(node)
        if not types or "object" in types:
            self._compile_object(node, path, out)
            return self._apply_type_name_override(node, path, out)
        if _enum_literals(node):
            self._compile_enum(node, path, out, types)
            if len(path) <= 1:
                return self._apply_type_name_override(node, path, out)
            return out
        self._primitive(node, path, out, types)
        return out

    def _compile_all_of(self, node: SchemaNode, path: tuple[str, ...]) -> TypeDescriptor:
        members = [self.resolver.restore(m, (*path, str(i))) or m for i, m in enumerate(node.all_of)]
        simple = all(m.ref or m.value is None or not (m.value.all_of or m.value.one_of or m.value.any_of) for m in members)
        ref_count = sum(1 for m in members if m.ref)
        if not (simple and ref_count > 0 and len(path) <= 1):
            return merge_schemas(self, members, path)

        # "Base type + extra fields": embed every referenced member.
        out = TypeDescriptor(go_type="struct")
        for member in members:
            if member.ref:
                out.embedded_types.append(self._type_name_for_ref(member.ref, path))
                out.additional_types.extend(self.compile(member, path, restore=False).additional_types)
            else:
                inline = self.compile(member, path, restore=False)
                out.properties.extend(inline.properties)
                out.additional_types.extend(inline.additional_types)
        if out.embedded_types or out.properties:
            out.go_type = gen_struct_from_schema(out, self.config)
        return out

    def _compile_object(self, node: SchemaNode, path: tuple[str, ...], out: TypeDescriptor) -> None:
        if not node.properties and not node.has_additional_properties() and not node.one_of and not node.any_of:
            if node.type_is("object"):
                out.go_type = "map[string]interface{}"
                self._container_skip(out)
            else:
                # No type information at all.
                out.go_type = ANY_TYPE
                out.skip_optional_pointer = True
            out.define_via_alias = True
            return

        out.define_via_alias = False
        out.has_additional_properties = node.has_additional_properties()
        out.additional_properties_type = TypeDescriptor(go_type=ANY_TYPE)
        if node.additional_properties.schema is not None:
            element = self.compile(node.additional_properties.schema, path)
            if element.has_additional_properties or element.union_elements:
                aux_path = (*path, "AdditionalProperties")
                name_anonymous(element, path_to_type_name(aux_path), ".".join(aux_path))
            out.additional_properties_type = element
            out.additional_types.extend(element.additional_types)

        if (
            not self.config.compatibility.disable_flatten_additional_properties
            and not node.properties
            and not node.any_of
            and not node.one_of
        ):
            element_type = out.additional_properties_type.type_decl
            out.has_additional_properties = False
            out.go_type = f"map[string]{element_type}"
            self._container_skip(out)
            return

        for name in sorted_schema_keys(node.properties):
            prop_ref = node.properties[name]
            prop_path = (*path, name)
            prop_schema = self.compile(prop_ref, prop_path)
            if (prop_schema.has_additional_properties or prop_schema.union_elements) and not prop_schema.ref_type:
                name_anonymous(prop_schema, path_to_type_name(prop_path), ".".join(prop_path))

            required = name in node.required
            out.properties.append(_property(name, prop_ref, prop_schema, required=required, path=prop_path))
            out.additional_types.extend(prop_schema.additional_types)

        if node.any_of:
            generate_union(self, out, node.any_of, node.discriminator, path)
        if node.one_of:
            generate_union(self, out, node.one_of, node.discriminator, path)

        out.go_type = gen_struct_from_schema(out, self.config)

    def _apply_type_name_override(self, node: SchemaNode, path: tuple[str, ...], out: TypeDescriptor) -> TypeDescriptor:
        """`x-go-type-name`: emit the body under that name and refer to it by alias."""
        type_name = ext.ext_string(node.extensions, ext.GO_TYPE_NAME, path=path)
        if not type_name:
            return out
        definition = TypeDefinition(type_name=type_name, json_name=".".join(path), schema=out)
        return TypeDescriptor(
            go_type=type_name,
            description=out.description,
            define_via_alias=True,
            additional_types=[*out.additional_types, definition],
            node=node,
        )

    def _compile_enum(self, node: SchemaNode, path: tuple[str, ...], out: TypeDescriptor, types: list[str]) -> None:
        self._primitive(node, path, out, types)
        # Enum values must not be interchangeable with the bare primitive.
        out.define_via_alias = False

        literals = [enum_literal(v) for v in _enum_literals(node)]
        names = ext.enum_var_names(node.extensions, path=path) or literals
        for key, value in sanitize_enum_names(names, literals).items():
            enum_name = "Empty" if value == "" else key
            if self.config.compatibility.old_enum_conflicts:
                out.enum_values[schema_name_to_type_name(path_to_type_name((*path, enum_name)))] = value
            else:
                out.enum_values[schema_name_to_type_name(enum_name)] = value

        if len(path) > 1:
            type_name = ext.ext_string(node.extensions, ext.GO_TYPE_NAME, path=path)
            name_anonymous(out, type_name or schema_name_to_type_name(path_to_type_name(path)), ".".join(path))

    def _primitive(self, node: SchemaNode, path: tuple[str, ...], out: TypeDescriptor, types: list[str]) -> None:
        out.define_via_alias = True
        concrete = [t for t in types if t != "null"]
        if not concrete:
            # `type: null` on its own.
            out.go_type = ANY_TYPE
            return
        if len(concrete) > 1:
            numeric = {"number", "integer"} & set(concrete)
            if len(concrete) == 2 and "string" in concrete and numeric:
                out.go_type = "float32"
            else:
                out.go_type = ANY_TYPE
            return

        kind = concrete[0]
        fmt = node.format
        if kind == "array":
            item_path = (*path, "Item")
            item = self.compile(node.items, item_path)
            if (item.has_additional_properties or item.union_elements) and not item.ref_type:
                name_anonymous(item, path_to_type_name(item_path), ".".join(item_path))
            out.array_type = item
            out.go_type = "[]" + item.type_decl
            out.additional_types = list(item.additional_types)
            out.properties = list(item.properties)
            out.define_via_alias = "array" not in self.config.output_options.disable_type_aliases_for_type
            self._container_skip(out)
        elif kind == "integer":
            out.go_type = fmt if fmt in _INT_FORMATS else "int"
        elif kind == "number":
            if fmt == "double":
                out.go_type = "float64"
            elif fmt in ("float", ""):
                out.go_type = "float32"
            else:
                raise InvalidFormatError(f"invalid number format: {fmt}", path)
        elif kind == "boolean":
            if fmt:
                raise InvalidFormatError(f"invalid format ({fmt}) for boolean", path)
            out.go_type = "bool"
        elif kind == "string":
            out.go_type = _STRING_FORMATS.get(fmt, "string")
            if fmt == "byte":
                self._container_skip(out)
            elif fmt == "json":
                out.skip_optional_pointer = True
        else:
            raise UnhandledTypeError(f"unhandled schema type: {kind}", path)

    def _container_skip(self, out: TypeDescriptor) -> None:
        if self.config.output_options.prefer_skip_optional_pointer_on_container_types:
            out.skip_optional_pointer = True

    # -- parameters ---------------------------------------------------------

    def compile_parameter(self, param: Parameter, path: Sequence[str]) -> TypeDescriptor:
        path = tuple(path)
        if param.schema is not None:
            node = param.schema.value
            if node is not None and node.one_of:
                array_variant = single_variant = None
                for element in node.one_of:
                    if element.value is None:
                        continue
                    if element.value.types[:1] == ["array"]:
                        array_variant = element
                    elif element.value.types[:1] == ["string"]:
                        single_variant = element
                if array_variant is not None and single_variant is not None:
                    return self._single_or_array(array_variant, single_variant, path)
            return self.compile(param.schema, path)

        # Only a lone application/json content entry is decoded; anything
        # else is passed through as text.
        if len(param.content) == 1 and "application/json" in param.content:
            return self.compile(param.content["application/json"].schema, path)
        return TypeDescriptor(go_type="string", description=param.description)

    def _single_or_array(self, array_variant: SchemaRef, single_variant: SchemaRef, path: tuple[str, ...]) -> TypeDescriptor:
        array_schema = self.compile(array_variant, path)
        single_schema = self.compile(single_variant, path)
        element_type = single_schema.type_decl
        if array_schema.array_type is not None:
            element_type = array_schema.array_type.type_decl

        out = TypeDescriptor(
            description="Union type for parameter that accepts either single value or array",
            properties=[
                Property(json_name="single", schema=TypeDescriptor(go_type=element_type), description="Single value variant"),
                Property(json_name="array", schema=TypeDescriptor(go_type="[]" + element_type), description="Array value variant"),
            ],
            additional_types=[*array_schema.additional_types, *single_schema.additional_types],
        )
        out.go_type = gen_struct_from_schema(out, self.config)
        return out
