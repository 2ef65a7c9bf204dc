"""
Compiler output model: type descriptors, properties and named type
definitions, plus the Go spelling of struct bodies.
"""

import enum
from dataclasses import dataclass, field, replace
from typing import Any, Optional, Sequence

from oapi_typegen import extensions as ext
from oapi_typegen.config import Configuration
from oapi_typegen.document import SchemaNode
from oapi_typegen.errors import PropertyConflictError
from oapi_typegen.names import (
    deprecation_comment,
    schema_name_to_type_name,
    string_with_type_name_to_go_comment,
    uppercase_first,
)

ANY_TYPE = "interface{}"


@dataclass
class UnionDiscriminator:
    property: str
    # discriminator value -> Go type
    mapping: dict[str, str] = field(default_factory=dict)

    def json_tag(self) -> str:
        return f'`json:"{self.property}"`'

    def property_name(self) -> str:
        return schema_name_to_type_name(self.property)


@dataclass
class TypeDescriptor:
    go_type: str = ""
    # Set when the descriptor denotes a named type.
    ref_type: str = ""
    array_type: Optional["TypeDescriptor"] = None
    # constant name -> literal text, in declaration order
    enum_values: dict[str, str] = field(default_factory=dict)
    properties: list["Property"] = field(default_factory=list)
    has_additional_properties: bool = False
    additional_properties_type: Optional["TypeDescriptor"] = None
    # Auxiliary named types that must be emitted alongside this one.
    additional_types: list["TypeDefinition"] = field(default_factory=list)
    embedded_types: list[str] = field(default_factory=list)
    skip_optional_pointer: bool = False
    description: str = ""
    union_elements: list[str] = field(default_factory=list)
    discriminator: Optional[UnionDiscriminator] = None
    define_via_alias: bool = False
    go_type_import: Optional[dict[str, str]] = None
    node: Optional[SchemaNode] = None

    @property
    def is_ref(self) -> bool:
        return self.ref_type != ""

    @property
    def is_external_ref(self) -> bool:
        return self.is_ref and "." in self.ref_type

    @property
    def type_decl(self) -> str:
        return self.ref_type if self.is_ref else self.go_type

    def add_property(self, prop: "Property", *, path: Sequence[str] = ()) -> None:
        """Append prop; an existing property of the same name must be equal to it."""
        for existing in self.properties:
            if existing.json_name == prop.json_name and not properties_equal(existing, prop):
                raise PropertyConflictError(
                    f"incompatible property redefinition: property {prop.json_name!r} "
                    f"already exists with a different type",
                    path,
                )
        self.properties.append(prop)


def any_type(*, alias: bool = True) -> TypeDescriptor:
    return TypeDescriptor(go_type=ANY_TYPE, define_via_alias=alias)


@dataclass
class Property:
    json_name: str
    schema: TypeDescriptor
    required: bool = False
    nullable: bool = False
    read_only: bool = False
    write_only: bool = False
    deprecated: bool = False
    description: str = ""
    needs_form_tag: bool = False
    extensions: dict[str, Any] = field(default_factory=dict)
    # Breadcrumb of the field itself, reported with extension errors.
    path: tuple[str, ...] = ()

    def ext_path(self) -> tuple[str, ...]:
        return self.path or (self.json_name,)

    def go_field_name(self, config: Configuration) -> str:
        name = ext.ext_string(self.extensions, ext.GO_NAME, path=self.ext_path()) or self.json_name
        if config.compatibility.allow_unexported_struct_field_names:
            if ext.ext_bool(self.extensions, ext.ONLY_HONOUR_GO_NAME, path=self.ext_path()):
                return name
        return schema_name_to_type_name(name)

    def skips_optional_pointer(self) -> bool:
        override = ext.ext_bool(self.extensions, ext.GO_TYPE_SKIP_OPTIONAL_POINTER, path=self.ext_path())
        if override is not None:
            return override
        return self.schema.skip_optional_pointer

    def has_optional_pointer(self) -> bool:
        return not self.required and not self.skips_optional_pointer()

    def go_type_def(self, config: Configuration) -> str:
        decl = self.schema.type_decl
        mode = representation_mode(self, config)
        if mode is RepresentationMode.NULLABLE_WRAPPER:
            return f"nullable.Nullable[{decl}]"
        if mode is RepresentationMode.OPTIONAL_POINTER:
            return "*" + decl
        return decl


def properties_equal(a: Property, b: Property) -> bool:
    return a.json_name == b.json_name and a.schema.type_decl == b.schema.type_decl and a.required == b.required


class RepresentationMode(enum.Enum):
    VALUE = "value"
    OPTIONAL_POINTER = "optional-pointer"
    NULLABLE_WRAPPER = "nullable-wrapper"


def representation_mode(prop: Property, config: Configuration) -> RepresentationMode:
    """How a struct field holding prop is spelled: bare, behind `*`, or in nullable.Nullable."""
    if prop.nullable and config.output_options.nullable_type:
        return RepresentationMode.NULLABLE_WRAPPER
    if prop.skips_optional_pointer():
        return RepresentationMode.VALUE
    readonly_pointer = prop.read_only and (
        not prop.required or not config.compatibility.disable_required_readonly_as_pointer
    )
    if not prop.required or prop.nullable or readonly_pointer or prop.write_only:
        return RepresentationMode.OPTIONAL_POINTER
    return RepresentationMode.VALUE


@dataclass
class TypeDefinition:
    type_name: str
    # Dot-joined breadcrumb of the schema this type was generated for.
    json_name: str = ""
    schema: TypeDescriptor = field(default_factory=TypeDescriptor)

    def is_alias(self, config: Configuration) -> bool:
        return not config.compatibility.old_aliasing and self.schema.define_via_alias


@dataclass
class EnumDefinition:
    schema: TypeDescriptor
    type_name: str
    # '"' for string enums, empty otherwise.
    value_wrapper: str = ""
    prefix_type_name: bool = False

    def get_values(self) -> dict[str, str]:
        if not self.prefix_type_name:
            return dict(self.schema.enum_values)
        return {self.type_name + uppercase_first(k): v for k, v in self.schema.enum_values.items()}


def _field_tags(prop: Property, config: Configuration) -> str:
    opts = config.output_options
    compat = config.compatibility
    should_omit_empty = (not prop.required or prop.read_only or prop.write_only) and (
        not prop.required or not prop.read_only or not compat.disable_required_readonly_as_pointer
    )
    omit_empty = not prop.nullable and should_omit_empty
    if prop.nullable and opts.nullable_type:
        omit_empty = should_omit_empty
    omit_zero = should_omit_empty and prop.skips_optional_pointer() and opts.prefer_skip_optional_pointer_with_omitzero

    path = prop.ext_path()
    override = ext.ext_bool(prop.extensions, ext.OMIT_EMPTY, path=path)
    if override is not None:
        omit_empty = override
    override = ext.ext_bool(prop.extensions, ext.OMIT_ZERO, path=path)
    if override is not None:
        omit_zero = override

    tags: dict[str, str] = {
        "json": prop.json_name + (",omitempty" if omit_empty else "") + (",omitzero" if omit_zero else ""),
    }
    if opts.enable_yaml_tags:
        tags["yaml"] = prop.json_name + (",omitempty" if omit_empty else "")
    if prop.needs_form_tag:
        tags["form"] = prop.json_name + (",omitempty" if omit_empty else "")
    if ext.ext_bool(prop.extensions, ext.GO_JSON_IGNORE, path=path):
        tags["json"] = "-"
    extra = ext.ext_string_map(prop.extensions, ext.EXTRA_TAGS, path=path)
    if extra:
        tags.update(extra)
    return " ".join(f'{k}:"{tags[k]}"' for k in sorted(tags))


def gen_fields_from_properties(props: Sequence[Property], config: Configuration) -> list[str]:
    lines: list[str] = []
    for i, prop in enumerate(props):
        text = ""
        field_name = prop.go_field_name(config)
        if prop.description:
            if i != 0:
                text += "\n"
            text += string_with_type_name_to_go_comment(prop.description, field_name) + "\n"
        if prop.deprecated:
            reason = ext.ext_string(prop.extensions, ext.DEPRECATED_REASON, path=prop.ext_path())
            text += deprecation_comment(reason or "") + "\n"
        text += f"    {field_name} {prop.go_type_def(config)} `{_field_tags(prop, config)}`"
        lines.append(text)
    return lines


def additional_properties_type(schema: TypeDescriptor) -> str:
    element = schema.additional_properties_type
    if element is None:
        return ANY_TYPE
    return element.ref_type or element.go_type


def gen_struct_from_schema(schema: TypeDescriptor, config: Configuration) -> str:
    parts = ["struct {"]
    parts.extend(f"    {embedded}" for embedded in schema.embedded_types)
    parts.extend(gen_fields_from_properties(schema.properties, config))
    if schema.has_additional_properties:
        parts.append(f'    AdditionalProperties map[string]{additional_properties_type(schema)} `json:"-"`')
    if schema.union_elements:
        parts.append("    union json.RawMessage")
    parts.append("}")
    return "\n".join(parts)


def name_anonymous(schema: TypeDescriptor, type_name: str, json_name: str) -> None:
    """Emit schema's body as the auxiliary type type_name and make schema refer to it by that name."""
    body = replace(schema, additional_types=list(schema.additional_types))
    schema.additional_types.append(TypeDefinition(type_name=type_name, json_name=json_name, schema=body))
    schema.ref_type = type_name
