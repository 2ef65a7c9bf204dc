import logging

import pytest

from oapi_typegen.config import CompatibilityOptions, Configuration, OutputOptions
from oapi_typegen.document import Parameter, SchemaRef
from oapi_typegen.errors import ExtensionError, InvalidFormatError, UnhandledTypeError

PET = """
components:
  schemas:
    Pet:
      type: object
      required: [id]
      properties:
        id: {type: integer, format: int64}
        name: {type: string}
"""


def _compile(load, compiler_for, text, name, cfg=None):
    doc = load(text)
    compiler = compiler_for(doc, cfg)
    return compiler.compile(doc.components.schemas[name], (name,), definition=True), compiler


def _field_types(schema, config):
    return {p.json_name: p.go_type_def(config) for p in schema.properties}


def test_object_becomes_struct(load, compiler_for):
    schema, _ = _compile(load, compiler_for, PET, "Pet")
    assert schema.go_type == (
        "struct {\n"
        '    Id int64 `json:"id"`\n'
        '    Name *string `json:"name,omitempty"`\n'
        "}"
    )
    assert not schema.define_via_alias


def test_defining_occurrence_is_never_an_alias_to_itself(load, compiler_for):
    doc = load(PET)
    compiler = compiler_for(doc)
    sref = SchemaRef(ref="#/components/schemas/Pet", value=doc.components.schemas["Pet"].value)

    defined = compiler.compile(sref, ("Pet",), definition=True)
    assert defined.go_type.startswith("struct {")

    used = compiler.compile(sref, ("Owner", "pet"))
    assert used.ref_type == "Pet"
    assert used.type_decl == "Pet"


def test_component_that_is_a_reference_becomes_an_alias(load, compiler_for):
    text = PET + "    Animal:\n      $ref: '#/components/schemas/Pet'\n"
    schema, _ = _compile(load, compiler_for, text, "Animal")
    assert schema.ref_type == "Pet"
    assert schema.define_via_alias


def test_formats(load, compiler_for):
    schema, compiler = _compile(
        load,
        compiler_for,
        """
        components:
          schemas:
            Sample:
              type: object
              properties:
                created: {type: string, format: date-time}
                id: {type: string, format: uuid}
                blob: {type: string, format: byte}
                raw: {type: string, format: json}
                count: {type: integer, format: int32}
                ratio: {type: number, format: double}
                score: {type: number}
                flag: {type: boolean}
        """,
        "Sample",
    )
    assert _field_types(schema, compiler.config) == {
        "blob": "*[]byte",
        "count": "*int32",
        "created": "*time.Time",
        "flag": "*bool",
        "id": "*openapi_types.UUID",
        "ratio": "*float64",
        "raw": "json.RawMessage",
        "score": "*float32",
    }


@pytest.mark.parametrize(
    "prop, error, message",
    [
        ("{type: number, format: decimal}", InvalidFormatError, "invalid number format: decimal"),
        ("{type: boolean, format: yes-no}", InvalidFormatError, "for boolean"),
        ("{type: tuple}", UnhandledTypeError, "unhandled schema type: tuple"),
        ("{type: string, x-go-type: 3}", ExtensionError, "x-go-type"),
    ],
)
def test_invalid_schemas(load, compiler_for, prop, error, message):
    text = f"""
    components:
      schemas:
        Bad:
          type: object
          properties:
            value: {prop}
    """
    with pytest.raises(error, match=message) as excinfo:
        _compile(load, compiler_for, text, "Bad")
    assert excinfo.value.path == ("Bad", "value")


def test_array_alias_and_disabled_alias(load, compiler_for):
    text = """
    components:
      schemas:
        Tags:
          type: array
          items: {type: string}
    """
    schema, _ = _compile(load, compiler_for, text, "Tags")
    assert schema.go_type == "[]string"
    assert schema.define_via_alias

    cfg = Configuration(output_options=OutputOptions(disable_type_aliases_for_type=["array"]))
    schema, _ = _compile(load, compiler_for, text, "Tags", cfg)
    assert not schema.define_via_alias


def test_additional_properties_flatten_to_map(load, compiler_for):
    text = """
    components:
      schemas:
        Labels:
          type: object
          additionalProperties: {type: string}
    """
    schema, _ = _compile(load, compiler_for, text, "Labels")
    assert schema.go_type == "map[string]string"

    cfg = Configuration(compatibility=CompatibilityOptions(disable_flatten_additional_properties=True))
    schema, _ = _compile(load, compiler_for, text, "Labels", cfg)
    assert schema.has_additional_properties
    assert schema.go_type == 'struct {\n    AdditionalProperties map[string]string `json:"-"`\n}'


def test_bare_object_and_untyped_schema(load, compiler_for):
    text = """
    components:
      schemas:
        Blob:
          type: object
        Anything: {}
    """
    blob, _ = _compile(load, compiler_for, text, "Blob")
    assert blob.go_type == "map[string]interface{}"
    anything, _ = _compile(load, compiler_for, text, "Anything")
    assert anything.go_type == "interface{}"


def test_nested_enum_gets_its_own_type(load, compiler_for):
    schema, compiler = _compile(
        load,
        compiler_for,
        """
        components:
          schemas:
            Pet:
              type: object
              properties:
                status:
                  type: string
                  enum: [available, sold]
        """,
        "Pet",
    )
    assert _field_types(schema, compiler.config) == {"status": "*PetStatus"}
    (aux,) = schema.additional_types
    assert aux.type_name == "PetStatus"
    assert aux.json_name == "Pet.status"
    assert aux.schema.enum_values == {"Available": "available", "Sold": "sold"}
    assert not aux.schema.define_via_alias


def test_enum_type_inferred_from_literals(load, compiler_for):
    text = """
    components:
      schemas:
        Level:
          enum: [1, 2, null]
    """
    schema, _ = _compile(load, compiler_for, text, "Level")
    assert schema.go_type == "int"
    assert schema.enum_values == {"N1": "1", "N2": "2"}


def test_enum_var_names(load, compiler_for):
    text = """
    components:
      schemas:
        Size:
          type: integer
          enum: [1, 2]
          x-enum-varnames: [small, large]
    """
    schema, _ = _compile(load, compiler_for, text, "Size")
    assert schema.enum_values == {"Small": "1", "Large": "2"}


def test_go_type_extension(load, compiler_for):
    schema, compiler = _compile(
        load,
        compiler_for,
        """
        components:
          schemas:
            Price:
              type: object
              required: [amount]
              properties:
                amount:
                  type: string
                  x-go-type: decimal.Decimal
                  x-go-type-import:
                    path: github.com/shopspring/decimal
        """,
        "Price",
    )
    (amount,) = schema.properties
    assert amount.go_type_def(compiler.config) == "decimal.Decimal"
    assert amount.schema.go_type_import == {"path": "github.com/shopspring/decimal", "name": ""}


def test_nullable_representation(load, compiler_for):
    text = """
    components:
      schemas:
        Pet:
          type: object
          properties:
            nick: {type: string, nullable: true}
    """
    schema, _ = _compile(load, compiler_for, text, "Pet")
    assert '    Nick *string `json:"nick"`' in schema.go_type

    cfg = Configuration(output_options=OutputOptions(nullable_type=True))
    schema, _ = _compile(load, compiler_for, text, "Pet", cfg)
    assert '    Nick nullable.Nullable[string] `json:"nick,omitempty"`' in schema.go_type


def test_unresolved_reference_uses_the_referenced_name(load, compiler_for, caplog):
    text = """
    components:
      schemas:
        Pet:
          type: object
          properties:
            owner:
              $ref: '#/components/schemas/Person'
    """
    with caplog.at_level(logging.WARNING):
        schema, compiler = _compile(load, compiler_for, text, "Pet")
    assert _field_types(schema, compiler.config) == {"owner": "*Person"}
    assert "unresolved reference" in caplog.text


def test_multi_type_schemas(load, compiler_for):
    schema, compiler = _compile(
        load,
        compiler_for,
        """
        openapi: 3.1.0
        info: {title: t, version: "1"}
        components:
          schemas:
            Mixed:
              type: object
              properties:
                numeric: {type: [string, number]}
                loose: {type: [string, boolean]}
                maybe: {type: [string, "null"]}
        """,
        "Mixed",
    )
    assert _field_types(schema, compiler.config) == {
        "loose": "*interface{}",
        "maybe": "*string",
        "numeric": "*float32",
    }


def test_parameter_accepting_single_value_or_array(load, compiler_for):
    doc = load(
        """
        components:
          parameters:
            Ids:
              name: ids
              in: query
              schema:
                oneOf:
                  - type: string
                  - type: array
                    items: {type: string}
        """
    )
    compiler = compiler_for(doc)
    param: Parameter = doc.components.parameters["Ids"].value
    schema = compiler.compile_parameter(param, ("Ids",))
    assert "Single *string" in schema.go_type
    assert "Array *[]string" in schema.go_type
    assert schema.description.startswith("Union type for parameter")


def test_parameter_without_schema_is_a_string(load, compiler_for):
    compiler = compiler_for(load(PET))
    schema = compiler.compile_parameter(Parameter(name="q", location="query"), ("q",))
    assert schema.go_type == "string"


def test_ref_with_annotations_stays_a_named_type(load, compiler_for):
    schema, compiler = _compile(
        load,
        compiler_for,
        """
        openapi: 3.1.0
        info: {title: t, version: "1"}
        components:
          schemas:
            Owner:
              type: object
              properties:
                name: {type: string}
            Pet:
              type: object
              properties:
                owner:
                  $ref: '#/components/schemas/Owner'
                  readOnly: true
                  description: Who looks after the pet.
                keeper:
                  $ref: '#/components/schemas/Owner'
                  x-go-type-skip-optional-pointer: true
        """,
        "Pet",
    )
    keeper, owner = schema.properties
    assert owner.schema.type_decl == "Owner"
    assert owner.read_only
    assert owner.description == "Who looks after the pet."
    assert _field_types(schema, compiler.config) == {"keeper": "Owner", "owner": "*Owner"}
    assert not schema.additional_types


def test_recursive_anonymous_schema_degrades_to_any(load, compiler_for, caplog):
    text = """
    components:
      schemas:
        Holder:
          type: object
          properties:
            tree: &tree
              type: object
              properties:
                child: *tree
    """
    with caplog.at_level(logging.WARNING):
        schema, _ = _compile(load, compiler_for, text, "Holder")
    (tree,) = schema.properties
    assert '    Child interface{} `json:"child,omitempty"`' in tree.schema.go_type
    assert "cycle at Holder.tree.child" in caplog.text


def test_bad_field_extension_names_the_field(load, compiler_for):
    text = """
    components:
      schemas:
        Pet:
          type: object
          properties:
            tag:
              type: string
              x-oapi-codegen-extra-tags: [validate]
    """
    with pytest.raises(ExtensionError) as excinfo:
        _compile(load, compiler_for, text, "Pet")
    assert str(excinfo.value).startswith("Pet.tag: invalid value for 'x-oapi-codegen-extra-tags'")
