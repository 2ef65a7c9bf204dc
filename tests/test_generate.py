import logging

from oapi_typegen.config import CompatibilityOptions, Configuration, OutputOptions
from oapi_typegen.document import Operation
from oapi_typegen.generate import (
    generate,
    is_json_media_type,
    operation_type_prefix,
    render_declarations,
    result_to_dict,
)

PETSTORE = """
paths:
  /pets:
    get:
      operationId: listPets
      tags: [pets]
      description: List all pets.
      parameters:
        - name: limit
          in: query
          schema: {type: integer, format: int32}
        - name: X-Request-ID
          in: header
          required: true
          schema: {type: string}
        - $ref: '#/components/parameters/Status'
      responses:
        '200':
          description: ok
          content:
            application/json:
              schema:
                type: array
                items:
                  $ref: '#/components/schemas/Pet'
    post:
      operationId: createPet
      tags: [admin]
      requestBody:
        content:
          application/json:
            schema:
              type: object
              required: [name]
              properties:
                name: {type: string}
      responses:
        '201': {description: created}
  /pets/{id}:
    put:
      requestBody:
        $ref: '#/components/requestBodies/PetBody'
      responses: {}
components:
  parameters:
    Status:
      name: status
      in: query
      schema:
        type: string
        enum: [available, sold]
  requestBodies:
    PetBody:
      content:
        application/json:
          schema:
            $ref: '#/components/schemas/Pet'
  schemas:
    Pet:
      type: object
      required: [id]
      properties:
        id: {type: integer, format: int64}
        created: {type: string, format: date-time}
    Orphan: {type: string}
"""


def _types(result):
    return {d.type_name: d for d in result.type_definitions}


def test_operation_type_prefix():
    assert operation_type_prefix("/pets", "get", Operation(operation_id="list-pets")) == "ListPets"
    assert operation_type_prefix("/pets/{id}", "put", Operation()) == "PutPetsId"


def test_is_json_media_type():
    assert is_json_media_type("application/json")
    assert is_json_media_type("application/merge-patch+json; charset=utf-8")
    assert not is_json_media_type("text/plain")


def test_petstore(load, config):
    result = generate(load(PETSTORE), config)
    types = _types(result)

    assert "Orphan" not in types
    assert set(types) == {
        "Pet",
        "Status",
        "PetBody",
        "ListPetsParams",
        "CreatePetJSONBody",
        "CreatePetJSONRequestBody",
        "PutPetsIdJSONRequestBody",
    }
    assert types["PetBody"].schema.type_decl == "Pet"
    assert types["PutPetsIdJSONRequestBody"].schema.type_decl == "PetBody"
    assert types["CreatePetJSONRequestBody"].schema.type_decl == "CreatePetJSONBody"
    assert types["ListPetsParams"].schema.go_type == (
        "struct {\n"
        '    Limit *int32 `form:"limit,omitempty" json:"limit,omitempty"`\n'
        '    XRequestID string `json:"X-Request-ID"`\n'
        '    Status *Status `form:"status,omitempty" json:"status,omitempty"`\n'
        "}"
    )
    (enum,) = result.enums
    assert enum.type_name == "Status"
    assert enum.get_values() == {"Available": "available", "Sold": "sold"}


def test_render_petstore(load, config):
    out = render_declarations(generate(load(PETSTORE), config), config)

    assert out.startswith("// Package api provides primitives")
    assert "// Code generated by oapi-typegen. DO NOT EDIT.\npackage api\n" in out
    assert 'import (\n\t"time"\n)\n' in out
    assert "// Pet defines model for Pet.\ntype Pet struct {\n" in out
    assert '    Created *time.Time `json:"created,omitempty"`' in out
    assert "// ListPetsParams List all pets.\ntype ListPetsParams struct {" in out
    assert "type CreatePetJSONRequestBody = CreatePetJSONBody" in out
    assert "type PetBody = Pet" in out
    assert "type Status string" in out
    assert (
        "// Defines values for Status.\n"
        "const (\n"
        '\tAvailable Status = "available"\n'
        '\tSold Status = "sold"\n'
        ")"
    ) in out


def test_tag_filter_prunes_what_only_filtered_operations_used(load, config):
    result = generate(load(PETSTORE), config.with_overrides(include_tags=["pets"]))
    types = _types(result)
    assert "CreatePetJSONBody" not in types
    assert "PutPetsIdJSONRequestBody" not in types
    assert "PetBody" not in types
    assert "ListPetsParams" in types


def test_old_aliasing(load):
    cfg = Configuration(compatibility=CompatibilityOptions(old_aliasing=True))
    out = render_declarations(generate(load(PETSTORE), cfg), cfg)
    assert "type PetBody Pet" in out
    assert "type CreatePetJSONRequestBody CreatePetJSONBody" in out


def test_colliding_operation_type_is_renamed(load, keep_all, caplog):
    text = PETSTORE + "    ListPetsParams: {type: string}\n"
    with caplog.at_level(logging.WARNING):
        result = generate(load(text), keep_all)
    types = _types(result)
    assert types["ListPetsParams"].schema.go_type == "string"
    assert types["ListPetsParams2"].schema.go_type.startswith("struct {")
    assert "renamed to ListPetsParams2" in caplog.text


def test_identical_duplicates_are_emitted_once(render):
    out = render(
        """
        components:
          schemas:
            A:
              type: object
              properties:
                kind: {type: string, x-go-type-name: Kind, enum: [x, y]}
            B:
              type: object
              properties:
                kind: {type: string, x-go-type-name: Kind, enum: [x, y]}
        """
    )
    assert out.count("type Kind string") == 1
    assert out.count("// Defines values for Kind.") == 1


def test_conflicting_enum_values_are_prefixed(render):
    out = render(
        """
        components:
          schemas:
            Color: {type: string, enum: [red, blue]}
            Shade: {type: string, enum: [red]}
        """
    )
    assert '\tColorBlue Color = "blue"' in out
    assert '\tColorRed Color = "red"' in out
    assert '\tShadeRed Shade = "red"' in out


def test_enum_value_named_like_a_type_is_prefixed(render):
    out = render(
        """
        components:
          schemas:
            Tone: {type: string, enum: [blue]}
            Blue: {type: object}
        """
    )
    assert '\tToneBlue Tone = "blue"' in out


def test_always_prefix_enum_values(render, keep_all):
    cfg = Configuration(
        output_options=keep_all.output_options,
        compatibility=CompatibilityOptions(always_prefix_enum_values=True),
    )
    out = render("components:\n  schemas:\n    Mode: {type: integer, enum: [1, 2]}\n", cfg)
    assert "\tModeN1 Mode = 1" in out
    assert "\tModeN2 Mode = 2" in out


def test_type_name_override(render):
    out = render(
        """
        components:
          schemas:
            Pet:
              type: object
              x-go-type-name: Animal
              properties:
                name: {type: string}
        """
    )
    assert "type Pet = Animal" in out
    assert "type Animal struct {" in out


def test_imports_follow_usage(render):
    cfg = Configuration(output_options=OutputOptions(skip_prune=True, nullable_type=True))
    out = render(
        """
        components:
          schemas:
            Price:
              type: object
              properties:
                amount:
                  type: string
                  x-go-type: decimal.Decimal
                  x-go-type-import: {path: github.com/shopspring/decimal}
                id: {type: string, format: uuid}
                note: {type: string, nullable: true}
            Either:
              oneOf:
                - type: string
                - type: integer
        """,
        cfg,
    )
    assert (
        "import (\n"
        '\t"encoding/json"\n'
        "\n"
        '\t"github.com/oapi-codegen/nullable"\n'
        '\t"github.com/shopspring/decimal"\n'
        '\topenapi_types "github.com/oapi-codegen/runtime/types"\n'
        ")\n"
    ) in out


def test_external_references(load, tmp_path):
    (tmp_path / "common.yaml").write_text(
        "components:\n  schemas:\n    Money: {type: object, properties: {amount: {type: number}}}\n",
        encoding="utf-8",
    )
    cfg = Configuration(
        output_options=OutputOptions(skip_prune=True),
        import_mapping={"common.yaml": "github.com/acme/common"},
    )
    doc = load(
        """
        components:
          schemas:
            Order:
              type: object
              properties:
                price:
                  $ref: 'common.yaml#/components/schemas/Money'
        """,
        base_path=tmp_path,
    )
    out = render_declarations(generate(doc, cfg), cfg)
    assert '    Price *externalRef0.Money `json:"price,omitempty"`' in out
    assert '\texternalRef0 "github.com/acme/common"' in out


def test_response_components_with_several_json_media_types(render):
    out = render(
        """
        components:
          responses:
            PetList:
              description: pets
              content:
                application/json:
                  schema: {type: array, items: {type: string}}
                application/merge-patch+json:
                  schema: {type: array, items: {type: integer}}
                text/plain:
                  schema: {type: string}
        """
    )
    assert "type PetListJSON = []string" in out
    assert "type PetListApplicationMergePatchJson = []int" in out
    assert "PetListTextPlain" not in out


def test_result_to_dict(load, config):
    result = generate(load(PETSTORE), config)
    data = result_to_dict(result, config)
    assert data["package"] == "api"
    assert data["schemas"] == {"Pet": result.schemas["Pet"].type_decl}
    assert {"type_name": "Status", "values": {"Available": "available", "Sold": "sold"}, "string": True} in data["enums"]
    body = next(t for t in data["types"] if t["name"] == "PetBody")
    assert body["alias"] and body["declaration"] == "Pet"
