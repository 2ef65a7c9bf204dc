import logging

import pytest

from oapi_typegen.errors import LoaderError
from oapi_typegen.loader import load_document, load_document_from_data


def test_rejects_swagger_documents():
    with pytest.raises(LoaderError, match="Swagger"):
        load_document_from_data("swagger: '2.0'\ninfo: {title: t, version: '1'}\n")


def test_rejects_missing_version():
    with pytest.raises(LoaderError, match="openapi"):
        load_document_from_data("info: {title: t, version: '1'}\n")


def test_loads_components_and_refs(load):
    doc = load(
        """
        paths: {}
        components:
          schemas:
            Pet:
              type: object
              properties:
                owner:
                  $ref: '#/components/schemas/Owner'
            Owner:
              type: object
              properties:
                name: {type: string}
        """
    )
    pet = doc.components.schemas["Pet"]
    owner_ref = pet.value.properties["owner"]
    assert owner_ref.ref == "#/components/schemas/Owner"
    # Both cells share the component's node.
    assert owner_ref.value is doc.components.schemas["Owner"].value
    assert not doc.is_openapi31


def test_openapi31_type_arrays_and_ref_siblings(load):
    doc = load(
        """
        openapi: 3.1.0
        info: {title: t, version: "1"}
        components:
          schemas:
            Name:
              type: [string, "null"]
            Tagged:
              $ref: '#/components/schemas/Name'
              description: only an annotation
            Extended:
              $ref: '#/components/schemas/Name'
              maxLength: 3
        """
    )
    assert doc.is_openapi31
    name = doc.components.schemas["Name"].value
    assert name.types == ["string", "null"]
    assert name.nullable

    tagged = doc.components.schemas["Tagged"]
    assert tagged.ref == "#/components/schemas/Name"
    assert tagged.site.description == "only an annotation"

    extended = doc.components.schemas["Extended"]
    assert extended.ref == "#/components/schemas/Name"
    assert extended.value is name
    assert extended.site.constraints == {"maxLength": 3}


def test_unresolvable_ref_degrades_with_warning(load, caplog):
    with caplog.at_level(logging.WARNING, logger="oapi_typegen.loader"):
        doc = load(
            """
            components:
              schemas:
                Pet:
                  type: object
                  properties:
                    missing:
                      $ref: '#/components/schemas/Nope'
            """
        )
    missing = doc.components.schemas["Pet"].value.properties["missing"]
    assert missing.ref == "#/components/schemas/Nope"
    assert missing.value is None
    assert "unresolvable reference" in caplog.text


def test_path_parameters_default_to_required(load):
    doc = load(
        """
        paths:
          /pets/{id}:
            parameters:
              - name: id
                in: path
                schema: {type: string}
            get:
              parameters:
                - name: q
                  in: query
                  schema: {type: string}
              responses: {}
        """
    )
    item = doc.paths["/pets/{id}"]
    assert item.parameters[0].value.required
    assert not item.operations["get"].parameters[0].value.required
    assert [(p, m) for p, m, _ in doc.operations()] == [("/pets/{id}", "get")]


def test_relative_file_refs(tmp_path):
    (tmp_path / "common.yaml").write_text(
        "components:\n  schemas:\n    Money:\n      type: object\n      properties:\n        amount: {type: number}\n",
        encoding="utf-8",
    )
    (tmp_path / "api.yaml").write_text(
        "openapi: 3.0.3\n"
        "info: {title: t, version: '1'}\n"
        "components:\n"
        "  schemas:\n"
        "    Price:\n"
        "      type: object\n"
        "      properties:\n"
        "        value:\n"
        "          $ref: 'common.yaml#/components/schemas/Money'\n",
        encoding="utf-8",
    )
    doc = load_document(tmp_path / "api.yaml")
    value = doc.components.schemas["Price"].value.properties["value"]
    assert value.ref == "common.yaml#/components/schemas/Money"
    assert "amount" in value.value.properties


def test_inline_refs_dereferences_internal_refs(load):
    doc = load(
        """
        components:
          schemas:
            Pet:
              type: object
              properties:
                name: {type: string}
            Owner:
              type: object
              properties:
                pet:
                  $ref: '#/components/schemas/Pet'
        """,
        inline_refs=True,
    )
    pet = doc.components.schemas["Owner"].value.properties["pet"]
    assert doc.inlined_refs
    assert pet.ref == ""
    assert pet.value is not doc.components.schemas["Pet"].value
    assert "name" in pet.value.properties


def test_each_ref_keeps_its_own_sibling_annotations(load):
    props = "".join(
        f"        p{i}:\n"
        f"          $ref: '#/components/schemas/Base'\n"
        f"          x-go-name: Field{i}\n" + ("          deprecated: true\n" if i % 2 else "")
        for i in range(12)
    )
    doc = load(
        "openapi: 3.1.0\n"
        "info: {title: t, version: '1'}\n"
        "components:\n"
        "  schemas:\n"
        "    Base: {type: string}\n"
        "    Holder:\n"
        "      type: object\n"
        "      properties:\n" + props
    )
    base = doc.components.schemas["Base"].value
    holder = doc.components.schemas["Holder"].value
    for i in range(12):
        prop = holder.properties[f"p{i}"]
        assert prop.ref == "#/components/schemas/Base"
        assert prop.value is base
        assert prop.site.extensions == {"x-go-name": f"Field{i}"}
        assert prop.site.deprecated == bool(i % 2)


def test_openapi30_ref_siblings_keep_only_extensions(load):
    doc = load(
        """
        components:
          schemas:
            Owner: {type: object, properties: {name: {type: string}}}
            Pet:
              type: object
              properties:
                owner:
                  $ref: '#/components/schemas/Owner'
                  readOnly: true
                  x-go-type-skip-optional-pointer: true
        """
    )
    owner = doc.components.schemas["Pet"].value.properties["owner"]
    assert owner.ref == "#/components/schemas/Owner"
    assert not owner.site.read_only
    assert owner.site.extensions == {"x-go-type-skip-optional-pointer": True}


def test_ref_chain_that_loops_is_a_loader_error(load):
    with pytest.raises(LoaderError, match="Cycle detected"):
        load(
            """
            components:
              schemas:
                A:
                  $ref: '#/components/schemas/B'
                B:
                  $ref: '#/components/schemas/A'
            """
        )
