from oapi_typegen.prune import find_component_refs, prune_unused_components


def test_prunes_until_nothing_is_left_to_remove(load):
    doc = load(
        """
        paths: {}
        components:
          schemas:
            A:
              type: object
              properties:
                b:
                  $ref: '#/components/schemas/B'
            B: {type: string}
          securitySchemes:
            token: {type: http, scheme: bearer}
        """
    )
    # B is still referenced by A on the first pass.
    assert prune_unused_components(doc) == 2
    assert doc.components.schemas == {}
    assert list(doc.components.security_schemes) == ["token"]
    assert prune_unused_components(doc) == 0


def test_keeps_everything_reachable_from_operations(load):
    doc = load(
        """
        paths:
          /pets:
            get:
              parameters:
                - $ref: '#/components/parameters/Limit'
              responses:
                '200':
                  $ref: '#/components/responses/PetList'
        components:
          parameters:
            Limit:
              name: limit
              in: query
              schema:
                $ref: '#/components/schemas/Count'
          responses:
            PetList:
              description: pets
              content:
                application/json:
                  schema:
                    type: array
                    items:
                      $ref: '#/components/schemas/Pet'
            Unused:
              description: nobody
          schemas:
            Pet:
              type: object
              properties:
                tags:
                  type: array
                  items:
                    $ref: '#/components/schemas/Tag'
            Tag: {type: string}
            Count: {type: integer}
            Orphan: {type: string}
        """
    )
    refs = find_component_refs(doc)
    assert "#/components/schemas/Tag" in refs
    assert "#/components/schemas/Orphan" not in refs

    assert prune_unused_components(doc) == 2
    assert sorted(doc.components.schemas) == ["Count", "Pet", "Tag"]
    assert list(doc.components.responses) == ["PetList"]
    assert list(doc.components.parameters) == ["Limit"]


def test_recursive_schemas_terminate(load):
    doc = load(
        """
        paths:
          /nodes:
            get:
              responses:
                '200':
                  description: ok
                  content:
                    application/json:
                      schema:
                        $ref: '#/components/schemas/Node'
        components:
          schemas:
            Node:
              type: object
              properties:
                children:
                  type: array
                  items:
                    $ref: '#/components/schemas/Node'
        """
    )
    assert prune_unused_components(doc) == 0
    assert list(doc.components.schemas) == ["Node"]


def test_every_ref_to_a_shared_node_is_recorded(load):
    doc = load(
        """
        paths:
          /pets:
            get:
              responses:
                '200':
                  description: ok
                  content:
                    application/json:
                      schema:
                        type: object
                        properties:
                          alias:
                            $ref: '#/components/schemas/Alias'
                          pet:
                            $ref: '#/components/schemas/Pet'
        components:
          schemas:
            Alias:
              $ref: '#/components/schemas/Pet'
            Pet: {type: string}
        """
    )
    refs = find_component_refs(doc)
    assert {"#/components/schemas/Alias", "#/components/schemas/Pet"} <= refs
    assert prune_unused_components(doc) == 0
