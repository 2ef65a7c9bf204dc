"""
Load an OpenAPI/JSON-Schema document (JSON or YAML) into the document model.

Internal references ("#/components/schemas/Foo") and relative-file references
("common.yaml#/components/schemas/Foo") are resolved to shared schema nodes
while the original `$ref` strings are kept on every `SchemaRef`, so the
compiler can refer to named types instead of inlining them.

With `inline_refs=True` internal references are dereferenced at every usage
site first (cycles keep their `$ref`), which reproduces the output of parsers
that resolve `$ref` eagerly; the resolver then restores component names
structurally.

Remote (URL) references are rejected.
"""

import json
import logging
import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Callable, Optional, Union

import yaml

from oapi_typegen.document import (
    OPERATION_METHODS,
    AdditionalProperties,
    Callback,
    ComponentRef,
    Components,
    Discriminator,
    Document,
    Example,
    Header,
    Link,
    MediaType,
    Operation,
    Parameter,
    PathItem,
    RequestBody,
    Response,
    SchemaNode,
    SchemaRef,
    SecurityScheme,
)
from oapi_typegen.errors import LoaderError

logger = logging.getLogger(__name__)

Json = Union[dict[str, Any], list[Any], str, int, float, bool, None]

_SUPPORTED_VERSIONS = ("3.0", "3.1")

# Keywords carried through as metadata only.
_CONSTRAINT_KEYS: set[str] = {
    "minLength",
    "maxLength",
    "pattern",
    "minimum",
    "maximum",
    "exclusiveMinimum",
    "exclusiveMaximum",
    "multipleOf",
    "minItems",
    "maxItems",
    "uniqueItems",
    "minProperties",
    "maxProperties",
    "prefixItems",
    "patternProperties",
    "contentEncoding",
    "contentMediaType",
}


def _looks_like_url(ref: str) -> bool:
    return "://" in ref


def _split_ref(ref: str) -> tuple[str, str]:
    """
    Split a $ref into (path_part, fragment_part_without_hash).
    Examples:
      "foo.json#/a/b" -> ("foo.json", "/a/b")
      "foo.json"      -> ("foo.json", "")
      "#/a/b"         -> ("", "/a/b")
    """
    if "#" not in ref:
        return ref, ""
    path, frag = ref.split("#", 1)
    return path, frag


def _decode_json_pointer_token(token: str) -> str:
    # JSON Pointer escaping per RFC 6901
    return token.replace("~1", "/").replace("~0", "~")


def _json_pointer_get(doc: Json, pointer: str, *, context: str) -> Json:
    """
    Resolve a JSON Pointer against a loaded document.
    pointer is the fragment part without '#'. "" means the whole doc.
    """
    if pointer in ("", None):
        return doc
    if not pointer.startswith("/"):
        raise KeyError(f"Unsupported JSON pointer fragment '{pointer}' in {context} (expected '' or '/...').")

    cur: Json = doc
    for raw_token in pointer.lstrip("/").split("/"):
        token = _decode_json_pointer_token(raw_token)
        if isinstance(cur, list):
            try:
                idx = int(token)
            except ValueError as e:
                raise KeyError(f"Pointer token '{token}' is not a list index in {context}.") from e
            try:
                cur = cur[idx]
            except IndexError as e:
                raise KeyError(f"List index '{idx}' out of range while resolving pointer in {context}.") from e
        elif isinstance(cur, dict):
            if token not in cur:
                raise KeyError(f"Key '{token}' not found while resolving pointer in {context}.")
            cur = cur[token]
        else:
            raise KeyError(f"Cannot dereference through non-container while resolving pointer in {context}.")
    return cur


def _parse_text(text: str, *, suffix: str = "", context: str = "<data>") -> Json:
    try:
        if suffix == ".json":
            return json.loads(text)
        # YAML is a superset of JSON, so it also covers JSON without a suffix.
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise LoaderError(f"Failed to parse {context}: {e}") from e


def _load_file(path: Path) -> Json:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise LoaderError(f"Failed to read {path}: {e}") from e
    return _parse_text(text, suffix=path.suffix.lower(), context=str(path))


def _inline_internal_refs(root: Json, *, max_depth: int = 200) -> Json:
    """
    Dereference every internal `#/...` $ref at its usage site.

    A $ref that is already being expanded on the current stack is kept as-is,
    so recursive schemas survive as references.
    """

    def _inline_ref_value(ref_value: str, *, stack: list[str], depth: int) -> Json:
        if ref_value in stack:
            return {"$ref": ref_value}
        if depth > max_depth:
            raise LoaderError(f"Max depth exceeded ({max_depth}) while resolving $ref '{ref_value}'.")
        _path, frag = _split_ref(ref_value)
        try:
            target = _json_pointer_get(root, frag, context=f"$ref '{ref_value}'")
        except KeyError:
            # Left for the builder, which degrades missing targets.
            return {"$ref": ref_value}
        return _inline_node(deepcopy(target), stack=stack + [ref_value], depth=depth + 1)

    def _inline_node(node: Json, *, stack: list[str], depth: int) -> Json:
        if isinstance(node, dict):
            ref_value = node.get("$ref")
            if isinstance(ref_value, str) and ref_value.startswith("#"):
                siblings = {k: v for k, v in node.items() if k != "$ref"}
                resolved = _inline_ref_value(ref_value, stack=stack, depth=depth)
                if siblings and isinstance(resolved, dict) and "$ref" not in resolved:
                    merged = dict(resolved)
                    merged.update(_inline_node(siblings, stack=stack, depth=depth + 1))
                    return merged
                return resolved
            return {k: _inline_node(v, stack=stack, depth=depth + 1) for k, v in node.items()}
        if isinstance(node, list):
            return [_inline_node(v, stack=stack, depth=depth + 1) for v in node]
        return node

    if not isinstance(root, dict):
        return root
    out: dict[str, Any] = {}
    for key, value in root.items():
        out[key] = _inline_node(deepcopy(value), stack=[], depth=0)
    return out


class DocumentLoader:
    def __init__(self, *, inline_refs: bool = False, max_depth: int = 200) -> None:
        self.inline_refs = inline_refs
        self.max_depth = max_depth
        self._doc_cache: dict[str, Json] = {}
        self._nodes_by_id: dict[int, tuple[Json, SchemaNode]] = {}
        self._document: Optional[Document] = None

    def load(self, path: Union[str, Path]) -> Document:
        entry = Path(path).resolve()
        raw = _load_file(entry)
        return self._build(raw, base_file=entry)

    def load_from_data(self, text: str, *, base_path: Union[str, Path, None] = None) -> Document:
        raw = _parse_text(text)
        base_file = None
        if base_path is not None:
            # A synthetic file name inside base_path anchors relative refs.
            base_file = (Path(base_path) / "__document__").resolve()
        return self._build(raw, base_file=base_file)

    def _load_cached(self, abs_path: Path) -> Json:
        key = str(abs_path)
        if key not in self._doc_cache:
            self._doc_cache[key] = _load_file(abs_path)
        return self._doc_cache[key]

    def _build(self, raw: Json, *, base_file: Optional[Path]) -> Document:
        if not isinstance(raw, dict):
            raise LoaderError(f"Document must be an object at the top level (got {type(raw).__name__}).")
        version = raw.get("openapi")
        if version is None:
            if "swagger" in raw:
                raise LoaderError(f"Unsupported Swagger version {raw['swagger']!r}; only OpenAPI 3.0 and 3.1 are supported.")
            raise LoaderError("Document is missing the 'openapi' version field.")
        version = str(version)
        if not version.startswith(_SUPPORTED_VERSIONS):
            raise LoaderError(f"Unsupported OpenAPI version {version!r}; expected 3.0.x or 3.1.x.")

        if self.inline_refs:
            raw = _inline_internal_refs(raw, max_depth=self.max_depth)

        doc = Document(openapi=version, inlined_refs=self.inline_refs)
        self._document = doc
        self._nodes_by_id = {}
        if base_file is not None:
            self._doc_cache[str(base_file)] = raw
        self._root = raw
        self._base_file = base_file

        info = raw.get("info")
        doc.info = dict(info) if isinstance(info, dict) else {}
        doc.json_schema_dialect = str(raw.get("jsonSchemaDialect") or "")
        doc.extensions = _extensions(raw)

        components = raw.get("components")
        if components is not None:
            if not isinstance(components, dict):
                raise LoaderError("Top-level 'components' exists but is not an object.")
            doc.components = self._build_components(components)

        paths = raw.get("paths")
        if paths is not None:
            if not isinstance(paths, dict):
                raise LoaderError("Top-level 'paths' exists but is not an object.")
            for path, item in paths.items():
                if str(path).startswith("x-"):
                    continue
                doc.paths[str(path)] = self._build_path_item(item, base_file=base_file, context=f"paths[{path!r}]")

        webhooks = raw.get("webhooks")
        if isinstance(webhooks, dict):
            for name, item in webhooks.items():
                doc.webhooks[str(name)] = self._build_path_item(item, base_file=base_file, context=f"webhooks[{name!r}]")

        logger.debug("loaded OpenAPI %s document with %d schema nodes", version, len(doc.nodes))
        return doc

    # -- reference handling -------------------------------------------------

    def _target(self, ref_value: str, *, base_file: Optional[Path]) -> tuple[Json, Optional[Path]]:
        """
        Resolve a $ref to its raw target and the file that should anchor the
        target's own relative refs. Raises KeyError for missing targets.
        """
        if _looks_like_url(ref_value):
            raise LoaderError(f"Remote reference {ref_value!r} is not supported; download the document first.")
        path_part, frag = _split_ref(ref_value)
        if path_part == "":
            root = self._root if base_file is None else self._doc_cache.get(str(base_file), self._root)
            return _json_pointer_get(root, frag, context=f"$ref '{ref_value}'"), base_file
        if base_file is None:
            raise LoaderError(f"Relative-file reference {ref_value!r} requires a base path.")
        if os.path.isabs(path_part):
            abs_path = Path(path_part).resolve()
        else:
            abs_path = (base_file.parent / path_part).resolve()
        loaded = self._load_cached(abs_path)
        return _json_pointer_get(loaded, frag, context=f"$ref '{ref_value}' from {base_file}"), abs_path

    def _resolve_component(
        self,
        raw: Json,
        *,
        base_file: Optional[Path],
        build: Callable[[Any, Optional[Path]], Any],
        context: str,
        stack: tuple[str, ...] = (),
    ) -> ComponentRef:
        if isinstance(raw, dict) and isinstance(raw.get("$ref"), str):
            ref_value = raw["$ref"]
            if ref_value in stack:
                raise LoaderError(f"Cycle detected while resolving $ref '{ref_value}' in {context}.")
            try:
                target, target_base = self._target(ref_value, base_file=base_file)
            except KeyError as e:
                logger.warning("unresolvable reference %s in %s: %s", ref_value, context, e)
                return ComponentRef(ref=ref_value, value=None)
            inner = self._resolve_component(
                target, base_file=target_base, build=build, context=context, stack=stack + (ref_value,)
            )
            return ComponentRef(ref=ref_value, value=inner.value)
        if not isinstance(raw, dict):
            raise LoaderError(f"{context} must be an object (got {type(raw).__name__}).")
        return ComponentRef(ref="", value=build(raw, base_file))

    # -- schemas ------------------------------------------------------------

    def schema_ref(
        self, raw: Json, *, base_file: Optional[Path], context: str, stack: tuple[str, ...] = ()
    ) -> SchemaRef:
        if isinstance(raw, bool):
            # 3.1 boolean schemas: both forms carry no type information.
            return SchemaRef(value=self._new_node())
        if not isinstance(raw, dict):
            raise LoaderError(f"Schema at {context} must be an object (got {type(raw).__name__}).")

        ref_value = raw.get("$ref")
        if not isinstance(ref_value, str):
            return SchemaRef(value=self._schema_node(raw, base_file=base_file, context=context))
        if ref_value in stack:
            raise LoaderError(f"Cycle detected while resolving $ref '{ref_value}' at {context}.")

        try:
            target, target_base = self._target(ref_value, base_file=base_file)
        except KeyError as e:
            logger.warning("unresolvable reference %s at %s: %s", ref_value, context, e)
            return SchemaRef(ref=ref_value, value=None, site=self._site_node(raw))

        if isinstance(target, dict) and isinstance(target.get("$ref"), str):
            # A component that is itself only a reference: keep the outer name.
            inner = self.schema_ref(target, base_file=target_base, context=context, stack=stack + (ref_value,))
            value = inner.value
        elif isinstance(target, bool):
            value = self._new_node()
        elif isinstance(target, dict):
            value = self._schema_node(target, base_file=target_base, context=ref_value)
        else:
            raise LoaderError(f"$ref {ref_value!r} at {context} does not point at a schema object.")
        return SchemaRef(ref=ref_value, value=value, site=self._site_node(raw))

    def _site_node(self, raw: dict[str, Any]) -> Optional[SchemaNode]:
        """
        Annotations next to a $ref. OpenAPI 3.0 ignores $ref siblings apart
        from extensions; 3.1 also honours the annotation keywords.
        """
        siblings = {k: v for k, v in raw.items() if k != "$ref"}
        if self._document is None or not self._document.is_openapi31:
            siblings = {k: v for k, v in siblings.items() if k.startswith("x-")}
        if not siblings:
            return None
        return SchemaNode(
            description=str(siblings.get("description") or ""),
            nullable=bool(siblings.get("nullable", False)),
            read_only=bool(siblings.get("readOnly", False)),
            write_only=bool(siblings.get("writeOnly", False)),
            deprecated=bool(siblings.get("deprecated", False)),
            constraints={k: v for k, v in siblings.items() if k in _CONSTRAINT_KEYS},
            extensions=_extensions(siblings),
        )

    def _new_node(self) -> SchemaNode:
        if self._document is None:
            raise LoaderError("no document is being loaded")
        return self._document.new_node()

    def _schema_node(self, raw: dict[str, Any], *, base_file: Optional[Path], context: str) -> SchemaNode:
        cached = self._nodes_by_id.get(id(raw))
        if cached is not None and cached[0] is raw:
            return cached[1]
        node = self._new_node()
        # Registered before the children are built so recursive YAML anchors terminate.
        # The raw dict is kept alive with the node so its id is never reused.
        self._nodes_by_id[id(raw)] = (raw, node)

        def sub(value: Json, key: str) -> SchemaRef:
            return self.schema_ref(value, base_file=base_file, context=f"{context}.{key}")

        type_value = raw.get("type")
        if isinstance(type_value, str):
            node.types = [type_value]
        elif isinstance(type_value, list):
            node.types = [str(t) for t in type_value]
        elif type_value is not None:
            raise LoaderError(f"Invalid 'type' at {context}: {type_value!r}.")

        node.nullable = bool(raw.get("nullable", False)) or "null" in node.types
        node.format = str(raw.get("format") or "")
        node.title = str(raw.get("title") or "")
        node.description = str(raw.get("description") or "")

        for key, attr in (("allOf", "all_of"), ("oneOf", "one_of"), ("anyOf", "any_of")):
            value = raw.get(key)
            if value is None:
                continue
            if not isinstance(value, list):
                raise LoaderError(f"'{key}' at {context} must be a list.")
            setattr(node, attr, [sub(item, f"{key}[{i}]") for i, item in enumerate(value)])

        if "not" in raw:
            node.not_ = sub(raw["not"], "not")

        items = raw.get("items")
        if isinstance(items, (dict, bool)):
            node.items = sub(items, "items")
        elif isinstance(items, list):
            node.constraints["items"] = items

        properties = raw.get("properties")
        if properties is not None:
            if not isinstance(properties, dict):
                raise LoaderError(f"'properties' at {context} must be an object.")
            for name, prop in properties.items():
                node.properties[str(name)] = sub(prop, f"properties.{name}")

        required = raw.get("required")
        if isinstance(required, list):
            node.required = [str(r) for r in required]

        additional = raw.get("additionalProperties")
        if isinstance(additional, bool):
            node.additional_properties = AdditionalProperties(has=additional)
        elif isinstance(additional, dict):
            node.additional_properties = AdditionalProperties(has=True, schema=sub(additional, "additionalProperties"))

        enum = raw.get("enum")
        if enum is not None:
            if not isinstance(enum, list):
                raise LoaderError(f"'enum' at {context} must be a list.")
            node.enum = list(enum)
        if "const" in raw:
            node.const = raw["const"]

        discriminator = raw.get("discriminator")
        if isinstance(discriminator, dict):
            mapping = discriminator.get("mapping") or {}
            if not isinstance(mapping, dict):
                raise LoaderError(f"'discriminator.mapping' at {context} must be an object.")
            node.discriminator = Discriminator(
                property_name=str(discriminator.get("propertyName") or ""),
                mapping={str(k): str(v) for k, v in mapping.items()},
            )

        node.read_only = bool(raw.get("readOnly", False))
        node.write_only = bool(raw.get("writeOnly", False))
        node.deprecated = bool(raw.get("deprecated", False))
        if "default" in raw:
            node.default = raw["default"]
        if "example" in raw:
            node.example = raw["example"]
        elif isinstance(raw.get("examples"), list) and raw["examples"]:
            node.example = raw["examples"][0]

        node.constraints.update({k: v for k, v in raw.items() if k in _CONSTRAINT_KEYS})
        node.extensions = _extensions(raw)
        return node

    # -- other objects ------------------------------------------------------

    def _media_types(self, raw: Any, *, base_file: Optional[Path], context: str) -> dict[str, MediaType]:
        out: dict[str, MediaType] = {}
        if not isinstance(raw, dict):
            return out
        for content_type, media in raw.items():
            if not isinstance(media, dict):
                continue
            schema = None
            if "schema" in media:
                schema = self.schema_ref(media["schema"], base_file=base_file, context=f"{context}.{content_type}")
            out[str(content_type)] = MediaType(
                schema=schema,
                examples=self._examples(media.get("examples"), base_file=base_file, context=context),
            )
        return out

    def _examples(self, raw: Any, *, base_file: Optional[Path], context: str) -> dict[str, ComponentRef]:
        out: dict[str, ComponentRef] = {}
        if not isinstance(raw, dict):
            return out
        for name, example in raw.items():
            out[str(name)] = self._resolve_component(
                example, base_file=base_file, build=self._example, context=f"{context}.examples.{name}"
            )
        return out

    def _example(self, raw: dict[str, Any], base_file: Optional[Path]) -> Example:
        return Example(
            summary=str(raw.get("summary") or ""),
            value=raw.get("value"),
            external_value=str(raw.get("externalValue") or ""),
        )

    def _parameter(self, raw: dict[str, Any], base_file: Optional[Path]) -> Parameter:
        name = str(raw.get("name") or "")
        context = f"parameter {name!r}"
        location = str(raw.get("in") or "")
        return Parameter(
            name=name,
            location=location,
            required=bool(raw.get("required", location == "path")),
            description=str(raw.get("description") or ""),
            style=str(raw.get("style") or ""),
            explode=raw.get("explode"),
            schema=self.schema_ref(raw["schema"], base_file=base_file, context=context) if "schema" in raw else None,
            content=self._media_types(raw.get("content"), base_file=base_file, context=context),
            examples=self._examples(raw.get("examples"), base_file=base_file, context=context),
            extensions=_extensions(raw),
        )

    def _header(self, raw: dict[str, Any], base_file: Optional[Path]) -> Header:
        return Header(
            description=str(raw.get("description") or ""),
            required=bool(raw.get("required", False)),
            schema=self.schema_ref(raw["schema"], base_file=base_file, context="header") if "schema" in raw else None,
            content=self._media_types(raw.get("content"), base_file=base_file, context="header"),
        )

    def _request_body(self, raw: dict[str, Any], base_file: Optional[Path]) -> RequestBody:
        return RequestBody(
            description=str(raw.get("description") or ""),
            required=bool(raw.get("required", False)),
            content=self._media_types(raw.get("content"), base_file=base_file, context="requestBody"),
        )

    def _link(self, raw: dict[str, Any], base_file: Optional[Path]) -> Link:
        return Link(
            operation_id=str(raw.get("operationId") or ""),
            operation_ref=str(raw.get("operationRef") or ""),
            description=str(raw.get("description") or ""),
        )

    def _response(self, raw: dict[str, Any], base_file: Optional[Path]) -> Response:
        headers = {}
        for name, header in (raw.get("headers") or {}).items():
            headers[str(name)] = self._resolve_component(
                header, base_file=base_file, build=self._header, context=f"header {name!r}"
            )
        links = {}
        for name, link in (raw.get("links") or {}).items():
            links[str(name)] = self._resolve_component(link, base_file=base_file, build=self._link, context=f"link {name!r}")
        return Response(
            description=str(raw.get("description") or ""),
            headers=headers,
            content=self._media_types(raw.get("content"), base_file=base_file, context="response"),
            links=links,
        )

    def _callback(self, raw: dict[str, Any], base_file: Optional[Path]) -> Callback:
        paths = {}
        for expression, item in raw.items():
            if str(expression).startswith("x-"):
                continue
            paths[str(expression)] = self._build_path_item(item, base_file=base_file, context=f"callback {expression!r}")
        return Callback(paths=paths)

    def _operation(self, raw: dict[str, Any], base_file: Optional[Path], *, context: str) -> Operation:
        op = Operation(
            operation_id=str(raw.get("operationId") or ""),
            tags=[str(t) for t in (raw.get("tags") or [])],
            summary=str(raw.get("summary") or ""),
            description=str(raw.get("description") or ""),
            deprecated=bool(raw.get("deprecated", False)),
            extensions=_extensions(raw),
        )
        for i, param in enumerate(raw.get("parameters") or []):
            op.parameters.append(
                self._resolve_component(param, base_file=base_file, build=self._parameter, context=f"{context}.parameters[{i}]")
            )
        if "requestBody" in raw:
            op.request_body = self._resolve_component(
                raw["requestBody"], base_file=base_file, build=self._request_body, context=f"{context}.requestBody"
            )
        for code, response in (raw.get("responses") or {}).items():
            op.responses[str(code)] = self._resolve_component(
                response, base_file=base_file, build=self._response, context=f"{context}.responses.{code}"
            )
        for name, callback in (raw.get("callbacks") or {}).items():
            op.callbacks[str(name)] = self._resolve_component(
                callback, base_file=base_file, build=self._callback, context=f"{context}.callbacks.{name}"
            )
        return op

    def _build_path_item(self, raw: Json, *, base_file: Optional[Path], context: str) -> PathItem:
        if isinstance(raw, dict) and isinstance(raw.get("$ref"), str):
            # Common pattern: paths: { "/x": { "$ref": "paths/x.yaml" } }
            try:
                raw, base_file = self._target(raw["$ref"], base_file=base_file)
            except KeyError as e:
                raise LoaderError(f"Failed to resolve path item for {context}: {e}") from e
        if not isinstance(raw, dict):
            raise LoaderError(f"Path item for {context} must be an object (got {type(raw).__name__}).")
        item = PathItem(summary=str(raw.get("summary") or ""), description=str(raw.get("description") or ""))
        for i, param in enumerate(raw.get("parameters") or []):
            item.parameters.append(
                self._resolve_component(param, base_file=base_file, build=self._parameter, context=f"{context}.parameters[{i}]")
            )
        for method in OPERATION_METHODS:
            op_raw = raw.get(method)
            if op_raw is None:
                continue
            if not isinstance(op_raw, dict):
                raise LoaderError(f"Operation {method.upper()} in {context} must be an object.")
            item.operations[method] = self._operation(op_raw, base_file, context=f"{context}.{method}")
        return item

    def _build_components(self, raw: dict[str, Any]) -> Components:
        components = Components()
        base_file = self._base_file

        def section(key: str) -> dict[str, Any]:
            value = raw.get(key) or {}
            if not isinstance(value, dict):
                raise LoaderError(f"components.{key} exists but is not an object.")
            return value

        for name, schema in section("schemas").items():
            components.schemas[str(name)] = self.schema_ref(schema, base_file=base_file, context=f"components.schemas.{name}")

        builders: dict[str, tuple[str, Callable[[Any, Optional[Path]], Any]]] = {
            "parameters": ("parameters", self._parameter),
            "responses": ("responses", self._response),
            "requestBodies": ("request_bodies", self._request_body),
            "headers": ("headers", self._header),
            "examples": ("examples", self._example),
            "links": ("links", self._link),
            "callbacks": ("callbacks", self._callback),
        }
        for key, (attr, build) in builders.items():
            target = getattr(components, attr)
            for name, value in section(key).items():
                target[str(name)] = self._resolve_component(
                    value, base_file=base_file, build=build, context=f"components.{key}.{name}"
                )

        for name, value in section("securitySchemes").items():
            if not isinstance(value, dict):
                raise LoaderError(f"components.securitySchemes.{name} must be an object.")
            components.security_schemes[str(name)] = ComponentRef(
                ref=str(value.get("$ref") or ""),
                value=SecurityScheme(type=str(value.get("type") or ""), raw=dict(value)),
            )

        for name, value in section("pathItems").items():
            components.path_items[str(name)] = ComponentRef(
                value=self._build_path_item(value, base_file=base_file, context=f"components.pathItems.{name}")
            )
        return components


def _extensions(raw: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in raw.items() if isinstance(k, str) and k.startswith("x-")}


def load_document(path: Union[str, Path], *, inline_refs: bool = False) -> Document:
    return DocumentLoader(inline_refs=inline_refs).load(path)


def load_document_from_data(
    text: str,
    *,
    base_path: Union[str, Path, None] = None,
    inline_refs: bool = False,
) -> Document:
    return DocumentLoader(inline_refs=inline_refs).load_from_data(text, base_path=base_path)
