"""
Reference handling for one generation run.

The resolver owns two tables built from the document's components:

- the type-name table, mapping every named component to the Go type name it
  is emitted under (after `x-go-name` overrides and collision renaming);
- the restoration table, mapping component schema nodes back to their names,
  used to turn anonymous copies of a component into references again.

Both are rebuilt for every resolver, so concurrent runs over different
documents never share state.
"""

import logging
from typing import Optional, Sequence

from oapi_typegen import extensions as ext
from oapi_typegen.config import Configuration
from oapi_typegen.document import Document, SchemaNode, SchemaRef
from oapi_typegen.errors import TypeNameCollisionError, UnsupportedReferenceError
from oapi_typegen.names import schema_name_to_type_name, sorted_schema_keys, unique_name

logger = logging.getLogger(__name__)

# Component sections whose entries become Go types, in emission order.
TYPED_SECTIONS: tuple[str, ...] = ("schemas", "parameters", "responses", "requestBodies")


def _escape_pointer_token(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def _decode_pointer_token(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def component_ref(section: str, name: str) -> str:
    return f"#/components/{section}/{_escape_pointer_token(name)}"


def is_go_type_reference(ref: str) -> bool:
    """True for refs naming a component; a bare document ref ("other.yaml") is not one."""
    return ref != "" and "#" in ref


def _additional_key(node: SchemaNode) -> object:
    ap = node.additional_properties
    if ap.schema is not None:
        return "schema"
    if ap.has is None:
        return None
    return ap.has


def _enum_key(node: SchemaNode) -> list[tuple[str, str]]:
    return [(type(v).__name__, str(v)) for v in node.enum]


def schemas_match(a: SchemaNode, b: SchemaNode) -> bool:
    """Shallow structural equality used for reference restoration."""
    if a.types != b.types:
        return False
    if set(a.properties) != set(b.properties):
        return False
    if a.required != b.required:
        return False
    if _enum_key(a) != _enum_key(b):
        return False
    return _additional_key(a) == _additional_key(b)


class ReferenceResolver:
    def __init__(self, document: Document, config: Configuration) -> None:
        self.document = document
        self.config = config
        self._imports = config.external_imports()
        self._type_names: dict[tuple[str, str], str] = {}
        self._component_nodes: dict[int, str] = {}
        self._restored: dict[int, str] = {}
        self._build_tables()

    def _build_tables(self) -> None:
        taken: set[str] = set()
        for section in TYPED_SECTIONS:
            items = self.document.components.section(section)
            names = sorted_schema_keys(items) if section == "schemas" else sorted(items)
            for name in names:
                item = items[name]
                type_name = self._declared_type_name(section, name, item)
                if type_name in taken:
                    renamed = unique_name(type_name, taken)
                    if not renamed:
                        raise TypeNameCollisionError(type_name, f"components.{section}.{name}")
                    logger.warning(
                        "component %s/%s collides with type %s; renamed to %s", section, name, type_name, renamed
                    )
                    type_name = renamed
                taken.add(type_name)
                self._type_names[(section, name)] = type_name

        for name, sref in self.document.components.schemas.items():
            # A component that merely points at another one does not own its node.
            if sref.ref == "" and sref.value is not None:
                self._component_nodes.setdefault(sref.value.index, name)

    def _declared_type_name(self, section: str, name: str, item: object) -> str:
        extensions: dict = {}
        if section == "schemas":
            node = getattr(item, "value", None)
            if node is not None:
                extensions = node.extensions
        else:
            extensions = getattr(getattr(item, "value", None), "extensions", None) or {}
        override = extensions.get(ext.GO_NAME)
        if isinstance(override, str) and override:
            return override
        return schema_name_to_type_name(name)

    # -- lookups ------------------------------------------------------------

    def resolve(self, sref: Optional[SchemaRef]) -> tuple[Optional[SchemaNode], bool]:
        if sref is None or sref.value is None:
            return None, False
        return sref.value, True

    def component_type_name(self, section: str, name: str) -> str:
        return self._type_names[(section, name)]

    def component_name_for(self, node: SchemaNode) -> Optional[str]:
        return self._component_nodes.get(node.index)

    def type_name_for_ref(self, ref: str) -> str:
        """Go spelling of a component reference, qualified for external documents."""
        if not ref:
            raise UnsupportedReferenceError("empty reference")
        if ref.startswith("#"):
            return self._local_type_name(ref, local=True)

        parts = ref.split("#")
        if len(parts) != 2:
            raise UnsupportedReferenceError(f"unsupported reference: {ref}")
        remote, fragment = parts
        go_import = self._imports.get(remote)
        if go_import is None:
            raise UnsupportedReferenceError(
                f"unrecognized external reference {remote!r}; provide the Go import for it in import-mapping"
            )
        type_name = self._local_type_name("#" + fragment, local=False)
        if not go_import.name:
            return type_name
        return f"{go_import.name}.{type_name}"

    def _local_type_name(self, ref: str, *, local: bool) -> str:
        parts = ref.split("/")
        depth = len(parts)
        if depth != 4 and (local or depth != 2):
            raise UnsupportedReferenceError(f"unexpected reference depth: {depth} for ref: {ref}")
        name = _decode_pointer_token(parts[-1])
        if local and parts[1] == "components":
            known = self._type_names.get((parts[2], name))
            if known is not None:
                return known
        return schema_name_to_type_name(name)

    # -- restoration --------------------------------------------------------

    def restore(self, sref: Optional[SchemaRef], path: Sequence[str]) -> Optional[SchemaRef]:
        """
        Re-attach a component reference to an anonymous schema that is (or
        structurally looks like) a named component schema.
        """
        if sref is None or sref.ref or sref.value is None:
            return sref
        node = sref.value
        own_name = self._component_nodes.get(node.index)
        if own_name is not None:
            if len(path) == 1 and path[0] == own_name:
                return sref
            return SchemaRef(ref=component_ref("schemas", own_name), value=node)

        name = self._structural_match(node)
        if not name:
            return sref
        logger.debug("restored %s as reference to component %s", ".".join(path), name)
        target = self.document.components.schemas[name].value
        return SchemaRef(ref=component_ref("schemas", name), value=target)

    def _structural_match(self, node: SchemaNode) -> str:
        # Only documents whose references were dereferenced at load time lose
        # their component names; elsewhere an anonymous schema stays anonymous.
        if not self.document.inlined_refs or not node.properties or node.index < 0:
            return ""
        cached = self._restored.get(node.index)
        if cached is not None:
            return cached

        matches = sorted(
            name
            for index, name in self._component_nodes.items()
            if schemas_match(node, self.document.nodes[index])
        )
        chosen = ""
        if len(matches) == 1:
            chosen = matches[0]
        elif matches:
            if len(node.properties) == 1:
                (prop_name,) = node.properties
                folded = prop_name.replace("_", "").casefold()
                for match in matches:
                    if match.casefold() == prop_name.casefold() or match.casefold() == folded:
                        chosen = match
                        break
            if not chosen:
                chosen = min(matches, key=lambda m: (len(m), m))
        self._restored[node.index] = chosen
        return chosen
