"""
Remove components that nothing refers to.

Every `$ref` reachable from paths, webhooks and the components themselves is
recorded (the walk stops at a reference), then every component whose
canonical `#/components/<section>/<name>` string was not recorded is
deleted. Deleting one component can orphan another, so this repeats until a
pass removes nothing. Security schemes are referenced by name, not by `$ref`,
and are never removed.
"""

import logging
from typing import Optional

from oapi_typegen.document import (
    COMPONENT_SECTIONS,
    Callback,
    ComponentRef,
    Document,
    Header,
    MediaType,
    Operation,
    Parameter,
    PathItem,
    RequestBody,
    Response,
    SchemaRef,
)
from oapi_typegen.resolver import component_ref

logger = logging.getLogger(__name__)

_PRUNABLE_SECTIONS: tuple[str, ...] = tuple(s for s in COMPONENT_SECTIONS if s != "securitySchemes")


def _visit(cell: Optional[ComponentRef], refs: set[str]) -> bool:
    """Record cell's ref; True when the walk should descend into its value."""
    if cell is None:
        return False
    if cell.ref:
        refs.add(cell.ref)
        return False
    return cell.value is not None


def _walk_schema(sref: Optional[SchemaRef], refs: set[str], visited: set[int]) -> None:
    if sref is None:
        return
    if sref.ref:
        refs.add(sref.ref)
        return
    node = sref.value
    if node is None or node.index in visited:
        return
    visited.add(node.index)
    for child in node.children():
        _walk_schema(child, refs, visited)


def _walk_schema_root(sref: Optional[SchemaRef], refs: set[str]) -> None:
    _walk_schema(sref, refs, set())


def _walk_content(content: dict[str, MediaType], refs: set[str]) -> None:
    for media in content.values():
        _walk_schema_root(media.schema, refs)
        for example in media.examples.values():
            _visit(example, refs)


def _walk_parameter(cell: ComponentRef, refs: set[str]) -> None:
    if not _visit(cell, refs):
        return
    param: Parameter = cell.value
    _walk_schema_root(param.schema, refs)
    for example in param.examples.values():
        _visit(example, refs)
    _walk_content(param.content, refs)


def _walk_header(cell: ComponentRef, refs: set[str]) -> None:
    if not _visit(cell, refs):
        return
    header: Header = cell.value
    _walk_schema_root(header.schema, refs)
    _walk_content(header.content, refs)


def _walk_request_body(cell: Optional[ComponentRef], refs: set[str]) -> None:
    if cell is None or not _visit(cell, refs):
        return
    body: RequestBody = cell.value
    _walk_content(body.content, refs)


def _walk_response(cell: ComponentRef, refs: set[str]) -> None:
    if not _visit(cell, refs):
        return
    response: Response = cell.value
    for header in response.headers.values():
        _walk_header(header, refs)
    _walk_content(response.content, refs)
    for link in response.links.values():
        _visit(link, refs)


def _walk_callback(cell: ComponentRef, refs: set[str]) -> None:
    if not _visit(cell, refs):
        return
    callback: Callback = cell.value
    for item in callback.paths.values():
        _walk_path_item(item, refs)


def _walk_operation(op: Operation, refs: set[str]) -> None:
    for param in op.parameters:
        _walk_parameter(param, refs)
    _walk_request_body(op.request_body, refs)
    for response in op.responses.values():
        _walk_response(response, refs)
    for callback in op.callbacks.values():
        _walk_callback(callback, refs)


def _walk_path_item(item: PathItem, refs: set[str]) -> None:
    for param in item.parameters:
        _walk_parameter(param, refs)
    for op in item.operations.values():
        _walk_operation(op, refs)


def find_component_refs(document: Document) -> set[str]:
    refs: set[str] = set()
    for item in document.paths.values():
        _walk_path_item(item, refs)
    for item in document.webhooks.values():
        _walk_path_item(item, refs)

    components = document.components
    for sref in components.schemas.values():
        _walk_schema_root(sref, refs)
    for cell in components.parameters.values():
        _walk_parameter(cell, refs)
    for cell in components.headers.values():
        _walk_header(cell, refs)
    for cell in components.request_bodies.values():
        _walk_request_body(cell, refs)
    for cell in components.responses.values():
        _walk_response(cell, refs)
    for section in ("securitySchemes", "examples", "links"):
        for cell in components.section(section).values():
            _visit(cell, refs)
    for cell in components.callbacks.values():
        _walk_callback(cell, refs)
    for cell in components.path_items.values():
        if _visit(cell, refs):
            _walk_path_item(cell.value, refs)
    return refs


def _remove_orphaned_components(document: Document, refs: set[str]) -> int:
    removed = 0
    for section in _PRUNABLE_SECTIONS:
        entries = document.components.section(section)
        for name in [n for n in entries if component_ref(section, n) not in refs]:
            logger.debug("pruning unused component %s/%s", section, name)
            del entries[name]
            removed += 1
    return removed


def prune_unused_components(document: Document) -> int:
    """Prune in place until nothing more can be removed; returns the total removed."""
    total = 0
    while True:
        removed = _remove_orphaned_components(document, find_component_refs(document))
        logger.debug("prune pass removed %d component(s)", removed)
        if removed < 1:
            return total
        total += removed
