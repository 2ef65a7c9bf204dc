"""
Operation selection by tag and operation id.

Exclude sets are applied before include sets; both only touch `paths`.
"""

import logging
from typing import Callable

from oapi_typegen.config import Configuration
from oapi_typegen.document import Document, Operation

logger = logging.getLogger(__name__)


def _has_tag(op: Operation, tags: set[str]) -> bool:
    return any(tag in tags for tag in op.tags)


def _has_operation_id(op: Operation, operation_ids: set[str]) -> bool:
    return op.operation_id in operation_ids


def _remove_operations(document: Document, matches: Callable[[Operation], bool], *, exclude: bool) -> int:
    """Drop every operation for which matches(op) == exclude."""
    removed = 0
    for path, item in document.paths.items():
        for method in [m for m, op in item.operations.items() if matches(op) == exclude]:
            logger.debug("filtered out %s %s", method.upper(), path)
            item.set_operation(method, None)
            removed += 1
    return removed


def filter_operations(document: Document, config: Configuration) -> int:
    """Apply the tag and operation-id filters in place; returns the number of operations removed."""
    opts = config.output_options
    removed = 0
    if opts.exclude_tags:
        tags = set(opts.exclude_tags)
        removed += _remove_operations(document, lambda op: _has_tag(op, tags), exclude=True)
    if opts.include_tags:
        tags = set(opts.include_tags)
        removed += _remove_operations(document, lambda op: _has_tag(op, tags), exclude=False)
    if opts.exclude_operation_ids:
        ids = set(opts.exclude_operation_ids)
        removed += _remove_operations(document, lambda op: _has_operation_id(op, ids), exclude=True)
    if opts.include_operation_ids:
        ids = set(opts.include_operation_ids)
        removed += _remove_operations(document, lambda op: _has_operation_id(op, ids), exclude=False)
    return removed
