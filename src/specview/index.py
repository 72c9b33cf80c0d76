"""Group a document's operations by tag."""

from __future__ import annotations

import logging

from specview.models import DEFAULT_TAG, Document, IndexEntry, TagIndex

logger = logging.getLogger(__name__)


def build_tag_index(document: Document) -> TagIndex:
    """Build the :class:`~specview.models.TagIndex` of *document*.

    Paths and methods are visited in declaration order. Each operation is
    appended to the bucket of every tag it lists (``"default"`` when it lists
    none), so an operation with tags ``["A", "B"]`` shows up in both. Buckets
    are ordered by first appearance of their tag; a tag repeated within one
    operation is counted once.

    Tag descriptions come from the document's top-level ``tags`` list.
    """
    buckets: dict[str, list[IndexEntry]] = {}
    for path, methods in document.paths.items():
        for method, operation in methods.items():
            entry = IndexEntry(path=path, method=method, operation=operation)
            for tag in dict.fromkeys(operation.tags or [DEFAULT_TAG]):
                buckets.setdefault(tag, []).append(entry)

    descriptions = {
        tag.name: tag.description
        for tag in document.tags or []
        if tag.description
    }

    logger.debug(
        "Indexed %d operation(s) under %d tag(s)",
        document.operation_count(),
        len(buckets),
    )
    return TagIndex(buckets=buckets, descriptions=descriptions)
