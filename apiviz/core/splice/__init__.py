# Locating host pages and merging rendered diagrams into them.

from .anchors import (
    BORDERED_SUMMARY_TABLE,
    CONTENT_CONTAINER,
    DEFAULT_ANCHORS,
    PRE_BLOCK_BEFORE_PARAGRAPH,
    AnchorStrategy,
    find_anchor,
)
from .layout import PageLayout
from .splicer import OutputSplicer, PageTarget, build_payload, splice_text

__all__ = [
    "BORDERED_SUMMARY_TABLE",
    "CONTENT_CONTAINER",
    "DEFAULT_ANCHORS",
    "PRE_BLOCK_BEFORE_PARAGRAPH",
    "AnchorStrategy",
    "find_anchor",
    "PageLayout",
    "OutputSplicer",
    "PageTarget",
    "build_payload",
    "splice_text",
]
