"""Named insertion-point strategies for host pages.

Each strategy recognizes one known page template. They are tried in
order and the first strategy that matches decides the insertion offset.
Adding support for a new host template means adding one strategy.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Sequence, Tuple


@dataclass(frozen=True)
class AnchorStrategy:
    """A named pattern plus where to insert relative to its match."""

    name: str
    pattern: Pattern[str]
    insert_after: bool = False  # False: insert before the match

    def locate(self, content: str) -> Optional[int]:
        """Offset of the insertion point, or None if the page doesn't match."""
        match = self.pattern.search(content)
        if match is None:
            return None
        return match.end() if self.insert_after else match.start()


# After a closing preformatted block that is followed by a paragraph
PRE_BLOCK_BEFORE_PARAGRAPH = AnchorStrategy(
    name="pre-block-before-paragraph",
    pattern=re.compile(r"</PRE>(?=\s*<P>)"),
    insert_after=True,
)

# Before the first fixed-border summary table
BORDERED_SUMMARY_TABLE = AnchorStrategy(
    name="bordered-summary-table",
    pattern=re.compile(r'<TABLE BORDER="1"'),
)

# Before the generic content container of newer page templates
CONTENT_CONTAINER = AnchorStrategy(
    name="content-container",
    pattern=re.compile(r'<div class="contentContainer">'),
)

DEFAULT_ANCHORS: Tuple[AnchorStrategy, ...] = (
    PRE_BLOCK_BEFORE_PARAGRAPH,
    BORDERED_SUMMARY_TABLE,
    CONTENT_CONTAINER,
)


def find_anchor(
    content: str,
    strategies: Sequence[AnchorStrategy] = DEFAULT_ANCHORS,
) -> Optional[Tuple[AnchorStrategy, int]]:
    """Return the first matching strategy and its insertion offset."""
    for strategy in strategies:
        offset = strategy.locate(content)
        if offset is not None:
            return strategy, offset
    return None


def strategy_names(strategies: Sequence[AnchorStrategy]) -> List[str]:
    return [s.name for s in strategies]
