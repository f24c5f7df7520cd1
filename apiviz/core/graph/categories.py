"""Category color table.

Categories are declared as ``<name>[:<fillcolor>[:<linecolor>]]`` and
looked up for every node through style_for(), which never fails: unknown
or missing tags resolve to the neutral default style.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional, Tuple

from ..constants import CATEGORY_PALETTE, DEFAULT_FILL_COLOR, DEFAULT_LINE_COLOR

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Category:
    name: str
    fill_color: str
    line_color: str


DEFAULT_CATEGORY = Category(name="", fill_color=DEFAULT_FILL_COLOR, line_color=DEFAULT_LINE_COLOR)


def parse_category_option(option: str) -> Tuple[str, Optional[str], Optional[str]]:
    """Split a category option into (name, fill color, line color).

    Raises:
        ValueError: If the name is empty or there are too many fields.
    """
    parts = [p.strip() for p in option.split(":")]
    if not parts[0]:
        raise ValueError(f"category '{option}' has no name")
    if len(parts) > 3:
        raise ValueError(
            f"category '{option}' must be <name>[:<fillcolor>[:<linecolor>]]"
        )

    fill = parts[1] if len(parts) > 1 and parts[1] else None
    line = parts[2] if len(parts) > 2 and parts[2] else None
    return parts[0], fill, line


class CategoryTable:
    """Tag name -> colors. The first registration of a name wins."""

    def __init__(self):
        self._categories: Dict[str, Category] = {}

    @classmethod
    def from_options(cls, options: Iterable[str]) -> "CategoryTable":
        table = cls()
        for option in options:
            name, fill, line = parse_category_option(option)
            table.register(name, fill, line)
        return table

    def register(
        self,
        name: str,
        fill_color: Optional[str] = None,
        line_color: Optional[str] = None,
    ) -> Category:
        existing = self._categories.get(name)
        if existing is not None:
            logger.warning(
                "Category '%s' declared more than once; keeping %s/%s",
                name, existing.fill_color, existing.line_color,
            )
            return existing

        if fill_color is None:
            fill_color, palette_line = CATEGORY_PALETTE[
                len(self._categories) % len(CATEGORY_PALETTE)
            ]
            line_color = line_color or palette_line

        category = Category(
            name=name,
            fill_color=fill_color,
            line_color=line_color or DEFAULT_LINE_COLOR,
        )
        self._categories[name] = category
        return category

    def style_for(self, tag: Optional[str]) -> Category:
        if not tag:
            return DEFAULT_CATEGORY
        return self._categories.get(tag, DEFAULT_CATEGORY)

    def __contains__(self, name: object) -> bool:
        return name in self._categories

    def __iter__(self) -> Iterator[Category]:
        return iter(self._categories.values())

    def __len__(self) -> int:
        return len(self._categories)
