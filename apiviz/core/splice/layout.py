"""Page naming strategy shared by the graph builder and the splicer.

The host page generator decides where pages live. Rather than reaching
into host state, callers hand a PageLayout to both the builder (for node
hyperlinks) and the splicer (for locating pages). Subclass it for hosts
with a different naming scheme.
"""

import posixpath
from typing import Optional

from ..constants import OVERVIEW_PAGE, PACKAGE_SUMMARY_PAGE, PAGE_EXTENSION


class PageLayout:
    """Javadoc-style layout: one directory per package segment.

    Page ids are '/'-separated paths without extension, relative to the
    output directory: ``com/acme/Widget``, ``com/acme/package-summary``,
    ``overview-summary``.
    """

    extension = PAGE_EXTENSION
    margin_pages = (PACKAGE_SUMMARY_PAGE, OVERVIEW_PAGE)

    def type_page(self, package: Optional[str], name: str) -> str:
        if not package:
            return name
        return f"{package.replace('.', '/')}/{name}"

    def package_page(self, package: str) -> str:
        return f"{package.replace('.', '/')}/{PACKAGE_SUMMARY_PAGE}"

    def overview_page(self) -> str:
        return OVERVIEW_PAGE

    def needs_bottom_margin(self, page_id: str) -> bool:
        """Summary pages get one extra spacing element below the diagram."""
        return any(name in page_id for name in self.margin_pages)

    def href(self, from_page: str, to_page: str) -> str:
        """Relative link from one page to another."""
        start = posixpath.dirname(from_page) or "."
        return posixpath.relpath(to_page + self.extension, start)
