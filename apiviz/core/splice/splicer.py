"""Merge rendered diagrams into host-generated pages.

The splicer never interprets the page beyond the anchor strategies: it
finds one insertion offset, inserts the image map and image reference
there, and leaves every other byte untouched. A page that matches no
strategy is a template mismatch and fails the run.
"""

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from ..constants import IMAGE_EXTENSION, MAP_EXTENSION, MAP_NAME
from ..errors import LegacyPageNotFoundWarning, SpliceAnchorNotFoundError
from ..render.graphviz import RenderedDiagram
from .anchors import DEFAULT_ANCHORS, AnchorStrategy, find_anchor, strategy_names
from .layout import PageLayout

logger = logging.getLogger(__name__)

NEWLINE = "\n"
SPACER = "<BR>"

# Pages are decoded losslessly so untouched bytes are written back as-is.
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


@dataclass(frozen=True)
class PageTarget:
    """Where one diagram goes: the host page and its sibling artifacts."""

    page_id: str  # the id actually found, possibly a legacy name
    page_path: Path
    image_path: Path
    map_path: Path


def build_payload(map_content: str, image_name: str, extra_margin: bool) -> str:
    """Markup inserted at the anchor: image map, centered image, spacing."""
    return (
        map_content + NEWLINE
        + f'<CENTER><IMG SRC="{image_name}" USEMAP="#{MAP_NAME}" BORDER="0"></CENTER>'
        + NEWLINE
        + (SPACER if extra_margin else "")
        + NEWLINE
    )


def splice_text(
    content: str,
    payload: str,
    page: str,
    strategies: Sequence[AnchorStrategy] = DEFAULT_ANCHORS,
) -> str:
    """Insert payload at the first matching anchor.

    Raises:
        SpliceAnchorNotFoundError: If no strategy matches.
    """
    found = find_anchor(content, strategies)
    if found is None:
        raise SpliceAnchorNotFoundError(page, strategy_names(strategies))
    strategy, offset = found
    logger.debug("Anchor '%s' matched %s at offset %d", strategy.name, page, offset)
    return content[:offset] + payload + content[offset:]


class OutputSplicer:
    """Locates host pages and splices rendered diagrams into them.

    Args:
        output_dir: Root of the generated documentation.
        layout: Page naming strategy (shared with the graph builder).
        anchors: Ordered anchor strategies.
        legacy_page_lookup: Retry missing pages under the old dotted
            single-file naming (``a/b/c`` -> ``a/b.c`` -> ``a.b.c``).
    """

    def __init__(
        self,
        output_dir: Path,
        layout: Optional[PageLayout] = None,
        anchors: Sequence[AnchorStrategy] = DEFAULT_ANCHORS,
        legacy_page_lookup: bool = True,
    ):
        self._output_dir = Path(output_dir)
        self._layout = layout or PageLayout()
        self._anchors = tuple(anchors)
        self._legacy_page_lookup = legacy_page_lookup

    @property
    def layout(self) -> PageLayout:
        return self._layout

    def resolve(self, page_id: str) -> PageTarget:
        """Find the page for a logical page id.

        Raises:
            LegacyPageNotFoundWarning: If neither the expected page nor any
                legacy candidate exists. Callers skip the page.
        """
        candidates = [page_id]
        if self._legacy_page_lookup:
            candidates.extend(self._legacy_candidates(page_id))

        for candidate in candidates:
            page_path = self._output_dir / (candidate + self._layout.extension)
            if page_path.is_file():
                if candidate != page_id:
                    logger.info("Using legacy page name %s for %s", candidate, page_id)
                return PageTarget(
                    page_id=candidate,
                    page_path=page_path,
                    image_path=self._output_dir / (candidate + IMAGE_EXTENSION),
                    map_path=self._output_dir / (candidate + MAP_EXTENSION),
                )

        raise LegacyPageNotFoundWarning(
            page_id, [c + self._layout.extension for c in candidates]
        )

    @staticmethod
    def _legacy_candidates(page_id: str) -> List[str]:
        """Collapse separators into dots, rightmost first."""
        candidates = []
        current = page_id
        while True:
            idx = current.rfind("/")
            if idx <= 0:
                return candidates
            current = current[:idx] + "." + current[idx + 1:]
            candidates.append(current)

    def splice(self, target: PageTarget, rendered: RenderedDiagram, logical_page_id: str) -> None:
        """Insert the rendered diagram into the target page.

        The map file is deleted on every exit path, including failures;
        the image stays next to the page.

        Raises:
            SpliceAnchorNotFoundError: If the page matches no anchor.
        """
        try:
            content = _read_text(target.page_path)
            map_content = _read_text(rendered.map_path)
            payload = build_payload(
                map_content,
                rendered.image_path.name,
                self._layout.needs_bottom_margin(logical_page_id),
            )
            new_content = splice_text(content, payload, str(target.page_path), self._anchors)
            _write_text_atomic(target.page_path, new_content)
        finally:
            try:
                rendered.map_path.unlink()
            except FileNotFoundError:
                pass


def _read_text(path: Path) -> str:
    with open(path, "r", encoding=_ENCODING, errors=_ERRORS, newline="") as f:
        return f.read()


def _write_text_atomic(path: Path, content: str) -> None:
    """Write through a temporary sibling file so a failed write leaves the page intact.

    The page keeps its permission bits; mkstemp alone would leave it 0600.
    """
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding=_ENCODING, errors=_ERRORS, newline="") as f:
            f.write(content)
        shutil.copymode(path, tmp_name)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise
