"""DOT text -> PNG + client-side image map via the Graphviz `dot` executable.

One blocking subprocess call per diagram produces both artifacts:

    dot -Tpng -o <image> -Tcmapx -o <map>     (DOT source on stdin)

Executable resolution order:
  1. graphviz_home/bin/dot (explicit configuration)
  2. GRAPHVIZ_DOT env var
  3. `dot` on PATH

Availability is probed once per renderer; callers decide what to do when
it is missing (the pipeline skips every diagram for the run).
"""

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..constants import DOT_EXTENSION
from ..errors import RendererExecutionError, RendererTimeoutError, RendererUnavailableError

logger = logging.getLogger(__name__)

_PROBE_TIMEOUT = 10


@dataclass(frozen=True)
class RenderedDiagram:
    """Both artifacts of one successful render."""

    image_path: Path
    map_path: Path


def _resolve_dot(graphviz_home: Optional[Path]) -> Optional[str]:
    """Return the dot executable path if one can be found, else None."""
    if graphviz_home is not None:
        for name in ("dot", "dot.exe"):
            candidate = Path(graphviz_home) / "bin" / name
            if candidate.is_file():
                return str(candidate)
        logger.info("No dot executable under graphviz_home %s", graphviz_home)

    env_path = os.environ.get("GRAPHVIZ_DOT")
    if env_path:
        return env_path if Path(env_path).is_file() else None

    return shutil.which("dot")


class GraphvizRenderer:
    """Runs Graphviz for one diagram at a time.

    Args:
        graphviz_home: Graphviz installation directory, optional.
        timeout: Seconds to wait for one render before killing dot.
        emit_dot: Also write the DOT source next to the image.
    """

    def __init__(
        self,
        graphviz_home: Optional[Path] = None,
        timeout: float = 60.0,
        emit_dot: bool = False,
    ):
        self._graphviz_home = graphviz_home
        self._timeout = timeout
        self._emit_dot = emit_dot
        self._checked = False
        self._dot: Optional[str] = None

    def is_available(self) -> bool:
        """Check once whether dot can be executed."""
        if self._checked:
            return self._dot is not None

        self._checked = True
        dot = _resolve_dot(self._graphviz_home)
        if dot is None:
            logger.warning("Graphviz (dot) not found")
            return False

        try:
            proc = subprocess.run(
                [dot, "-V"],
                capture_output=True,
                timeout=_PROBE_TIMEOUT,
            )
        except subprocess.TimeoutExpired:
            logger.warning("Graphviz probe timed out after %ds: %s", _PROBE_TIMEOUT, dot)
            return False
        except OSError as e:
            logger.warning("Graphviz probe failed: %s", e)
            return False

        if proc.returncode != 0:
            logger.warning("Graphviz probe exited with %d: %s", proc.returncode, dot)
            return False

        # dot -V reports its version on stderr
        version = (proc.stderr or proc.stdout or b"").decode("utf-8", errors="replace").strip()
        logger.info("Graphviz available at %s (%s)", dot, version or "unknown version")
        self._dot = dot
        return True

    def require(self) -> None:
        """Raise RendererUnavailableError unless dot can be executed."""
        if not self.is_available():
            raise RendererUnavailableError(
                "Graphviz is not found. Install Graphviz, put `dot` on PATH, "
                "or set graphviz_home / GRAPHVIZ_DOT."
            )

    def render(self, source: str, image_path: Path, map_path: Path, diagram_id: str) -> RenderedDiagram:
        """Render DOT source into an image and an image map.

        Returns both artifacts or raises; on failure any partial output is
        removed.

        Raises:
            RendererUnavailableError: If dot is not available.
            RendererTimeoutError: If dot exceeds the timeout.
            RendererExecutionError: If dot fails or an artifact is missing.
        """
        self.require()
        assert self._dot is not None

        image_path.parent.mkdir(parents=True, exist_ok=True)
        if self._emit_dot:
            image_path.with_suffix(DOT_EXTENSION).write_text(source, encoding="utf-8")

        cmd = [
            self._dot,
            "-Tpng", "-o", str(image_path),
            "-Tcmapx", "-o", str(map_path),
        ]

        try:
            proc = subprocess.run(
                cmd,
                input=source.encode("utf-8"),
                capture_output=True,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as e:
            _remove([image_path, map_path])
            raise RendererTimeoutError(diagram_id, self._timeout) from e
        except OSError as e:
            _remove([image_path, map_path])
            raise RendererExecutionError(diagram_id, str(e)) from e

        if proc.returncode != 0:
            _remove([image_path, map_path])
            stderr = proc.stderr.decode("utf-8", errors="replace").strip()
            raise RendererExecutionError(
                diagram_id,
                f"dot exited with {proc.returncode}: {stderr[:300] if stderr else '(no output)'}",
            )

        missing = [p for p in (image_path, map_path) if not p.is_file()]
        if missing:
            _remove([image_path, map_path])
            raise RendererExecutionError(
                diagram_id,
                "missing output: " + ", ".join(str(p) for p in missing),
            )

        logger.debug("Rendered %s (%d bytes DOT)", image_path, len(source))
        return RenderedDiagram(image_path=image_path, map_path=map_path)


def _remove(paths: List[Path]) -> None:
    for path in paths:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
