"""Error taxonomy for diagram generation.

Fatal errors (configuration, splice anchor, renderer execution) propagate
to the invoker. Degrade-and-warn conditions (metrics cross-check, renderer
unavailable, missing legacy page) are caught by the pipeline and turned
into warnings plus a RunReport entry.
"""

from typing import List, Sequence


class ApivizError(Exception):
    """Base class for all diagram generation errors."""


class ConfigurationError(ApivizError):
    """A required option is missing or has an invalid value."""

    def __init__(self, option: str, message: str):
        self.option = option
        super().__init__(f"{option}: {message}")


class DiagramTargetNotFoundError(ApivizError, KeyError):
    """An explicitly requested root type is not part of the model."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Type not found in documentation model: {name}")

    def __str__(self) -> str:
        return self.args[0]


class ModelInconsistencyError(ApivizError):
    """A visible documented type is missing from the analyzed classes."""

    def __init__(self, missing_type: str):
        self.missing_type = missing_type
        super().__init__(
            f"Dependency analysis could not locate compiled class: {missing_type}"
        )


class RendererUnavailableError(ApivizError):
    """The Graphviz executable could not be located or probed."""


class RendererExecutionError(ApivizError):
    """Graphviz ran but failed to produce both artifacts for one diagram."""

    def __init__(self, diagram_id: str, message: str):
        self.diagram_id = diagram_id
        super().__init__(f"Failed to render diagram '{diagram_id}': {message}")


class RendererTimeoutError(RendererExecutionError):
    """Graphviz did not finish within the configured timeout."""

    def __init__(self, diagram_id: str, timeout: float):
        self.timeout = timeout
        super().__init__(diagram_id, f"renderer timed out after {timeout:g}s")


class SpliceAnchorNotFoundError(ApivizError):
    """No anchor strategy matched the host page."""

    def __init__(self, page: str, strategies: Sequence[str]):
        self.page = page
        self.strategies: List[str] = list(strategies)
        super().__init__(
            f"Failed to find an insertion point in {page} "
            f"(tried: {', '.join(self.strategies)})"
        )


class LegacyPageNotFoundWarning(UserWarning):
    """A page is missing under both its expected and legacy names."""

    def __init__(self, page_id: str, candidates: Sequence[str]):
        self.page_id = page_id
        self.candidates: List[str] = list(candidates)
        super().__init__(
            f"Page not found for '{page_id}' (looked for: {', '.join(self.candidates)}); "
            "skipping diagram"
        )
