"""Package coupling metrics for the overview diagram.

Wraps a CouplingEngine and cross-checks its result against the
documentation model. The metrics are all-or-nothing: if any visible
documented type is missing from the analyzed classes, the whole pass is
reported unavailable rather than partially populated.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Sequence, Set

from ..constants import OPTION_SOURCE_CLASS_PATH
from ..errors import ModelInconsistencyError
from ..graph.models import PackageMetrics
from .jdepend import CouplingEngine
from .models import CouplingMetrics, PackageAnalysis

if TYPE_CHECKING:
    from ..model.adapter import DocumentationModelAdapter

logger = logging.getLogger(__name__)


class DependencyMetricsAdapter:
    """Computes afferent/efferent counts per visible package.

    Args:
        model: Documentation model view (package list and visibility).
        engine: Coupling analysis engine.
        class_path: Class search path; directories are analyzed, other
            entries (jars, missing paths) are skipped.
    """

    def __init__(
        self,
        model: "DocumentationModelAdapter",
        engine: CouplingEngine,
        class_path: Sequence[Path] = (),
    ):
        self._model = model
        self._engine = engine
        self._class_path = list(class_path)

    def analysis_directories(self) -> List[Path]:
        directories = []
        for entry in self._class_path:
            if entry.is_dir():
                logger.info("Included into dependency analysis: %s", entry)
                directories.append(entry)
            else:
                logger.info("Excluded from dependency analysis: %s", entry)
        return directories

    def analyze(self) -> CouplingMetrics:
        """Run the engine and cross-check; never raises."""
        if not self._engine.is_available():
            return self._unavailable("coupling analysis engine is not available")

        report = self._engine.analyze(self.analysis_directories())
        if report is None:
            return self._unavailable("coupling analysis failed")

        if not any(a.classes for a in report.values()):
            return self._unavailable("no compiled class files were found")

        accepted = self._accepted_packages()
        try:
            self._cross_check(report)
        except ModelInconsistencyError as e:
            logger.warning("%s", e)
            logger.warning(
                "Please make sure that the '%s' option was specified correctly.",
                OPTION_SOURCE_CLASS_PATH,
            )
            return self._unavailable(str(e))

        packages: Dict[str, PackageMetrics] = {}
        for name in sorted(accepted):
            analysis = report.get(name)
            if analysis is None:
                continue
            packages[name] = PackageMetrics(
                afferent=len({p for p in analysis.used_by if p in accepted and p != name}),
                efferent=len({p for p in analysis.depends_upon if p in accepted and p != name}),
            )

        logger.info("Coupling metrics computed for %d packages", len(packages))
        return CouplingMetrics(available=True, packages=packages)

    def _accepted_packages(self) -> Set[str]:
        """Packages the analysis counts: documented and not hidden."""
        return {p for p in self._model.packages() if not self._model.is_hidden(p)}

    def _cross_check(self, report: Dict[str, PackageAnalysis]) -> None:
        """Every visible documented type must be among the analyzed classes.

        Raises:
            ModelInconsistencyError: On the first missing type.
        """
        for t in self._model.types():
            if not t.package or self._model.is_hidden(t.package):
                continue
            analysis = report.get(t.package)
            if analysis is None or t.binary_name not in analysis.classes:
                raise ModelInconsistencyError(t.binary_name)

    @staticmethod
    def _unavailable(reason: str) -> CouplingMetrics:
        logger.warning(
            "Package coupling metrics unavailable (%s); "
            "the overview diagram will be generated without them",
            reason,
        )
        return CouplingMetrics.unavailable(reason)
