"""Sequential build, render and splice for every diagram of a run.

Order: one class diagram per documented type, then one summary diagram
per package, then the overview (unless disabled). Each diagram completes
before the next one starts.

Failure policy:
  - Graphviz missing: probed once up front; no diagram is generated and
    the run still succeeds.
  - Page missing under expected and legacy names: that page is skipped.
  - Coupling metrics unavailable: the overview is drawn without them.
  - Render failure or unknown page template: the run is aborted.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .config import ApivizSettings
from .errors import LegacyPageNotFoundWarning
from .graph.builder import RelationshipGraphBuilder
from .graph.categories import CategoryTable
from .graph.models import Graph
from .metrics.adapter import DependencyMetricsAdapter
from .metrics.jdepend import CouplingEngine, JDependEngine, JDependReportEngine
from .metrics.models import CouplingMetrics
from .model.adapter import DocumentationModelAdapter
from .model.models import DocumentationModel
from .render.dot import serialize
from .render.graphviz import GraphvizRenderer
from .splice.layout import PageLayout
from .splice.splicer import OutputSplicer

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    """What one pipeline run did."""
    renderer_available: bool = True
    generated: List[str] = field(default_factory=list)  # page ids instrumented
    skipped: List[LegacyPageNotFoundWarning] = field(default_factory=list)
    metrics: Optional[CouplingMetrics] = None

    @property
    def diagram_count(self) -> int:
        return len(self.generated)


class DiagramPipeline:
    """Generates and splices all diagrams for one documentation set.

    Collaborators are injected; use from_settings() for the standard
    wiring.
    """

    def __init__(
        self,
        adapter: DocumentationModelAdapter,
        builder: RelationshipGraphBuilder,
        categories: CategoryTable,
        renderer: GraphvizRenderer,
        splicer: OutputSplicer,
        metrics: Optional[DependencyMetricsAdapter] = None,
        generate_overview: bool = True,
    ):
        self._adapter = adapter
        self._builder = builder
        self._categories = categories
        self._renderer = renderer
        self._splicer = splicer
        self._metrics = metrics
        self._generate_overview = generate_overview

    @classmethod
    def from_settings(
        cls,
        model: DocumentationModel,
        settings: ApivizSettings,
        renderer: Optional[GraphvizRenderer] = None,
        engine: Optional[CouplingEngine] = None,
        layout: Optional[PageLayout] = None,
    ) -> "DiagramPipeline":
        layout = layout or PageLayout()
        adapter = DocumentationModelAdapter(model, settings.exclude_packages)
        categories = CategoryTable.from_options(settings.categories)

        if engine is None:
            if settings.metrics_report is not None:
                engine = JDependReportEngine(settings.metrics_report)
            else:
                engine = JDependEngine(settings.jdepend_jar)

        return cls(
            adapter=adapter,
            builder=RelationshipGraphBuilder(
                adapter, categories, layout, settings.reference_convention
            ),
            categories=categories,
            renderer=renderer or GraphvizRenderer(
                graphviz_home=settings.graphviz_home,
                timeout=settings.renderer_timeout,
                emit_dot=settings.emit_dot,
            ),
            splicer=OutputSplicer(
                Path(settings.output_dir),
                layout=layout,
                legacy_page_lookup=settings.legacy_page_lookup,
            ),
            metrics=DependencyMetricsAdapter(adapter, engine, settings.class_path),
            generate_overview=not settings.no_package_diagram,
        )

    def run(self) -> RunReport:
        """Generate every diagram.

        Raises:
            RendererExecutionError: A diagram failed to render.
            SpliceAnchorNotFoundError: A page matched no anchor strategy.
        """
        report = RunReport()

        if not self._renderer.is_available():
            logger.warning(
                "Graphviz is not found. Install Graphviz and put `dot` on PATH "
                "or set graphviz_home."
            )
            logger.warning("Skipping diagram generation.")
            report.renderer_available = False
            return report

        layout = self._splicer.layout

        for t in self._adapter.types():
            self._instrument(
                report,
                layout.type_page(t.package, t.name),
                self._builder.class_diagram(t.qualified_name),
            )

        for package in self._adapter.packages():
            self._instrument(
                report,
                layout.package_page(package),
                self._builder.package_diagram(package),
            )

        if self._generate_overview:
            report.metrics = self._analyze_metrics()
            self._instrument(
                report,
                layout.overview_page(),
                self._builder.overview_diagram(report.metrics.for_overview()),
            )

        logger.info(
            "Diagram generation complete: %d generated, %d skipped",
            len(report.generated), len(report.skipped),
        )
        return report

    def _analyze_metrics(self) -> CouplingMetrics:
        if self._metrics is None:
            return CouplingMetrics.unavailable("no coupling analysis configured")
        return self._metrics.analyze()

    def _instrument(self, report: RunReport, page_id: str, graph: Graph) -> None:
        try:
            target = self._splicer.resolve(page_id)
        except LegacyPageNotFoundWarning as w:
            logger.warning("%s", w)
            report.skipped.append(w)
            return

        source = serialize(graph, self._categories)
        logger.info("Generating %s...", target.image_path)
        rendered = self._renderer.render(source, target.image_path, target.map_path, page_id)
        self._splicer.splice(target, rendered, page_id)
        report.generated.append(target.page_id)
