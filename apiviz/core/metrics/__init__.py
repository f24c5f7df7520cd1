# Package coupling metrics from an external analysis engine (JDepend).

from .adapter import DependencyMetricsAdapter
from .jdepend import CouplingEngine, JDependEngine, JDependReportEngine, parse_jdepend_xml
from .models import CouplingMetrics, PackageAnalysis

__all__ = [
    "DependencyMetricsAdapter",
    "CouplingEngine",
    "JDependEngine",
    "JDependReportEngine",
    "parse_jdepend_xml",
    "CouplingMetrics",
    "PackageAnalysis",
]
