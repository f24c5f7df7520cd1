"""Coupling analysis data contracts."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from ..graph.models import PackageMetrics


@dataclass
class PackageAnalysis:
    """What the coupling engine reported for one package."""
    name: str
    classes: Set[str] = field(default_factory=set)  # binary names, "a.b.Outer$Inner"
    depends_upon: List[str] = field(default_factory=list)
    used_by: List[str] = field(default_factory=list)


@dataclass
class CouplingMetrics:
    """Result of one metrics pass: either complete or unavailable."""
    available: bool
    packages: Dict[str, PackageMetrics] = field(default_factory=dict)
    reason: Optional[str] = None

    @classmethod
    def unavailable(cls, reason: str) -> "CouplingMetrics":
        return cls(available=False, reason=reason)

    def for_overview(self) -> Optional[Dict[str, PackageMetrics]]:
        """Per-package counts to label the overview with, or None."""
        return self.packages if self.available else None
