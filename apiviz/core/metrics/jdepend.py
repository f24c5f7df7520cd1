"""JDepend bridge for package coupling analysis.

Runs the JDepend XML UI over compiled class directories and parses its
report:

    java -cp jdepend.jar jdepend.xmlui.JDepend -file <report.xml> <dir>...

A pre-generated report can be used instead. Engines are designed to fail
gracefully: if Java, the jar or the report is unavailable, analyze()
returns None and the caller degrades to no metrics.

Jar location resolution order:
  1. jdepend_jar setting (explicit)
  2. JDEPEND_JAR_PATH env var
"""

import logging
import os
import shutil
import subprocess
import tempfile
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .models import PackageAnalysis

logger = logging.getLogger(__name__)

_JDEPEND_MAIN = "jdepend.xmlui.JDepend"


def _texts(element: Optional[ET.Element], child_name: str) -> List[str]:
    """Stripped text of every direct child with the given name."""
    if element is None:
        return []
    return [c.text.strip() for c in element.findall(child_name) if c.text and c.text.strip()]


def parse_jdepend_xml(text: str) -> Dict[str, PackageAnalysis]:
    """Parse a JDepend XML report into per-package analyses.

    Raises:
        ET.ParseError: If the report is not well-formed XML.
    """
    root = ET.fromstring(text)
    packages_el = root.find("Packages")
    if packages_el is None:
        return {}

    result: Dict[str, PackageAnalysis] = {}
    for pkg_el in packages_el.findall("Package"):
        name = pkg_el.get("name", "").strip()
        if not name:
            continue

        # Referenced-but-not-analyzed packages only carry an <error> element
        if pkg_el.find("error") is not None:
            continue

        classes = set(_texts(pkg_el.find("AbstractClasses"), "Class"))
        classes.update(_texts(pkg_el.find("ConcreteClasses"), "Class"))

        result[name] = PackageAnalysis(
            name=name,
            classes=classes,
            depends_upon=_texts(pkg_el.find("DependsUpon"), "Package"),
            used_by=_texts(pkg_el.find("UsedBy"), "Package"),
        )
    return result


class CouplingEngine(ABC):
    """External coupling analysis engine."""

    @abstractmethod
    def is_available(self) -> bool:
        ...

    @abstractmethod
    def analyze(self, directories: Sequence[Path]) -> Optional[Dict[str, PackageAnalysis]]:
        """Analyze compiled classes; None on any failure."""
        ...

    def _parse_report(self, text: str, origin: str) -> Optional[Dict[str, PackageAnalysis]]:
        try:
            return parse_jdepend_xml(text)
        except ET.ParseError as e:
            logger.warning("Invalid JDepend report from %s: %s", origin, e)
            return None


class JDependReportEngine(CouplingEngine):
    """Reads an existing JDepend XML report instead of running JDepend."""

    def __init__(self, report_path: Path):
        self._report_path = Path(report_path)

    def is_available(self) -> bool:
        return self._report_path.is_file()

    def analyze(self, directories: Sequence[Path]) -> Optional[Dict[str, PackageAnalysis]]:
        try:
            with open(self._report_path, "r", encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            logger.warning("Cannot read JDepend report %s: %s", self._report_path, e)
            return None
        return self._parse_report(text, str(self._report_path))


class JDependEngine(CouplingEngine):
    """Runs JDepend as a subprocess."""

    def __init__(self, jar_path: Optional[Path] = None, timeout: int = 120):
        self._jar_path = jar_path
        self._timeout = timeout
        self._availability_checked = False
        self._is_available_cache = False
        self._resolved_jar: Optional[Path] = None

    def _resolve_jar(self) -> Optional[Path]:
        candidate = self._jar_path
        if candidate is None:
            env_path = os.environ.get("JDEPEND_JAR_PATH")
            candidate = Path(env_path) if env_path else None
        return candidate if candidate is not None and candidate.is_file() else None

    def is_available(self) -> bool:
        if self._availability_checked:
            return self._is_available_cache

        self._availability_checked = True
        self._resolved_jar = self._resolve_jar()
        if self._resolved_jar is None:
            logger.info(
                "JDepend unavailable: set jdepend_jar or JDEPEND_JAR_PATH "
                "to enable package coupling metrics"
            )
            return False

        if shutil.which("java") is None:
            logger.info("JDepend unavailable: Java not in PATH")
            return False

        self._is_available_cache = True
        return True

    def analyze(self, directories: Sequence[Path]) -> Optional[Dict[str, PackageAnalysis]]:
        if not self.is_available():
            return None

        fd, report_name = tempfile.mkstemp(prefix="jdepend-", suffix=".xml")
        os.close(fd)
        report_path = Path(report_name)
        cmd = [
            "java", "-cp", str(self._resolved_jar), _JDEPEND_MAIN,
            "-file", str(report_path),
            *[str(d) for d in directories],
        ]

        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
            if proc.returncode != 0:
                logger.warning(
                    "JDepend failed (exit %d): %s",
                    proc.returncode, (proc.stderr or "")[:300],
                )
                return None

            with open(report_path, "r", encoding="utf-8") as f:
                text = f.read()
            return self._parse_report(text, "JDepend")

        except subprocess.TimeoutExpired:
            logger.warning("JDepend timed out after %ds", self._timeout)
            return None
        except OSError as e:
            logger.warning("JDepend execution failed: %s", e)
            return None
        finally:
            try:
                report_path.unlink()
            except FileNotFoundError:
                pass
