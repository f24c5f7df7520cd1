"""Run configuration for diagram generation.

Values arrive already parsed (YAML file and/or CLI flags) and are validated
here once, before any diagram is attempted. Validation failures surface as
ConfigurationError naming the offending option.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, ValidationInfo, field_validator

from .constants import (
    OPTION_CATEGORY,
    OPTION_CLASSPATH,
    OPTION_EMIT_DOT,
    OPTION_EXCLUDE_PACKAGES,
    OPTION_GRAPHVIZ_HOME,
    OPTION_JDEPEND_JAR,
    OPTION_LEGACY_PAGE_LOOKUP,
    OPTION_METRICS_REPORT,
    OPTION_NO_PACKAGE_DIAGRAM,
    OPTION_REFERENCE_CONVENTION,
    OPTION_RENDERER_TIMEOUT,
    OPTION_SOURCE_CLASS_PATH,
    TAG_CATEGORY,
    TAG_HIDDEN,
)
from .errors import ConfigurationError
from .graph.categories import parse_category_option
from .graph.models import ReferenceConvention

logger = logging.getLogger(__name__)


def _split_path_list(value: Any) -> Any:
    """Accept 'a:b:c' style path lists as well as YAML lists."""
    if isinstance(value, str):
        return [p for p in value.split(os.pathsep) if p]
    if isinstance(value, list):
        parts: List[str] = []
        for item in value:
            if isinstance(item, str):
                parts.extend(p for p in item.split(os.pathsep) if p)
            else:
                parts.append(item)
        return parts
    return value


def _check_readable(entries: List[Path]) -> None:
    for entry in entries:
        if not entry.exists() or not os.access(entry, os.R_OK):
            raise ValueError(f"{entry} doesn't exist or is not readable")


class ApivizSettings(BaseModel):
    """Validated options for one diagram generation run."""

    output_dir: Path = Field(Path("."), description="Directory holding the generated pages")
    categories: List[str] = Field(
        default_factory=list,
        description="Category colors as <name>[:<fillcolor>[:<linecolor>]]",
    )
    source_class_path: Optional[List[Path]] = Field(
        None, description="Where to find compiled classes for dependency analysis"
    )
    classpath: List[Path] = Field(
        default_factory=list, description="Additional class path entries for dependency analysis"
    )
    no_package_diagram: bool = Field(
        False, description="Do not generate the package diagram in the overview summary"
    )
    exclude_packages: List[str] = Field(
        default_factory=list, description="Regular expressions of packages hidden from diagrams"
    )
    reference_convention: ReferenceConvention = Field(
        ReferenceConvention.FIELD_ASSOCIATION,
        description="Edge kind for member type references",
    )
    graphviz_home: Optional[Path] = Field(None, description="Graphviz installation directory")
    renderer_timeout: float = Field(60.0, gt=0, description="Seconds to wait for one render")
    legacy_page_lookup: bool = Field(
        True, description="Retry missing pages under the old dotted page naming"
    )
    jdepend_jar: Optional[Path] = Field(None, description="Path to jdepend.jar")
    metrics_report: Optional[Path] = Field(
        None, description="Pre-generated JDepend XML report (skips running JDepend)"
    )
    emit_dot: bool = Field(False, description="Keep the DOT source next to each image")

    @field_validator("source_class_path", mode="before")
    @classmethod
    def _split_source_class_path(cls, value: Any) -> Any:
        return _split_path_list(value)

    @field_validator("classpath", mode="before")
    @classmethod
    def _split_classpath(cls, value: Any) -> Any:
        return _split_path_list(value)

    @field_validator("source_class_path")
    @classmethod
    def _check_source_class_path(cls, value: Optional[List[Path]]) -> Optional[List[Path]]:
        if value is None:
            return None
        if not value:
            raise ValueError("requires at least one valid class path")
        _check_readable(value)
        return value

    @field_validator("classpath")
    @classmethod
    def _check_classpath(cls, value: List[Path], info: ValidationInfo) -> List[Path]:
        # Only checked when dependency analysis is requested
        if info.data.get("source_class_path") is not None:
            _check_readable(value)
        return value

    @field_validator("categories")
    @classmethod
    def _check_categories(cls, value: List[str]) -> List[str]:
        for option in value:
            parse_category_option(option)
        return value

    @field_validator("exclude_packages")
    @classmethod
    def _check_exclude_patterns(cls, value: List[str]) -> List[str]:
        for pattern in value:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid pattern '{pattern}': {e}") from e
        return value

    @property
    def class_path(self) -> List[Path]:
        """source_class_path entries first, then classpath, without duplicates."""
        seen: Dict[Path, None] = {}
        for entry in (self.source_class_path or []) + self.classpath:
            seen.setdefault(entry, None)
        return list(seen)

    @classmethod
    def from_sources(
        cls,
        config_file: Optional[Path] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ApivizSettings":
        """Merge a YAML config file with explicit overrides and validate.

        Overrides whose value is None are ignored so unset CLI flags do not
        mask values from the file.
        """
        data: Dict[str, Any] = {}
        if config_file is not None:
            data.update(_load_yaml(config_file))
        for key, value in (overrides or {}).items():
            if value is not None:
                data[key] = value

        try:
            return cls(**data)
        except ValidationError as e:
            first = e.errors()[0]
            option = str(first["loc"][0]) if first.get("loc") else "config"
            message = first.get("msg", str(e))
            raise ConfigurationError(option, message) from e


def _load_yaml(config_file: Path) -> Dict[str, Any]:
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigurationError("config", f"cannot read {config_file}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError("config", f"invalid YAML in {config_file}: {e}") from e

    if not isinstance(loaded, dict):
        raise ConfigurationError("config", f"{config_file} must contain a mapping")
    logger.debug("Loaded configuration from %s (%d keys)", config_file, len(loaded))
    return loaded


def option_help() -> str:
    """Describe the diagram options, for the CLI help screen."""
    lines = [
        "Provided by APIviz:",
        f"  {OPTION_SOURCE_CLASS_PATH} <pathlist>     Specify where to find source class files",
        f"  {OPTION_CLASSPATH} <pathlist>             Additional class path for dependency analysis",
        f"  {OPTION_NO_PACKAGE_DIAGRAM}              Do not generate the package diagram in the overview summary",
        f"  {OPTION_CATEGORY} <category>[:<fillcolor>[:<linecolor>]]",
        f"                                  Color for items marked with @{TAG_CATEGORY}",
        f"  {OPTION_EXCLUDE_PACKAGES} <regex>         Hide matching packages (as @{TAG_HIDDEN} does)",
        f"  {OPTION_REFERENCE_CONVENTION} <name>  field-association | association | dependency",
        f"  {OPTION_GRAPHVIZ_HOME} <dir>             Graphviz installation directory",
        f"  {OPTION_RENDERER_TIMEOUT} <seconds>   Maximum time for one diagram render",
        f"  {OPTION_LEGACY_PAGE_LOOKUP}              Retry missing pages under dotted legacy names",
        f"  {OPTION_JDEPEND_JAR} <file>                Path to jdepend.jar",
        f"  {OPTION_METRICS_REPORT} <file>            Use an existing JDepend XML report",
        f"  {OPTION_EMIT_DOT}                        Keep the DOT source next to each image",
    ]
    return "\n".join(lines)
