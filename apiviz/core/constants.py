"""Shared constants for diagram generation.

Documentation tag names, option names, and the default color scheme live
here so the builder, renderer and CLI agree on them.
"""

# =============================================================================
# Documentation Tags
# =============================================================================

TAG_CATEGORY = "apiviz.category"
TAG_HIDDEN = "apiviz.hidden"
TAG_USES = "apiviz.uses"
TAG_HAS = "apiviz.has"
TAG_OWNS = "apiviz.owns"
TAG_COMPOSED_OF = "apiviz.composedOf"

# =============================================================================
# Option Names (as shown in help and configuration errors)
# =============================================================================

OPTION_CATEGORY = "categories"
OPTION_SOURCE_CLASS_PATH = "source_class_path"
OPTION_CLASSPATH = "classpath"
OPTION_NO_PACKAGE_DIAGRAM = "no_package_diagram"
OPTION_EXCLUDE_PACKAGES = "exclude_packages"
OPTION_REFERENCE_CONVENTION = "reference_convention"
OPTION_GRAPHVIZ_HOME = "graphviz_home"
OPTION_RENDERER_TIMEOUT = "renderer_timeout"
OPTION_LEGACY_PAGE_LOOKUP = "legacy_page_lookup"
OPTION_JDEPEND_JAR = "jdepend_jar"
OPTION_METRICS_REPORT = "metrics_report"
OPTION_EMIT_DOT = "emit_dot"

# =============================================================================
# Page Naming
# =============================================================================

OVERVIEW_PAGE = "overview-summary"
PACKAGE_SUMMARY_PAGE = "package-summary"
PAGE_EXTENSION = ".html"
IMAGE_EXTENSION = ".png"
MAP_EXTENSION = ".map"
DOT_EXTENSION = ".dot"

# Graph name; Graphviz uses it as the image map name.
MAP_NAME = "APIVIZ"

# =============================================================================
# Colors
# =============================================================================

DEFAULT_FILL_COLOR = "#FFFFFF"
DEFAULT_LINE_COLOR = "#000000"
EXTERNAL_FILL_COLOR = "#F1F3F5"
EXTERNAL_LINE_COLOR = "#ADB5BD"

# Fill/line pairs handed out to categories declared without colors.
CATEGORY_PALETTE = [
    ("#FFF3CD", "#B08800"),
    ("#D1E7DD", "#146C43"),
    ("#CFE2FF", "#0A58CA"),
    ("#F8D7DA", "#B02A37"),
    ("#E2D9F3", "#59359A"),
    ("#CFF4FC", "#087990"),
    ("#FFE5D0", "#CA6510"),
    ("#E9ECEF", "#495057"),
]

# Supertypes every class has; never drawn.
IMPLICIT_ROOT_TYPES = {"java.lang.Object", "builtins.object", "object"}
