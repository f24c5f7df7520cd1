import argparse
import logging
import sys
from pathlib import Path

from .core.config import ApivizSettings, option_help
from .core.errors import ApivizError, ConfigurationError
from .core.model.adapter import load_model
from .core.pipeline import DiagramPipeline


def setup_logging(log_level: str = "INFO") -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="apiviz",
        description="APIviz - UML diagrams for generated API documentation",
        epilog=option_help(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--model",
        type=Path,
        required=True,
        help="JSON export of the documentation model"
    )
    parser.add_argument(
        "-d", "--output-dir",
        dest="output_dir",
        type=Path,
        help="Directory holding the generated pages"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML file with diagram options"
    )
    parser.add_argument(
        "--category",
        dest="categories",
        action="append",
        metavar="NAME[:FILL[:LINE]]",
        help="Category color (repeatable)"
    )
    parser.add_argument(
        "--source-class-path",
        dest="source_class_path",
        metavar="PATHLIST",
        help="Where to find compiled classes for dependency analysis"
    )
    parser.add_argument(
        "--classpath",
        metavar="PATHLIST",
        help="Additional class path for dependency analysis"
    )
    parser.add_argument(
        "--no-package-diagram",
        dest="no_package_diagram",
        action="store_true",
        default=None,
        help="Do not generate the package diagram in the overview summary"
    )
    parser.add_argument(
        "--exclude-package",
        dest="exclude_packages",
        action="append",
        metavar="REGEX",
        help="Hide packages matching the expression (repeatable)"
    )
    parser.add_argument(
        "--reference-convention",
        dest="reference_convention",
        choices=["field-association", "association", "dependency"],
        help="Edge kind for member type references"
    )
    parser.add_argument(
        "--graphviz-home",
        dest="graphviz_home",
        type=Path,
        help="Graphviz installation directory"
    )
    parser.add_argument(
        "--renderer-timeout",
        dest="renderer_timeout",
        type=float,
        help="Seconds to wait for one diagram render"
    )
    parser.add_argument(
        "--no-legacy-page-lookup",
        dest="legacy_page_lookup",
        action="store_false",
        default=None,
        help="Do not retry missing pages under dotted legacy names"
    )
    parser.add_argument(
        "--jdepend-jar",
        dest="jdepend_jar",
        type=Path,
        help="Path to jdepend.jar"
    )
    parser.add_argument(
        "--metrics-report",
        dest="metrics_report",
        type=Path,
        help="Use an existing JDepend XML report"
    )
    parser.add_argument(
        "--emit-dot",
        dest="emit_dot",
        action="store_true",
        default=None,
        help="Keep the DOT source next to each image"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )
    return parser


_OPTION_KEYS = (
    "output_dir",
    "categories",
    "source_class_path",
    "classpath",
    "no_package_diagram",
    "exclude_packages",
    "reference_convention",
    "graphviz_home",
    "renderer_timeout",
    "legacy_page_lookup",
    "jdepend_jar",
    "metrics_report",
    "emit_dot",
)


def main(argv=None) -> int:
    """Main entry point for APIviz."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    overrides = {key: getattr(args, key) for key in _OPTION_KEYS}
    try:
        settings = ApivizSettings.from_sources(args.config, overrides)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return EXIT_CONFIG_ERROR

    try:
        model = load_model(args.model)
    except (OSError, ValueError) as e:
        logger.error("Cannot load documentation model %s: %s", args.model, e)
        return EXIT_FAILURE

    logger.info("Generating diagrams into %s", settings.output_dir)
    try:
        report = DiagramPipeline.from_settings(model, settings).run()
    except ApivizError as e:
        logger.error("Diagram generation failed: %s", e)
        return EXIT_FAILURE

    if not report.renderer_available:
        logger.warning("No diagrams were generated")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
