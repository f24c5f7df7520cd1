"""Tests for settings validation and the command line entry point."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from apiviz.__main__ import EXIT_CONFIG_ERROR, EXIT_FAILURE, EXIT_OK, main
from apiviz.core.config import ApivizSettings, option_help
from apiviz.core.errors import ConfigurationError
from apiviz.core.graph.models import ReferenceConvention
from apiviz.core.render.graphviz import RenderedDiagram


def _write_yaml(tmp_path, text) -> Path:
    path = tmp_path / "apiviz.yaml"
    path.write_text(text, encoding="utf-8")
    return path


# =========================================================================
# Tests: Settings
# =========================================================================

class TestSettings:
    def test_defaults(self):
        settings = ApivizSettings()
        assert settings.output_dir == Path(".")
        assert settings.categories == []
        assert settings.source_class_path is None
        assert settings.reference_convention is ReferenceConvention.FIELD_ASSOCIATION
        assert settings.renderer_timeout == 60.0
        assert settings.legacy_page_lookup is True
        assert settings.no_package_diagram is False

    def test_yaml_and_overrides(self, tmp_path):
        config = _write_yaml(tmp_path, (
            "categories:\n"
            "  - core:#FFEEAA\n"
            "reference_convention: dependency\n"
            "renderer_timeout: 30\n"
        ))

        settings = ApivizSettings.from_sources(config, {
            "renderer_timeout": 5,
            "categories": None,
            "output_dir": str(tmp_path),
        })

        assert settings.categories == ["core:#FFEEAA"]
        assert settings.reference_convention is ReferenceConvention.DEPENDENCY
        assert settings.renderer_timeout == 5
        assert settings.output_dir == tmp_path

    def test_path_list_string_is_split(self, tmp_path):
        a, b = tmp_path / "a", tmp_path / "b"
        a.mkdir()
        b.mkdir()
        settings = ApivizSettings.from_sources(None, {
            "source_class_path": f"{a}{os.pathsep}{b}",
            "classpath": [str(b), str(tmp_path)],
        })
        assert settings.source_class_path == [a, b]
        assert settings.class_path == [a, b, tmp_path]

    def test_missing_class_path_entry(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            ApivizSettings.from_sources(None, {"source_class_path": str(tmp_path / "nope")})
        assert exc_info.value.option == "source_class_path"
        assert "nope" in str(exc_info.value)

    def test_missing_classpath_entry_with_source_class_path(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            ApivizSettings.from_sources(None, {
                "source_class_path": str(tmp_path),
                "classpath": str(tmp_path / "missing.jar"),
            })
        assert exc_info.value.option == "classpath"
        assert "missing.jar" in str(exc_info.value)

    def test_classpath_unchecked_without_source_class_path(self, tmp_path):
        settings = ApivizSettings.from_sources(None, {"classpath": str(tmp_path / "missing.jar")})
        assert settings.classpath == [tmp_path / "missing.jar"]

    def test_empty_source_class_path(self):
        with pytest.raises(ConfigurationError) as exc_info:
            ApivizSettings.from_sources(None, {"source_class_path": ""})
        assert exc_info.value.option == "source_class_path"

    @pytest.mark.parametrize("option, value", [
        ("categories", [":red"]),
        ("exclude_packages", ["com.(acme"]),
        ("renderer_timeout", 0),
        ("reference_convention", "composition"),
    ])
    def test_invalid_value_names_option(self, option, value):
        with pytest.raises(ConfigurationError) as exc_info:
            ApivizSettings.from_sources(None, {option: value})
        assert exc_info.value.option == option
        assert str(exc_info.value).startswith(f"{option}: ")

    def test_invalid_yaml(self, tmp_path):
        config = _write_yaml(tmp_path, "categories: [unclosed\n")
        with pytest.raises(ConfigurationError) as exc_info:
            ApivizSettings.from_sources(config)
        assert exc_info.value.option == "config"

    def test_yaml_must_be_mapping(self, tmp_path):
        config = _write_yaml(tmp_path, "- just\n- a list\n")
        with pytest.raises(ConfigurationError):
            ApivizSettings.from_sources(config)

    def test_option_help_lists_options(self):
        text = option_help()
        for option in (
            "source_class_path", "classpath", "categories", "no_package_diagram",
            "exclude_packages", "emit_dot",
        ):
            assert option in text


# =========================================================================
# Tests: Command line
# =========================================================================

class TestMain:
    def _write_model(self, tmp_path) -> Path:
        path = tmp_path / "model.json"
        path.write_text(json.dumps({
            "types": [{"name": "Widget", "package": "com.acme"}],
        }), encoding="utf-8")
        return path

    def test_renderer_unavailable_still_succeeds(self, tmp_path):
        model = self._write_model(tmp_path)
        with patch("apiviz.core.render.graphviz.GraphvizRenderer.is_available", return_value=False):
            code = main(["--model", str(model), "-d", str(tmp_path)])
        assert code == EXIT_OK

    def test_configuration_error(self, tmp_path):
        model = self._write_model(tmp_path)
        code = main(["--model", str(model), "--renderer-timeout", "0"])
        assert code == EXIT_CONFIG_ERROR

    def test_unreadable_model(self, tmp_path):
        code = main(["--model", str(tmp_path / "missing.json"), "-d", str(tmp_path)])
        assert code == EXIT_FAILURE

    def test_fatal_error(self, tmp_path):
        model = self._write_model(tmp_path)
        (tmp_path / "com" / "acme").mkdir(parents=True)
        (tmp_path / "com" / "acme" / "Widget.html").write_text("<html></html>", encoding="utf-8")

        def render(self, source, image_path, map_path, diagram_id):
            image_path.write_bytes(b"")
            map_path.write_text("<map></map>", encoding="utf-8")
            return RenderedDiagram(image_path, map_path)

        with patch("apiviz.core.render.graphviz.GraphvizRenderer.is_available", return_value=True), \
                patch("apiviz.core.render.graphviz.GraphvizRenderer.render", render):
            code = main(["--model", str(model), "-d", str(tmp_path)])
        assert code == EXIT_FAILURE
