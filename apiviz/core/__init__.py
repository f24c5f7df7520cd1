# Lazy imports so `from apiviz.core.graph.models import Graph` does not pull
# in the renderer, splicer and pydantic settings.

__all__ = [
    "ApivizSettings",
    "DiagramPipeline",
    "RunReport",
    "DocumentationModelAdapter",
    "load_model",
    "RelationshipGraphBuilder",
    "CategoryTable",
    "GraphvizRenderer",
    "OutputSplicer",
    "PageLayout",
    "DependencyMetricsAdapter",
]

_IMPORT_MAP = {
    "ApivizSettings": ".config",
    "DiagramPipeline": ".pipeline",
    "RunReport": ".pipeline",
    "DocumentationModelAdapter": ".model.adapter",
    "load_model": ".model.adapter",
    "RelationshipGraphBuilder": ".graph.builder",
    "CategoryTable": ".graph.categories",
    "GraphvizRenderer": ".render.graphviz",
    "OutputSplicer": ".splice.splicer",
    "PageLayout": ".splice.layout",
    "DependencyMetricsAdapter": ".metrics.adapter",
}


def __getattr__(name):
    if name in _IMPORT_MAP:
        import importlib
        module = importlib.import_module(_IMPORT_MAP[name], __package__)
        return getattr(module, name)
    raise AttributeError(f"module 'apiviz.core' has no attribute {name}")
