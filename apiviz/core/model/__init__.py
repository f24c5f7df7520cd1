# Read-only view over the host documentation engine's model.

from .adapter import DocumentationModelAdapter, load_model
from .models import DocumentationModel, MemberDoc, PackageDoc, TypeDoc

__all__ = [
    "DocumentationModelAdapter",
    "load_model",
    "DocumentationModel",
    "MemberDoc",
    "PackageDoc",
    "TypeDoc",
]
