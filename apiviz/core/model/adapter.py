"""Read-only lookups over the host documentation model.

The adapter indexes the model once and answers the questions the graph
builder asks: which packages exist, which are hidden, what a type extends
and references. It never raises for missing optional data.
"""

import json
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from ..constants import (
    TAG_CATEGORY,
    TAG_COMPOSED_OF,
    TAG_HAS,
    TAG_HIDDEN,
    TAG_OWNS,
    TAG_USES,
)
from ..graph.models import EdgeKind
from .models import DocumentationModel, PackageDoc, TypeDoc
from .schemas import ModelExport

logger = logging.getLogger(__name__)

# Identifiers inside a type expression: "java.util.Map<K, com.foo.Bar[]>"
_TYPE_NAME_RE = re.compile(r"[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*")

_RELATION_TAGS = (
    (TAG_USES, EdgeKind.DEPENDENCY),
    (TAG_HAS, EdgeKind.ASSOCIATION),
    (TAG_OWNS, EdgeKind.AGGREGATION),
    (TAG_COMPOSED_OF, EdgeKind.AGGREGATION),
)

_REFERENCE_ORDER = ("field", "parameter", "return")


def load_model(path: Path) -> DocumentationModel:
    """Load a JSON export of the host documentation model."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    model = ModelExport.model_validate(data).to_model()
    logger.info(
        "Loaded documentation model from %s: %d types, %d packages",
        path, len(model.types), len(model.packages),
    )
    return model


class DocumentationModelAdapter:
    """Indexed, read-only view over a DocumentationModel.

    Args:
        model: The host model.
        exclude_packages: Regular expressions; a package whose full name
            matches any of them is hidden, like one tagged apiviz.hidden.
    """

    def __init__(self, model: DocumentationModel, exclude_packages: Sequence[str] = ()):
        self._model = model
        self._exclude = [re.compile(p) for p in exclude_packages]

        self._by_qualified: Dict[str, TypeDoc] = {}
        self._by_package: Dict[str, List[TypeDoc]] = {}
        for t in model.types:
            self._by_qualified.setdefault(t.qualified_name, t)
            if t.package:
                self._by_package.setdefault(t.package, []).append(t)

        self._subtypes: Dict[str, List[TypeDoc]] = {}
        for t in model.types:
            for parent in [t.superclass, *t.interfaces]:
                if parent:
                    self._subtypes.setdefault(parent, []).append(t)

    @property
    def model(self) -> DocumentationModel:
        return self._model

    # ── Packages ───────────────────────────────────────────────────────

    def packages(self) -> List[str]:
        """Package names in order of first appearance in the type list."""
        return list(self._by_package)

    def package_doc(self, package: str) -> Optional[PackageDoc]:
        return self._model.packages.get(package)

    def is_hidden(self, package: Optional[str]) -> bool:
        if not package:
            return False
        doc = self._model.packages.get(package)
        if doc is not None and doc.has_tag(TAG_HIDDEN):
            return True
        return any(p.fullmatch(package) for p in self._exclude)

    # ── Types ──────────────────────────────────────────────────────────

    def types(self) -> List[TypeDoc]:
        return list(self._model.types)

    def types_in(self, package: str) -> List[TypeDoc]:
        return list(self._by_package.get(package, []))

    def get_type(self, qualified_name: str) -> Optional[TypeDoc]:
        return self._by_qualified.get(qualified_name)

    def package_of(self, type_doc: TypeDoc) -> Optional[PackageDoc]:
        if not type_doc.package:
            return None
        return self._model.packages.get(type_doc.package)

    def is_type_hidden(self, type_doc: TypeDoc) -> bool:
        return type_doc.has_tag(TAG_HIDDEN) or self.is_hidden(type_doc.package)

    def resolve(self, name: str, context_package: Optional[str]) -> Optional[TypeDoc]:
        """Resolve a possibly unqualified type name against the model."""
        found = self._by_qualified.get(name)
        if found is None and context_package and "." not in name:
            found = self._by_qualified.get(f"{context_package}.{name}")
        return found

    def category_of(self, type_doc: TypeDoc) -> Optional[str]:
        """The type's category tag, falling back to its package's."""
        values = type_doc.tag_values(TAG_CATEGORY)
        if not values:
            doc = self.package_of(type_doc)
            values = doc.tag_values(TAG_CATEGORY) if doc else []
        return values[0].strip() if values and values[0].strip() else None

    def known_subtypes(self, type_doc: TypeDoc) -> List[TypeDoc]:
        return list(self._subtypes.get(type_doc.qualified_name, []))

    def referenced_types(self, type_doc: TypeDoc) -> List[Tuple[str, str]]:
        """(reference kind, qualified name) for member types found in the model.

        Reference kind is 'field', 'parameter' or 'return'. Each target is
        listed once, under the first kind in that order that mentions it.
        Self references are dropped.
        """
        by_kind: Dict[str, List[str]] = {k: [] for k in _REFERENCE_ORDER}
        for member in type_doc.members:
            if member.member_type == "field":
                if member.type_name:
                    by_kind["field"].append(member.type_name)
                continue
            by_kind["parameter"].extend(member.parameter_types)
            if member.type_name and member.member_type == "method":
                by_kind["return"].append(member.type_name)

        seen = {type_doc.qualified_name}
        result: List[Tuple[str, str]] = []
        for kind in _REFERENCE_ORDER:
            for expression in by_kind[kind]:
                for name in _TYPE_NAME_RE.findall(expression):
                    target = self.resolve(name, type_doc.package)
                    if target is None or target.qualified_name in seen:
                        continue
                    seen.add(target.qualified_name)
                    result.append((kind, target.qualified_name))
        return result

    def declared_relations(self, type_doc: TypeDoc) -> List[Tuple[EdgeKind, str, Optional[str]]]:
        """Relations declared with apiviz.uses/has/owns/composedOf tags.

        Tag values read ``<type> [<cardinality>]``; unknown targets are
        skipped with a debug message.
        """
        relations: List[Tuple[EdgeKind, str, Optional[str]]] = []
        for tag, kind in _RELATION_TAGS:
            for value in type_doc.tag_values(tag):
                parts = value.split(None, 1)
                if not parts:
                    continue
                target = self.resolve(parts[0], type_doc.package)
                if target is None:
                    logger.debug(
                        "Ignoring @%s %s on %s: type not documented",
                        tag, parts[0], type_doc.qualified_name,
                    )
                    continue
                cardinality = parts[1].strip() if len(parts) > 1 else None
                relations.append((kind, target.qualified_name, cardinality or None))
        return relations
