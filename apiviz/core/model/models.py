"""Documentation model data structures.

Read-only view of what the host documentation engine extracted from the
sources. These are pure data containers; lookups live in adapter.py.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..graph.models import TypeKind


@dataclass
class MemberDoc:
    """A field, method or constructor of a documented type."""

    name: str
    member_type: str  # "field" | "method" | "constructor"
    type_name: Optional[str] = None  # field type or return type, qualified
    parameter_types: List[str] = field(default_factory=list)


@dataclass
class TypeDoc:
    """A documented class, interface, enum or annotation type."""

    name: str  # "Outer.Inner" for nested types
    package: Optional[str]  # None for the default package
    kind: TypeKind = TypeKind.CLASS
    superclass: Optional[str] = None  # qualified
    interfaces: List[str] = field(default_factory=list)  # qualified
    members: List[MemberDoc] = field(default_factory=list)
    tags: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def qualified_name(self) -> str:
        return f"{self.package}.{self.name}" if self.package else self.name

    @property
    def binary_name(self) -> str:
        """Compiled class name: nested types joined with '$'."""
        nested = self.name.replace(".", "$")
        return f"{self.package}.{nested}" if self.package else nested

    def tag_values(self, tag: str) -> List[str]:
        return self.tags.get(tag, [])

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags


@dataclass
class PackageDoc:
    name: str
    tags: Dict[str, List[str]] = field(default_factory=dict)

    def tag_values(self, tag: str) -> List[str]:
        return self.tags.get(tag, [])

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags


@dataclass
class DocumentationModel:
    """Everything the host engine documented, in host order."""

    types: List[TypeDoc] = field(default_factory=list)
    packages: Dict[str, PackageDoc] = field(default_factory=dict)
