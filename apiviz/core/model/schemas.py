"""JSON export schema for the host documentation model."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..graph.models import TypeKind
from .models import DocumentationModel, MemberDoc, PackageDoc, TypeDoc


class MemberExport(BaseModel):
    """A member of an exported type."""
    name: str = Field(..., description="Member name")
    member_type: str = Field("method", description="field | method | constructor")
    type: Optional[str] = Field(None, description="Field type or return type")
    parameters: List[str] = Field(default_factory=list, description="Parameter types")


class TypeExport(BaseModel):
    """An exported type."""
    name: str = Field(..., description="Simple name, Outer.Inner for nested types", min_length=1)
    package: Optional[str] = Field(None, description="Containing package")
    kind: TypeKind = Field(TypeKind.CLASS, description="class | interface | enum | annotation")
    superclass: Optional[str] = Field(None, description="Qualified superclass")
    interfaces: List[str] = Field(default_factory=list, description="Qualified interfaces")
    members: List[MemberExport] = Field(default_factory=list)
    tags: Dict[str, List[str]] = Field(default_factory=dict, description="Documentation tags")


class PackageExport(BaseModel):
    """Package-level documentation tags."""
    name: str = Field(..., description="Package name")
    tags: Dict[str, List[str]] = Field(default_factory=dict)


class ModelExport(BaseModel):
    """Top-level export document."""
    packages: List[PackageExport] = Field(default_factory=list)
    types: List[TypeExport] = Field(default_factory=list)

    def to_model(self) -> DocumentationModel:
        packages = {p.name: PackageDoc(name=p.name, tags=dict(p.tags)) for p in self.packages}
        types = []
        for t in self.types:
            types.append(TypeDoc(
                name=t.name,
                package=t.package or None,
                kind=t.kind,
                superclass=t.superclass,
                interfaces=list(t.interfaces),
                members=[
                    MemberDoc(
                        name=m.name,
                        member_type=m.member_type,
                        type_name=m.type,
                        parameter_types=list(m.parameters),
                    )
                    for m in t.members
                ],
                tags=dict(t.tags),
            ))
            if t.package and t.package not in packages:
                packages[t.package] = PackageDoc(name=t.package)
        return DocumentationModel(types=types, packages=packages)
