"""
Diagram Model: typed results for Mermaid class and ER diagrams

Both parsers build these dataclasses in a single pass and return them whole.
The JSON view (to_json) is the contract downstream consumers read: camelCase
keys in a fixed order, and unset optional fields left out entirely rather
than written as null.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


# ──────────────────────────────────────────────────────────────────
# Class diagram
# ──────────────────────────────────────────────────────────────────

VISIBILITY_SYMBOLS = {
    '+': 'public',
    '-': 'private',
    '#': 'protected',
    '~': 'package',
}


def parse_visibility(symbol: str) -> str:
    """Map a visibility symbol to its name. Unknown or empty means public."""
    return VISIBILITY_SYMBOLS.get(symbol, 'public')


@dataclass
class MethodParameter:
    name: str
    type: Optional[str] = None


@dataclass
class ClassMember:
    name: str
    type: str = "property"
    visibility: str = "public"
    data_type: Optional[str] = None
    is_static: bool = False
    is_abstract: bool = False
    parameters: List[MethodParameter] = field(default_factory=list)
    return_type: Optional[str] = None


@dataclass
class ClassDefinition:
    name: str
    label: Optional[str] = None
    annotations: List[str] = field(default_factory=list)
    members: List[ClassMember] = field(default_factory=list)
    generic_type: Optional[str] = None


@dataclass
class Multiplicity:
    source: Optional[str] = None
    target: Optional[str] = None


@dataclass
class Relationship:
    source: str
    target: str
    kind: str
    label: Optional[str] = None
    multiplicity: Optional[Multiplicity] = None


@dataclass
class Namespace:
    name: str
    classes: List[str] = field(default_factory=list)


@dataclass
class ClassDiagramResult:
    classes: List[ClassDefinition] = field(default_factory=list)
    relationships: List[Relationship] = field(default_factory=list)
    namespaces: Optional[List[Namespace]] = None

    def find_class(self, name: str) -> Optional[ClassDefinition]:
        for cls in self.classes:
            if cls.name == name:
                return cls
        return None

    def ensure_class(self, name: str) -> ClassDefinition:
        """Return the named class, appending an empty placeholder if unknown."""
        cls = self.find_class(name)
        if cls is None:
            cls = ClassDefinition(name=name)
            self.classes.append(cls)
        return cls

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'classes': [_class_to_json(c) for c in self.classes],
            'relationships': [_relationship_to_json(r) for r in self.relationships],
        }
        if self.namespaces is not None:
            data['namespaces'] = [
                {'name': ns.name, 'classes': list(ns.classes)} for ns in self.namespaces
            ]
        return data


def _member_to_json(member: ClassMember) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        'name': member.name,
        'type': member.type,
        'visibility': member.visibility,
    }
    if member.data_type is not None:
        data['dataType'] = member.data_type
    if member.is_static:
        data['isStatic'] = True
    if member.is_abstract:
        data['isAbstract'] = True
    if member.parameters:
        params = []
        for p in member.parameters:
            param: Dict[str, Any] = {'name': p.name}
            if p.type is not None:
                param['type'] = p.type
            params.append(param)
        data['parameters'] = params
    if member.return_type is not None:
        data['returnType'] = member.return_type
    return data


def _class_to_json(cls: ClassDefinition) -> Dict[str, Any]:
    data: Dict[str, Any] = {'name': cls.name}
    if cls.label is not None:
        data['label'] = cls.label
    if cls.annotations:
        data['annotations'] = list(cls.annotations)
    data['members'] = [_member_to_json(m) for m in cls.members]
    if cls.generic_type is not None:
        data['genericType'] = cls.generic_type
    return data


def _relationship_to_json(rel: Relationship) -> Dict[str, Any]:
    data: Dict[str, Any] = {'from': rel.source, 'to': rel.target, 'type': rel.kind}
    if rel.label is not None:
        data['label'] = rel.label
    if rel.multiplicity is not None:
        mult: Dict[str, Any] = {}
        if rel.multiplicity.source is not None:
            mult['from'] = rel.multiplicity.source
        if rel.multiplicity.target is not None:
            mult['to'] = rel.multiplicity.target
        data['multiplicity'] = mult
    return data


# ──────────────────────────────────────────────────────────────────
# ER diagram
# ──────────────────────────────────────────────────────────────────

KEY_TYPES = ('PK', 'FK', 'UK')


class ERRelationshipKind(str, Enum):
    ONE_TO_ONE = "ONE_TO_ONE"
    ONE_TO_MANY = "ONE_TO_MANY"
    MANY_TO_ONE = "MANY_TO_ONE"
    MANY_TO_MANY = "MANY_TO_MANY"
    ZERO_OR_ONE_TO_ONE = "ZERO_OR_ONE_TO_ONE"
    ZERO_OR_ONE_TO_MANY = "ZERO_OR_ONE_TO_MANY"
    ONE_TO_ZERO_OR_MANY = "ONE_TO_ZERO_OR_MANY"
    ZERO_OR_MANY_TO_ZERO_OR_MANY = "ZERO_OR_MANY_TO_ZERO_OR_MANY"


@dataclass
class EntityMember:
    name: str
    data_type: str
    keys: List[str] = field(default_factory=list)
    comment: Optional[str] = None
    length: Optional[int] = None


@dataclass
class Entity:
    name: str
    # None until the entity gets an attribute block
    members: Optional[List[EntityMember]] = None


@dataclass
class Cardinality:
    source: str
    target: str


@dataclass
class ERRelationship:
    source: str
    target: str
    kind: ERRelationshipKind
    label: Optional[str] = None
    cardinality: Optional[Cardinality] = None


@dataclass
class ERDiagramResult:
    entities: List[Entity] = field(default_factory=list)
    relationships: List[ERRelationship] = field(default_factory=list)

    def to_json(self) -> Dict[str, Any]:
        return {
            'entities': [_entity_to_json(e) for e in self.entities],
            'relationships': [_er_relationship_to_json(r) for r in self.relationships],
        }


def _entity_member_to_json(member: EntityMember) -> Dict[str, Any]:
    data: Dict[str, Any] = {'name': member.name, 'dataType': member.data_type}
    if member.keys:
        data['keys'] = list(member.keys)
    if member.comment is not None:
        data['comment'] = member.comment
    if member.length is not None:
        data['length'] = member.length
    return data


def _entity_to_json(entity: Entity) -> Dict[str, Any]:
    data: Dict[str, Any] = {'name': entity.name}
    if entity.members is not None:
        data['members'] = [_entity_member_to_json(m) for m in entity.members]
    return data


def _er_relationship_to_json(rel: ERRelationship) -> Dict[str, Any]:
    data: Dict[str, Any] = {'from': rel.source, 'to': rel.target, 'type': rel.kind.value}
    if rel.label is not None:
        data['label'] = rel.label
    if rel.cardinality is not None:
        data['cardinality'] = {'from': rel.cardinality.source, 'to': rel.cardinality.target}
    return data


# ──────────────────────────────────────────────────────────────────
# JSON Serialization
# ──────────────────────────────────────────────────────────────────

DiagramResult = Union[ClassDiagramResult, ERDiagramResult]


def to_json_text(result: DiagramResult) -> str:
    """Pretty-print a result as 2-space indented JSON, keys in insertion order."""
    return json.dumps(result.to_json(), indent=2, ensure_ascii=False)


def save_result(result: DiagramResult, path: str) -> None:
    """Write a parse result to a .json file."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, 'w', encoding='utf-8') as f:
        f.write(to_json_text(result))
        f.write('\n')
