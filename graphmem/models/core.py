"""
Core data models for the graph memory system.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List


def normalize_name(value: str) -> str:
    """Lower-case and replace spaces with underscores; the basis of all name equality."""
    return str(value).lower().replace(' ', '_')


@dataclass
class EntityRecord:
    """Entity extracted from text. Names are not unique; identity is resolved by similarity."""
    name: str
    type: str

    def normalized(self) -> 'EntityRecord':
        return EntityRecord(name=normalize_name(self.name), type=normalize_name(self.type))


@dataclass
class RelationshipTriple:
    """Directed (source, relationship, destination) fact within a tenant's graph."""
    source: str
    relationship: str
    destination: str

    def normalized(self) -> 'RelationshipTriple':
        return RelationshipTriple(source=normalize_name(self.source),
                                  relationship=normalize_name(self.relationship),
                                  destination=normalize_name(self.destination))

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    def __str__(self) -> str:
        return f'{self.source} -- {self.relationship} -- {self.destination}'


@dataclass
class SearchHit:
    """Edge adjacent to a node that matched a similarity search."""
    source: str
    source_id: Any
    relationship: str
    relation_id: Any
    destination: str
    destination_id: Any
    similarity: float

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'SearchHit':
        return cls(source=record.get('source'),
                   source_id=record.get('source_id'),
                   relationship=record.get('relationship'),
                   relation_id=record.get('relation_id'),
                   destination=record.get('destination'),
                   destination_id=record.get('destination_id'),
                   similarity=float(record.get('similarity') or 0.0))

    def to_triple(self) -> RelationshipTriple:
        return RelationshipTriple(source=self.source, relationship=self.relationship, destination=self.destination)


@dataclass
class AddResult:
    """Outcome of one add() call."""
    deleted_entities: List[List[Dict[str, Any]]] = field(default_factory=list)
    added_entities: List[List[Dict[str, Any]]] = field(default_factory=list)
    relations: List[RelationshipTriple] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'deleted_entities': self.deleted_entities,
            'added_entities': self.added_entities,
            'relations': [relation.to_dict() for relation in self.relations],
        }
