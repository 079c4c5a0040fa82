# app/services/owner_resolver.py
"""
Owner resolution for the polymorphic (person_id, person_type) reference.

Presence entries and vehicles point at a Worker, a Supplier or a LeoniPersonnel.
This module is the single place that turns such a reference into the concrete
row and a normalized OwnerRecord. Each owner model exposes the same capability
set (display_name, identifier, contact_info, search_columns), so nothing here
switches on field names.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, NamedTuple, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.errors import ValidationError
from app.models import LeoniPersonnel, Supplier, Worker
from app.models.enums import PersonType, enum_values
from app.utils.text_utils import LIKE_ESCAPE, like_pattern

OWNER_MODELS = {
    PersonType.WORKER: Worker,
    PersonType.SUPPLIER: Supplier,
    PersonType.LEONI_PERSONNEL: LeoniPersonnel,
}


class PersonRef(NamedTuple):
    person_id: int
    person_type: PersonType


@dataclass
class OwnerRecord:
    id: int
    name: Optional[str]
    identifier: Optional[str]
    contact_info: Optional[str]
    kind: str
    extra: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "identifier": self.identifier,
            "contact_info": self.contact_info,
            "kind": self.kind,
            **self.extra,
        }


def parse_person_type(value) -> PersonType:
    """Coerce a raw value to PersonType. Raises ValidationError for anything else."""
    if isinstance(value, PersonType):
        return value
    try:
        return PersonType(value)
    except ValueError:
        raise ValidationError(
            f"Invalid person type '{value}'. Expected one of {enum_values(PersonType)}",
            code="invalid_person_type",
        )


def model_for(person_type):
    return OWNER_MODELS[parse_person_type(person_type)]


def to_owner_record(row) -> OwnerRecord:
    extra = {}
    if isinstance(row, Supplier):
        extra = {"num_vst": row.num_vst, "comp_affil": row.comp_affil}
    return OwnerRecord(
        id=row.id,
        name=row.display_name,
        identifier=row.identifier,
        contact_info=row.contact_info,
        kind=row.person_type.value,
        extra=extra,
    )


def get_owner(db: Session, person_id: int, person_type):
    """Return the concrete owner row, or None."""
    return db.get(model_for(person_type), person_id)


def exists(db: Session, person_id: int, person_type) -> bool:
    return get_owner(db, person_id, person_type) is not None


def resolve(db: Session, person_id: int, person_type) -> Optional[OwnerRecord]:
    row = get_owner(db, person_id, person_type)
    return to_owner_record(row) if row else None


def resolve_many(db: Session, refs: Iterable) -> Dict[PersonRef, OwnerRecord]:
    """Resolve many references with one query per owner kind."""
    ids_by_type = defaultdict(set)
    for person_id, person_type in refs:
        ids_by_type[parse_person_type(person_type)].add(person_id)

    resolved = {}
    for person_type, ids in ids_by_type.items():
        model = OWNER_MODELS[person_type]
        for row in db.query(model).filter(model.id.in_(ids)).all():
            resolved[PersonRef(row.id, person_type)] = to_owner_record(row)
    return resolved


def search(db: Session, text: str, person_type=None) -> List[PersonRef]:
    """Case-insensitive substring search over each owner kind's name/identifier columns."""
    text = (text or "").strip()
    if not text:
        return []
    kinds = [parse_person_type(person_type)] if person_type else list(OWNER_MODELS)
    pattern = like_pattern(text)

    matches = []
    for kind in kinds:
        model = OWNER_MODELS[kind]
        clauses = [getattr(model, column).ilike(pattern, escape=LIKE_ESCAPE) for column in model.search_columns]
        for (row_id,) in db.query(model.id).filter(or_(*clauses)).all():
            matches.append(PersonRef(row_id, kind))
    return matches
