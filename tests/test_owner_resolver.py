# tests/test_owner_resolver.py
"""Tests for polymorphic (person_id, person_type) resolution."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from app.errors import ValidationError
from app.models import LeoniPersonnel, Supplier, Worker
from app.models.enums import PersonType
from app.services import owner_resolver
from app.services.owner_resolver import PersonRef


class TestParsePersonType:
    def test_accepts_enum_and_value(self):
        assert owner_resolver.parse_person_type(PersonType.SUPPLIER) is PersonType.SUPPLIER
        assert owner_resolver.parse_person_type("LeoniPersonnel") is PersonType.LEONI_PERSONNEL

    @pytest.mark.parametrize("value", ["worker", "Visitor", "", None])
    def test_rejects_unknown(self, value):
        with pytest.raises(ValidationError):
            owner_resolver.parse_person_type(value)

    def test_model_for(self):
        assert owner_resolver.model_for("Worker") is Worker
        assert owner_resolver.model_for("Supplier") is Supplier
        assert owner_resolver.model_for(PersonType.LEONI_PERSONNEL) is LeoniPersonnel


class TestResolve:
    def test_resolve_each_kind(self, db, make_worker, make_supplier, make_personnel):
        worker = make_worker(worker_name="Sami", cin="W0000042")
        supplier = make_supplier(name="Acme", id_sup="SUP000000042")
        staff = make_personnel(name="Leila", matricule="M00042")

        assert owner_resolver.resolve(db, worker.id, "Worker").to_dict() == {
            "id": worker.id, "name": "Sami", "identifier": "W0000042",
            "contact_info": worker.email, "kind": "Worker",
        }
        supplier_record = owner_resolver.resolve(db, supplier.id, "Supplier")
        assert supplier_record.identifier == "SUP000000042"
        assert supplier_record.to_dict()["num_vst"] == supplier.num_vst
        assert owner_resolver.resolve(db, staff.id, "LeoniPersonnel").identifier == "M00042"

    def test_missing_owner(self, db):
        assert owner_resolver.resolve(db, 404, "Worker") is None
        assert owner_resolver.exists(db, 404, "Supplier") is False

    def test_resolve_many(self, db, make_worker, make_supplier):
        w1, w2 = make_worker(), make_worker()
        supplier = make_supplier()

        resolved = owner_resolver.resolve_many(
            db, [(w1.id, "Worker"), (w2.id, PersonType.WORKER), (supplier.id, "Supplier"), (999, "Worker")]
        )
        assert set(resolved) == {
            PersonRef(w1.id, PersonType.WORKER),
            PersonRef(w2.id, PersonType.WORKER),
            PersonRef(supplier.id, PersonType.SUPPLIER),
        }

    def test_search_across_kinds(self, db, make_worker, make_supplier, make_personnel):
        worker = make_worker(worker_name="Nour Haddad")
        supplier = make_supplier(name="Haddad Freight")
        make_personnel(name="Someone Else")

        refs = owner_resolver.search(db, "haddad")
        assert set(refs) == {PersonRef(worker.id, PersonType.WORKER), PersonRef(supplier.id, PersonType.SUPPLIER)}
        assert owner_resolver.search(db, "haddad", "Supplier") == [PersonRef(supplier.id, PersonType.SUPPLIER)]
        assert owner_resolver.search(db, "   ") == []

    def test_search_treats_wildcards_literally(self, db, make_worker, make_supplier):
        make_worker(worker_name="Plain Name")
        make_supplier(name="Other Co")
        underscored = make_worker(worker_name="Rim_Khalil")

        assert owner_resolver.search(db, "%") == []
        assert owner_resolver.search(db, "_") == [PersonRef(underscored.id, PersonType.WORKER)]
