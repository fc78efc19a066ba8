"""
test_catalog_service.py — Tests for shops and directly entered materials

Called by: pytest
Depends on: boqcore.services.catalog_service, tests/conftest.py
"""

from decimal import Decimal

import pytest

from boqcore.exceptions import MissingField, NotFound
from boqcore.models import Material, MaterialSubmission, Shop
from boqcore.services import catalog_service as svc


def test_create_shop_starts_pending(db_session, admin_user):
    shop = svc.create_shop(db_session, {"name": "BuildMart", "city": "Nashik", "approved": True}, admin_user)
    assert shop.approved is False
    assert shop.owner_id == admin_user.id
    assert shop.id not in {s.id for s in svc.list_public_shops(db_session)}
    assert shop.id in {s.id for s in svc.list_pending_shops(db_session)}


def test_create_shop_requires_name(db_session, supplier_user):
    with pytest.raises(MissingField):
        svc.create_shop(db_session, {"city": "Pune"}, supplier_user)


def test_update_shop(db_session, shop):
    updated = svc.update_shop(db_session, shop.id, {"city": "Mumbai", "rating": Decimal("4.5")})
    assert updated.city == "Mumbai"
    assert updated.rating == Decimal("4.5")
    assert updated.approved is True


def test_update_shop_ignores_approval_fields(db_session, shop):
    with pytest.raises(MissingField):
        svc.update_shop(db_session, shop.id, {"approved": False})


def test_update_unknown_shop(db_session):
    with pytest.raises(NotFound):
        svc.update_shop(db_session, 404, {"city": "Pune"})


def test_delete_shop_cascade(db_session, shop, submission, pending_material):
    svc.delete_shop(db_session, shop.id)
    assert db_session.query(Shop).count() == 0
    assert db_session.query(Material).count() == 0
    assert db_session.query(MaterialSubmission).count() == 0


def test_list_owner_shops(db_session, shop, supplier_user, admin_user):
    svc.create_shop(db_session, {"name": "Admin Depot"}, admin_user)
    assert [s.id for s in svc.list_owner_shops(db_session, supplier_user)] == [shop.id]


def test_approve_and_reject_shop(db_session, admin_user):
    shop = svc.create_shop(db_session, {"name": "BuildMart"}, admin_user)
    assert svc.approve_shop(db_session, shop.id, admin_user).approved is True
    rejected = svc.reject_shop(db_session, shop.id, "Closed down", admin_user)
    assert rejected.approved is False
    assert rejected.approval_reason == "Closed down"


def test_create_material_direct(db_session, shop, category, subcategory, admin_user):
    material = svc.create_material(
        db_session,
        {
            "name": "River Sand",
            "shop_id": shop.id,
            "category_id": category.id,
            "subcategory_id": subcategory.id,
            "unit": "cft",
        },
        admin_user,
    )
    assert material.source == "direct"
    assert material.approved is False
    assert material.rate == Decimal("0")
    assert material.template_id is None


def test_create_material_unknown_shop(db_session, admin_user):
    with pytest.raises(NotFound):
        svc.create_material(db_session, {"name": "Sand", "shop_id": 77}, admin_user)


def test_update_material(db_session, pending_material):
    updated = svc.update_material(db_session, pending_material.id, {"rate": Decimal("45.50")})
    assert updated.rate == Decimal("45.50")
    assert updated.approved is False


def test_update_material_no_fields(db_session, pending_material):
    with pytest.raises(MissingField):
        svc.update_material(db_session, pending_material.id, {})


def test_delete_material(db_session, pending_material):
    svc.delete_material(db_session, pending_material.id)
    with pytest.raises(NotFound):
        svc.get_material(db_session, pending_material.id)


def test_approve_material_publishes(db_session, pending_material, admin_user):
    svc.approve_material(db_session, pending_material.id, admin_user)
    assert [m.id for m in svc.list_public_materials(db_session)] == [pending_material.id]
    assert svc.list_pending_materials(db_session) == []
