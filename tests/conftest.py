"""
conftest.py — Shared Test Fixtures for the BOQ service

Provides an in-memory SQLite database, FastAPI TestClients with auth
overrides per role, and factory fixtures for the catalog and BOQ models.

Business Rules:
- All tests run against isolated in-memory DB (no prod data risk)
- Auth is overridden so tests don't need a session cookie
- Each test function gets a fresh schema

Called by: all test files via pytest autodiscovery
Depends on: boqcore.models (Base), boqcore.database (get_db), boqcore.dependencies
"""

import os

os.environ["TESTING"] = "1"  # Must be set before importing app modules
os.environ.setdefault("DATABASE_URL", "sqlite://")

from decimal import Decimal
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Query, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from boqcore.models import (
    Base,
    BoqItem,
    BoqProject,
    BoqVersion,
    Category,
    Material,
    MaterialSubmission,
    MaterialTemplate,
    Shop,
    Subcategory,
    User,
)

# ── In-memory SQLite engine ──────────────────────────────────────────

TEST_DB_URL = "sqlite://"  # in-memory, fresh per session

engine = create_engine(
    TEST_DB_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@event.listens_for(engine, "connect")
def _enable_fk(dbapi_conn, _):
    """SQLite ignores FKs by default — turn them on."""
    dbapi_conn.execute("PRAGMA foreign_keys=ON")


# ── Fixtures ─────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def db_session():
    """Create all tables, yield a session, then tear down."""
    Base.metadata.create_all(bind=engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def fail_delete_on():
    """Make the Nth bulk Query.delete() in a test raise a driver error.

    Used to break a cascade partway through and check nothing was removed.
    """
    real_delete = Query.delete
    calls = {"n": 0}

    def _arm(call_no: int):
        def _delete(self, *args, **kwargs):
            calls["n"] += 1
            if calls["n"] == call_no:
                raise OperationalError("DELETE", {}, Exception("connection reset"))
            return real_delete(self, *args, **kwargs)

        return patch.object(Query, "delete", _delete)

    return _arm


def _make_user(db: Session, username: str, role: str) -> User:
    user = User(username=username, name=username.replace("_", " ").title(), role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def admin_user(db_session: Session) -> User:
    return _make_user(db_session, "admin_one", "admin")


@pytest.fixture()
def software_user(db_session: Session) -> User:
    return _make_user(db_session, "software_one", "software_team")


@pytest.fixture()
def purchase_user(db_session: Session) -> User:
    return _make_user(db_session, "purchase_one", "purchase_team")


@pytest.fixture()
def supplier_user(db_session: Session) -> User:
    return _make_user(db_session, "supplier_one", "supplier")


@pytest.fixture()
def plain_user(db_session: Session) -> User:
    """A signed-in user with no catalog role."""
    return _make_user(db_session, "user_one", "user")


@pytest.fixture()
def category(db_session: Session) -> Category:
    cat = Category(name="Concrete")
    db_session.add(cat)
    db_session.commit()
    db_session.refresh(cat)
    return cat


@pytest.fixture()
def subcategory(db_session: Session, category: Category) -> Subcategory:
    sub = Subcategory(name="Ready Mix", category_id=category.id)
    db_session.add(sub)
    db_session.commit()
    db_session.refresh(sub)
    return sub


@pytest.fixture()
def template(db_session: Session, category: Category) -> MaterialTemplate:
    tpl = MaterialTemplate(name="Cement", code="CEM-01", category_id=category.id)
    db_session.add(tpl)
    db_session.commit()
    db_session.refresh(tpl)
    return tpl


@pytest.fixture()
def shop(db_session: Session, supplier_user: User) -> Shop:
    """An approved shop owned by the supplier fixture."""
    s = Shop(name="Acme Building Supplies", city="Pune", owner_id=supplier_user.id, approved=True)
    db_session.add(s)
    db_session.commit()
    db_session.refresh(s)
    return s


@pytest.fixture()
def submission(db_session: Session, template: MaterialTemplate, shop: Shop, supplier_user: User):
    sub = MaterialSubmission(
        template_id=template.id,
        shop_id=shop.id,
        rate=Decimal("350"),
        unit="bag",
        brand_name="UltraTech",
        technical_specification="OPC 53 grade",
        submitted_by_id=supplier_user.id,
    )
    db_session.add(sub)
    db_session.commit()
    db_session.refresh(sub)
    return sub


@pytest.fixture()
def pending_material(db_session: Session, shop: Shop) -> Material:
    m = Material(name="River Sand", code="SAND-01", rate=Decimal("42"), shop_id=shop.id, unit="cft")
    db_session.add(m)
    db_session.commit()
    db_session.refresh(m)
    return m


@pytest.fixture()
def project(db_session: Session, admin_user: User) -> BoqProject:
    p = BoqProject(name="Tower A", client="Acme Realty", budget="5000000", created_by_id=admin_user.id)
    db_session.add(p)
    db_session.commit()
    db_session.refresh(p)
    return p


@pytest.fixture()
def version(db_session: Session, project: BoqProject) -> BoqVersion:
    v = BoqVersion(
        project_id=project.id,
        version_number=1,
        project_name=project.name,
        project_client=project.client,
    )
    db_session.add(v)
    db_session.commit()
    db_session.refresh(v)
    return v


@pytest.fixture()
def items(db_session: Session, project: BoqProject, version: BoqVersion) -> list[BoqItem]:
    rows = [
        BoqItem(
            project_id=project.id,
            version_id=version.id,
            estimator="flooring",
            table_data={"product_name": "Vitrified Tile", "step11_items": [{"qty": 120}]},
        ),
        BoqItem(
            project_id=project.id,
            version_id=version.id,
            estimator="painting",
            table_data={"product_name": "Emulsion", "step11_items": [{"qty": 40}]},
        ),
    ]
    db_session.add_all(rows)
    db_session.commit()
    for r in rows:
        db_session.refresh(r)
    return rows


# ── Clients ──────────────────────────────────────────────────────────


def _client_for(db_session: Session, user: User | None) -> TestClient:
    """TestClient whose require_user resolves to `user` (or stays real when None).

    Role gates depend on require_user, so one override drives every gate.
    """
    from boqcore.database import get_db
    from boqcore.dependencies import require_user
    from boqcore.main import app

    def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db
    if user is not None:
        app.dependency_overrides[require_user] = lambda: user
    return TestClient(app)


@pytest.fixture()
def client(db_session: Session, admin_user: User):
    """FastAPI TestClient authenticated as an admin."""
    from boqcore.main import app

    with _client_for(db_session, admin_user) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def supplier_client(db_session: Session, supplier_user: User):
    from boqcore.main import app

    with _client_for(db_session, supplier_user) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def user_client(db_session: Session, plain_user: User):
    """Signed-in user without a catalog role."""
    from boqcore.main import app

    with _client_for(db_session, plain_user) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def anon_client(db_session: Session):
    """No session cookie: require_user runs for real and raises 401."""
    from boqcore.main import app

    with _client_for(db_session, None) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def login_as():
    """Switch the signed-in user mid-test: login_as(supplier_user)."""
    from boqcore.dependencies import require_user
    from boqcore.main import app

    def _login(user: User) -> None:
        app.dependency_overrides[require_user] = lambda: user

    return _login
