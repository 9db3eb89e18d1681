import os
import tempfile

# Point the app at a throwaway database before anything imports config/database
_tmpdir = tempfile.mkdtemp(prefix="almoxarifado-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_tmpdir, "test.db")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.pop("ADMIN_EMAIL", None)
os.environ.pop("ADMIN_PASSWORD", None)

import pytest
from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine
from main import app
from models.product import Product
from models.supplier import Supplier
from models.truss import Truss
from models.users import User
from utils.hashing import get_password_hash
from utils.tokenJWT import create_access_token


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def _make_user(email, role, authorized=True):
    session = SessionLocal()
    try:
        user = User(
            email=email,
            password_hash=get_password_hash("secret123"),
            role=role,
            display_name=email.split("@")[0],
            is_authorized=authorized,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user.id
    finally:
        session.close()


def _headers(email):
    token = create_access_token(data={"sub": email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers():
    _make_user("admin@warehouse.io", "admin")
    return _headers("admin@warehouse.io")


@pytest.fixture
def storekeeper_headers():
    _make_user("keeper@warehouse.io", "storekeeper")
    return _headers("keeper@warehouse.io")


@pytest.fixture
def purchasing_headers():
    _make_user("buyer@warehouse.io", "purchasing")
    return _headers("buyer@warehouse.io")


@pytest.fixture
def make_user():
    return _make_user


@pytest.fixture
def auth_headers():
    return _headers


@pytest.fixture
def product_factory():
    def _create(code="CIM-01", name="Cimento CP II", current_stock=0, min_stock=10, category="Construção"):
        session = SessionLocal()
        try:
            product = Product(code=code, name=name, current_stock=current_stock,
                              min_stock=min_stock, category=category, unit="saco")
            session.add(product)
            session.commit()
            session.refresh(product)
            return product.id
        finally:
            session.close()
    return _create


@pytest.fixture
def supplier_factory():
    def _create(code="SUP-01", name="Casa do Construtor", active=True):
        session = SessionLocal()
        try:
            supplier = Supplier(code=code, name=name, cnpj="12.345.678/0001-90", active=active)
            session.add(supplier)
            session.commit()
            session.refresh(supplier)
            return supplier.id
        finally:
            session.close()
    return _create


@pytest.fixture
def truss_factory():
    def _create(code="TR-01", name="Treliça 3m", current_stock=5):
        session = SessionLocal()
        try:
            truss = Truss(code=code, name=name, current_stock=current_stock, max_stock=10)
            session.add(truss)
            session.commit()
            session.refresh(truss)
            return truss.id
        finally:
            session.close()
    return _create
