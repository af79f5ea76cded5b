import os

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RESEND_API_KEY"] = ""

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.core.hashing import hash_password
from app.core.jwt import create_access_token
from app.database import Base, get_db
from app.models.customers import Customer
from app.models.employees import Employee
from app.models.price_history import PriceHistory
from app.models.products import Product
from app.models.sale_details import SaleDetail
from app.models.sales import Sale
from app.models.users import User


engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# --------------------------------------------------------------------
# DATABASE / CLIENT
# --------------------------------------------------------------------
@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# --------------------------------------------------------------------
# USERS
# --------------------------------------------------------------------
def make_user(db, email, role="user", password="S3cure-pass!"):
    user = User(
        email=email,
        full_name=email.split("@")[0].title(),
        password_hash=hash_password(password),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user):
    token = create_access_token(data={"sub": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def owner(db):
    return make_user(db, "owner@example.com", role="owner")


@pytest.fixture
def admin(db):
    return make_user(db, "admin@example.com", role="admin")


@pytest.fixture
def staff(db):
    return make_user(db, "staff@example.com", role="user")


# --------------------------------------------------------------------
# SALES DATA
# --------------------------------------------------------------------
def add_sale(db, transno, salesdate, custno="C0001", empno="E001", lines=()):
    db.add(Sale(transno=transno, salesdate=salesdate, custno=custno, empno=empno))
    for prodcode, quantity in lines:
        db.add(SaleDetail(transno=transno, prodcode=prodcode, quantity=quantity))
    db.commit()


@pytest.fixture
def sales_data(db):
    """Customer C0001 with two sales of P1 priced from two price history entries."""
    db.add(Customer(custno="C0001", custname="Acme Trading", address="12 Harbor Rd", payterm="30D"))
    db.add(Customer(custno="C0002", custname="Blue Lantern Supply", address=None, payterm="COD"))
    db.add(Employee(empno="E001", firstname="Jane", lastname="Cruz"))
    db.add(Product(prodcode="P1", description="Widget", unit="pc"))
    db.add(Product(prodcode="P2", description="Gadget", unit="box"))
    db.add(PriceHistory(prodcode="P1", effdate=date(2024, 1, 1), unitprice=Decimal("10.00")))
    db.add(PriceHistory(prodcode="P1", effdate=date(2024, 2, 1), unitprice=Decimal("12.00")))
    db.commit()

    add_sale(db, "T0001", date(2024, 1, 10), lines=[("P1", 3)])
    add_sale(db, "T0002", date(2024, 2, 5), lines=[("P1", 3)])
    return db
