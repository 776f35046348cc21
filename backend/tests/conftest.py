"""
Pytest fixtures for armory backend tests.

Provides test database setup, reference data (bases, assets, one user per
role), bearer-token headers, and the test client.
"""

import pytest
from armory import create_app
from armory.config import TestConfig
from armory.extensions import db
from armory.models import Asset, Base, Stock, User
from armory.services import token_service
from armory.services.access_policy import Principal
from armory.services.auth_service import hash_password


TEST_PASSWORD = "Password123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='session')
def password_hash(app):
    """bcrypt is deliberately slow; hash the shared test password once."""
    return hash_password(TEST_PASSWORD)


@pytest.fixture(scope='function')
def bases(db_session):
    """Three bases: Fort Bragg, Camp Pendleton, Norfolk Naval Base."""
    rows = [
        Base(name="Fort Bragg", location="North Carolina, USA"),
        Base(name="Camp Pendleton", location="California, USA"),
        Base(name="Norfolk Naval Base", location="Virginia, USA"),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows


@pytest.fixture(scope='function')
def asset(db_session):
    row = Asset(type="weapons", description="M4A1 Carbine")
    db_session.add(row)
    db_session.commit()
    return row


@pytest.fixture(scope='function')
def other_asset(db_session):
    row = Asset(type="vehicles", description="HUMVEE M1165")
    db_session.add(row)
    db_session.commit()
    return row


def _make_user(db_session, password_hash, *, name, email, role, base_id=None) -> User:
    user = User(name=name, email=email, password_hash=password_hash, role=role, base_id=base_id)
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def admin_user(db_session, password_hash):
    return _make_user(
        db_session, password_hash,
        name="General John Smith", email="admin@military.gov", role="admin",
    )


@pytest.fixture(scope='function')
def commander_user(db_session, password_hash, bases):
    """Commander at Fort Bragg (bases[0])."""
    return _make_user(
        db_session, password_hash,
        name="Colonel Mike Johnson", email="commander@fortbragg.mil", role="commander",
        base_id=bases[0].id,
    )


@pytest.fixture(scope='function')
def logistics_user(db_session, password_hash, bases):
    """Logistics officer at Camp Pendleton (bases[1])."""
    return _make_user(
        db_session, password_hash,
        name="Major Sarah Wilson", email="logistics@pendleton.mil", role="logistics",
        base_id=bases[1].id,
    )


@pytest.fixture(scope='function')
def seed(admin_user, commander_user, logistics_user, asset):
    """Full reference dataset: bases, an asset, and one user per role."""
    return {
        "admin": admin_user,
        "commander": commander_user,
        "logistics": logistics_user,
        "asset": asset,
    }


@pytest.fixture(scope='function')
def make_stock(db_session):
    """Factory: create a Stock row with explicit balances."""
    def _make(base, asset, *, opening=0, closing=0, assigned=0, expended=0) -> Stock:
        stock = Stock(
            base_id=base.id,
            asset_id=asset.id,
            opening_balance=opening,
            closing_balance=closing,
            assigned=assigned,
            expended=expended,
        )
        db_session.add(stock)
        db_session.commit()
        return stock
    return _make


def principal_for(user: User) -> Principal:
    return Principal(user_id=user.id, email=user.email, role=user.role, base_id=user.base_id)


def reload(obj):
    """Re-read a row so changes committed by a request are visible."""
    db.session.refresh(obj)
    return obj


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


def get_auth_token(client, email: str, password: str = TEST_PASSWORD) -> str:
    """Helper to get auth token for a user through the login endpoint."""
    response = client.post('/api/auth/login', json={
        'email': email,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


@pytest.fixture(scope='function')
def admin_headers(admin_user):
    return auth_headers(token_service.issue_token(admin_user))


@pytest.fixture(scope='function')
def commander_headers(commander_user):
    return auth_headers(token_service.issue_token(commander_user))


@pytest.fixture(scope='function')
def logistics_headers(logistics_user):
    return auth_headers(token_service.issue_token(logistics_user))
