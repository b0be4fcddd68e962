"""
Pytest fixtures for FitTrack backend tests.

Each test gets a fresh app bound to an in-memory SQLite database with every
table created, one user per role, and bearer headers for each of them.
"""

from datetime import timedelta

import pytest

from fittrack import create_app
from fittrack.extensions import db
from fittrack.models import Customer, Fitting, Measurement, User
from fittrack.services import permission_service, token_service
from fittrack.services.auth_service import hash_password
from fittrack.time_utils import utcnow

PASSWORD = "Password123!"


@pytest.fixture()
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'JWT_SECRET': 'test-secret',
        'BCRYPT_ROUNDS': 4,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    """Create test client."""
    return app.test_client()


def _make_user(name, email, role, branch=None):
    user = User(name=name, email=email, password_hash=hash_password(PASSWORD), role=role, branch=branch)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture()
def admin(app):
    return _make_user("Ada Admin", "admin@fittrack.local", "admin")


@pytest.fixture()
def manager(app):
    return _make_user("Mina Manager", "manager@fittrack.local", "manager", branch="Downtown")


@pytest.fixture()
def tailor(app):
    return _make_user("Tom Tailor", "tailor@fittrack.local", "tailor", branch="Downtown")


@pytest.fixture()
def other_tailor(app):
    return _make_user("Tess Tailor", "tess@fittrack.local", "tailor", branch="Uptown")


@pytest.fixture()
def customer_user(app):
    return _make_user("Cleo Customer", "cleo@example.com", "customer")


def auth_headers(user) -> dict:
    """Helper to create Authorization headers."""
    token = token_service.generate_token({"userId": user.id, "email": user.email, "role": user.role})
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture()
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture()
def manager_headers(manager):
    return auth_headers(manager)


@pytest.fixture()
def tailor_headers(tailor):
    return auth_headers(tailor)


@pytest.fixture()
def other_tailor_headers(other_tailor):
    return auth_headers(other_tailor)


@pytest.fixture()
def customer_headers(customer_user):
    return auth_headers(customer_user)


@pytest.fixture()
def seeded_permissions(app):
    permission_service.seed_permissions()


@pytest.fixture()
def make_customer(app):
    def factory(name="Jane Doe", phone=None, email=None, address=None):
        customer = Customer(name=name, phone=phone, email=email, address=address)
        db.session.add(customer)
        db.session.commit()
        return customer
    return factory


@pytest.fixture()
def make_measurement(app, make_customer):
    counter = {"n": 0}

    def factory(customer=None, created_by=None, units="cm", branch=None, age_days=0, updated_days=None, **fields):
        counter["n"] += 1
        customer = customer or make_customer(name=f"Client {counter['n']}", phone=f"555-000-{counter['n']:04d}")
        created_at = utcnow() - timedelta(days=age_days)
        updated_at = utcnow() - timedelta(days=updated_days if updated_days is not None else age_days)
        values = {"chest": 100, "neck": 40}
        values.update(fields)
        measurement = Measurement(
            entry_id=f"ENT-TEST-{counter['n']:04d}",
            customer_id=customer.id,
            units=units,
            created_by=created_by.id if created_by else None,
            branch=branch,
            created_at=created_at,
            updated_at=updated_at,
            **values,
        )
        db.session.add(measurement)
        db.session.commit()
        return measurement
    return factory


@pytest.fixture()
def make_fitting(app, make_customer):
    def factory(tailor, customer=None, days_ahead=3, status="scheduled", branch=None):
        customer = customer or make_customer(name="Fitting Client", phone=f"555-fit-{tailor.id}")
        fitting = Fitting(
            customer_id=customer.id,
            tailor_id=tailor.id,
            scheduled_at=utcnow() + timedelta(days=days_ahead),
            status=status,
            branch=branch,
        )
        db.session.add(fitting)
        db.session.commit()
        return fitting
    return factory
