"""
Pytest fixtures for Sutradhar backend tests.

Provides an in-memory database, a test client, buyer/seller accounts with
bearer tokens, and a small published catalog spread over two shops.
"""

import pytest
from sutradhar import create_app
from sutradhar.extensions import db
from sutradhar.models import Seller, Product, Offer
from sutradhar.services.auth_service import sign_up
from sutradhar.services.session_service import create_session


PASSWORD = "Password123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'LOG_LEVEL': 'WARNING',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function', autouse=True)
def db_session(app):
    """Fresh data for each test."""
    meta = db.metadata
    for table in reversed(meta.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()

    yield db.session

    db.session.rollback()


def make_user(email: str, role: str = "buyer", display_name: str | None = None):
    return sign_up(email, PASSWORD, display_name=display_name, role=role)


def token_for(user) -> str:
    _, token = create_session(user.id)
    return token


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


def make_shop(user, shop_name: str, **kwargs) -> Seller:
    seller = Seller(user_id=user.id, shop_name=shop_name, **kwargs)
    db.session.add(seller)
    db.session.commit()
    return seller


def make_product(seller: Seller, title: str, price: float, tags=None, published: bool = True, **kwargs) -> Product:
    product = Product(
        seller_id=seller.id,
        title=title,
        price=price,
        stock=kwargs.pop("stock", 10),
        photos=kwargs.pop("photos", []),
        tags=tags or [],
        published=published,
        **kwargs,
    )
    db.session.add(product)
    db.session.commit()
    return product


def make_offer(code: str, offer_type: str = "percent", value: float = 20, **kwargs) -> Offer:
    offer = Offer(code=code, type=offer_type, value=value, **kwargs)
    db.session.add(offer)
    db.session.commit()
    return offer


@pytest.fixture
def buyer(db_session):
    return make_user("meera@example.com", display_name="Meera")


@pytest.fixture
def buyer_headers(buyer):
    return auth_headers(token_for(buyer))


@pytest.fixture
def other_buyer(db_session):
    return make_user("arjun@example.com", display_name="Arjun")


@pytest.fixture
def weaver(db_session):
    """Seller account with a verified textile shop."""
    user = make_user("weaver@example.com", role="seller", display_name="Lakshmi")
    shop = make_shop(user, "Kanchi Looms", region="Tamil Nadu", verified_badge=True, rating=4.8)
    return user, shop


@pytest.fixture
def potter(db_session):
    user = make_user("potter@example.com", role="seller", display_name="Ravi")
    shop = make_shop(user, "Khurja Clay Works", region="Uttar Pradesh")
    return user, shop


@pytest.fixture
def weaver_headers(weaver):
    user, _ = weaver
    return auth_headers(token_for(user))


@pytest.fixture
def saree(weaver):
    _, shop = weaver
    return make_product(shop, "Silk Saree", 3000.0, tags=["Textiles", "Silk"])


@pytest.fixture
def stole(weaver):
    _, shop = weaver
    return make_product(shop, "Cotton Stole", 500.0, tags=["Textiles"])


@pytest.fixture
def vase(potter):
    _, shop = potter
    return make_product(shop, "Blue Pottery Vase", 1000.0, tags=["Pottery", "Home Decor"])
