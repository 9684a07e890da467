from decimal import Decimal

import pytest

from marketplace.app import create_app
from marketplace.auth.tokens import ACCESS, REFRESH, create_token
from marketplace.config import TestConfig
from marketplace.extensions import db
from marketplace.models import (
    Category,
    Customer,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    Product,
    Shop,
    User,
    UserRole,
    UserStatus,
    Vendor,
)
from marketplace.services import order_service

PASSWORD = "secret123"


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_ctx(app):
    """Application context for calling services and models directly."""
    with app.app_context():
        yield


class Factory:
    """Creates rows in their own app context and hands back plain ids/tokens.

    Requests issued by the test client then run in fresh contexts, so the
    logged-in user is resolved from each request's own token.
    """

    def __init__(self, app):
        self.app = app
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    def user(self, role=UserRole.CUSTOMER, email=None, status=UserStatus.ACTIVE, name=None) -> dict:
        n = self._next()
        email = email or f"{role.lower()}{n}@example.com"
        with self.app.app_context():
            user = User(email=email, role=role, status=status)
            user.set_password(PASSWORD)
            db.session.add(user)
            profile = None
            if role == UserRole.CUSTOMER:
                profile = Customer(user=user, email=email, name=name or f"Customer {n}")
            elif role == UserRole.VENDOR:
                profile = Vendor(user=user, email=email, name=name or f"Vendor {n}")
            if profile is not None:
                db.session.add(profile)
            db.session.commit()
            token = create_token(ACCESS, email, role)
            return {
                "id": user.id,
                "email": email,
                "role": role,
                "profile_id": profile.id if profile is not None else None,
                "token": token,
                "refresh_token": create_token(REFRESH, email, role),
                "headers": {"Authorization": f"Bearer {token}"},
            }

    def admin(self, **kw) -> dict:
        return self.user(role=UserRole.ADMIN, **kw)

    def vendor(self, **kw) -> dict:
        return self.user(role=UserRole.VENDOR, **kw)

    def customer(self, **kw) -> dict:
        return self.user(role=UserRole.CUSTOMER, **kw)

    def category(self, name=None) -> int:
        with self.app.app_context():
            c = Category(name=name or f"Category {self._next()}")
            db.session.add(c)
            db.session.commit()
            return c.id

    def shop(self, vendor_profile_id: int, name=None, blacklisted=False) -> int:
        with self.app.app_context():
            s = Shop(name=name or f"Shop {self._next()}", vendor_id=vendor_profile_id, is_blacklisted=blacklisted)
            db.session.add(s)
            db.session.commit()
            return s.id

    def product(self, shop_id: int, category_id: int, name=None, price="100.00", inventory=10) -> int:
        with self.app.app_context():
            p = Product(
                name=name or f"Product {self._next()}",
                price=Decimal(price),
                inventory=inventory,
                shop_id=shop_id,
                category_id=category_id,
            )
            db.session.add(p)
            db.session.commit()
            return p.id

    def order(self, customer_profile_id: int, lines, status=OrderStatus.PENDING,
              payment_status=PaymentStatus.PENDING, total="100.00") -> int:
        """``lines`` is a list of (shop_id, product_id) pairs."""
        with self.app.app_context():
            o = Order(
                sub_total=Decimal(total),
                total=Decimal(total),
                discounts=Decimal("0"),
                customer_id=customer_profile_id,
                transaction_id=f"TXN-TEST-{self._next()}",
                status=status,
                payment_status=payment_status,
                items=[
                    OrderItem(shop_id=shop_id, product_id=product_id, quantity=1, price=Decimal(total))
                    for shop_id, product_id in lines
                ],
            )
            db.session.add(o)
            db.session.commit()
            return o.id


@pytest.fixture
def factory(app):
    return Factory(app)


@pytest.fixture
def catalog(factory):
    """A vendor with one shop and one product, plus a customer."""
    vendor = factory.vendor()
    customer = factory.customer()
    category_id = factory.category("Shoes")
    shop_id = factory.shop(vendor["profile_id"], name="Main street shoes")
    product_id = factory.product(shop_id, category_id, price="50.00")
    return {
        "vendor": vendor,
        "customer": customer,
        "category_id": category_id,
        "shop_id": shop_id,
        "product_id": product_id,
    }


@pytest.fixture
def gateway(monkeypatch):
    """Replaces the payment gateway call made during checkout."""
    calls = []

    def fake_initiate_payment(amount, transaction_id, customer, order_id):
        calls.append({
            "amount": amount,
            "transaction_id": transaction_id,
            "customer_email": customer.email,
            "order_id": order_id,
        })
        return {"result": "true", "payment_url": f"https://pay.example.com/{transaction_id}"}

    monkeypatch.setattr(order_service, "initiate_payment", fake_initiate_payment)
    return calls


def order_payload(shop_id: int, product_id: int, **overrides) -> dict:
    payload = {
        "subTotal": "100.00",
        "total": "90.00",
        "discounts": "10.00",
        "couponId": None,
        "items": [
            {
                "shopId": shop_id,
                "productId": product_id,
                "size": "M",
                "quantity": 2,
                "price": "50.00",
                "discount": "5.00",
            }
        ],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_payload():
    return order_payload
