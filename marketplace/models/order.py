# marketplace/models/order.py
from datetime import datetime
from marketplace.extensions import db


class OrderStatus:
    PENDING = "PENDING"
    ONGOING = "ONGOING"
    DELIVERED = "DELIVERED"


class PaymentStatus:
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"


class Order(db.Model):
    __tablename__ = "order"

    id = db.Column(db.Integer, primary_key=True)

    sub_total = db.Column(db.Numeric(10, 2), nullable=False)
    total = db.Column(db.Numeric(10, 2), nullable=False)
    discounts = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    coupon_id = db.Column(db.String(64), nullable=True)

    customer_id = db.Column(db.Integer, db.ForeignKey("customer.id"), nullable=False, index=True)
    customer = db.relationship("Customer", back_populates="orders")

    # pairing with the payment gateway
    transaction_id = db.Column(db.String(64), unique=True, index=True, nullable=False)
    payment_status = db.Column(db.String(16), nullable=False, default=PaymentStatus.PENDING)
    status = db.Column(db.String(16), nullable=False, default=OrderStatus.PENDING)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    items = db.relationship(
        "OrderItem", back_populates="order", lazy=True, cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Order #{self.id} – {self.status} – TXN:{self.transaction_id}>"
