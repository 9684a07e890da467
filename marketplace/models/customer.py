# marketplace/models/customer.py
from datetime import datetime
from marketplace.extensions import db


class Customer(db.Model):
    __tablename__ = "customer"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), db.ForeignKey("user.email"), unique=True, nullable=False)
    phone = db.Column(db.String(32), nullable=True)
    address = db.Column(db.Text, nullable=True)
    profile_photo = db.Column(db.String(255), nullable=True)
    is_deleted = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    user = db.relationship("User", back_populates="customer")
    orders = db.relationship("Order", back_populates="customer", lazy=True)

    def __repr__(self):
        return f"<Customer #{self.id} {self.email}>"
