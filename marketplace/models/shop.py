# marketplace/models/shop.py
from datetime import datetime
from marketplace.extensions import db


class Shop(db.Model):
    __tablename__ = "shop"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    description = db.Column(db.Text, nullable=True)
    logo = db.Column(db.String(255), nullable=True)
    is_blacklisted = db.Column(db.Boolean, nullable=False, default=False, index=True)

    vendor_id = db.Column(db.Integer, db.ForeignKey("vendor.id"), nullable=False)
    vendor = db.relationship("Vendor", back_populates="shops")

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    products = db.relationship("Product", back_populates="shop", lazy=True)

    def __repr__(self):
        flag = " BLACKLISTED" if self.is_blacklisted else ""
        return f"<Shop #{self.id} {self.name}{flag}>"
