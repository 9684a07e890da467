# marketplace/models/vendor.py
from datetime import datetime
from marketplace.extensions import db


class Vendor(db.Model):
    __tablename__ = "vendor"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), db.ForeignKey("user.email"), unique=True, nullable=False)
    phone = db.Column(db.String(32), nullable=True)
    address = db.Column(db.Text, nullable=True)
    logo = db.Column(db.String(255), nullable=True)
    is_deleted = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    user = db.relationship("User", back_populates="vendor")
    shops = db.relationship("Shop", back_populates="vendor", lazy=True)

    def __repr__(self):
        return f"<Vendor #{self.id} {self.email}>"
