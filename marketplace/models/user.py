# marketplace/models/user.py
from datetime import datetime

from flask_login import UserMixin

from marketplace.extensions import db, bcrypt


class UserRole:
    ADMIN = "ADMIN"
    VENDOR = "VENDOR"
    CUSTOMER = "CUSTOMER"

    ALL = (ADMIN, VENDOR, CUSTOMER)


class UserStatus:
    ACTIVE = "ACTIVE"
    BLOCKED = "BLOCKED"
    DELETED = "DELETED"

    ALL = (ACTIVE, BLOCKED, DELETED)


class User(db.Model, UserMixin):
    __tablename__ = "user"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(200), nullable=False)
    role = db.Column(db.String(16), nullable=False, default=UserRole.CUSTOMER)
    status = db.Column(db.String(16), nullable=False, default=UserStatus.ACTIVE)
    needs_password_change = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    customer = db.relationship("Customer", back_populates="user", uselist=False)
    vendor = db.relationship("Vendor", back_populates="user", uselist=False)

    # --- Password handling ---------------------------------------------------
    def set_password(self, password: str) -> None:
        self.password_hash = bcrypt.generate_password_hash(password).decode("utf-8")

    def check_password(self, password: str) -> bool:
        try:
            return bcrypt.check_password_hash(self.password_hash, password)
        except ValueError:
            # malformed hash stored (e.g. imported account)
            return False

    @property
    def is_active(self):
        return self.status == UserStatus.ACTIVE

    @property
    def profile(self):
        if self.role == UserRole.CUSTOMER:
            return self.customer
        if self.role == UserRole.VENDOR:
            return self.vendor
        return None

    def get_id(self):
        return str(self.id)

    def __repr__(self):
        return f"<User {self.email} role={self.role} status={self.status}>"
