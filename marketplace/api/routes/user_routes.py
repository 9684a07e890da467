from __future__ import annotations

from flask import Blueprint, request, current_app
from flask_login import current_user

from marketplace.api.utils.pagination import calculate_pagination, paginate_query
from marketplace.api.utils.query_filters import build_equality_filters, search_condition, split_params
from marketplace.api.utils.responses import get_payload, payload_str, send_response
from marketplace.api.utils.serializers import customer_dict, user_dict, vendor_dict
from marketplace.auth.guards import auth_required
from marketplace.auth.login_routes import MIN_PASSWORD_LENGTH
from marketplace.errors import ApiError
from marketplace.extensions import db
from marketplace.models import Customer, User, UserRole, UserStatus, Vendor

api_users = Blueprint("api_users", __name__, url_prefix="/api/user")

USER_SEARCH_FIELDS = ("email",)
PROFILE_FIELDS = {"name": "name", "phone": "phone", "address": "address"}


def _user_with_profile(u: User) -> dict:
    data = user_dict(u)
    if u.role == UserRole.CUSTOMER:
        data["customer"] = customer_dict(u.customer)
    elif u.role == UserRole.VENDOR:
        data["vendor"] = vendor_dict(u.vendor)
    return data


def _new_user(email: str, password: str, role: str) -> User:
    email = (email or "").strip().lower()
    if not email or "@" not in email:
        raise ApiError(400, "Invalid 'email'")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ApiError(400, f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if User.query.filter_by(email=email).first():
        raise ApiError(409, f"User with email {email} already exists")

    user = User(email=email, role=role, status=UserStatus.ACTIVE)
    user.set_password(password)
    db.session.add(user)
    return user


def _profile_payload(data: dict, key: str) -> dict:
    profile = data.get(key)
    if not isinstance(profile, dict):
        raise ApiError(400, f"Missing '{key}' object")
    name = payload_str(profile, "name")
    if not name:
        raise ApiError(400, f"Missing '{key}.name'")
    return profile


@api_users.post("/create-customer")
def create_customer():
    data = get_payload()
    profile = _profile_payload(data, "customer")
    user = _new_user(payload_str(profile, "email"), payload_str(data, "password", strip=False), UserRole.CUSTOMER)
    db.session.add(Customer(
        name=profile["name"].strip(),
        user=user,
        email=user.email,
        phone=payload_str(profile, "phone") or None,
        address=payload_str(profile, "address") or None,
        profile_photo=payload_str(profile, "profilePhoto") or None,
    ))
    db.session.commit()
    current_app.logger.info("[USER] customer created uid=%s", user.id)
    return send_response(_user_with_profile(user), "Customer created", 201)


@api_users.post("/create-vendor")
def create_vendor():
    data = get_payload()
    profile = _profile_payload(data, "vendor")
    user = _new_user(payload_str(profile, "email"), payload_str(data, "password", strip=False), UserRole.VENDOR)
    db.session.add(Vendor(
        name=profile["name"].strip(),
        user=user,
        email=user.email,
        phone=payload_str(profile, "phone") or None,
        address=payload_str(profile, "address") or None,
        logo=payload_str(profile, "logo") or None,
    ))
    db.session.commit()
    current_app.logger.info("[USER] vendor created uid=%s", user.id)
    return send_response(_user_with_profile(user), "Vendor created", 201)


@api_users.post("/create-admin")
@auth_required(UserRole.ADMIN)
def create_admin():
    data = get_payload()
    user = _new_user(payload_str(data, "email"), payload_str(data, "password", strip=False), UserRole.ADMIN)
    user.needs_password_change = True
    db.session.commit()
    return send_response(user_dict(user), "Admin created", 201)


@api_users.get("/")
@auth_required(UserRole.ADMIN)
def list_users():
    params = calculate_pagination(request.args)
    search_term, filters = split_params(request.args)

    conditions = build_equality_filters(User, filters)
    search = search_condition(User, search_term, USER_SEARCH_FIELDS)
    if search is not None:
        conditions.append(search)

    rows, total = paginate_query(User.query.filter(*conditions), User, params)
    return send_response([_user_with_profile(u) for u in rows], "Users retrieved", meta=params.meta(total))


@api_users.get("/me")
@auth_required()
def get_me():
    return send_response(_user_with_profile(current_user), "Profile retrieved")


@api_users.patch("/me")
@auth_required(UserRole.CUSTOMER, UserRole.VENDOR)
def update_me():
    data = get_payload()
    profile = current_user.profile
    if profile is None:
        raise ApiError(404, "Profile not found")

    for key, attr in PROFILE_FIELDS.items():
        if key in data:
            value = payload_str(data, key) or None
            if attr == "name" and not value:
                raise ApiError(400, "Invalid 'name'")
            setattr(profile, attr, value)

    if current_user.role == UserRole.CUSTOMER and "profilePhoto" in data:
        profile.profile_photo = payload_str(data, "profilePhoto") or None
    if current_user.role == UserRole.VENDOR and "logo" in data:
        profile.logo = payload_str(data, "logo") or None

    db.session.commit()
    return send_response(_user_with_profile(current_user), "Profile updated")


@api_users.patch("/<int:user_id>/status")
@auth_required(UserRole.ADMIN)
def change_status(user_id: int):
    status = payload_str(get_payload(), "status").upper()
    if status not in (UserStatus.ACTIVE, UserStatus.BLOCKED):
        raise ApiError(400, "Status must be ACTIVE or BLOCKED")

    user = db.session.get(User, user_id)
    if not user or user.status == UserStatus.DELETED:
        raise ApiError(404, "User not found")

    user.status = status
    db.session.commit()
    current_app.logger.info("[USER] uid=%s status -> %s", user.id, status)
    return send_response(user_dict(user), "Status changed")


@api_users.delete("/<int:user_id>")
@auth_required(UserRole.ADMIN)
def delete_user(user_id: int):
    user = db.session.get(User, user_id)
    if not user or user.status == UserStatus.DELETED:
        raise ApiError(404, "User not found")

    user.status = UserStatus.DELETED
    if user.profile is not None:
        user.profile.is_deleted = True
    db.session.commit()
    return send_response(user_dict(user), "User deleted")
