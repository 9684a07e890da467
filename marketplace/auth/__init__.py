# marketplace/auth/__init__.py

# Single blueprint object shared by login and password-reset views.
from . import login_routes as _login

auth_bp = _login.auth_bp

# Importing attaches the reset views to auth_bp
from . import password_reset_routes  # noqa: F401,E402
