"""
Authentication blueprint: signup, login and logout under /auth.
"""

from flask import Blueprint

auth_bp = Blueprint(
    'auth',
    __name__,
    url_prefix='/auth',
    template_folder='../templates',
)

# Registers the routes on the blueprint; must stay below auth_bp.
from houseofplants.auth import routes  # noqa: E402, F401
