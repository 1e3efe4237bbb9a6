from flask import Blueprint

bp = Blueprint("quotation", __name__)

from . import routes  # noqa: E402,F401
