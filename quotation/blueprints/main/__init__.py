from flask import Blueprint

bp = Blueprint("main", __name__)

# Import submodules so their @bp.route decorators register
from . import routes
