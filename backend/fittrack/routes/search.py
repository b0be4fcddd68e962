# Overview: Flask API route for global search.

from flask import Blueprint, g, jsonify, request

from ..decorators import current_principal, require_access, require_auth
from ..permissions import Action, Resource
from ..services import search_service

search_bp = Blueprint("search", __name__, url_prefix="/api/search")


@search_bp.get("")
@require_auth
@require_access(Resource.SEARCH, Action.VIEW)
def search():
    results = search_service.search(current_principal(), g.access, request.args.get("q"))
    return jsonify({"results": results})
