from typing import Annotated
from urllib.parse import quote

import structlog
from flask import Blueprint, current_app, jsonify, request

from nodestore.errors import BadRequestAlertError
from nodestore.node import Node, NodeService, customize_node_bindings
from nodestore.paging import Pageable, Sort, pagination_headers
from nodestore.predicate import Predicate, QueryPredicate, query_predicate

logger = structlog.get_logger(__name__)

bp = Blueprint("nodes", __name__)

node_service = NodeService()


def json_object() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise BadRequestAlertError("Request body must be a JSON object", "node", "invalidbody")
    return data


def node_from_body(data: dict) -> Node:
    try:
        return Node.from_document(data)
    except ValueError as e:
        raise BadRequestAlertError(str(e), "node", "invalidbody") from e


def alert_headers(message: str, param: str) -> dict[str, str]:
    app_name = current_app.config["APP_NAME"]
    return {
        f"X-{app_name}-alert": message,
        f"X-{app_name}-params": quote(param or ""),
    }


@bp.route("/nodes", methods=["POST"])
def create_node():
    """Create a new node."""
    data = json_object()
    logger.debug("REST request to save Node", node=data)

    node = node_service.create(node_from_body(data))

    headers = alert_headers("nodeManagement.created", node.id)
    headers["Location"] = f"/api/nodes/{node.id}"
    return jsonify(node), 201, headers


@bp.route("/nodes", methods=["PUT"])
def update_node():
    """Update an existing node."""
    data = json_object()
    logger.debug("REST request to update Node", node=data)

    node = node_service.update(node_from_body(data))
    if node is None:
        return jsonify({"error": "Node not found"}), 404

    return jsonify(node), 200, alert_headers("nodeManagement.updated", node.id)


@bp.route("/nodes", methods=["GET"])
def list_nodes():
    """List nodes one page at a time."""
    pageable = Pageable.from_args(request.args)
    page = node_service.list(pageable)
    headers = pagination_headers(request.base_url, request.args, page)
    return jsonify(page.content), 200, headers


@bp.route("/nodes/<node_id>", methods=["GET"])
def get_node(node_id: str):
    """Get node by ID."""
    logger.debug("REST request to get Node", node_id=node_id)
    node = node_service.repository.find_by_id(node_id)
    if not node:
        return jsonify({"error": "Node not found"}), 404
    return jsonify(node)


@bp.route("/nodes/<node_id>", methods=["DELETE"])
def delete_node(node_id: str):
    """Delete a node."""
    logger.debug("REST request to delete Node", node_id=node_id)
    node_service.repository.delete_by_id(node_id)
    return "", 204, alert_headers("nodeManagement.deleted", node_id)


@bp.route("/search/nodes", methods=["GET"])
@query_predicate
def search_nodes(
    predicate: Annotated[Predicate, QueryPredicate(bindings=customize_node_bindings)],
) -> list[Node]:
    """Search nodes with filters taken from the query string."""
    sort = Sort.parse(request.args.getlist("sort"))
    logger.debug("search for node", sort=str(sort), predicate=predicate)
    return node_service.repository.search(predicate, sort)


@bp.route("/search/nodes/meta", methods=["POST"])
def search_nodes_by_meta():
    """Search nodes by ``meta.*`` entries in the JSON body."""
    data = json_object()
    sort = Sort.parse(request.args.getlist("sort"))
    return jsonify(node_service.find_by_meta(data, sort))
