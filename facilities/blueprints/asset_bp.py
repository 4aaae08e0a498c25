"""
Hotel Facilities Platform
Asset registry blueprint.

Endpoints:
    GET    /api/v1/assets                     {assets, message}
    POST   /api/v1/assets
    PATCH  /api/v1/assets/<id>                {status?, condition?}
    POST   /api/v1/assets/<id>/generate-qr    issue a new QR code
    GET    /api/v1/assets/<id>/qr.png         QR label image
"""

import logging

from flask import Blueprint, Response, jsonify

from facilities.auth import require_session
from facilities.blueprints import json_body, register_error_handlers
from facilities.services import asset_service

logger = logging.getLogger(__name__)

asset_bp = Blueprint("assets", __name__, url_prefix="/api/v1")
register_error_handlers(asset_bp)


@asset_bp.route("/assets", methods=["GET"])
@require_session
def list_assets():
    return jsonify({"assets": asset_service.list_assets(), "message": "Assets fetched successfully"})


@asset_bp.route("/assets", methods=["POST"])
@require_session
def create_asset():
    asset = asset_service.create_asset(json_body())
    return jsonify(asset_service.asset_summary(asset)), 201


@asset_bp.route("/assets/<int:asset_id>", methods=["PATCH"])
@require_session
def update_asset(asset_id):
    asset = asset_service.update_asset(asset_id, json_body())
    return jsonify(asset_service.asset_summary(asset))


@asset_bp.route("/assets/<int:asset_id>/generate-qr", methods=["POST"])
@require_session
def generate_qr(asset_id):
    asset = asset_service.regenerate_qr(asset_id)
    return jsonify(asset_service.asset_summary(asset))


@asset_bp.route("/assets/<int:asset_id>/qr.png", methods=["GET"])
@require_session
def qr_image(asset_id):
    return Response(asset_service.qr_png(asset_id), mimetype="image/png")
