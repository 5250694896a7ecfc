from __future__ import annotations

import json

import pydantic
from flask import Blueprint, current_app, jsonify, request

import db
from api.schemas.api_responses import ok
from api.schemas.requests import WatchlistAddRequest
from api.services import watchlist_service
from utils.errors import ValidationError

watchlist_v1_bp = Blueprint("watchlist_v1", __name__, url_prefix="/watchlist")


@watchlist_v1_bp.get("")
def list_watchlist():
    session = db.SessionLocal()
    try:
        items = watchlist_service.list_items(session)
        return jsonify(ok([watchlist_service.serialize_item(i) for i in items]))
    finally:
        session.close()


@watchlist_v1_bp.post("")
def add_to_watchlist():
    """Add a ticker. 201 when created, 200 when it was already listed."""

    try:
        body = WatchlistAddRequest.model_validate(request.get_json(silent=True) or {})
    except pydantic.ValidationError as e:
        raise ValidationError(
            "Invalid request body",
            details={"errors": json.loads(e.json(include_url=False))},
        ) from e

    session = db.SessionLocal()
    try:
        item, created = watchlist_service.add_ticker(
            session, current_app.extensions["form4_service"], body.ticker
        )
        return jsonify(ok(watchlist_service.serialize_item(item))), (
            201 if created else 200
        )
    finally:
        session.close()


@watchlist_v1_bp.delete("/<ticker>")
def remove_from_watchlist(ticker: str):
    session = db.SessionLocal()
    try:
        watchlist_service.remove_ticker(session, ticker)
        return jsonify(ok({"ticker": ticker.strip().upper(), "removed": True}))
    finally:
        session.close()
