# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify
from sqlalchemy.exc import SQLAlchemyError

from storefront.infrastructure.health import check_credential_store
from storefront.shared.logging import logger


class MiscController:
    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("misc", __name__)
        bp.add_url_rule("/", view_func=self.index, methods=["GET"])
        bp.add_url_rule("/api/health", view_func=self.health, methods=["GET"])
        return bp

    def index(self):
        return "welcome"

    def health(self):
        try:
            health = check_credential_store()
        except SQLAlchemyError as exc:
            logger.error(f"health: credential store unreachable: {type(exc).__name__}")
            return (
                jsonify({"ok": False, "database": "error"}),
                HTTPStatus.SERVICE_UNAVAILABLE,
            )
        return jsonify(health.to_dict()), HTTPStatus.OK
