# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from storefront.container import Container
from storefront.infrastructure.db import init_db
from storefront.infrastructure.signing_secret import ensure_signing_secret
from storefront.shared.config import AppConfig, load_config
from storefront.shared.logging import logger, setup_logging
from storefront.shared.middleware.error_handler import configure_error_handling
from storefront.shared.middleware.request_logger import configure_request_logging


def create_app(config: AppConfig | None = None) -> Flask:
    config = config or load_config()
    setup_logging(debug_mode=config.debug_logging)

    # Must succeed before anything can serve a request.
    signing_secret = ensure_signing_secret(config)
    init_db()

    container = Container(config=config, signing_secret=signing_secret)

    app = Flask(__name__)
    app.extensions["storefront"] = container
    configure_error_handling(app)
    configure_request_logging(app)

    cors_kwargs: dict[str, object] = {
        "resources": {r"/api/*": {"origins": config.security.allowed_origins}}
    }
    if any(o != "*" for o in config.security.allowed_origins):
        cors_kwargs["supports_credentials"] = True
    CORS(app, **cors_kwargs)

    app.register_blueprint(container.misc_controller.as_blueprint())
    app.register_blueprint(container.auth_controller.as_blueprint())

    @app.after_request
    def _add_security_headers(resp):
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("Referrer-Policy", "no-referrer")
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("Cache-Control", "no-store")

        if config.security.enable_hsts:
            resp.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains",
            )

        return resp

    logger.info(
        f"Flask app initialized env={config.app_env} "
        f"token_ttl={int(config.token_ttl.total_seconds())}s"
    )
    return app
