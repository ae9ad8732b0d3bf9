from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from config import get_settings_module

from .container import Container, build_container
from .core.constants import DEFAULT_MAX_ICON_BYTES, DEFAULT_USER_COOKIE_MAX_AGE_DAYS
from .core.enums import DenominatorPolicy
from .records.controller import register as register_records
from .stamps.controller import register as register_stamps
from .statistics.controller import register as register_statistics
from .web.middleware import register as register_middleware

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__, template_folder="../../../templates", static_folder="../../../static")

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    storage_config = dict(getattr(settings, "STORAGE_CONFIG", {}))
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["ADMIN_USER"] = getattr(settings, "ADMIN_USER", "admin")
    app.config["ADMIN_PASS"] = getattr(settings, "ADMIN_PASS", "changeme")
    app.config["USER_COOKIE_SECURE"] = bool(getattr(settings, "USER_COOKIE_SECURE", False))
    app.config["USER_COOKIE_MAX_AGE_DAYS"] = int(
        getattr(settings, "USER_COOKIE_MAX_AGE_DAYS", DEFAULT_USER_COOKIE_MAX_AGE_DAYS)
    )
    app.config["MAX_ICON_BYTES"] = int(getattr(settings, "MAX_ICON_BYTES", DEFAULT_MAX_ICON_BYTES))
    # Multipart overhead on top of the icon itself.
    app.config["MAX_CONTENT_LENGTH"] = app.config["MAX_ICON_BYTES"] + 64 * 1024

    logging.basicConfig(
        level=logging.DEBUG if app.config["DEBUG"] else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info(f"[stamp-rally] settings={settings_module} bucket={storage_config.get('bucket')}")

    # Honour X-Forwarded-Proto / X-Forwarded-Host from the load balancer.
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)

    if container is None:
        container = build_container(
            storage_config=storage_config,
            stats_denominator=getattr(settings, "STATS_UNFILTERED_DENOMINATOR", DenominatorPolicy.FILES.value),
        )

    register_middleware(app)
    register_records(app, container)
    register_stamps(app, container)
    register_statistics(app, container)

    return app
