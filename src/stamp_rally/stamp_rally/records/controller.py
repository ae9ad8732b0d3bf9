from __future__ import annotations

import io
import logging

from flask import Flask, render_template, send_file

from ..container import Container
from ..core.exceptions import NotFoundError, StorageError
from ..web.middleware import base_url, current_user_id

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _progress_page(template: str, **extra):
        catalog = container.catalog_service.list_catalog()
        acquired = container.record_service.acquired_ids(current_user_id())
        stamps = container.catalog_service.progress(acquired, catalog=catalog)
        return render_template(
            template,
            stamps=stamps,
            all_stamps=catalog,
            acquired_count=sum(1 for s in stamps if s.acquired),
            **extra,
        )

    @app.route("/", endpoint="index")
    def index():
        return _progress_page("index.html", message="Welcome to the stamp rally!", base_url=base_url())

    @app.route("/my-stamps", endpoint="my_stamps")
    def my_stamps():
        return _progress_page("my-stamps.html")

    @app.route("/stamp/<secret>", endpoint="collect_stamp")
    def collect_stamp(secret: str):
        entry = container.catalog_service.find_by_secret(secret)
        if entry is None:
            return "Invalid stamp", 404

        try:
            _, is_new = container.record_service.acquire(current_user_id(), entry.stamp_id, entry.name)
        except StorageError:
            logger.exception(f"Failed to record stamp {entry.stamp_id}")
            return "Failed to record the stamp", 500

        return render_template("stamp.html", stamp_id=entry.stamp_id, stamp_name=entry.name, is_new=is_new)

    @app.route("/logos/<stamp_id>", endpoint="stamp_logo")
    def stamp_logo(stamp_id: str):
        try:
            image = container.catalog_service.get_logo(stamp_id)
        except NotFoundError:
            return "Logo not found", 404
        except StorageError:
            logger.exception(f"Error fetching logo for {stamp_id}")
            return "Error fetching logo", 500
        return send_file(io.BytesIO(image.body), mimetype=image.content_type)

    @app.route("/map", endpoint="venue_map")
    def venue_map():
        try:
            image = container.catalog_service.get_map()
        except NotFoundError:
            return "Map not found", 404
        return send_file(io.BytesIO(image.body), mimetype=image.content_type)
