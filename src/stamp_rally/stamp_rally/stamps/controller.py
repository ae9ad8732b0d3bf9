from __future__ import annotations

import base64
import io
import logging
from dataclasses import replace

import qrcode
from flask import Flask, current_app, flash, redirect, render_template, request, url_for

from ..common.validators import require_icon_file, require_max_size
from ..container import Container
from ..core.constants import DEFAULT_MAX_ICON_BYTES
from ..core.exceptions import ConflictError, NotFoundError, StorageError, ValidationError
from ..web.middleware import admin_required, base_url

logger = logging.getLogger(__name__)


def qr_data_url(data: str) -> str:
    """Render `data` as a PNG QR code and return it as a data: URL."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def register(app: Flask, container: Container) -> None:
    def _write_failed(action: str, e: Exception):
        if isinstance(e, ConflictError):
            return "The stamp catalog was changed by someone else, please reload and retry", 409
        logger.exception(f"{action} failed")
        return f"{action} failed", 500

    @app.route("/admin", endpoint="admin_index")
    @admin_required
    def admin_index():
        stamps = container.catalog_service.list_catalog()
        return render_template("admin/index.html", stamps=stamps, base_url=base_url())

    @app.route("/admin/qrcodes", methods=["GET"], endpoint="admin_qrcodes")
    @admin_required
    def admin_qrcodes():
        items = [replace(item, qr=qr_data_url(item.url)) for item in container.catalog_service.qr_codes(base_url())]
        return render_template("admin/qrcodes.html", qr_list=items)

    @app.route("/admin/qrcodes", methods=["POST"], endpoint="admin_update_qrcodes")
    @admin_required
    def admin_update_qrcodes():
        try:
            container.catalog_service.update_names_and_hashes(request.form)
        except StorageError as e:
            return _write_failed("Stamp update", e)
        flash("Stamps updated", "success")
        return redirect(url_for("admin_qrcodes"))

    @app.route("/admin/add-stamp", methods=["POST"], endpoint="admin_add_stamp")
    @admin_required
    def admin_add_stamp():
        try:
            entry = container.catalog_service.add_stamp(request.form.get("name"))
        except ValidationError as e:
            return str(e), 400
        except StorageError as e:
            return _write_failed("Adding the stamp", e)
        flash(f"Added stamp {entry.name}", "success")
        return redirect(url_for("admin_index"))

    @app.route("/admin/upload-icon/<stamp_id>", methods=["POST"], endpoint="admin_upload_icon")
    @admin_required
    def admin_upload_icon(stamp_id: str):
        file = request.files.get("icon")
        try:
            if file is None or not file.filename:
                raise ValidationError("No file selected")
            ext = require_icon_file(file.filename, file.mimetype)
            max_bytes = int(current_app.config.get("MAX_ICON_BYTES", DEFAULT_MAX_ICON_BYTES))
            body = require_max_size(file.read(), max_bytes)
            container.catalog_service.set_logo(stamp_id, extension=ext, body=body, content_type=file.mimetype)
        except ValidationError as e:
            return str(e), 400
        except NotFoundError as e:
            return str(e), 404
        except StorageError as e:
            return _write_failed("Icon upload", e)
        flash("Icon uploaded", "success")
        return redirect(url_for("admin_index"))

    @app.route("/admin/delete-icon/<stamp_id>", methods=["POST"], endpoint="admin_delete_icon")
    @admin_required
    def admin_delete_icon(stamp_id: str):
        try:
            container.catalog_service.clear_logo(stamp_id)
        except NotFoundError as e:
            return str(e), 404
        except StorageError as e:
            return _write_failed("Icon delete", e)
        flash("Icon removed", "info")
        return redirect(url_for("admin_index"))
