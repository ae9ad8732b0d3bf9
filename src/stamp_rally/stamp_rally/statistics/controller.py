from __future__ import annotations

import csv
import io
import logging

from flask import Flask, jsonify, render_template, request

from ..container import Container
from ..core.exceptions import StorageError, ValidationError
from ..web.middleware import admin_required
from .model import DateRange, StatisticsSnapshot

logger = logging.getLogger(__name__)


def snapshot_to_dict(snapshot: StatisticsSnapshot) -> dict:
    return {
        "totalUsers": snapshot.total_users,
        "completionRate": snapshot.completion_rate_label,
        "completedUsers": snapshot.completed_users,
        "totalAcquisitions": snapshot.total_acquisitions,
        "scannedFiles": snapshot.scanned_files,
        "failedKeys": list(snapshot.failed_keys),
        "dailyStats": dict(snapshot.daily_stats),
        "stampStats": {
            stamp_id: {
                "name": s.name,
                "count": s.count,
                "percentage": s.percentage_label,
                "acquisitions": [{"date": a.date, "userId": a.user_id} for a in s.acquisitions],
            }
            for stamp_id, s in snapshot.stamp_stats.items()
        },
    }


def register(app: Flask, container: Container) -> None:
    def _compute():
        date_from = request.args.get("dateFrom") or ""
        date_to = request.args.get("dateTo") or ""
        date_range = DateRange.parse(date_from, date_to)
        return container.statistics_service.compute(date_range), date_from, date_to

    @app.route("/admin/statistics", endpoint="admin_statistics")
    @admin_required
    def admin_statistics():
        try:
            snapshot, date_from, date_to = _compute()
        except ValidationError as e:
            return str(e), 400
        except StorageError:
            logger.exception("Statistics error")
            return "Statistics error", 500

        return render_template(
            "admin/statistics.html",
            statistics=snapshot,
            date_from=date_from,
            date_to=date_to,
        )

    @app.route("/admin/statistics.json", endpoint="admin_statistics_json")
    @admin_required
    def admin_statistics_json():
        try:
            snapshot, _, _ = _compute()
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except StorageError:
            logger.exception("Statistics error")
            return jsonify({"success": False, "message": "Statistics error"}), 500
        return jsonify(snapshot_to_dict(snapshot))

    @app.route("/admin/statistics.csv", endpoint="admin_statistics_csv")
    @admin_required
    def admin_statistics_csv():
        try:
            snapshot, date_from, date_to = _compute()
        except ValidationError as e:
            return str(e), 400
        except StorageError:
            logger.exception("Statistics error")
            return "Statistics error", 500

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=["stamp_id", "name", "count", "percentage"])
        writer.writeheader()
        for s in snapshot.stamp_stats.values():
            writer.writerow({"stamp_id": s.stamp_id, "name": s.name, "count": s.count, "percentage": s.percentage_label})

        suffix = f"_{date_from or 'all'}_{date_to or 'all'}".replace("-", "")
        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename=stamp_statistics{suffix}.csv"},
        )
