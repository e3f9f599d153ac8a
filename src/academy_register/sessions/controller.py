from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import account_required, internal_error
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/sessions", methods=["GET"], endpoint="api_sessions")
    @account_required
    def api_sessions():
        days_s = request.args.get("days")
        if days_s is not None and (not days_s.isdigit() or int(days_s) > 90):
            return jsonify({"error": "Invalid days", "code": "validation_error"}), 400

        try:
            result = container.session_service.upcoming(window_days=int(days_s) if days_s else None)
        except Exception:
            return internal_error("Failed to build sessions")

        return jsonify(
            {
                "sessions": [s.to_dict() for s in result.sessions],
                "skipped": [{"classId": s.class_id, "reason": s.reason} for s in result.skipped],
            }
        )
