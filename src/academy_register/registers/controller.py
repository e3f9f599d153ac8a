from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.http import account_required, error_response, internal_error
from ..container import Container
from ..core.exceptions import DomainError
from .model import EntryInput


def register(app: Flask, container: Container) -> None:
    service = container.register_service

    @app.route("/api/admin/register/<class_id>", methods=["GET"], endpoint="api_register_sheet")
    @account_required
    def api_register_sheet(class_id: str):
        try:
            sheet = service.open_register(class_id, request.args.get("date") or "")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("Failed to load register")
        return jsonify(sheet.to_dict())

    @app.route("/api/admin/register/save", methods=["POST"], endpoint="api_register_save")
    @account_required
    def api_register_save():
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return jsonify({"error": "Invalid JSON body", "code": "validation_error"}), 400

        raw_entries = payload.get("entries")
        if not isinstance(raw_entries, list):
            raw_entries = []
        entries = [
            EntryInput(
                child_id=row.get("childId") if isinstance(row, dict) else None,
                is_present=row.get("isPresent") if isinstance(row, dict) else None,
            )
            for row in raw_entries
        ]

        try:
            # Lock state is decided server-side; any client-sent flag is ignored.
            result = service.save_register(
                payload.get("classId"),
                payload.get("sessionDate"),
                session.get("account_id"),
                entries,
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("Failed to save register")

        return jsonify({"ok": True, **result.to_dict()})

    @app.route("/api/admin/register/<register_id>/entries", methods=["GET"], endpoint="api_register_entries")
    @account_required
    def api_register_entries(register_id: str):
        try:
            entries = service.find_entries(register_id)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("Failed to load entries")
        return jsonify({"entries": [e.to_dict() for e in entries]})

    @app.route("/api/admin/register-history", methods=["GET"], endpoint="api_register_history")
    @account_required
    def api_register_history():
        try:
            rows = service.find_registers_by_date(request.args.get("date") or "")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("Failed to load register history")
        return jsonify({"registers": [r.to_dict() for r in rows]})
