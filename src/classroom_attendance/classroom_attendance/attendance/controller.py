from __future__ import annotations

import io
import logging

from flask import Flask, jsonify, request, send_file, session

from ..common.validators import as_text
from ..common.web import current_role, json_error, login_required, teacher_required
from ..container import Container
from ..core.enums import RejectReason, Role
from ..core.exceptions import AuthorizationError, ClockOrScheduleUnavailable, ValidationError
from ..tokens.qr import decode_upload
from .export import to_csv_bytes, to_xlsx_bytes
from .service import Rejected, ScanResult

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _scan_response(result: ScanResult):
        if isinstance(result, Rejected):
            status = 422 if result.reason == RejectReason.MISSING_IDENTITY else 400
            return jsonify(result.to_dict()), status
        return jsonify(result.to_dict()), 200

    def _identity(source) -> tuple[str, str]:
        student_id = as_text(source.get("student_id")) or as_text(session.get("student_id"))
        student_name = as_text(source.get("student_name")) or as_text(session.get("name"))
        return student_id, student_name

    @app.route("/api/scan", methods=["POST"], endpoint="api_scan")
    def api_scan():
        """Submit the text decoded from the lecture QR code."""
        try:
            data = request.get_json(silent=True)
            if not isinstance(data, dict):
                data = {}
            student_id, student_name = _identity(data)
            result = container.scan_service.submit(
                as_text(data.get("code")),
                student_id,
                student_name,
                now=container.clock(),
            )
            return _scan_response(result)
        except Exception:
            logger.exception("Scan submission failed")
            return json_error("System error while marking attendance", 500)

    @app.route("/api/scan/image", methods=["POST"], endpoint="api_scan_image")
    def api_scan_image():
        """Accept an uploaded camera frame, decode the QR code and submit it."""
        try:
            if "image" not in request.files:
                return json_error("Image file is required", 400)

            decoded = decode_upload(request.files["image"].stream)
            if not decoded:
                return json_error("No QR code found in image", 400, reason=RejectReason.MALFORMED.value)

            student_id, student_name = _identity(request.form)
            result = container.scan_service.submit(decoded, student_id, student_name, now=container.clock())
            return _scan_response(result)
        except Exception:
            logger.exception("Image scan failed")
            return json_error("System error while marking attendance", 500)

    @app.route("/api/lectures/<lecture_id>/roster", endpoint="lecture_roster")
    @teacher_required
    def lecture_roster(lecture_id: str):
        snapshot = container.attendance_service.roster(lecture_id, now=container.clock())
        return jsonify(snapshot.to_dict())

    @app.route("/api/lectures/<lecture_id>/roster.csv", endpoint="lecture_roster_csv")
    @teacher_required
    def lecture_roster_csv(lecture_id: str):
        snapshot = container.attendance_service.roster(lecture_id, now=container.clock())
        return app.response_class(
            to_csv_bytes(snapshot),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename=attendance_{lecture_id}.csv"},
        )

    @app.route("/api/lectures/<lecture_id>/roster.xlsx", endpoint="lecture_roster_xlsx")
    @teacher_required
    def lecture_roster_xlsx(lecture_id: str):
        snapshot = container.attendance_service.roster(lecture_id, now=container.clock())
        return send_file(
            io.BytesIO(to_xlsx_bytes(snapshot)),
            download_name=f"attendance_{lecture_id}.xlsx",
            as_attachment=True,
            mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )

    @app.route("/api/lectures/<lecture_id>/live", methods=["GET"], endpoint="lecture_live")
    @teacher_required
    def lecture_live(lecture_id: str):
        """Latest polled roster; the first call starts the refresh loop."""
        try:
            snapshot = container.live_board.snapshot(lecture_id)
        except ValidationError as e:
            return json_error(str(e), 400)
        except ClockOrScheduleUnavailable:
            return json_error("Schedule is unavailable right now", 503)
        return jsonify({**snapshot.to_dict(), "refresh_seconds": container.live_board.refresh_seconds})

    @app.route("/api/lectures/<lecture_id>/live", methods=["DELETE"], endpoint="lecture_live_close")
    @teacher_required
    def lecture_live_close(lecture_id: str):
        return jsonify({"closed": container.live_board.close(lecture_id)})

    @app.route(
        "/api/lectures/<lecture_id>/students/<student_id>/absent",
        methods=["POST"],
        endpoint="lecture_mark_absent",
    )
    @teacher_required
    def lecture_mark_absent(lecture_id: str, student_id: str):
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}
        try:
            record = container.attendance_service.mark_absent(
                current_role=current_role(),
                student_id=student_id,
                lecture_id=lecture_id,
                student_name=as_text(data.get("student_name")) or None,
            )
        except AuthorizationError as e:
            return json_error(str(e), 403)
        except ValidationError as e:
            return json_error(str(e), 400)
        return jsonify({"success": True, "record": record.to_dict()})

    @app.route("/api/students/<student_id>/history", endpoint="student_history")
    @login_required
    def student_history(student_id: str):
        if current_role() != Role.TEACHER and session.get("student_id") != student_id:
            return json_error("You can only view your own attendance", 403)
        try:
            return jsonify(container.attendance_service.student_history(student_id))
        except ValidationError as e:
            return json_error(str(e), 400)
