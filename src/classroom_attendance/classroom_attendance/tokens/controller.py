from __future__ import annotations

import io

from flask import Flask, jsonify, send_file

from ..common.web import json_error, teacher_required
from ..container import Container
from .codec import encode_payload
from .qr import render_png


def register(app: Flask, container: Container) -> None:
    rotator = container.token_rotator

    @app.route("/api/rotation/start", methods=["POST"], endpoint="rotation_start")
    @teacher_required
    def rotation_start():
        """Open the QR display: start rotating tokens for the active lecture."""
        container.start_background_jobs()
        return jsonify({"running": container.rotation_loop.running, "rotation_seconds": rotator.rotation_seconds})

    @app.route("/api/rotation/stop", methods=["POST"], endpoint="rotation_stop")
    @teacher_required
    def rotation_stop():
        """Close the QR display: stop rotating and drop live tokens."""
        container.rotation_loop.stop()
        return jsonify({"running": False})

    @app.route("/api/lectures/current/token", endpoint="lecture_current_token")
    @teacher_required
    def lecture_current_token():
        token = rotator.current_token()
        session = rotator.current_session()
        if token is None or session is None:
            return jsonify({"active": False})
        return jsonify(
            {
                "active": True,
                "lecture": session.to_dict(),
                "payload": encode_payload(token),
                "expires_in": rotator.seconds_until_rotation(container.clock()),
                "rotation_seconds": rotator.rotation_seconds,
            }
        )

    @app.route("/api/lectures/current/qr.png", endpoint="lecture_current_qr")
    @teacher_required
    def lecture_current_qr():
        token = rotator.current_token()
        if token is None:
            return json_error("No lecture in progress", 404)

        response = send_file(io.BytesIO(render_png(encode_payload(token))), mimetype="image/png")
        response.headers["Cache-Control"] = "no-store"
        return response
