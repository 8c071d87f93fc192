from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import json_error
from ..container import Container
from ..core.exceptions import ClockOrScheduleUnavailable


def register(app: Flask, container: Container) -> None:
    @app.route("/api/schedule/today", endpoint="schedule_today")
    def schedule_today():
        now = container.clock()
        try:
            overview = container.lecture_clock.day_overview(now)
        except ClockOrScheduleUnavailable:
            return json_error("Schedule is unavailable right now", 503)
        return jsonify({"date": now.date().isoformat(), "lectures": [o.to_dict() for o in overview]})

    @app.route("/api/lectures/current", endpoint="lecture_current")
    def lecture_current():
        try:
            session = container.lecture_clock.active_session(container.clock())
        except ClockOrScheduleUnavailable:
            return json_error("Schedule is unavailable right now", 503)
        if session is None:
            return jsonify({"active": False})
        return jsonify({"active": True, **session.to_dict()})
