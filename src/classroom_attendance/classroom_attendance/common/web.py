from __future__ import annotations

from functools import wraps

from flask import jsonify, session

from ..core.enums import Role


def json_error(message: str, status: int, **extra):
    return jsonify({"success": False, "message": message, **extra}), status


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if not session.get("role"):
            return json_error("Please sign in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def teacher_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if not session.get("role"):
            return json_error("Please sign in to continue", 401)
        if session.get("role") != Role.TEACHER.value:
            return json_error("Teachers only", 403)
        return view(*args, **kwargs)

    return wrapper


def current_role() -> Role | None:
    try:
        return Role(session.get("role"))
    except ValueError:
        return None
