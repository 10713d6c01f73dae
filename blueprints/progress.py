"""Learner progress routes. Every route acts on the token's user."""

from __future__ import annotations

from flask import Blueprint
from flask_login import current_user, login_required

import course_store
from errors import NotFoundError, ValidationError
from helpers import json_body, parse_id, require_fields, require_strings, success_response
from progress_store import PROGRESS_TYPES, ProgressStoreDB, ProgressUpdate

bp = Blueprint("progress", __name__, url_prefix="/api/progress")


def _course_or_404(course_id: int) -> dict:
    course = course_store.get(course_id)
    if course is None:
        raise NotFoundError("Course not found")
    return course


def _optional_id(data: dict, key: str, label: str) -> int | None:
    if data.get(key) in (None, ""):
        return None
    return parse_id(data[key], label)


@bp.route("", methods=["POST"])
@bp.route("/", methods=["POST"])
@login_required
def record_progress():
    data = json_body()
    require_fields(data, "courseId", "progressType", "status")
    require_strings(data, "progressType", "status")
    if data["progressType"] not in PROGRESS_TYPES:
        raise ValidationError(f"progressType must be one of: {', '.join(PROGRESS_TYPES)}")
    course_id = parse_id(data["courseId"], "course")
    _course_or_404(course_id)

    try:
        time_spent = int(data.get("timeSpent") or 0)
    except (TypeError, ValueError):
        raise ValidationError("timeSpent must be a number")
    score = data.get("score")
    if score is not None and (isinstance(score, bool) or not isinstance(score, (int, float))):
        raise ValidationError("score must be a number")

    progress_id = ProgressStoreDB(current_user.id).record(
        course_id=course_id,
        progress_type=data["progressType"],
        status=data["status"],
        lesson_id=_optional_id(data, "lessonId", "lesson"),
        test_id=_optional_id(data, "testId", "test"),
        score=score,
        time_spent=time_spent,
    )
    return success_response(
        {"progressId": progress_id},
        message="Progress recorded successfully",
        status=201,
    )


@bp.route("", methods=["GET"])
@bp.route("/", methods=["GET"])
@login_required
def my_progress():
    return success_response(ProgressStoreDB(current_user.id).all())


@bp.route("/course/<course_id>", methods=["GET"])
@login_required
def course_progress(course_id):
    course_id = parse_id(course_id, "course")
    course = _course_or_404(course_id)
    store = ProgressStoreDB(current_user.id)
    return success_response({
        "course": {"id": course["id"], "title": course["title"]},
        "progress": store.for_course(course_id),
        "completion": store.completion(course_id),
    })


@bp.route("/course/<course_id>/stats", methods=["GET"])
@login_required
def course_stats(course_id):
    course_id = parse_id(course_id, "course")
    course = _course_or_404(course_id)
    return success_response({
        "courseId": course_id,
        "courseTitle": course["title"],
        "statistics": ProgressStoreDB(current_user.id).completion(course_id),
    })


@bp.route("/<progress_id>", methods=["PUT"])
@login_required
def update_progress(progress_id):
    progress_id = parse_id(progress_id, "progress")
    changes = ProgressUpdate.from_payload(json_body())
    updated = ProgressStoreDB(current_user.id).update(progress_id, changes)
    return success_response(updated, message="Progress updated successfully")
