"""Lesson routes."""

from __future__ import annotations

from flask import Blueprint
from flask_login import login_required

import course_store
import lesson_store
from errors import NotFoundError, ValidationError
from helpers import (
    json_body,
    page_meta,
    paginate_args,
    parse_id,
    require_fields,
    require_strings,
    success_response,
)

bp = Blueprint("lessons", __name__, url_prefix="/api/lessons")


def _lesson_or_404(lesson_id: int) -> dict:
    lesson = lesson_store.get(lesson_id)
    if lesson is None:
        raise NotFoundError("Lesson not found")
    return lesson


@bp.route("", methods=["GET"])
@bp.route("/", methods=["GET"])
def list_lessons():
    limit, offset = paginate_args()
    lessons = lesson_store.list_lessons(limit, offset)
    return success_response(lessons, meta=page_meta(limit, offset, len(lessons)))


@bp.route("/<lesson_id>", methods=["GET"])
def get_lesson(lesson_id):
    return success_response(_lesson_or_404(parse_id(lesson_id, "lesson")))


@bp.route("/course/<course_id>", methods=["GET"])
def lessons_by_course(course_id):
    course_id = parse_id(course_id, "course")
    if not course_store.exists(course_id):
        raise NotFoundError("Course not found")
    return success_response(lesson_store.by_course(course_id))


@bp.route("", methods=["POST"])
@bp.route("/", methods=["POST"])
@login_required
def create_lesson():
    data = json_body()
    require_fields(data, "courseId", "title", "description", "duration", "lessonType")
    require_strings(data, "title", "description", "lessonType", "content", "videoUrl")
    course_id = parse_id(data["courseId"], "course")
    if not course_store.exists(course_id):
        raise NotFoundError("Course not found")

    try:
        duration = int(data["duration"])
        order_index = int(data.get("orderIndex") or 0)
    except (TypeError, ValueError):
        raise ValidationError("duration and orderIndex must be numbers")

    lesson_id = lesson_store.create(
        course_id=course_id,
        title=data["title"].strip(),
        description=data["description"].strip(),
        content=data.get("content") or "",
        duration=duration,
        order_index=order_index,
        lesson_type=data["lessonType"],
        video_url=data.get("videoUrl"),
    )
    return success_response(
        {"lessonId": lesson_id},
        message="Lesson created successfully",
        status=201,
    )


@bp.route("/<lesson_id>", methods=["PUT"])
@login_required
def update_lesson(lesson_id):
    lesson_id = parse_id(lesson_id, "lesson")
    _lesson_or_404(lesson_id)
    updated = lesson_store.update(lesson_id, lesson_store.LessonUpdate.from_payload(json_body()))
    return success_response(updated, message="Lesson updated successfully")


@bp.route("/<lesson_id>", methods=["DELETE"])
@login_required
def delete_lesson(lesson_id):
    lesson_id = parse_id(lesson_id, "lesson")
    _lesson_or_404(lesson_id)
    lesson_store.delete(lesson_id)
    return success_response(message="Lesson deleted successfully")
