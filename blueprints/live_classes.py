"""Live class routes, including seat registration."""

from __future__ import annotations

from datetime import datetime, timezone

from flask import Blueprint, request
from flask_login import current_user, login_required

import course_store
import live_class_store
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

bp = Blueprint("live_classes", __name__, url_prefix="/api/live-classes")


def _parse_scheduled_time(value) -> datetime:
    """ISO 8601 timestamp; a trailing Z is read as UTC."""
    if not isinstance(value, str):
        raise ValidationError("Invalid scheduled time")
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError("Invalid scheduled time")


def _is_future(moment: datetime) -> bool:
    if moment.tzinfo is None:
        return moment > datetime.now()
    return moment > datetime.now(timezone.utc)


def _check_capacity(max_participants: int) -> None:
    if max_participants < 1:
        raise ValidationError("maxParticipants must be at least 1")


def _class_or_404(class_id: int) -> dict:
    live_class = live_class_store.get(class_id)
    if live_class is None:
        raise NotFoundError("Live class not found")
    return live_class


@bp.route("", methods=["GET"])
@bp.route("/", methods=["GET"])
def list_live_classes():
    limit, offset = paginate_args()
    classes = live_class_store.list_classes(limit, offset, status=request.args.get("status") or None)
    return success_response(classes, meta=page_meta(limit, offset, len(classes)))


@bp.route("/<class_id>", methods=["GET"])
def get_live_class(class_id):
    class_id = parse_id(class_id, "live class")
    live_class = _class_or_404(class_id)
    registered = live_class_store.registrations(class_id)
    return success_response({
        **live_class,
        "registrations": len(registered),
        "registeredUsers": registered,
    })


@bp.route("/course/<course_id>", methods=["GET"])
def live_classes_by_course(course_id):
    course_id = parse_id(course_id, "course")
    if not course_store.exists(course_id):
        raise NotFoundError("Course not found")
    return success_response(live_class_store.by_course(course_id))


@bp.route("/<class_id>/register", methods=["POST"])
@login_required
def register_for_class(class_id):
    class_id = parse_id(class_id, "live class")
    registration_id = live_class_store.register(current_user.id, class_id)
    return success_response(
        {"registrationId": registration_id},
        message="Successfully registered for live class",
        status=201,
    )


@bp.route("", methods=["POST"])
@bp.route("/", methods=["POST"])
@login_required
def create_live_class():
    data = json_body()
    require_fields(data, "courseId", "title", "description", "scheduledTime", "duration")
    require_strings(data, "title", "description", "scheduledTime", "meetingUrl")
    course_id = parse_id(data["courseId"], "course")
    if not course_store.exists(course_id):
        raise NotFoundError("Course not found")

    if not _is_future(_parse_scheduled_time(data["scheduledTime"])):
        raise ValidationError("Scheduled time must be in the future")

    max_participants = data.get("maxParticipants")
    if max_participants is None:
        max_participants = live_class_store.DEFAULT_MAX_PARTICIPANTS
    try:
        duration = int(data["duration"])
        max_participants = int(max_participants)
    except (TypeError, ValueError):
        raise ValidationError("duration and maxParticipants must be numbers")
    _check_capacity(max_participants)

    class_id = live_class_store.create(
        course_id=course_id,
        title=data["title"].strip(),
        description=data["description"].strip(),
        scheduled_time=data["scheduledTime"],
        duration=duration,
        meeting_url=data.get("meetingUrl") or "",
        max_participants=max_participants,
    )
    return success_response(
        {"classId": class_id},
        message="Live class created successfully",
        status=201,
    )


@bp.route("/<class_id>", methods=["PUT"])
@login_required
def update_live_class(class_id):
    class_id = parse_id(class_id, "live class")
    _class_or_404(class_id)
    changes = live_class_store.LiveClassUpdate.from_payload(json_body())
    if changes.max_participants is not None:
        _check_capacity(changes.max_participants)
    updated = live_class_store.update(class_id, changes)
    return success_response(updated, message="Live class updated successfully")


@bp.route("/<class_id>", methods=["DELETE"])
@login_required
def delete_live_class(class_id):
    class_id = parse_id(class_id, "live class")
    _class_or_404(class_id)
    live_class_store.delete(class_id)
    return success_response(message="Live class deleted successfully")
