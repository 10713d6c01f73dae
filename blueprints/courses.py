"""Course catalog routes."""

from __future__ import annotations

from flask import Blueprint, request
from flask_login import login_required

import course_store
import educator_store
from errors import NotFoundError, ValidationError
from helpers import json_body, page_meta, paginate_args, parse_id, success_response
from validation import VALID_EXAMS, course_errors, is_non_negative_number, validate

bp = Blueprint("courses", __name__, url_prefix="/api/courses")

MIN_SEARCH_LENGTH = 2


def _price_arg(name: str) -> float | None:
    raw = request.args.get(name)
    if raw in (None, ""):
        return None
    try:
        return float(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a number")


def _course_or_404(course_id: int) -> dict:
    course = course_store.get(course_id)
    if course is None:
        raise NotFoundError("Course not found")
    return course


@bp.route("", methods=["GET"])
@bp.route("/", methods=["GET"])
def list_courses():
    limit, offset = paginate_args()
    educator_id = request.args.get("educatorId")
    filters = {
        "target_exam": request.args.get("targetExam") or None,
        "course_type": request.args.get("courseType") or None,
        "educator_id": parse_id(educator_id, "educator") if educator_id else None,
        "min_price": _price_arg("minPrice"),
        "max_price": _price_arg("maxPrice"),
    }
    courses = course_store.list_courses(filters, limit, offset)
    return success_response(courses, meta=page_meta(limit, offset, len(courses)))


@bp.route("/<course_id>", methods=["GET"])
def get_course(course_id):
    return success_response(_course_or_404(parse_id(course_id, "course")))


@bp.route("", methods=["POST"])
@bp.route("/", methods=["POST"])
@login_required
@validate(course_errors)
def create_course():
    data = json_body()
    if educator_store.get(data["educatorId"]) is None:
        raise NotFoundError("Educator not found")

    course = {
        "title": data["title"].strip(),
        "description": data["description"].strip(),
        "educatorId": data["educatorId"],
        "targetExam": data["targetExam"],
        "duration": str(data["duration"]),
        "validityPeriod": str(data["validityPeriod"]),
        "price": float(data["price"]),
        "discount": float(data.get("discount") or 0),
        "courseType": data["courseType"],
    }
    course_id = course_store.create(
        title=course["title"],
        description=course["description"],
        educator_id=course["educatorId"],
        target_exam=course["targetExam"],
        duration=course["duration"],
        validity_period=course["validityPeriod"],
        price=course["price"],
        discount=course["discount"],
        course_type=course["courseType"],
    )
    return success_response(
        {"courseId": course_id, **course},
        message="Course created successfully",
        status=201,
    )


@bp.route("/<course_id>", methods=["PUT"])
@login_required
def update_course(course_id):
    course_id = parse_id(course_id, "course")
    _course_or_404(course_id)

    changes = course_store.CourseUpdate.from_payload(json_body())
    if changes.price is not None and not is_non_negative_number(changes.price):
        raise ValidationError("Price must be a non-negative number")
    updated = course_store.update(course_id, changes)
    return success_response(updated, message="Course updated successfully")


@bp.route("/<course_id>", methods=["DELETE"])
@login_required
def delete_course(course_id):
    course_id = parse_id(course_id, "course")
    _course_or_404(course_id)
    course_store.delete(course_id)
    return success_response(message="Course deleted successfully")


@bp.route("/educator/<educator_id>", methods=["GET"])
def courses_by_educator(educator_id):
    educator_id = parse_id(educator_id, "educator")
    limit, offset = paginate_args()
    courses = course_store.list_courses({"educator_id": educator_id}, limit, offset)
    return success_response(courses, meta=page_meta(limit, offset, len(courses)))


@bp.route("/exam/<target_exam>", methods=["GET"])
def courses_by_exam(target_exam):
    if target_exam not in VALID_EXAMS:
        raise ValidationError(
            "Invalid target exam", details=[f"Target exam must be one of: {', '.join(VALID_EXAMS)}"]
        )
    limit, offset = paginate_args()
    courses = course_store.list_courses({"target_exam": target_exam}, limit, offset)
    return success_response(courses, meta=page_meta(limit, offset, len(courses)))


@bp.route("/search/<query>", methods=["GET"])
def search_courses(query):
    term = query.strip()
    if len(term) < MIN_SEARCH_LENGTH:
        raise ValidationError(f"Search query must be at least {MIN_SEARCH_LENGTH} characters")
    limit, offset = paginate_args(default_limit=20)
    courses = course_store.search(term, limit, offset)
    return success_response(courses, meta=page_meta(limit, offset, len(courses)))
