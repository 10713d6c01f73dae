"""Course test routes (mounted at /api/tests) and their questions."""

from __future__ import annotations

from flask import Blueprint
from flask_login import login_required

import assessment_store
import course_store
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

bp = Blueprint("assessments", __name__, url_prefix="/api/tests")


def _test_or_404(test_id: int) -> dict:
    test = assessment_store.get(test_id)
    if test is None:
        raise NotFoundError("Test not found")
    return test


def _ints(data: dict, *keys: str) -> list[int]:
    try:
        return [int(data[k]) for k in keys]
    except (TypeError, ValueError):
        raise ValidationError(f"{', '.join(keys)} must be numbers")


@bp.route("", methods=["GET"])
@bp.route("/", methods=["GET"])
def list_tests():
    limit, offset = paginate_args()
    tests = assessment_store.list_tests(limit, offset)
    return success_response(tests, meta=page_meta(limit, offset, len(tests)))


@bp.route("/<test_id>", methods=["GET"])
def get_test(test_id):
    test_id = parse_id(test_id, "test")
    test = _test_or_404(test_id)
    return success_response({**test, "questions": assessment_store.questions(test_id)})


@bp.route("/course/<course_id>", methods=["GET"])
def tests_by_course(course_id):
    course_id = parse_id(course_id, "course")
    if not course_store.exists(course_id):
        raise NotFoundError("Course not found")
    return success_response(assessment_store.by_course(course_id))


@bp.route("", methods=["POST"])
@bp.route("/", methods=["POST"])
@login_required
def create_test():
    data = json_body()
    require_fields(
        data, "courseId", "title", "description", "duration", "totalMarks", "passingMarks", "testType",
    )
    require_strings(data, "title", "description", "testType")
    course_id = parse_id(data["courseId"], "course")
    if not course_store.exists(course_id):
        raise NotFoundError("Course not found")

    duration, total_marks, passing_marks = _ints(data, "duration", "totalMarks", "passingMarks")
    test_id = assessment_store.create(
        course_id=course_id,
        title=data["title"].strip(),
        description=data["description"].strip(),
        duration=duration,
        total_marks=total_marks,
        passing_marks=passing_marks,
        test_type=data["testType"],
    )
    return success_response({"testId": test_id}, message="Test created successfully", status=201)


@bp.route("/<test_id>/questions", methods=["POST"])
@login_required
def add_question(test_id):
    test_id = parse_id(test_id, "test")
    data = json_body()
    require_fields(data, "question", "options", "correctAnswer", "marks")
    require_strings(data, "question", "explanation")
    if not isinstance(data["options"], list):
        raise ValidationError("Options must be a list")
    _test_or_404(test_id)

    (marks,) = _ints(data, "marks")
    question_id = assessment_store.add_question(
        test_id=test_id,
        question=data["question"].strip(),
        options=data["options"],
        correct_answer=str(data["correctAnswer"]),
        marks=marks,
        explanation=data.get("explanation") or "",
    )
    return success_response(
        {"questionId": question_id},
        message="Question added successfully",
        status=201,
    )


@bp.route("/<test_id>", methods=["PUT"])
@login_required
def update_test(test_id):
    test_id = parse_id(test_id, "test")
    _test_or_404(test_id)
    changes = assessment_store.AssessmentUpdate.from_payload(json_body())
    updated = assessment_store.update(test_id, changes)
    return success_response(updated, message="Test updated successfully")


@bp.route("/<test_id>", methods=["DELETE"])
@login_required
def delete_test(test_id):
    test_id = parse_id(test_id, "test")
    _test_or_404(test_id)
    assessment_store.delete(test_id)
    return success_response(message="Test deleted successfully")
