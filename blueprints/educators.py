"""Educator routes."""

from __future__ import annotations

from flask import Blueprint
from flask_login import login_required

import educator_store
from errors import ConflictError, NotFoundError, ValidationError
from helpers import (
    json_body,
    page_meta,
    paginate_args,
    parse_id,
    require_fields,
    require_strings,
    success_response,
)
from validation import is_valid_email

bp = Blueprint("educators", __name__, url_prefix="/api/educators")


def _educator_or_404(educator_id: int) -> dict:
    educator = educator_store.get(educator_id)
    if educator is None:
        raise NotFoundError("Educator not found")
    return educator


def _int_field(value, label: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a number")


@bp.route("", methods=["GET"])
@bp.route("/", methods=["GET"])
def list_educators():
    limit, offset = paginate_args()
    educators = educator_store.list_educators(limit, offset)
    return success_response(educators, meta=page_meta(limit, offset, len(educators)))


@bp.route("/<educator_id>", methods=["GET"])
def get_educator(educator_id):
    return success_response(_educator_or_404(parse_id(educator_id, "educator")))


@bp.route("/<educator_id>/courses", methods=["GET"])
def educator_courses(educator_id):
    educator_id = parse_id(educator_id, "educator")
    _educator_or_404(educator_id)
    return success_response(educator_store.courses(educator_id))


@bp.route("", methods=["POST"])
@bp.route("/", methods=["POST"])
@login_required
def create_educator():
    data = json_body()
    require_fields(data, "name", "email", "bio", "expertise", "experience", "qualification")
    require_strings(data, "name", "email", "bio", "expertise", "qualification")
    if not is_valid_email(data["email"]):
        raise ValidationError("Please provide a valid email address")

    email = data["email"].strip().lower()
    if educator_store.get_by_email(email):
        raise ConflictError("Educator with this email already exists")

    educator_id = educator_store.create(
        name=data["name"].strip(),
        email=email,
        bio=data["bio"].strip(),
        expertise=data["expertise"].strip(),
        experience=_int_field(data["experience"], "Experience"),
        qualification=data["qualification"].strip(),
    )
    return success_response(
        {"educatorId": educator_id},
        message="Educator created successfully",
        status=201,
    )


@bp.route("/<educator_id>", methods=["PUT"])
@login_required
def update_educator(educator_id):
    educator_id = parse_id(educator_id, "educator")
    _educator_or_404(educator_id)

    changes = educator_store.EducatorUpdate.from_payload(json_body())
    updated = educator_store.update(educator_id, changes)
    return success_response(updated, message="Educator updated successfully")


@bp.route("/<educator_id>", methods=["DELETE"])
@login_required
def delete_educator(educator_id):
    educator_id = parse_id(educator_id, "educator")
    _educator_or_404(educator_id)
    educator_store.delete(educator_id)
    return success_response(message="Educator deleted successfully")
