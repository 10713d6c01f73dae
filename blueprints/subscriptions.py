"""Subscription routes: purchase, payment status, cancellation, access checks."""

from __future__ import annotations

from flask import Blueprint, request
from flask_login import current_user, login_required

import subscription_store
from audit import log_event
from errors import ValidationError
from helpers import (
    json_body,
    page_meta,
    paginate_args,
    parse_id,
    require_fields,
    require_strings,
    role_required,
    success_response,
)
from subscription_store import SubscriptionStoreDB
from validation import is_non_negative_number

bp = Blueprint("subscriptions", __name__, url_prefix="/api/subscriptions")


@bp.route("", methods=["POST"])
@bp.route("/", methods=["POST"])
@login_required
def create_subscription():
    data = json_body()
    require_fields(data, "courseId", "subscriptionType", "duration", "amount")
    require_strings(data, "subscriptionType")
    course_id = parse_id(data["courseId"], "course")
    try:
        duration = int(data["duration"])
    except (TypeError, ValueError):
        raise ValidationError("Duration must be a whole number of months")
    if duration <= 0:
        raise ValidationError("Duration must be a whole number of months")
    if not is_non_negative_number(data["amount"]):
        raise ValidationError("Amount must be a non-negative number")
    amount = float(data["amount"])

    subscription_id = SubscriptionStoreDB(current_user.id).create(
        course_id=course_id,
        subscription_type=data["subscriptionType"],
        duration_months=duration,
        amount=amount,
    )
    log_event("subscription_created", current_user.id, f"subscription={subscription_id} course={course_id}")
    return success_response(
        {"subscriptionId": subscription_id, "paymentRequired": True, "amount": amount},
        message="Subscription created successfully",
        status=201,
    )


@bp.route("/my-subscriptions", methods=["GET"])
@login_required
def my_subscriptions():
    return success_response(SubscriptionStoreDB(current_user.id).all())


@bp.route("/access/<course_id>", methods=["GET"])
@login_required
def check_access(course_id):
    course_id = parse_id(course_id, "course")
    return success_response({
        "courseId": course_id,
        "hasAccess": subscription_store.has_active_subscription(current_user.id, course_id),
        "userId": current_user.id,
    })


@bp.route("/<subscription_id>", methods=["GET"])
@login_required
def get_subscription(subscription_id):
    subscription_id = parse_id(subscription_id, "subscription")
    return success_response(SubscriptionStoreDB(current_user.id).get_owned(subscription_id))


@bp.route("/<subscription_id>/payment", methods=["PATCH"])
@login_required
def update_payment(subscription_id):
    subscription_id = parse_id(subscription_id, "subscription")
    data = json_body()
    status = data.get("paymentStatus")
    if not status:
        raise ValidationError("Payment status is required")
    transaction_id = data.get("transactionId")
    if transaction_id is not None and not isinstance(transaction_id, str):
        raise ValidationError("Transaction ID must be a string")

    updated = SubscriptionStoreDB(current_user.id).update_payment_status(
        subscription_id, status, transaction_id=transaction_id,
    )
    log_event("subscription_payment", current_user.id, f"subscription={subscription_id} status={status}")
    return success_response(updated, message="Subscription updated successfully")


@bp.route("/<subscription_id>/cancel", methods=["PATCH"])
@login_required
def cancel_subscription(subscription_id):
    subscription_id = parse_id(subscription_id, "subscription")
    updated = SubscriptionStoreDB(current_user.id).cancel(subscription_id)
    log_event("subscription_cancelled", current_user.id, f"subscription={subscription_id}")
    return success_response(updated, message="Subscription cancelled successfully")


# ── Admin ───────────────────────────────────────────────────


@bp.route("", methods=["GET"])
@bp.route("/", methods=["GET"])
@login_required
@role_required("admin")
def list_subscriptions():
    limit, offset = paginate_args()
    status = request.args.get("status") or None
    if status is not None and status not in subscription_store.PAYMENT_STATUSES:
        raise ValidationError(
            f"status must be one of: {', '.join(subscription_store.PAYMENT_STATUSES)}"
        )
    subscriptions = subscription_store.list_all(limit, offset, status=status)
    return success_response(subscriptions, meta=page_meta(limit, offset, len(subscriptions)))


@bp.route("/course/<course_id>", methods=["GET"])
@login_required
@role_required("admin")
def course_subscriptions(course_id):
    course_id = parse_id(course_id, "course")
    return success_response(subscription_store.for_course(course_id))


@bp.route("/admin/stats", methods=["GET"])
@login_required
@role_required("admin")
def subscription_stats():
    return success_response(subscription_store.stats())
