"""
Service request lifecycle: which role may move a request from one status
to another, and who counts as a participant in a request.
"""

from __future__ import annotations

from mechanic_backend.core.deps import Principal
from mechanic_backend.models.service_request import ServiceRequest

STATUSES = (
    "pending",
    "accepted",
    "in_progress",
    "completed",
    "driver_assigned_pickup",
    "in_transit_to_shop",
    "at_shop",
    "pending_payment",
    "paid",
    "cancelled",
    "driver_assigned_return",
    "in_transit_to_owner",
    "delivered",
)

TRANSITIONS: dict[str, dict[str, tuple[str, ...]]] = {
    "shop": {
        "pending": ("accepted", "cancelled"),
        "accepted": ("in_progress", "at_shop", "completed"),
        "in_progress": ("completed",),
        "at_shop": ("in_progress", "completed"),
    },
    "customer": {
        "pending": ("cancelled",),
        "accepted": ("cancelled",),
        "pending_payment": ("paid",),
    },
    "driver": {
        "accepted": ("driver_assigned_pickup", "in_transit_to_shop"),
        "in_transit_to_shop": ("at_shop",),
        "completed": ("driver_assigned_return", "in_transit_to_owner"),
        "in_transit_to_owner": ("delivered",),
    },
    # admin may move any status to any other
    "admin": {s: tuple(t for t in STATUSES if t != s) for s in STATUSES},
}


def role_group(role: str) -> str:
    # mechanic and service accounts get the customer's (narrowest) rights
    return role if role in TRANSITIONS else "customer"


def allowed_transitions(role: str, current: str) -> tuple[str, ...]:
    return TRANSITIONS[role_group(role)].get(current, ())


def format_status(status: str) -> str:
    """in_transit_to_shop -> In Transit To Shop"""
    return " ".join(w[:1].upper() + w[1:] for w in status.split("_"))


def shop_owner_id(sr: ServiceRequest) -> str | None:
    return sr.shop.owner_id if sr.shop else None


def driver_ids(sr: ServiceRequest) -> list[str]:
    ids = []
    for driver_id in (sr.pickup_driver_id, sr.driver_id):
        if driver_id and driver_id not in ids:
            ids.append(driver_id)
    return ids


def can_update(sr: ServiceRequest, principal: Principal) -> bool:
    """The acting role must also be the request's own customer, shop or driver."""
    group = role_group(principal.role)
    if group == "admin":
        return True
    if group == "customer":
        return sr.customer_id == principal.user_id
    if group == "shop":
        return shop_owner_id(sr) == principal.user_id
    return principal.user_id in driver_ids(sr)


def can_view(sr: ServiceRequest, principal: Principal) -> bool:
    return (
        principal.role == "admin"
        or sr.customer_id == principal.user_id
        or shop_owner_id(sr) == principal.user_id
        or principal.user_id in driver_ids(sr)
    )
