# app/services/appointment_status.py
"""
Appointment status lifecycle.

    scheduled ──> confirmed
        │             │
        └──> cancelled <┘

`cancelled` is final for regular status updates. Bringing a cancelled
appointment back is a separate, administrator-only operation (`reinstate`).
"""

from app.models.appointment import AppointmentStatus

VALID_STATUS_VALUES: tuple[str, ...] = tuple(s.value for s in AppointmentStatus)

# Actions the client may offer for an appointment in a given state
CLIENT_ACTIONS: dict[AppointmentStatus, tuple[str, ...]] = {
    AppointmentStatus.SCHEDULED: ("confirm", "cancel", "reschedule", "start"),
    AppointmentStatus.CONFIRMED: ("cancel", "reschedule", "start"),
    AppointmentStatus.CANCELLED: (),
}


class InvalidStatusError(ValueError):
    """Raised when a status value is not part of the enumeration."""

    def __init__(self, value: object):
        self.value = value
        hint = ""
        if value == "rescheduled":
            hint = " Use the reschedule operation to move an appointment."
        super().__init__(
            f"Invalid status '{value}'. Must be one of: {', '.join(VALID_STATUS_VALUES)}.{hint}"
        )


class InvalidStatusTransitionError(Exception):
    """Raised when a status write would break the appointment lifecycle."""

    def __init__(self, current: AppointmentStatus, requested: AppointmentStatus):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot change appointment status from '{current.value}' to '{requested.value}'."
        )


def parse_status(value: object) -> AppointmentStatus:
    if isinstance(value, AppointmentStatus):
        return value
    if not isinstance(value, str):
        raise InvalidStatusError(value)
    try:
        return AppointmentStatus(value.strip().lower())
    except ValueError:
        raise InvalidStatusError(value) from None


def can_transition(current: AppointmentStatus | str, requested: AppointmentStatus | str) -> bool:
    """
    True if a regular status update from `current` to `requested` is allowed.

    - Writing the current status again is a no-op and always allowed.
    - Nothing leaves `cancelled` through a regular update.
    - Values outside the enumeration are never allowed.
    """
    try:
        current = parse_status(current)
        requested = parse_status(requested)
    except InvalidStatusError:
        return False

    if current == requested:
        return True
    if current == AppointmentStatus.CANCELLED:
        return False
    return True


def ensure_transition(current: AppointmentStatus, requested: AppointmentStatus) -> None:
    if not can_transition(current, requested):
        raise InvalidStatusTransitionError(current, requested)


def actions_for(status: AppointmentStatus) -> list[str]:
    return list(CLIENT_ACTIONS.get(status, ()))
