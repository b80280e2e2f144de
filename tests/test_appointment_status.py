import pytest

from app.models.appointment import AppointmentStatus
from app.services.appointment_status import (
    InvalidStatusError,
    InvalidStatusTransitionError,
    actions_for,
    can_transition,
    ensure_transition,
    parse_status,
)


@pytest.mark.parametrize("status", list(AppointmentStatus))
def test_same_status_is_always_allowed(status):
    assert can_transition(status, status)


@pytest.mark.parametrize(
    "current,requested",
    [
        ("scheduled", "confirmed"),
        ("scheduled", "cancelled"),
        ("confirmed", "cancelled"),
        ("confirmed", "scheduled"),
    ],
)
def test_forward_transitions_are_allowed(current, requested):
    assert can_transition(current, requested)


@pytest.mark.parametrize("requested", ["scheduled", "confirmed"])
def test_nothing_leaves_cancelled(requested):
    assert not can_transition("cancelled", requested)
    with pytest.raises(InvalidStatusTransitionError) as excinfo:
        ensure_transition(AppointmentStatus.CANCELLED, AppointmentStatus(requested))
    assert excinfo.value.current == AppointmentStatus.CANCELLED


def test_unknown_values_are_never_allowed():
    assert not can_transition("scheduled", "completed")
    assert not can_transition("nonsense", "scheduled")


def test_parse_status_normalises_case_and_whitespace():
    assert parse_status("  Confirmed ") == AppointmentStatus.CONFIRMED


def test_parse_status_rejects_rescheduled_with_hint():
    with pytest.raises(InvalidStatusError) as excinfo:
        parse_status("rescheduled")
    message = str(excinfo.value)
    assert "scheduled, confirmed, cancelled" in message
    assert "reschedule" in message.lower()


def test_parse_status_rejects_non_strings():
    with pytest.raises(InvalidStatusError):
        parse_status(3)


def test_cancelled_exposes_no_actions():
    assert actions_for(AppointmentStatus.CANCELLED) == []
    assert "confirm" in actions_for(AppointmentStatus.SCHEDULED)
    assert "confirm" not in actions_for(AppointmentStatus.CONFIRMED)
