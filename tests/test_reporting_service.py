from datetime import date, datetime, timezone
from types import SimpleNamespace

from app.services import reporting_service as reporting


def appt(status: str = "scheduled", when: datetime | None = None, patient_id: int = 1):
    return SimpleNamespace(
        status=status,
        scheduled_at=when or datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc),
        patient_id=patient_id,
    )


def patient(**fields):
    defaults = {"date_of_birth": None, "gender": None, "region": None, "health_conditions": []}
    defaults.update(fields)
    return SimpleNamespace(**defaults)


def test_rates_for_mixed_statuses():
    appointments = [appt("confirmed")] * 6 + [appt("cancelled")] * 2 + [appt("scheduled")] * 2

    assert reporting.calculate_completion_rate(appointments) == 60
    assert reporting.calculate_cancellation_rate(appointments) == 20


def test_rates_are_zero_for_empty_input():
    assert reporting.calculate_completion_rate([]) == 0
    assert reporting.calculate_cancellation_rate([]) == 0


def test_rates_never_exceed_one_hundred_together():
    appointments = [appt("confirmed"), appt("cancelled"), appt("cancelled")]
    total = reporting.calculate_completion_rate(appointments) + reporting.calculate_cancellation_rate(appointments)
    assert total <= 100


def test_status_distribution_includes_zero_counts():
    distribution = reporting.get_status_distribution([appt("confirmed"), appt("confirmed")])
    assert distribution == {"scheduled": 0, "confirmed": 2, "cancelled": 0}


def test_status_distribution_respects_window():
    inside = appt("cancelled", datetime(2025, 3, 10, tzinfo=timezone.utc))
    outside = appt("cancelled", datetime(2025, 1, 10, tzinfo=timezone.utc))
    window = (datetime(2025, 3, 1, tzinfo=timezone.utc), datetime(2025, 3, 31, tzinfo=timezone.utc))

    assert reporting.get_status_distribution([inside, outside], window)["cancelled"] == 1


def test_monthly_trend_is_calendar_aligned():
    now = datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc)
    appointments = [
        appt(when=datetime(2025, 2, 10, tzinfo=timezone.utc)),
        appt(when=datetime(2025, 3, 1, tzinfo=timezone.utc)),
        appt(when=datetime(2025, 3, 2, tzinfo=timezone.utc)),
        appt(when=datetime(2024, 12, 24, tzinfo=timezone.utc)),
    ]

    series = reporting.get_appointments_by_time_range(appointments, "monthly", months=2, now=now)

    assert series == [
        {"name": "Jan 2025", "count": 0},
        {"name": "Feb 2025", "count": 1},
        {"name": "Mar 2025", "count": 2},
    ]


def test_weekly_trend_starts_weeks_on_sunday():
    now = datetime(2025, 3, 5, tzinfo=timezone.utc)  # Wednesday
    appointments = [
        appt(when=datetime(2025, 3, 2, 9, tzinfo=timezone.utc)),  # Sunday
        appt(when=datetime(2025, 3, 4, 9, tzinfo=timezone.utc)),
        appt(when=datetime(2025, 3, 1, 9, tzinfo=timezone.utc)),  # Saturday, previous week
    ]

    series = reporting.get_appointments_by_time_range(appointments, reporting.TimeRange.WEEKLY, months=1, now=now)

    assert [point["name"] for point in series] == ["Feb 2", "Feb 9", "Feb 16", "Feb 23", "Mar 2"]
    assert series[-1]["count"] == 2
    assert series[-2]["count"] == 1


def test_daily_trend_covers_every_day_of_the_window():
    now = datetime(2025, 3, 15, 18, 0, tzinfo=timezone.utc)
    appointments = [
        appt(when=datetime(2025, 2, 15, 9, tzinfo=timezone.utc)),
        appt(when=datetime(2025, 3, 15, 9, tzinfo=timezone.utc)),
        appt(when=datetime(2025, 3, 15, 16, tzinfo=timezone.utc)),
        appt(when=datetime(2025, 2, 14, 9, tzinfo=timezone.utc)),
    ]

    series = reporting.get_appointments_by_time_range(appointments, reporting.TimeRange.DAILY, months=1, now=now)

    assert len(series) == 29
    assert series[0] == {"name": "Feb 15", "count": 1}
    assert series[-1] == {"name": "Mar 15", "count": 2}
    assert sum(point["count"] for point in series) == 3


def test_window_start_clamps_to_end_of_shorter_month():
    now = datetime(2025, 3, 31, tzinfo=timezone.utc)

    monthly = reporting.get_appointments_by_time_range([], "monthly", months=1, now=now)
    daily = reporting.get_appointments_by_time_range([], "daily", months=1, now=now)

    assert [point["name"] for point in monthly] == ["Feb 2025", "Mar 2025"]
    assert daily[0]["name"] == "Feb 28"
    assert len(daily) == 32


def test_trend_is_independent_of_input_order():
    now = datetime(2025, 3, 15, tzinfo=timezone.utc)
    appointments = [appt(when=datetime(2025, 3, day, tzinfo=timezone.utc)) for day in (3, 1, 9, 3)]

    forward = reporting.get_appointments_by_time_range(appointments, "daily", months=1, now=now)
    backward = reporting.get_appointments_by_time_range(list(reversed(appointments)), "daily", months=1, now=now)

    assert forward == backward
    assert {"name": "Mar 3", "count": 2} in forward


def test_age_distribution_bands():
    today = date(2025, 3, 1)
    patients = [
        patient(date_of_birth=date(2015, 1, 1)),  # 10
        patient(date_of_birth=date(1995, 3, 2)),  # 29, birthday tomorrow
        patient(date_of_birth=date(1960, 1, 1)),  # 65
        patient(),  # unknown, skipped
    ]

    bands = reporting.calculate_age_distribution(patients, today=today)

    assert bands == [
        {"age": "0-17", "count": 1},
        {"age": "18-30", "count": 1},
        {"age": "31-45", "count": 0},
        {"age": "46-60", "count": 0},
        {"age": "61+", "count": 1},
    ]


def test_gender_and_region_group_blank_as_unknown():
    patients = [patient(gender="Female", region="North"), patient(gender=" ", region=None), patient(gender="Female")]

    assert reporting.calculate_gender_distribution(patients) == {"Female": 2, "Unknown": 1}
    assert reporting.calculate_region_distribution(patients) == {"North": 1, "Unknown": 2}


def test_health_conditions_sorted_by_frequency_then_name():
    patients = [
        patient(health_conditions=["Asthma", "Diabetes"]),
        patient(health_conditions=["Diabetes"]),
        patient(health_conditions=["Arthritis"]),
    ]

    assert reporting.calculate_health_conditions_distribution(patients) == [
        {"condition": "Diabetes", "count": 2},
        {"condition": "Arthritis", "count": 1},
        {"condition": "Asthma", "count": 1},
    ]


def test_visit_frequency_and_retention():
    appointments = [appt(patient_id=1), appt(patient_id=1), appt(patient_id=2), appt(patient_id=3), appt(patient_id=3)]

    assert reporting.get_patient_visit_frequency(appointments) == [
        {"visits": 1, "count": 1},
        {"visits": 2, "count": 2},
    ]
    assert reporting.calculate_patient_retention_rate(appointments) == 67


def test_dashboard_on_empty_data():
    dashboard = reporting.build_dashboard([], [], now=datetime(2025, 3, 15, tzinfo=timezone.utc))

    assert dashboard["total_appointments"] == 0
    assert dashboard["completion_rate"] == 0
    assert dashboard["retention_rate"] == 0
    assert dashboard["visit_frequency"] == []
    assert all(point["count"] == 0 for point in dashboard["appointment_trend"])
