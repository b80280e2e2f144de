#!/usr/bin/env python3
# scripts/seed_demo_data.py
"""
Practice demo data seeder + reset.

- One administrator login (default admin / Demo@12345).
- A handful of specialties and doctors with weekday availability.
- Patients with realistic demographics, conditions and lifestyle fields.
- Appointments spread over the past N days (mostly confirmed, some cancelled,
  with actual start times so wait-time predictions have data) plus a few
  upcoming scheduled ones.
- Seeded rows are tagged so --reset only removes demo data:
    patients/doctors: email under the DEMO_EMAIL_DOMAIN
    appointments: belong to demo patients

Run:
  python -m scripts.seed_demo_data --create-tables --seed
  python -m scripts.seed_demo_data --reset
"""
from __future__ import annotations

import argparse
import logging
import random
import sys
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import NullPool

# Allow "python -m scripts.seed_demo_data" from repo root
REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(REPO_ROOT))

from app.core.config import get_settings  # noqa: E402
from app.core.database import enable_sqlite_foreign_keys  # noqa: E402
from app.core.security import get_password_hash  # noqa: E402
from app.models import Appointment, Base, Doctor, Patient, Specialty, User  # noqa: E402
from app.models.appointment import AppointmentStatus  # noqa: E402
from app.models.doctor import WEEKDAY_NAMES  # noqa: E402
from app.models.patient import ExerciseFrequency, PreferredCommunication, SmokingStatus  # noqa: E402

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "Demo@12345"
DEMO_EMAIL_DOMAIN = "demo-practice.test"

SPECIALTIES = [
    ("General Practice", "Primary care and routine check-ups"),
    ("Cardiology", "Heart and circulatory system"),
    ("Dermatology", "Skin conditions"),
    ("Pediatrics", "Care for children and adolescents"),
    ("Orthopedics", "Bones, joints and muscles"),
]

DOCTOR_NAMES = [
    "Amelia Hart",
    "Rahul Mehta",
    "Sofia Lindqvist",
    "Daniel Okafor",
    "Grace Chen",
    "Marco Bianchi",
]

FIRST_NAMES = [
    "Liam", "Olivia", "Noah", "Emma", "Arjun", "Priya", "Lucas", "Mia", "Ethan", "Ava",
    "Mateo", "Isla", "Kenji", "Aisha", "Leo", "Zara", "Omar", "Chloe", "Ivan", "Nora",
]
LAST_NAMES = [
    "Smith", "Patel", "Garcia", "Nguyen", "Kowalski", "Haddad", "Rossi", "Müller",
    "Johnson", "Silva", "Kim", "Okonkwo", "Brown", "Sato", "Novak",
]
LOCATIONS = [
    ("Springfield", "North"),
    ("Riverside", "North"),
    ("Lakeside", "East"),
    ("Hillview", "South"),
    ("Bayport", "West"),
    ("Oakridge", "West"),
]
CONDITIONS = ["Hypertension", "Diabetes", "Asthma", "Arthritis", "Migraine", "Eczema", "High cholesterol"]
MEDICATIONS = ["Metformin", "Lisinopril", "Albuterol", "Atorvastatin", "Ibuprofen"]
ALLERGIES = ["Penicillin", "Peanuts", "Pollen", "Latex"]
GENDERS = ["Male", "Female", "Other"]


# ----------------------------
# Engine / Session for seeding
# ----------------------------
_seed_settings = get_settings()

_seed_engine = create_engine(
    _seed_settings.database_url,
    future=True,
    pool_pre_ping=True,
    poolclass=NullPool,
)
if _seed_settings.database_url.startswith("sqlite"):
    enable_sqlite_foreign_keys(_seed_engine)

SeedSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=_seed_engine,
    future=True,
    expire_on_commit=False,
)


def demo_email(local_part: str) -> str:
    return f"{local_part.lower().replace(' ', '.')}@{DEMO_EMAIL_DOMAIN}"


def ensure_admin(db: Session, username: str, password: str) -> User:
    user = db.query(User).filter(User.username == username).first()
    if user:
        logger.info("Admin user '%s' already exists", username)
        return user
    user = User(username=username, hashed_password=get_password_hash(password), is_admin=True)
    db.add(user)
    db.flush()
    logger.info("Created admin user '%s'", username)
    return user


def ensure_specialties(db: Session) -> list[Specialty]:
    specialties = []
    for name, description in SPECIALTIES:
        specialty = db.query(Specialty).filter(Specialty.name == name).first()
        if not specialty:
            specialty = Specialty(name=name, description=description)
            db.add(specialty)
        specialties.append(specialty)
    db.flush()
    return specialties


def seed_doctors(db: Session, rng: random.Random, specialties: list[Specialty]) -> list[Doctor]:
    doctors = []
    for index, name in enumerate(DOCTOR_NAMES):
        email = demo_email(f"dr.{name}")
        doctor = db.query(Doctor).filter(Doctor.email == email).first()
        if not doctor:
            working_days = sorted(rng.sample(range(5), k=rng.randint(3, 5)))
            doctor = Doctor(
                name=name,
                email=email,
                phone=f"+1555010{index:02d}",
                specialty_id=specialties[index % len(specialties)].id,
                qualification="MD",
                experience=rng.randint(2, 30),
                available_days=[WEEKDAY_NAMES[d] for d in working_days],
                start_date=date.today() - timedelta(days=rng.randint(365, 3650)),
            )
            db.add(doctor)
        doctors.append(doctor)
    db.flush()
    return doctors


def seed_patients(db: Session, rng: random.Random, count: int) -> list[Patient]:
    patients = []
    today = date.today()
    for index in range(count):
        first, last = rng.choice(FIRST_NAMES), rng.choice(LAST_NAMES)
        city, region = rng.choice(LOCATIONS)
        patient = Patient(
            name=f"{first} {last}",
            email=demo_email(f"{first}.{last}.{index}"),
            phone=f"+1555{rng.randint(1000000, 9999999)}",
            date_of_birth=today - timedelta(days=rng.randint(2 * 365, 88 * 365)),
            gender=rng.choice(GENDERS),
            city=city,
            region=region,
            health_conditions=rng.sample(CONDITIONS, k=rng.randint(0, 2)),
            medications=rng.sample(MEDICATIONS, k=rng.randint(0, 2)),
            allergies=rng.sample(ALLERGIES, k=rng.randint(0, 1)),
            chronic_conditions=rng.sample(CONDITIONS[:4], k=rng.randint(0, 1)),
            smoking_status=rng.choice(list(SmokingStatus)),
            exercise_frequency=rng.choice(list(ExerciseFrequency)),
            preferred_communication=rng.choice(list(PreferredCommunication)),
        )
        db.add(patient)
        patients.append(patient)
    db.flush()
    return patients


def _clinic_time(rng: random.Random, day: date) -> datetime:
    hour = rng.randint(_seed_settings.clinic_open_hour, _seed_settings.clinic_close_hour - 1)
    minute = rng.choice((0, 15, 30, 45))
    return datetime.combine(day, time(hour, minute), tzinfo=timezone.utc)


def seed_appointments(
    db: Session,
    rng: random.Random,
    patients: list[Patient],
    doctors: list[Doctor],
    *,
    days: int,
    per_day: int,
) -> int:
    today = date.today()
    created = 0
    for offset in range(-days, 8):
        day = today + timedelta(days=offset)
        weekday = WEEKDAY_NAMES[day.weekday()]
        on_duty = [d for d in doctors if weekday in (d.available_days or [])]
        if not on_duty:
            continue
        for _ in range(rng.randint(max(1, per_day // 2), per_day)):
            doctor = rng.choice(on_duty)
            scheduled_at = _clinic_time(rng, day)
            appointment = Appointment(
                patient_id=rng.choice(patients).id,
                doctor_id=doctor.id,
                scheduled_at=scheduled_at,
                duration_minutes=rng.choice((15, 30, 30, 45, 60)),
                is_teleconsultation=rng.random() < 0.15,
            )
            if offset < 0:
                roll = rng.random()
                if roll < 0.15:
                    appointment.status = AppointmentStatus.CANCELLED
                else:
                    appointment.status = AppointmentStatus.CONFIRMED
                    appointment.actual_start_time = scheduled_at + timedelta(minutes=rng.randint(0, 35))
            else:
                appointment.status = AppointmentStatus.SCHEDULED
            if appointment.is_teleconsultation:
                appointment.meeting_url = f"https://meet.example.com/demo-{rng.randint(10000, 99999)}"
            db.add(appointment)
            created += 1
    db.flush()
    return created


def reset_demo_data(db: Session) -> None:
    domain_filter = f"%@{DEMO_EMAIL_DOMAIN}"
    patient_ids = [pid for (pid,) in db.query(Patient.id).filter(Patient.email.like(domain_filter))]
    removed_appointments = 0
    if patient_ids:
        removed_appointments = (
            db.query(Appointment)
            .filter(Appointment.patient_id.in_(patient_ids))
            .delete(synchronize_session=False)
        )
    removed_patients = db.query(Patient).filter(Patient.email.like(domain_filter)).delete(synchronize_session=False)
    doctor_ids = [did for (did,) in db.query(Doctor.id).filter(Doctor.email.like(domain_filter))]
    if doctor_ids:
        db.query(Appointment).filter(Appointment.doctor_id.in_(doctor_ids)).update(
            {Appointment.doctor_id: None}, synchronize_session=False
        )
    removed_doctors = db.query(Doctor).filter(Doctor.email.like(domain_filter)).delete(synchronize_session=False)
    db.commit()
    print(
        f"Reset done: {removed_patients} patients, {removed_doctors} doctors, "
        f"{removed_appointments} appointments removed."
    )


def seed(db: Session, args: argparse.Namespace) -> None:
    rng = random.Random(args.random_seed)
    ensure_admin(db, args.admin_username, args.admin_password)
    specialties = ensure_specialties(db)
    doctors = seed_doctors(db, rng, specialties)
    patients = seed_patients(db, rng, args.patients)
    appointments = seed_appointments(db, rng, patients, doctors, days=args.days, per_day=args.per_day)
    db.commit()
    print(
        f"Seeded {len(specialties)} specialties, {len(doctors)} doctors, "
        f"{len(patients)} patients, {appointments} appointments."
    )
    print(f"Admin login: {args.admin_username} / {args.admin_password}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed / reset practice demo data")
    parser.add_argument("--create-tables", action="store_true", help="Create missing tables (local SQLite use)")
    parser.add_argument("--seed", action="store_true", help="Seed demo doctors, patients and appointments")
    parser.add_argument("--reset", action="store_true", help="Delete demo data only")
    parser.add_argument("--admin-username", default="admin")
    parser.add_argument("--admin-password", default=DEMO_PASSWORD)
    parser.add_argument("--patients", type=int, default=60, help="Number of patients (default: 60)")
    parser.add_argument("--days", type=int, default=120, help="Days of history (default: 120)")
    parser.add_argument("--per-day", type=int, default=8, help="Max appointments per day (default: 8)")
    parser.add_argument("--random-seed", type=int, default=42)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if not (args.seed or args.reset or args.create_tables):
        parser.print_help()
        raise SystemExit(1)

    if args.create_tables:
        Base.metadata.create_all(_seed_engine)
        print("Tables created.")

    db: Session = SeedSessionLocal()
    try:
        if args.reset:
            reset_demo_data(db)
        if args.seed:
            seed(db, args)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
