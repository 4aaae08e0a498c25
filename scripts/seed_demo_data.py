#!/usr/bin/env python3
"""
Hotel Facilities Platform — Demo Data Seed Script.

Property: Grand Harbour Hotel (one building, three floors, plant room)

Creates the hotel, its staff roster, a location tree, a few assets, PPM
schedules with tasks, assignment rules, certificates and a training record.
Session tokens come from the identity provider, so no credentials are stored.

Usage:
    python scripts/seed_demo_data.py
    python scripts/seed_demo_data.py --append
    python scripts/seed_demo_data.py --verbose
"""

import argparse
import sys
from datetime import datetime, timedelta, timezone

sys.path.insert(0, ".")

from facilities import create_app
from facilities.models import db
from facilities.models.asset import Asset
from facilities.models.hotel import Hotel, Location, User
from facilities.models.ppm import PPMSchedule, PPMTask
from facilities.models.safety import Certificate, TrainingRecord
from facilities.models.work_order import AssignmentRule
from facilities.services.asset_service import new_qr_code
from facilities.services.ppm_service import next_due_date

_now = datetime.now(timezone.utc)


HOTEL = {
    "name": "Grand Harbour Hotel",
    "address": "1 Quay Street, Harbourside",
    "phone": "+44 20 7946 0000",
    "email": "facilities@grandharbour.example",
}

USERS = [
    {"name": "Maria Manager", "email": "maria@grandharbour.example", "role": "MANAGER", "employee_id": "EMP-001"},
    {"name": "Tom Technician", "email": "tom@grandharbour.example", "role": "TECHNICIAN", "employee_id": "EMP-010"},
    {"name": "Priya Plumber", "email": "priya@grandharbour.example", "role": "TECHNICIAN", "employee_id": "EMP-011"},
    {"name": "Sam Staff", "email": "sam@grandharbour.example", "role": "STAFF", "employee_id": "EMP-100"},
    {"name": "Ada Admin", "email": "ada@grandharbour.example", "role": "ADMIN", "employee_id": None},
]

# (name, type, parent name)
LOCATIONS = [
    ("Main Building", "BUILDING", None),
    ("Ground Floor", "FLOOR", "Main Building"),
    ("First Floor", "FLOOR", "Main Building"),
    ("Lobby", "AREA", "Ground Floor"),
    ("Kitchen", "AREA", "Ground Floor"),
    ("Room 101", "ROOM", "First Floor"),
    ("Room 102", "ROOM", "First Floor"),
    ("Plant Room", "PLANT", None),
]

# (name, category, location, manufacturer)
ASSETS = [
    ("Boiler #1", "HVAC", "Plant Room", "Viessmann"),
    ("Chiller #1", "HVAC", "Plant Room", "Carrier"),
    ("Passenger Lift A", "Lifts", "Lobby", "Otis"),
    ("Walk-in Freezer", "Refrigeration", "Kitchen", "Foster"),
]

# (name, frequency, description, asset name)
SCHEDULES = [
    ("Boiler service", "YEARLY", "Annual gas-safe boiler inspection", "Boiler #1"),
    ("Chiller filter change", "MONTHLY", "Replace and log chiller filters", "Chiller #1"),
    ("Lift inspection", "QUARTERLY", "", "Passenger Lift A"),
    ("Freezer temperature log", "DAILY", "Record freezer temperature", "Walk-in Freezer"),
]

# (name, category, priority, location name, assignee email)
RULES = [
    ("Plant room HVAC emergencies", "HVAC", "CRITICAL", "Plant Room", "tom@grandharbour.example"),
    ("HVAC default", "HVAC", None, None, "tom@grandharbour.example"),
    ("Plumbing default", "Plumbing", None, None, "priya@grandharbour.example"),
]

# (title, category, issued by, employee number, days until expiry)
CERTIFICATES = [
    ("Gas Safe Registration", "Gas", "Gas Safe Register", "EMP-010", 200),
    ("First Aid at Work", "Health", "Red Cross", "EMP-100", 20),
    ("Legionella Awareness", "Water", "City & Guilds", "EMP-011", -5),
]


def _log(verbose, msg):
    if verbose:
        print(msg)


def seed_hotel():
    hotel = Hotel.query.filter_by(name=HOTEL["name"]).first()
    if hotel:
        print(f"   ⏩ Hotel '{hotel.name}' already exists (id={hotel.id})")
        return hotel
    hotel = Hotel(**HOTEL)
    db.session.add(hotel)
    db.session.flush()
    print(f"   ✅ Hotel '{hotel.name}' created (id={hotel.id})")
    return hotel


def seed_users(hotel, verbose=False):
    users = {}
    for data in USERS:
        user = User.query.filter_by(email=data["email"]).first()
        if user is None:
            user = User(hotel_id=hotel.id, **data)
            db.session.add(user)
            db.session.flush()
            _log(verbose, f"   ✅ {user.role:<10} {user.name}")
        users[data["email"]] = user
    print(f"   👤 {len(users)} users")
    return users


def seed_locations(hotel, verbose=False):
    locations = {}
    for name, type_, parent_name in LOCATIONS:
        loc = Location.query.filter_by(hotel_id=hotel.id, name=name).first()
        if loc is None:
            parent = locations.get(parent_name)
            loc = Location(hotel_id=hotel.id, name=name, type=type_,
                           parent_id=parent.id if parent else None)
            db.session.add(loc)
            db.session.flush()
            _log(verbose, f"   ✅ {type_:<8} {name}")
        locations[name] = loc
    print(f"   📍 {len(locations)} locations")
    return locations


def seed_assets(hotel, locations, verbose=False):
    assets = {}
    for name, category, location_name, manufacturer in ASSETS:
        asset = Asset.query.filter_by(hotel_id=hotel.id, name=name).first()
        if asset is None:
            asset = Asset(
                hotel_id=hotel.id, location_id=locations[location_name].id,
                name=name, category=category, manufacturer=manufacturer,
                qr_code=new_qr_code(), purchase_date=_now - timedelta(days=730),
            )
            db.session.add(asset)
            db.session.flush()
            _log(verbose, f"   ✅ {asset.qr_code}  {name}")
        assets[name] = asset
    print(f"   🔧 {len(assets)} assets")
    return assets


def seed_schedules(hotel, assets, verbose=False):
    count = 0
    for name, frequency, description, asset_name in SCHEDULES:
        if PPMSchedule.query.filter_by(hotel_id=hotel.id, name=name).first():
            continue
        schedule = PPMSchedule(
            hotel_id=hotel.id, name=name, description=description,
            frequency=frequency, start_date=_now - timedelta(days=90),
        )
        db.session.add(schedule)
        db.session.flush()
        db.session.add(PPMTask(
            schedule_id=schedule.id,
            asset_id=assets[asset_name].id,
            title=f"PPM Task: {name}",
            description=description,
            due_date=next_due_date(_now, frequency),
        ))
        count += 1
        _log(verbose, f"   ✅ {frequency:<9} {name}")
    print(f"   📅 {count} PPM schedules")


def seed_rules(hotel, locations, users):
    count = 0
    for name, category, priority, location_name, email in RULES:
        if AssignmentRule.query.filter_by(hotel_id=hotel.id, name=name).first():
            continue
        db.session.add(AssignmentRule(
            hotel_id=hotel.id, name=name, category=category, priority=priority,
            location_id=locations[location_name].id if location_name else None,
            assignee_id=users[email].id,
        ))
        count += 1
    print(f"   🎯 {count} assignment rules")


def seed_compliance(users):
    by_number = {u.employee_id: u for u in users.values() if u.employee_id}
    count = 0
    for title, category, issued_by, number, days in CERTIFICATES:
        employee = by_number[number]
        if Certificate.query.filter_by(employee_id=employee.id, title=title).first():
            continue
        expiry = _now + timedelta(days=days)
        cert = Certificate(
            employee_id=employee.id, title=title, category=category, issued_by=issued_by,
            issued_date=expiry - timedelta(days=365 * 3), expiry_date=expiry,
        )
        db.session.add(cert)
        db.session.flush()
        db.session.add(TrainingRecord(
            employee_id=employee.id, certificate_id=cert.id, title=f"{title} course",
            category=category, status="COMPLETED", score=88.0,
            completion_date=cert.issued_date,
        ))
        count += 1
    print(f"   🛡️  {count} certificates")


def seed_all(app, append=False, verbose=False):
    with app.app_context():
        if not append:
            print("🗑️  Clearing existing data...")
            db.drop_all()
            db.create_all()

        print("\n🏨 Seeding hotel...")
        hotel = seed_hotel()
        users = seed_users(hotel, verbose)
        locations = seed_locations(hotel, verbose)
        assets = seed_assets(hotel, locations, verbose)
        seed_schedules(hotel, assets, verbose)
        seed_rules(hotel, locations, users)
        seed_compliance(users)

        db.session.commit()
        print("\n✅ Demo data ready.")


def main():
    parser = argparse.ArgumentParser(description="Seed demo data")
    parser.add_argument("--append", action="store_true")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args()

    app = create_app()
    print(f"🎯 DB: {app.config['SQLALCHEMY_DATABASE_URI']}\n")
    seed_all(app, append=args.append, verbose=args.verbose)


if __name__ == "__main__":
    main()
