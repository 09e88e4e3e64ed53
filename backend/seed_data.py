"""
Demo data seeding script
- Pricing config with defaults, one admin account, three approved drivers,
  two customers and a handful of shipments/orders
- Run: cd backend && python seed_data.py
"""

import sys
import os
from datetime import datetime, timedelta, timezone

# Make the shipday package importable relative to backend/
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from shipday.database import engine, SessionLocal, Base
from shipday.models import Driver, User, Shipment
from shipday.models.driver import DriverStatus, VehicleType
from shipday.models.user import UserRole
from shipday.schemas.orders import OrderCreate
from shipday.schemas.shipments import ShipmentCreate
from shipday.services.auth import hash_password
from shipday.services.orders import create_order
from shipday.services.pricing import get_pricing
from shipday.services.shipment_lifecycle import create_shipment

DEMO_PASSWORD = "Shipday#2024"

DRIVERS = [
    ("DRV001", "Sipho Ndlovu", "sipho@shipday.test", "0821234501", VehicleType.BIKE, "CA 123-456"),
    ("DRV002", "Anele Dlamini", "anele@shipday.test", "0821234502", VehicleType.VAN, "GP 55 AB"),
    ("DRV003", "Pieter Botha", "pieter@shipday.test", "0821234503", VehicleType.TRUCK, "ND 98-765"),
]

CUSTOMERS = [
    ("Thandi van der Merwe", "thandi@example.com", "0831112222", "Cape Town"),
    ("Lerato Mokoena", "lerato@example.com", "0833334444", "Johannesburg"),
]


def seed_accounts(session):
    """Admin, approved drivers and customers"""
    session.add(User(
        name="ShipDay Admin",
        email="admin@shipday.test",
        phone="0800000000",
        password=hash_password(DEMO_PASSWORD),
        role=UserRole.ADMIN,
    ))
    for driver_id, name, email, phone, vehicle_type, plate in DRIVERS:
        session.add(Driver(
            driver_id=driver_id,
            username=name,
            email=email,
            phone=phone,
            password=hash_password(DEMO_PASSWORD),
            vehicle_type=vehicle_type,
            vehicle_number=plate.upper(),
            id_proof=f"uploads/{driver_id.lower()}-id.pdf",
            status=DriverStatus.APPROVED,
        ))
    for name, email, phone, location in CUSTOMERS:
        session.add(User(
            name=name,
            email=email,
            phone=phone,
            password=hash_password(DEMO_PASSWORD),
            role=UserRole.CUSTOMER,
            location=location,
        ))
    session.commit()
    print(f"  Accounts: 1 admin, {len(DRIVERS)} drivers, {len(CUSTOMERS)} customers")


def seed_shipments(session):
    """One detailed express shipment, one legacy shipment"""
    detailed = ShipmentCreate.model_validate({
        "senderDetails": {
            "fullName": "Thandi van der Merwe",
            "email": "thandi@example.com",
            "mobile": "0831112222",
            "address": {"street": "12 Long St", "suburb": "City Bowl", "city": "Cape Town",
                        "province": "Western Cape", "postalCode": "8001"},
        },
        "collectionDetails": {
            "dispatcherName": "Thandi van der Merwe",
            "mobile": "0831112222",
            "address": {"street": "12 Long St", "suburb": "City Bowl", "city": "Cape Town",
                        "province": "Western Cape", "postalCode": "8001"},
        },
        "deliveryDetails": {
            "receiverName": "Lerato Mokoena",
            "mobile": "0833334444",
            "address": {"street": "4 Main Rd", "suburb": "Braamfontein", "city": "Johannesburg",
                        "province": "Gauteng", "postalCode": "2001"},
        },
        "parcelDetails": {
            "serviceType": "express",
            "parcelType": "box",
            "dimensions": {"length": 30, "width": 20, "height": 15, "weight": 2.5},
            "specialInstructions": "Fragile",
        },
        "payment": {"method": "payfast", "amount": 150},
    })
    legacy = ShipmentCreate.model_validate({
        "senderName": "Lerato Mokoena",
        "senderPhone": "0833334444",
        "receiverName": "Sipho Ndlovu",
        "receiverPhone": "0821234501",
        "start": "Johannesburg",
        "end": "Durban",
        "parcelWeight": 7,
        "packageType": "parcel",
        "cost": 250,
        "eta": (datetime.now(timezone.utc) + timedelta(days=1)).isoformat(),
    })
    for payload in (detailed, legacy):
        shipment, _ = create_shipment(session, payload)
        print(f"  Shipment {shipment.shipment_id}: {shipment.start_location} → {shipment.end_location}")


def seed_orders(session):
    for weight, delivery_type in ((0.8, "economy"), (4.0, "express")):
        order = create_order(session, OrderCreate(
            sender_name="Thandi van der Merwe",
            sender_phone="0831112222",
            receiver_name="Lerato Mokoena",
            receiver_phone="0833334444",
            delivery_address="4 Main Rd, Braamfontein, Johannesburg",
            weight=weight,
            delivery_type=delivery_type,
        ))
        print(f"  Order {order.order_id}: {order.delivery_type} {order.weight}kg → {order.total_amount}")


def main():
    print("=== ShipDay demo data ===")

    Base.metadata.create_all(bind=engine)

    session = SessionLocal()
    try:
        if session.query(User).count() > 0 or session.query(Shipment).count() > 0:
            print("Data already exists. Delete shipday.db to reseed.")
            return

        get_pricing(session)
        print("  Pricing config initialised")
        seed_accounts(session)
        seed_shipments(session)
        seed_orders(session)

        print("=== Seeding complete ===")
        print(f"Demo password for every account: {DEMO_PASSWORD}")
    except Exception as e:
        session.rollback()
        print(f"Seeding failed: {e}")
        raise
    finally:
        session.close()


if __name__ == "__main__":
    main()
