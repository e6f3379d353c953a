"""
Create the demo staff and customer accounts (safe to run repeatedly)
"""

import os

from order_tracker.database import Base, engine, SessionLocal
from order_tracker.auth.auth_handler import AuthHandler
from order_tracker.models.user import User
import order_tracker.models.order  # noqa: F401
import order_tracker.models.order_status_history  # noqa: F401
from order_tracker.utils.enums import Role

DEMO_USERS = [
    ("alice.johnson@gmail.com", "Alice Johnson", "+250788123456", Role.CUSTOMER),
    ("marie.uwase@tumalink.com", "Marie Uwase", "+250788456789", Role.ORDER_PROCESSOR),
    ("eric.nkurunziza@tumalink.com", "Eric Nkurunziza", "+250788678901", Role.WAREHOUSE_MANAGER),
    ("admin@tumalink.com", "Grace Mukamana", "+250788789012", Role.ADMIN),
    ("superadmin@tumalink.com", "Patrick Kagame", "+250788890123", Role.SUPER_ADMIN),
]

def run_seed():
    Base.metadata.create_all(bind=engine)
    password = os.getenv("SEED_PASSWORD", "Password123!")
    auth_handler = AuthHandler()

    db = SessionLocal()
    try:
        for email, full_name, phone, role in DEMO_USERS:
            if db.query(User).filter(User.email == email).first():
                print(f"User '{email}' already exists")
                continue

            db.add(User(
                email=email,
                full_name=full_name,
                phone=phone,
                role=role.value,
                hashed_password=auth_handler.get_password_hash(password),
                is_verified=True,
            ))
            db.commit()
            print(f"User created (email='{email}', role='{role.value}')")
    finally:
        db.close()

if __name__ == "__main__":
    run_seed()
