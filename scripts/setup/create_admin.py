# scripts/setup/create_admin.py
"""
Seed an approved, active admin account so the first operator can log in.
Usage: python scripts/setup/create_admin.py --email admin@leoni.local --cin 00000000
The password is prompted for when --password is not given.
"""

import sys
import os
import argparse
import getpass
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from app.database import SessionLocal, create_tables
from app.errors import DomainError
from app.models.enums import Role
from app.services import auth_service


def parse_args():
    parser = argparse.ArgumentParser(description="Create the first admin account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--cin", required=True)
    parser.add_argument("--first-name", default="Admin")
    parser.add_argument("--last-name", default="Leoni")
    parser.add_argument("--phone", default=None)
    parser.add_argument("--password", default=None)
    return parser.parse_args()


def main():
    args = parse_args()
    password = args.password or getpass.getpass("Password: ")

    create_tables()
    db = SessionLocal()
    try:
        user = auth_service.register(db, {
            "cin": args.cin,
            "first_name": args.first_name,
            "last_name": args.last_name,
            "phone_number": args.phone,
            "email": args.email,
            "password": password,
            "role": Role.ADMIN.value,
        })
    except DomainError as e:
        print(f"❌ {e.message}")
        sys.exit(1)
    finally:
        db.close()

    print(f"✅ Admin {user.email} created (id={user.id}, approved, active)")


if __name__ == "__main__":
    main()
