"""Seed an administrator user."""

import os

from app import create_app
from models import db
from models.statuses import UserRole
from models.user import User

ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "AdminPass123")
ADMIN_NAME = os.getenv("SEED_ADMIN_NAME", "CASE OFFICER")


def main() -> None:
    app = create_app()
    with app.app_context():
        admin = User.query.filter_by(email=ADMIN_EMAIL.lower()).first()
        if admin is None:
            admin = User(email=ADMIN_EMAIL.lower(), full_name=ADMIN_NAME)
            db.session.add(admin)
            action = "created"
        else:
            action = "updated"
        admin.role = UserRole.ADMIN
        admin.email_verified = True
        admin.verification_token = None
        admin.set_password(ADMIN_PASSWORD)
        db.session.commit()
        print(f"Admin user {action}: {ADMIN_EMAIL}")


if __name__ == "__main__":
    main()
