"""Create or promote an administrator account.

Registration never grants admin rights, so the first admin is seeded here:

    python seed_admin.py --email admin@example.com --password Admin123

ADMIN_EMAIL / ADMIN_PASSWORD from the environment are used when the
arguments are omitted.
"""
import argparse
import os
import sys

from dotenv import load_dotenv

from config import Settings
from database import init_db, make_engine, make_session_factory
from models.users import User, new_user_id
from utils import password_policy
from utils.hashing import get_password_hash


def seed_admin(session, email: str, password: str, rounds: int = 12):
    """Return ``(user, created)``; an existing account keeps its password and is promoted."""
    email = email.strip().lower()
    user = session.query(User).filter(User.email == email).first()
    if user:
        user.is_admin = True
        user.role = "admin"
        session.commit()
        session.refresh(user)
        return user, False

    if not password_policy.validate(password):
        raise ValueError(password_policy.POLICY_MESSAGE)

    user = User(
        user_id=new_user_id(),
        email=email,
        password_hash=get_password_hash(password, rounds=rounds),
        fname="",
        lname="",
        role="admin",
        is_admin=True,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user, True


def main(argv=None):
    load_dotenv()
    parser = argparse.ArgumentParser(description="Create or promote an administrator account.")
    parser.add_argument("--email", default=os.getenv("ADMIN_EMAIL"))
    parser.add_argument("--password", default=os.getenv("ADMIN_PASSWORD"))
    args = parser.parse_args(argv)

    if not args.email or not args.password:
        parser.error("--email and --password (or ADMIN_EMAIL / ADMIN_PASSWORD) are required")

    settings = Settings()
    engine = make_engine(settings.DATABASE_URL, timeout=settings.STORE_TIMEOUT_SECONDS)
    if not init_db(engine):
        print("Could not connect to the user store.")
        return 1

    session = make_session_factory(engine)()
    try:
        user, created = seed_admin(session, args.email, args.password, rounds=settings.BCRYPT_ROUNDS)
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    finally:
        session.close()

    if created:
        print(f"Admin account {user.email} created ({user.user_id}).")
    else:
        print(f"Existing account {user.email} promoted to admin.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
