"""
Create an account (e.g. the first admin). Run from project root:
  python -m app.scripts.create_user --email admin@example.com --name Admin PASSWORD --role ADMIN
At least one of --email or --username is required.
"""
import argparse
import sys

from app.core.database import SessionLocal
from app.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN, hash_password
from app.models import Role, User


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a back-office account.")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("--email", default=None)
    parser.add_argument("--username", default=None)
    parser.add_argument("--name", default=None)
    parser.add_argument("--role", default=Role.USER.value, choices=[r.value for r in Role])
    args = parser.parse_args(argv)

    email = (args.email or "").strip() or None
    username = (args.username or "").strip() or None
    if not email and not username:
        print("Either --email or --username is required.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        if email and db.query(User).filter(User.email == email).first():
            print(f"Email '{email}' is already in use.", file=sys.stderr)
            return 1
        if username and db.query(User).filter(User.username == username).first():
            print(f"Username '{username}' is already in use.", file=sys.stderr)
            return 1
        user = User(
            email=email,
            username=username,
            name=args.name or username or email,
            password_hash=hash_password(args.password),
            role=args.role,
            is_active=True,
            must_change_password=False,
        )
        db.add(user)
        db.commit()
        print(f"Created user '{email or username}' with role '{args.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
