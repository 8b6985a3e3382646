"""
Create an account (e.g. the first admin). Run from project root:
  python -m app.scripts.create_user USERNAME PASSWORD [role]
Example:
  python -m app.scripts.create_user admin your-secure-password admin
"""
import argparse
import logging
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.errors import AppError
from app.core.policy import Role
from app.services.credentials import CredentialStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Book Catalog account (admins can only be created here).")
    parser.add_argument("username", help="Username (1-255 chars)")
    parser.add_argument("password", help="Password (1-72 bytes)")
    parser.add_argument("role", nargs="?", default=Role.MEMBER.value, choices=[r.value for r in Role])
    args = parser.parse_args(argv)

    settings = get_settings()
    db = SessionLocal()
    try:
        store = CredentialStore(db, bcrypt_rounds=settings.BCRYPT_ROUNDS)
        account_id = store.register(args.username, args.password, role=Role(args.role))
    except AppError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
    logger.info("Created account '%s' (id=%s) with role '%s'.", args.username, account_id, args.role)
    return 0


if __name__ == "__main__":
    sys.exit(main())
