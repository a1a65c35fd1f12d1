"""
Create or reset an admin login.

    python -m settlement_sam.ops.create_admin --username admin
"""
import argparse
import asyncio
import getpass
import logging
import sys

from settlement_sam.config import settings
from settlement_sam.core.security import get_password_hash
from settlement_sam.database import async_session_factory, init_db
from settlement_sam.repositories.factory import build_repositories

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


async def create_admin(username: str, password: str) -> None:
    username = username.strip().lower()
    if settings.DATASTORE == "sql":
        await init_db()

    async with async_session_factory() as session:
        repos = build_repositories(session, settings)
        admin = await repos.admins.upsert(username, get_password_hash(password))
    logger.info("Admin %s saved (%s)", admin.username, settings.DATASTORE)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create or reset a Settlement Sam admin.")
    parser.add_argument("--username", required=True)
    parser.add_argument("--password", help="Prompted for when omitted")
    args = parser.parse_args(argv)

    password = args.password or getpass.getpass("Password: ")
    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.", file=sys.stderr)
        return 1

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    asyncio.run(create_admin(args.username, password))
    return 0


if __name__ == "__main__":
    sys.exit(main())
