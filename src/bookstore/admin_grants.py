"""
bookstore.admin_grants

Out-of-band provisioning of AdminGrant rows.

Usage:
    python -m bookstore.admin_grants grant <user_id>
    python -m bookstore.admin_grants revoke <user_id>
    python -m bookstore.admin_grants check <user_id>

A grant alone never makes someone an admin: the principal's email must also be
listed in BOOKSTORE_ADMIN_EMAILS.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from bookstore.db.init_db import init_db
from bookstore.db.repositories.admins import AdminGrantRepo
from bookstore.db.session import commit_or_raise, create_engine, create_sessionmaker
from bookstore.observability.logging import configure_logging, get_logger
from bookstore.settings import Settings, get_settings

log = get_logger(__name__)


async def run(action: str, user_id: str, *, settings: Settings) -> bool:
    engine = create_engine(settings)
    try:
        if settings.env in ("dev", "test"):
            await init_db(engine)
        async with create_sessionmaker(engine)() as session:
            repo = AdminGrantRepo(session)
            if action == "check":
                return await repo.exists(user_id)
            changed = await (repo.grant(user_id) if action == "grant" else repo.revoke(user_id))
            await commit_or_raise(session)
            log.info("admin_grants.changed", action=action, user_id=user_id, changed=changed)
            return changed
    finally:
        await engine.dispose()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="bookstore.admin_grants")
    parser.add_argument("action", choices=["grant", "revoke", "check"])
    parser.add_argument("user_id")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(
        service_name=settings.service_name, level=settings.log_level, json_logs=settings.log_json
    )
    result = asyncio.run(run(args.action, args.user_id, settings=settings))

    if args.action == "check":
        print("granted" if result else "not granted")
        return 0 if result else 1
    print(f"{args.action}: {'done' if result else 'no change'}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
