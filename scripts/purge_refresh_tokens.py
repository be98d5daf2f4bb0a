#!/usr/bin/env python3
"""Script to delete expired refresh tokens from the TableKeeper database."""

import asyncio

from tablekeeper.core.config import get_settings
from tablekeeper.core.database import db_manager
from tablekeeper.modules.auth import purge_expired_tokens

# Register every mapper so relationships resolve
from tablekeeper.modules.sessions.models import Session, SessionCheckin, SessionIntent  # noqa: F401
from tablekeeper.modules.table_requests.models import TableRequest  # noqa: F401
from tablekeeper.modules.tables.models import Table, TableMembership  # noqa: F401
from tablekeeper.modules.users.models import User  # noqa: F401


async def main():
    settings = get_settings()
    db_manager.init(settings.db)
    try:
        print("Purging expired refresh tokens...")
        removed = await purge_expired_tokens(db_manager, settings.jwt)
        print(f"   Removed {removed} tokens")
    finally:
        await db_manager.close()

if __name__ == "__main__":
    asyncio.run(main())
