"""Tiny forward-only schema migrations for the SQLite database.

Indexes the models do not declare, plus any later schema change that
``create_all`` cannot apply to an existing database. Each step runs once
and is recorded in ``schema_migrations``.
"""

from datetime import datetime
from typing import Awaitable, Callable

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection

MigrationStep = Callable[[AsyncConnection], Awaitable[None]]
MIGRATIONS: list[tuple[str, MigrationStep]] = []


def migration(name: str):
    def register(step: MigrationStep) -> MigrationStep:
        MIGRATIONS.append((name, step))
        return step
    return register


async def _applied_names(conn: AsyncConnection) -> set[str]:
    await conn.execute(text(
        "CREATE TABLE IF NOT EXISTS schema_migrations ("
        " name TEXT PRIMARY KEY,"
        " applied_at TEXT DEFAULT (datetime('now')))"
    ))
    rows = await conn.execute(text("SELECT name FROM schema_migrations"))
    return {name for (name,) in rows}


@migration("0001_reset_token_expiry_index")
async def add_reset_token_expiry_index(conn: AsyncConnection):
    await conn.execute(text(
        "CREATE INDEX IF NOT EXISTS ix_reset_tokens_expires_at ON reset_tokens (expires_at)"
    ))


@migration("0002_post_created_at_index")
async def add_post_created_at_index(conn: AsyncConnection):
    # feed and admin listings all order by created_at
    await conn.execute(text(
        "CREATE INDEX IF NOT EXISTS ix_posts_created_at ON posts (created_at)"
    ))


async def run_migrations(conn: AsyncConnection) -> list[str]:
    applied = await _applied_names(conn)
    ran = []
    for name, step in MIGRATIONS:
        if name in applied:
            continue
        await step(conn)
        await conn.execute(
            text("INSERT INTO schema_migrations(name, applied_at) VALUES (:name, :applied_at)"),
            {"name": name, "applied_at": datetime.utcnow().isoformat()},
        )
        ran.append(name)
    return ran
