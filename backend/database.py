"""
Database connection for PostgreSQL (Neon / Railway) or local SQLite.

Env vars (set in deployment Variables or .env):
    DATABASE_URL  -- full postgres:// connection string
    DATABASE_URL_FALLBACK -- optional sqlite+aiosqlite:///./local.db for local dev
"""

from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

load_dotenv()


def normalize_url(raw_url: str) -> str:
    # Hosted Postgres gives postgres:// but asyncpg needs postgresql+asyncpg://
    if raw_url.startswith("postgres://"):
        return raw_url.replace("postgres://", "postgresql+asyncpg://", 1)
    if raw_url.startswith("postgresql://"):
        return raw_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return raw_url


_raw_url = os.environ.get("DATABASE_URL", "")

if _raw_url:
    DATABASE_URL = normalize_url(_raw_url)
else:
    # Local fallback: async sqlite via aiosqlite
    DATABASE_URL = os.environ.get(
        "DATABASE_URL_FALLBACK", "sqlite+aiosqlite:///./secretlease.db"
    )

engine = create_async_engine(DATABASE_URL, echo=False, pool_pre_ping=True)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def init_db(bind: Optional[AsyncEngine] = None):
    """Create all tables (safe to call multiple times)."""
    # Register mappers before create_all
    from backend import models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db(bind: Optional[AsyncEngine] = None):
    from backend import models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def ping(session: AsyncSession) -> bool:
    await session.execute(text("SELECT 1"))
    return True


async def get_session() -> AsyncSession:
    async with async_session() as session:
        yield session
