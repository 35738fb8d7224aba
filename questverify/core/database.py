import enum
from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from questverify.core.config import settings

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.APP_DEBUG,
    pool_size=10,
    max_overflow=10,
    pool_pre_ping=True,               # Drop stale connections before use
    pool_recycle=1800,                 # Recycle connections every 30 min
    pool_timeout=30,                   # Wait max 30s for a pool connection before raising
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    # Persist enum values ("elderly_care"), not member names; timestamps are UTC-aware
    type_annotation_map = {
        datetime: DateTime(timezone=True),
        enum.Enum: SAEnum(enum.Enum, values_callable=lambda cls: [m.value for m in cls]),
    }

