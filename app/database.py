"""Database connection and session management using SQLAlchemy async ORM"""
import os
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from dotenv import load_dotenv

load_dotenv()

# Database Configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./students.db")

# Convert sync postgresql:// to async postgresql+asyncpg://
if DATABASE_URL.startswith("postgresql://"):
    DATABASE_URL = DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://", 1)

# Create missing tables on startup (CREATE TABLE IF NOT EXISTS semantics)
AUTO_CREATE_TABLES = os.getenv("AUTO_CREATE_TABLES", "true").lower() == "true"

SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

if DATABASE_URL.startswith("sqlite"):
    # SQLite connections are cheap and must not be shared across event loops
    engine = create_async_engine(DATABASE_URL, echo=SQL_ECHO, poolclass=NullPool)
else:
    # pool_size=10: Keep 10 connections alive in the pool
    # max_overflow=20: Allow 20 additional connections under load
    # pool_recycle=3600: Recycle connections every hour to prevent stale connections
    engine = create_async_engine(
        DATABASE_URL,
        echo=SQL_ECHO,
        pool_size=10,
        max_overflow=20,
        pool_recycle=3600,
        pool_pre_ping=True,  # Verify connection health before using
    )

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Base class for declarative models
Base = declarative_base()


async def init_db() -> None:
    """Create all tables that do not exist yet"""
    # Register models on Base.metadata
    import app.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for FastAPI endpoints to get database session.

    Usage in FastAPI:
        @app.get("/students")
        async def read_students(db: AsyncSession = Depends(get_db)):
            result = await db.execute(select(Student))
            return result.scalars().all()
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
