"""
SQLAlchemy Code Store
=====================
Persistent code store backed by an ``otp_codes`` table.

Unique constraints on ``identity`` and ``code`` back the store invariants
at the database level, so concurrent workers cannot both hold a slot.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import structlog
from sqlalchemy import DateTime, Integer, String, delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import Mapped, mapped_column

from otp_login.database import Base
from otp_login.errors import CodeCollisionError, InfrastructureError
from .models import OneTimeCode, hash_identity
from .store import CodeStore

logger = structlog.get_logger(__name__)


class OTPCodeRecord(Base):
    """Row holding the active code of one identity."""

    __tablename__ = "otp_codes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    identity: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    code: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )

    def to_domain(self) -> OneTimeCode:
        return OneTimeCode(
            identity=self.identity,
            code=self.code,
            issued_at=_as_utc(self.issued_at),
            expires_at=_as_utc(self.expires_at),
        )


def _as_utc(value: datetime) -> datetime:
    # SQLite drops the offset on the way back
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SQLAlchemyCodeStore(CodeStore):
    """Code store on any async SQLAlchemy backend."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(clock)
        self._session_factory = session_factory

    async def issue(self, identity: str, code: str, ttl: int) -> OneTimeCode:
        now = self.now()
        row = OTPCodeRecord(
            identity=identity,
            code=code,
            issued_at=now,
            expires_at=now + timedelta(seconds=ttl),
        )

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    holder = (
                        await session.execute(
                            select(OTPCodeRecord).where(OTPCodeRecord.code == code)
                        )
                    ).scalar_one_or_none()

                    if holder is not None:
                        if (
                            holder.identity != identity
                            and _as_utc(holder.expires_at) > now
                        ):
                            raise CodeCollisionError()
                        await session.execute(
                            delete(OTPCodeRecord).where(OTPCodeRecord.id == holder.id)
                        )

                    await session.execute(
                        delete(OTPCodeRecord).where(OTPCodeRecord.identity == identity)
                    )
                    session.add(row)
        except IntegrityError as e:
            logger.info(
                "Concurrent issue detected",
                identity_hash=hash_identity(identity),
            )
            raise CodeCollisionError() from e
        except SQLAlchemyError as e:
            logger.error("Code store write failed", error=str(e))
            raise InfrastructureError("Code store unavailable") from e

        return OneTimeCode(
            identity=identity,
            code=code,
            issued_at=row.issued_at,
            expires_at=row.expires_at,
        )

    async def lookup(self, code: str) -> Optional[OneTimeCode]:
        try:
            async with self._session_factory() as session:
                row = (
                    await session.execute(
                        select(OTPCodeRecord).where(OTPCodeRecord.code == code)
                    )
                ).scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Code store read failed", error=str(e))
            raise InfrastructureError("Code store unavailable") from e

        return row.to_domain() if row is not None else None

    async def consume(self, record: OneTimeCode) -> bool:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        delete(OTPCodeRecord).where(
                            OTPCodeRecord.code == record.code,
                            OTPCodeRecord.identity == record.identity,
                        )
                    )
        except SQLAlchemyError as e:
            logger.error("Code store delete failed", error=str(e))
            raise InfrastructureError("Code store unavailable") from e

        return result.rowcount == 1

    async def is_code_active(self, code: str) -> bool:
        record = await self.lookup(code)
        return record is not None and self.is_valid(record)

    async def purge_expired(self) -> int:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        delete(OTPCodeRecord).where(
                            OTPCodeRecord.expires_at <= self.now()
                        )
                    )
        except SQLAlchemyError as e:
            logger.error("Code store purge failed", error=str(e))
            raise InfrastructureError("Code store unavailable") from e

        if result.rowcount:
            logger.info("Expired codes purged", count=result.rowcount)
        return result.rowcount
