"""Shared SQLAlchemy logic for SQL (SQLite/Postgres/MySQL) backends."""

from __future__ import annotations

from typing import Sequence
from uuid import uuid4

from sqlalchemy import (
    Column,
    Float,
    ForeignKey,
    Integer,
    String,
    create_engine,
    func,
    select,
    text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, relationship, sessionmaker

from ecb_rates.db.base_backend import BackendStrategy
from ecb_rates.exceptions import QueryError, StoreError
from ecb_rates.ingestion.models import AggregateStat, CurrencyQuote, RateRecord
from ecb_rates.utils.logger import get_logger

LOGGER = get_logger(__name__)


class Base(DeclarativeBase):
    pass


class _RateRecordRow(Base):
    __tablename__ = "rate_records"

    id = Column(String(32), primary_key=True)
    rate_date = Column(String(10), nullable=False, unique=True, index=True)
    quotes = relationship(
        "_CurrencyQuoteRow",
        cascade="all, delete-orphan",
        order_by="_CurrencyQuoteRow.position",
        lazy="selectin",
    )


class _CurrencyQuoteRow(Base):
    __tablename__ = "currency_quotes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    record_id = Column(
        String(32),
        ForeignKey("rate_records.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position = Column(Integer, nullable=False)
    currency = Column(String(8), nullable=False, index=True)
    rate = Column(Float(precision=53), nullable=False)


def _quote_rows(quotes: Sequence[CurrencyQuote]) -> list[_CurrencyQuoteRow]:
    return [
        _CurrencyQuoteRow(position=position, currency=quote.currency, rate=quote.rate)
        for position, quote in enumerate(quotes)
    ]


def _record_from_row(row: _RateRecordRow) -> RateRecord:
    return RateRecord(
        identity=row.id,
        rate_date=row.rate_date,
        quotes=[CurrencyQuote(currency=quote.currency, rate=quote.rate) for quote in row.quotes],
    )


class RelationalBackend(BackendStrategy):
    """Base class that encapsulates SQLAlchemy powered interactions."""

    def __init__(self, url: str, *, engine: Engine | None = None) -> None:
        self.url = url
        self._engine_instance: Engine | None = engine
        self._session_factory: sessionmaker[Session] | None = None
        self._schema_ready = False

    def _engine_options(self) -> dict[str, object]:
        return {}

    def _get_engine(self) -> Engine:
        if self._engine_instance is None:
            self._engine_instance = create_engine(self.url, future=True, **self._engine_options())
        return self._engine_instance

    def _ready_engine(self) -> Engine:
        # Reads against a fresh database must see empty tables, not missing ones.
        if not self._schema_ready:
            self.ensure_schema()
        return self._get_engine()

    def _sessions(self) -> sessionmaker[Session]:
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self._ready_engine(), expire_on_commit=False, future=True
            )
        return self._session_factory

    def ensure_schema(self) -> None:
        try:
            engine = self._get_engine()
            LOGGER.info("Ensuring rate_records schema exists")
            with engine.begin() as connection:
                connection.execute(text("SELECT 1"))
            Base.metadata.create_all(engine)
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to ensure SQL schema: {exc}") from exc
        self._schema_ready = True

    def ping(self) -> None:
        try:
            with self._get_engine().connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise StoreError(f"Database is unreachable: {exc}") from exc

    def find_by_date(self, rate_date: str) -> RateRecord | None:
        stmt = select(_RateRecordRow).where(_RateRecordRow.rate_date == rate_date)
        try:
            with self._sessions()() as session:
                row = session.execute(stmt).scalars().first()
                return None if row is None else _record_from_row(row)
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to look up rates for {rate_date}: {exc}") from exc

    def insert(self, record: RateRecord) -> str:
        identity = uuid4().hex
        try:
            with self._sessions()() as session:
                session.add(
                    _RateRecordRow(
                        id=identity,
                        rate_date=record.rate_date,
                        quotes=_quote_rows(record.quotes),
                    )
                )
                session.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to insert rates for {record.rate_date}: {exc}") from exc
        return identity

    def replace(self, identity: str, record: RateRecord) -> None:
        try:
            with self._sessions()() as session:
                row = session.get(_RateRecordRow, identity)
                if row is None:
                    raise StoreError(f"No rates record with identity {identity}")
                row.rate_date = record.rate_date
                row.quotes = _quote_rows(record.quotes)
                session.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to replace rates for {record.rate_date}: {exc}") from exc

    def latest(self) -> RateRecord | None:
        stmt = select(_RateRecordRow).order_by(_RateRecordRow.rate_date.desc()).limit(1)
        try:
            with self._sessions()() as session:
                row = session.execute(stmt).scalars().first()
                return None if row is None else _record_from_row(row)
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to fetch latest rates: {exc}") from exc

    def fetch_all(self) -> list[RateRecord]:
        stmt = select(_RateRecordRow).order_by(_RateRecordRow.rate_date)
        try:
            with self._sessions()() as session:
                return [_record_from_row(row) for row in session.execute(stmt).scalars()]
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to fetch rates: {exc}") from exc

    def aggregate(self) -> list[AggregateStat]:
        stmt = (
            select(
                _CurrencyQuoteRow.currency,
                func.min(_CurrencyQuoteRow.rate),
                func.max(_CurrencyQuoteRow.rate),
                func.avg(_CurrencyQuoteRow.rate),
            )
            .group_by(_CurrencyQuoteRow.currency)
            .order_by(_CurrencyQuoteRow.currency)
        )
        try:
            with self._ready_engine().connect() as connection:
                rows = connection.execute(stmt).all()
        except SQLAlchemyError as exc:
            raise QueryError(f"SQL aggregation failed: {exc}") from exc
        return [
            AggregateStat(
                currency=currency,
                min=float(minimum),
                max=float(maximum),
                avg=float(average),
            )
            for currency, minimum, maximum, average in rows
        ]

    def close(self) -> None:  # pragma: no cover - trivial resource cleanup
        if self._engine_instance is not None:
            self._engine_instance.dispose()


__all__ = ["RelationalBackend", "Base"]
