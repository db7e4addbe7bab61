from __future__ import annotations

import base64
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import ColumnElement, Engine, and_, or_, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DbSession

from parlor.application.ports.repositories import (
    InvalidCursorError,
    LedgerStore,
    LedgerTransaction,
    StorageError,
)
from parlor.domain.common.ids import SessionId, TableId
from parlor.domain.daily.entities import DailyAggregate, DailyCompletion
from parlor.domain.session.entities import PaymentMethod, PaymentStatus, Session
from parlor.domain.table.entities import Table, TableCategory, TableStatus
from parlor.infrastructure.db.models.daily import DailyAggregateModel, DailyBreakdownModel
from parlor.infrastructure.db.models.session_record import SessionModel
from parlor.infrastructure.db.models.table import TableModel
from parlor.infrastructure.db.session import get_engine

CATEGORY_DIMENSION = "category"
PAYMENT_METHOD_DIMENSION = "payment_method"


class SqlAlchemyLedgerStore(LedgerStore):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = get_engine()
        return self._engine

    @contextmanager
    def transaction(self) -> Iterator[SqlAlchemyLedgerTransaction]:
        try:
            with DbSession(self.engine, expire_on_commit=False) as db, db.begin():
                yield SqlAlchemyLedgerTransaction(db)
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc


class SqlAlchemyLedgerTransaction(LedgerTransaction):
    def __init__(self, db: DbSession) -> None:
        self._db = db

    def get_table(self, table_id: TableId, *, for_update: bool = False) -> Table | None:
        statement = select(TableModel).where(TableModel.id == int(table_id))
        if for_update:
            statement = statement.with_for_update(nowait=False)
        model = self._db.execute(statement).scalar_one_or_none()
        return _table_to_domain(model) if model is not None else None

    def list_tables(self) -> list[Table]:
        models = self._db.execute(select(TableModel).order_by(TableModel.id)).scalars().all()
        return [_table_to_domain(model) for model in models]

    def save_table(self, table: Table) -> None:
        model = self._db.get(TableModel, int(table.table_id))
        if model is None:
            model = TableModel(id=int(table.table_id))
            self._db.add(model)
        model.category = table.category.value
        model.hourly_rate = table.hourly_rate
        model.status = table.status.value
        model.light_on = table.light_on
        model.last_maintenance_at = table.last_maintenance_at
        self._db.flush()

    def get_open_session(self, table_id: TableId) -> Session | None:
        statement = (
            select(SessionModel)
            .where(SessionModel.table_id == int(table_id), SessionModel.end_time.is_(None))
            .order_by(SessionModel.id.desc())
            .limit(1)
        )
        model = self._db.execute(statement).scalar_one_or_none()
        return _session_to_domain(model) if model is not None else None

    def list_open_sessions(self) -> list[Session]:
        statement = (
            select(SessionModel)
            .where(SessionModel.end_time.is_(None))
            .order_by(SessionModel.table_id)
        )
        return [_session_to_domain(model) for model in self._db.execute(statement).scalars()]

    def get_session(self, session_id: SessionId, *, for_update: bool = False) -> Session | None:
        statement = select(SessionModel).where(SessionModel.id == int(session_id))
        if for_update:
            statement = statement.with_for_update(nowait=False)
        model = self._db.execute(statement).scalar_one_or_none()
        return _session_to_domain(model) if model is not None else None

    def add_session(self, session: Session) -> Session:
        model = SessionModel(table_id=int(session.table_id))
        _apply_session(model, session)
        self._db.add(model)
        self._db.flush()
        return _session_to_domain(model)

    def save_session(self, session: Session) -> None:
        model = self._db.get(SessionModel, int(session.session_id))
        if model is None:
            raise StorageError(f"session {session.session_id} does not exist")
        _apply_session(model, session)
        self._db.flush()

    def list_sessions_for_table(
        self,
        table_id: TableId,
        limit: int,
        cursor: str | None,
    ) -> tuple[list[Session], str | None]:
        return self._page_sessions([SessionModel.table_id == int(table_id)], limit, cursor)

    def list_sessions(
        self,
        *,
        started_from: datetime | None,
        started_before: datetime | None,
        customer_phone: str | None,
        limit: int,
        cursor: str | None,
    ) -> tuple[list[Session], str | None]:
        conditions: list[ColumnElement[bool]] = []
        if started_from is not None:
            conditions.append(SessionModel.start_time >= started_from)
        if started_before is not None:
            conditions.append(SessionModel.start_time < started_before)
        if customer_phone is not None:
            conditions.append(SessionModel.customer_phone == customer_phone)
        return self._page_sessions(conditions, limit, cursor)

    def _page_sessions(
        self,
        conditions: list[ColumnElement[bool]],
        limit: int,
        cursor: str | None,
    ) -> tuple[list[Session], str | None]:
        statement = select(SessionModel).where(*conditions)

        cursor_parts = _decode_cursor(cursor) if cursor else None
        if cursor_parts is not None:
            cursor_start_time, cursor_session_id = cursor_parts
            statement = statement.where(
                or_(
                    SessionModel.start_time < cursor_start_time,
                    and_(
                        SessionModel.start_time == cursor_start_time,
                        SessionModel.id < cursor_session_id,
                    ),
                )
            )

        statement = statement.order_by(
            SessionModel.start_time.desc(), SessionModel.id.desc()
        ).limit(limit + 1)
        models = list(self._db.execute(statement).scalars().all())
        page = [_session_to_domain(model) for model in models[:limit]]

        next_cursor: str | None = None
        if len(models) > limit and page:
            last = page[-1]
            next_cursor = _encode_cursor(last.start_time, int(last.session_id))
        return page, next_cursor

    def get_daily(self, business_date: date) -> DailyAggregate | None:
        model = self._db.get(DailyAggregateModel, business_date)
        if model is None:
            return None
        breakdowns = self._db.execute(
            select(DailyBreakdownModel).where(DailyBreakdownModel.business_date == business_date)
        ).scalars()

        category_totals: dict[TableCategory, int] = {}
        payment_totals: dict[PaymentMethod, int] = {}
        for row in breakdowns:
            if row.dimension == CATEGORY_DIMENSION:
                category_totals[TableCategory(row.key)] = int(row.amount)
            elif row.dimension == PAYMENT_METHOD_DIMENSION:
                payment_totals[PaymentMethod(row.key)] = int(row.amount)

        return DailyAggregate(
            business_date=model.business_date,
            total_amount=int(model.total_amount),
            session_count=int(model.session_count),
            friendly_count=int(model.friendly_count),
            category_totals=category_totals,
            payment_method_totals=payment_totals,
        )

    def record_completion(self, completion: DailyCompletion) -> None:
        self._upsert_increment(
            DailyAggregateModel,
            keys={"business_date": completion.business_date},
            increments={
                "total_amount": completion.amount,
                "session_count": 1,
                "friendly_count": 1 if completion.is_friendly else 0,
            },
        )
        for dimension, key in (
            (CATEGORY_DIMENSION, completion.category.value),
            (PAYMENT_METHOD_DIMENSION, completion.payment_method.value),
        ):
            self._upsert_increment(
                DailyBreakdownModel,
                keys={
                    "business_date": completion.business_date,
                    "dimension": dimension,
                    "key": key,
                },
                increments={"amount": completion.amount},
            )

    def _upsert_increment(
        self,
        model: Any,
        *,
        keys: dict[str, Any],
        increments: dict[str, int],
    ) -> None:
        dialect = self._db.get_bind().dialect.name
        if dialect == "postgresql":
            insert = postgresql.insert
        elif dialect == "sqlite":
            insert = sqlite.insert
        else:
            raise StorageError(f"unsupported database dialect: {dialect}")

        statement = insert(model).values(**keys, **increments)
        statement = statement.on_conflict_do_update(
            index_elements=list(keys),
            set_={
                column: getattr(model, column) + getattr(statement.excluded, column)
                for column in increments
            },
        )
        self._db.execute(statement)


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _utc_or_none(value: datetime | None) -> datetime | None:
    return _utc(value) if value is not None else None


def _table_to_domain(model: TableModel) -> Table:
    return Table(
        table_id=TableId(model.id),
        category=TableCategory(model.category),
        hourly_rate=model.hourly_rate,
        status=TableStatus(model.status),
        light_on=bool(model.light_on),
        last_maintenance_at=_utc_or_none(model.last_maintenance_at),
    )


def _session_to_domain(model: SessionModel) -> Session:
    return Session(
        session_id=SessionId(model.id),
        table_id=TableId(model.table_id),
        start_time=_utc(model.start_time),
        end_time=_utc_or_none(model.end_time),
        accumulated_ms=model.accumulated_ms,
        active_since=_utc_or_none(model.active_since),
        break_count=model.break_count,
        is_friendly=bool(model.is_friendly),
        discount_percent=model.discount_percent,
        payment_method=PaymentMethod(model.payment_method),
        payment_status=PaymentStatus(model.payment_status),
        billed_minutes=model.billed_minutes,
        amount=model.amount,
        customer_name=model.customer_name,
        customer_phone=model.customer_phone,
        notes=model.notes,
    )


def _apply_session(model: SessionModel, session: Session) -> None:
    model.table_id = int(session.table_id)
    model.start_time = session.start_time
    model.end_time = session.end_time
    model.accumulated_ms = session.accumulated_ms
    model.active_since = session.active_since
    model.break_count = session.break_count
    model.is_friendly = session.is_friendly
    model.discount_percent = session.discount_percent
    model.payment_method = session.payment_method.value
    model.payment_status = session.payment_status.value
    model.billed_minutes = session.billed_minutes
    model.amount = session.amount
    model.customer_name = session.customer_name
    model.customer_phone = session.customer_phone
    model.notes = session.notes


def _encode_cursor(start_time: datetime, session_id: int) -> str:
    payload = f"{start_time.isoformat()}|{session_id}"
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")


def _decode_cursor(cursor: str) -> tuple[datetime, int]:
    try:
        raw = base64.urlsafe_b64decode(cursor.encode("ascii")).decode("utf-8")
        start_time_raw, session_id_raw = raw.split("|", 1)
        start_time = datetime.fromisoformat(start_time_raw)
        if start_time.tzinfo is None:
            start_time = start_time.replace(tzinfo=timezone.utc)
        return start_time, int(session_id_raw)
    except Exception as exc:
        raise InvalidCursorError("invalid cursor") from exc
