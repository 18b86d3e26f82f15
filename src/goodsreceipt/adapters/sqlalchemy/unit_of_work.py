"""SQLAlchemy-backed unit of work for the goods-receipt repositories."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from goodsreceipt.adapters.sqlalchemy.mappings import create_all_tables
from goodsreceipt.adapters.sqlalchemy.repositories import (
    SqlAlchemyPostedBatchRepository,
    SqlAlchemyPurchaseOrderRepository,
    SqlAlchemyUnloadingReportRepository,
)
from goodsreceipt.config import DatabaseConfig, get_database_config
from goodsreceipt.domain.ports.unit_of_work import ReceiptRepositories, RepositoryCollection

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None
    _connection_lock: threading.RLock | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value
        shared = value is not None and isinstance(value.pool, StaticPool)
        self._connection_lock = threading.RLock() if shared else None

    @property
    def connection_lock(self) -> threading.RLock | None:
        """Held by each unit of work while the engine has a single shared connection."""

        return self._connection_lock

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call goodsreceipt.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def create_engine_for_uri(database_uri: str) -> Engine:
    """Create an engine usable from the worker threads the async stores read on."""

    database = DatabaseConfig(uri=database_uri)
    if not database.is_sqlite:
        return create_engine(database.uri)
    connect_args = {"check_same_thread": False}
    if database.is_in_memory:
        return create_engine(database.uri, connect_args=connect_args, poolclass=StaticPool)
    return create_engine(database.uri, connect_args=connect_args)


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine, schema, and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_engine_for_uri(
        database_uri or get_database_config().uri
    )
    create_all_tables(resolved_engine)
    _STATE.engine = resolved_engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic SQLAlchemy unit of work with pluggable repository collections."""

    def __init__(self) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self._connection_lock = _STATE.connection_lock
        self._session: Session | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        if self._connection_lock is not None:
            self._connection_lock.acquire()
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        try:
            if exc_type is not None:
                self.rollback()
            self.session.close()
            self.session = None
        finally:
            if self._connection_lock is not None:
                self._connection_lock.release()
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyReceiptUnitOfWork(BaseSqlAlchemyUnitOfWork[ReceiptRepositories]):
    def _build_repositories(self, session: Session) -> ReceiptRepositories:
        return ReceiptRepositories(
            unloading_reports=SqlAlchemyUnloadingReportRepository(session),
            posted_batches=SqlAlchemyPostedBatchRepository(session),
            purchase_orders=SqlAlchemyPurchaseOrderRepository(session),
        )


if TYPE_CHECKING:
    from goodsreceipt.domain.ports.unit_of_work import ReceiptUnitOfWork

    _uow_check: ReceiptUnitOfWork = SqlAlchemyReceiptUnitOfWork()
