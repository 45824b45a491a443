"""SQLAlchemy-backed unit of work for the order sync cycle."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from shipsync.adapters.sqlalchemy.migrations import upgrade_head
from shipsync.adapters.sqlalchemy.repositories import (
    SqlAlchemyOrderLineRepository,
    SqlAlchemyProductCatalogRepository,
    SqlAlchemyRawPayloadRepository,
)
from shipsync.config import get_database_config
from shipsync.domain.ports.unit_of_work import OrderSyncRepositories, RepositoryCollection

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call shipsync.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine, migrate the schema and build the session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    if engine is None:
        database = get_database_config(uri=database_uri)
        engine = create_engine(database.uri, echo=database.echo, future=True)
    log.info("Migrating record store at %s", engine.url.render_as_string())
    upgrade_head(engine=engine)
    _STATE.engine = engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

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
        self._session: Session | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self.session = None
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


class SqlAlchemyOrderSyncUnitOfWork(BaseSqlAlchemyUnitOfWork[OrderSyncRepositories]):
    """Unit of work over the order-line, raw payload and catalog tables."""

    def _build_repositories(self, session: Session) -> OrderSyncRepositories:
        return OrderSyncRepositories(
            order_lines=SqlAlchemyOrderLineRepository(session),
            raw_payloads=SqlAlchemyRawPayloadRepository(session),
            catalog=SqlAlchemyProductCatalogRepository(session),
        )


if TYPE_CHECKING:
    from shipsync.domain.ports.unit_of_work import OrderSyncUnitOfWork

    _uow_check: OrderSyncUnitOfWork = SqlAlchemyOrderSyncUnitOfWork()
