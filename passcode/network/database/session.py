import time
from contextvars import ContextVar
from typing import Any, Dict, Optional

from loguru import logger
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session as SqlAlchemySession
from sqlalchemy.pool import NullPool

from passcode import settings


def create_db_engine(database_url: str) -> Engine:
    url = make_url(database_url)
    if url.get_backend_name() == 'sqlite':
        # Requests run on a threadpool, sqlite needs to share connections across them
        connect_args: Dict[str, Any] = {'check_same_thread': False, 'timeout': 30}
    else:
        connect_args = {
            'options': f'-c timezone=utc -c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}',
            'connect_timeout': 10,
        }

    return create_engine(
        url,
        poolclass=NullPool,
        connect_args=connect_args,
        pool_pre_ping=True,
    )


_rw_engine = create_db_engine(settings.DATABASE_URL)
_rw_session_maker = sessionmaker(autocommit=False, autoflush=False, bind=_rw_engine)


def get_engine() -> Engine:
    return _rw_engine


if settings.DB_LOG_STATEMENTS:
    # Log statements and their execution times
    @event.listens_for(Engine, 'before_cursor_execute')
    def before_cursor_execute(
        conn: Any, cursor: Any, statement: str, parameters: Any, context: Any, executemany: bool
    ) -> None:
        conn.info.setdefault('query_start_time', []).append(time.time())
        logger.info(f'Start Query: {statement}')

    @event.listens_for(Engine, 'after_cursor_execute')
    def after_cursor_execute(
        conn: Any, cursor: Any, statement: str, parameters: Any, context: Any, executemany: bool
    ) -> None:
        total = time.time() - conn.info['query_start_time'].pop(-1)
        logger.info(f'Query Time: {total}')


# Should be thread safe as well as coroutine safe!
_session_storage: ContextVar[SqlAlchemySession | None] = ContextVar('_session_storage', default=None)


class SessionNotAvailable(Exception):
    def __init__(self) -> None:
        msg = """
        Either you are not currently in a request context, or you need to manually
        create a session context by using a `db` instance as a context manager e.g.:
        with db():
            db.session.execute(select(PasscodeToken))
        """
        super().__init__(msg)


class SessionManagerMeta(type):
    """
    Access session as a property on context manager
    without having to init
    """

    @property
    def session(self) -> SqlAlchemySession:
        session = _session_storage.get()
        if session is None:
            raise SessionNotAvailable

        return session


class SessionManager(metaclass=SessionManagerMeta):
    def __init__(
        self,
        session_kwargs: Dict[str, Any] | None = None,
        commit_on_success: bool = False,
    ):
        self.session_token: Optional[Any] = None
        self.session_kwargs = session_kwargs or {}
        self.commit_on_success = commit_on_success

    def enter(self) -> Any:
        # Share an already open session, the outermost manager owns it
        if _session_storage.get() is None:
            session = _rw_session_maker(**self.session_kwargs)
            self.session_token = _session_storage.set(session)

        return type(self)

    def cleanup(self) -> None:
        if self.session_token is None:
            return
        session = _session_storage.get()
        if session is not None:
            session.close()
        _session_storage.reset(self.session_token)
        self.session_token = None

    def __enter__(self) -> Any:
        return self.enter()

    def __exit__(self, exc_type: Any, exc_value: Any, traceback: Any) -> None:
        try:
            session = _session_storage.get()
            if self.session_token is not None and session is not None:
                if self.commit_on_success and exc_type is None:
                    session.commit()
                else:
                    session.rollback()
        finally:
            self.cleanup()


# This is what external callers should access!
db: SessionManagerMeta = SessionManager


class IsolatedSession(SessionManager):
    """
    Provides a session away from the main application one, committed or
    rolled back on its own when the block exits.
    Use:
    with IsolatedSession(commit_on_success=True):
       # Do Stuff with New Session
       ...
    # Original session is replaced
    """

    def enter(self) -> Any:
        new_session = _rw_session_maker(**self.session_kwargs)
        self.session_token = _session_storage.set(new_session)

        return new_session
