"""Named database connections for the application and the log server.

Both connections are validated from ``app.config['DATABASES']`` before the
SQLAlchemy extension is initialised; the live handles wrap the engines that
Flask-SQLAlchemy creates for the default bind and the ``logserver`` bind.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Mapping

import sqlalchemy as sa
from alembic.migration import MigrationContext
from alembic.operations import Operations
from flask import current_app
from sqlalchemy.engine import URL

from .exceptions import ConfigurationError
from .models import db

logger = logging.getLogger(__name__)
sql_logger = logging.getLogger('backslash.sql')

DEFAULT = 'default'
LOGSERVER = 'logserver'
REQUIRED_CONNECTIONS = (DEFAULT, LOGSERVER)
REQUIRED_PARAMETERS = ('type', 'dbname', 'user', 'pass', 'host', 'driver')
DEFAULT_STATEMENT_LOG_SIZE = 1000


@dataclass(frozen=True)
class ConnectionConfig:
    name: str
    type: str
    dbname: str
    user: str
    password: str = field(repr=False)
    host: str
    driver: str
    port: int | None = None

    @classmethod
    def from_mapping(cls, name: str, params: Mapping | None) -> ConnectionConfig:
        if not params:
            raise ConfigurationError(
                f"Database parameters for the '{name}' connection are not defined in config"
            )
        for parameter in REQUIRED_PARAMETERS:
            value = params.get(parameter)
            if value is None or str(value).strip() == '':
                raise ConfigurationError(
                    f"Database parameter '{parameter}' is not defined for the '{name}' connection"
                )
        port = params.get('port')
        if port not in (None, ''):
            try:
                port = int(port)
            except (TypeError, ValueError):
                raise ConfigurationError(
                    f"Database parameter 'port' for the '{name}' connection must be an integer"
                ) from None
        else:
            port = None
        return cls(
            name=name,
            type=str(params['type']),
            dbname=str(params['dbname']),
            user=str(params['user']),
            password=str(params['pass']),
            host=str(params['host']),
            driver=str(params['driver']),
            port=port,
        )

    @property
    def url(self) -> str:
        drivername = f"{self.type}+{self.driver}"
        if self.type == 'sqlite':
            # sqlite takes a file path only; credentials and host do not apply
            database = None if self.dbname == ':memory:' else self.dbname
            url = URL.create(drivername, database=database)
        else:
            url = URL.create(
                drivername,
                username=self.user,
                password=self.password,
                host=self.host,
                port=self.port,
                database=self.dbname,
            )
        return url.render_as_string(hide_password=False)


def load_connection_configs(databases: Mapping | None) -> dict[str, ConnectionConfig]:
    """Validate the ``default`` and ``logserver`` connection blocks."""
    databases = databases or {}
    return {
        name: ConnectionConfig.from_mapping(name, databases.get(name))
        for name in REQUIRED_CONNECTIONS
    }


def bind_key_for(name: str) -> str | None:
    return None if name == DEFAULT else name


class StatementLog:
    """Keeps the most recent statements run on an engine and logs each at DEBUG."""

    def __init__(self, name: str, size: int = DEFAULT_STATEMENT_LOG_SIZE):
        self.name = name
        self.queries: deque[dict] = deque(maxlen=size)

    def attach(self, engine) -> None:
        sa.event.listen(engine, 'before_cursor_execute', self._before)
        sa.event.listen(engine, 'after_cursor_execute', self._after)

    def _before(self, conn, cursor, statement, parameters, context, executemany):
        # kept on the execution context so a failed statement leaves nothing behind
        if context is not None:
            context.backslash_query_start = time.perf_counter()

    def _after(self, conn, cursor, statement, parameters, context, executemany):
        start = getattr(context, 'backslash_query_start', None)
        duration_ms = (time.perf_counter() - start) * 1000 if start is not None else 0.0
        self.queries.append({'sql': statement, 'params': parameters, 'duration_ms': duration_ms})
        sql_logger.debug("[%s] %s %r (%.2f ms)", self.name, statement, parameters, duration_ms)


class Connection:
    """Live handle for one named connection."""

    def __init__(self, config: ConnectionConfig, engine, log_size: int = DEFAULT_STATEMENT_LOG_SIZE):
        self.config = config
        self.engine = engine
        self.statements = StatementLog(config.name, log_size)
        self.statements.attach(engine)

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def bind_key(self) -> str | None:
        return bind_key_for(self.name)

    def migrate(self, model) -> None:
        """Create the model's table, or add the columns it is missing."""
        table = model.__table__
        with self.engine.begin() as conn:
            inspector = sa.inspect(conn)
            if not inspector.has_table(table.name, schema=table.schema):
                table.create(conn)
                logger.info("Created table %s on %s", table.name, self.name)
                return
            existing = {column['name'] for column in inspector.get_columns(table.name, schema=table.schema)}
            missing = [column for column in table.columns if column.name not in existing]
            if not missing:
                return
            operations = Operations(MigrationContext.configure(conn))
            for column in missing:
                # added columns are nullable so existing rows stay valid
                operations.add_column(
                    table.name, sa.Column(column.name, column.type, nullable=True), schema=table.schema
                )
                logger.info("Added column %s.%s on %s", table.name, column.name, self.name)


class ConnectionRegistry:
    """Connection handles keyed by name, built once on first lookup."""

    def __init__(self, configs: Mapping[str, ConnectionConfig], log_size: int = DEFAULT_STATEMENT_LOG_SIZE):
        self.configs = dict(configs)
        self.log_size = log_size
        self._connections: dict[str, Connection] | None = None
        self._lock = threading.Lock()

    def get(self, name: str = DEFAULT) -> Connection:
        if self._connections is None:
            with self._lock:
                if self._connections is None:
                    self._connections = self._build()
        try:
            return self._connections[name]
        except KeyError:
            raise ConfigurationError(f"Database connection '{name}' is not configured") from None

    def _build(self) -> dict[str, Connection]:
        connections = {}
        for name, config in self.configs.items():
            connections[name] = Connection(config, db.engines[bind_key_for(name)], self.log_size)
            logger.debug("Opened %s connection (%s)", name, config.type)
        return connections

    @property
    def ready(self) -> bool:
        return self._connections is not None


def configure_binds(app, configs: Mapping[str, ConnectionConfig]) -> None:
    """Point Flask-SQLAlchemy's default bind and named binds at ``configs``."""
    app.config['SQLALCHEMY_DATABASE_URI'] = configs[DEFAULT].url
    app.config['SQLALCHEMY_BINDS'] = {
        name: config.url for name, config in configs.items() if name != DEFAULT
    }


def get_instance(name: str = DEFAULT) -> Connection:
    return current_app.extensions['backslash'].registry.get(name)
