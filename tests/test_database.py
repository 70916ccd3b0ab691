import pytest
import sqlalchemy as sa
from sqlalchemy.exc import OperationalError

from backslash import create_app
from backslash.database import get_instance
from backslash.exceptions import ConfigurationError
from backslash.models import db
from conftest import sqlite_databases


def test_registry_is_built_once_on_first_lookup(bootstrapper):
    registry = bootstrapper.registry
    assert not registry.ready
    default = registry.get()
    assert registry.ready
    assert registry.get('default') is default
    assert registry.get('logserver') is not default
    assert registry.get('logserver').bind_key == 'logserver'
    assert default.bind_key is None


def test_get_instance_uses_current_app(bootstrapper):
    assert get_instance() is bootstrapper.registry.get('default')
    assert get_instance('logserver').engine is db.engines['logserver']


def test_unknown_connection(bootstrapper):
    with pytest.raises(ConfigurationError, match="archive"):
        bootstrapper.registry.get('archive')


def test_statements_are_logged(bootstrapper, caplog):
    connection = get_instance()
    with caplog.at_level('DEBUG', logger='backslash.sql'):
        db.session.execute(sa.text('SELECT 42'))
    assert connection.statements.queries[-1]['sql'] == 'SELECT 42'
    assert 'SELECT 42' in caplog.text
    assert get_instance('logserver').statements.queries == []


def test_statement_log_keeps_only_recent_queries(tmp_path):
    app = create_app('config.TestingConfig', DATABASES=sqlite_databases(tmp_path), SQL_LOG_SIZE=3)
    with app.app_context():
        connection = get_instance()
        for n in range(10):
            db.session.execute(sa.text(f'SELECT {n}'))
        assert [q['sql'] for q in connection.statements.queries] == ['SELECT 7', 'SELECT 8', 'SELECT 9']
        db.session.remove()


def test_failed_statement_leaves_no_timing_state(bootstrapper):
    connection = get_instance()
    with pytest.raises(OperationalError):
        db.session.execute(sa.text('SELECT * FROM nope'))
    db.session.rollback()

    assert 'query_start' not in db.session.connection().info
    db.session.execute(sa.text('SELECT 1'))
    last = connection.statements.queries[-1]
    assert last['sql'] == 'SELECT 1'
    assert last['duration_ms'] >= 0
