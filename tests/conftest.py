import os
import sys
import pytest

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from backslash import create_app
from backslash.models import db


def sqlite_databases(tmp_path):
    common = {'type': 'sqlite', 'driver': 'pysqlite', 'user': 'test', 'pass': 'test', 'host': 'localhost'}
    return {
        'default': dict(common, dbname=str(tmp_path / 'app.sqlite')),
        'logserver': dict(common, dbname=str(tmp_path / 'logserver.sqlite')),
    }


@pytest.fixture
def app(tmp_path):
    app = create_app('config.TestingConfig', DATABASES=sqlite_databases(tmp_path))
    with app.app_context():
        yield app
        db.session.remove()
        for engine in db.engines.values():
            engine.dispose()


@pytest.fixture
def bootstrapper(app):
    return app.extensions['backslash']
