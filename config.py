import os

DB_PARAMETERS = ("type", "dbname", "user", "pass", "host", "driver", "port")


def db_from_env(name):
    """Collect ``DB_<NAME>_<FIELD>`` variables into a connection mapping.

    Unset variables are left out so validation can report them by name.
    """
    prefix = f"DB_{name.upper()}_"
    params = {}
    for field in DB_PARAMETERS:
        value = os.environ.get(prefix + field.upper())
        if value is not None:
            params[field] = value
    return params


class BaseConfig:
    SECRET_KEY = os.environ.get("SECRET_KEY")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    ADMIN_PASSWORD = os.environ.get("BACKSLASH_ADMIN_PASSWORD", "123456")
    # statements kept in memory per connection
    SQL_LOG_SIZE = 1000
    DATABASES = {
        'default': db_from_env('default'),
        'logserver': db_from_env('logserver'),
    }

class DevelopmentConfig(BaseConfig):
    DATABASES = {
        'default': {'type': 'sqlite', 'driver': 'pysqlite', 'dbname': 'database.sqlite',
                    'user': 'backslash', 'pass': 'backslash', 'host': 'localhost'},
        'logserver': {'type': 'sqlite', 'driver': 'pysqlite', 'dbname': 'logserver.sqlite',
                      'user': 'backslash', 'pass': 'backslash', 'host': 'localhost'},
    }

class TestingConfig(BaseConfig):
    TESTING = True
    DATABASES = {
        'default': {'type': 'sqlite', 'driver': 'pysqlite', 'dbname': ':memory:',
                    'user': 'test', 'pass': 'test', 'host': 'localhost'},
        'logserver': {'type': 'sqlite', 'driver': 'pysqlite', 'dbname': ':memory:',
                      'user': 'test', 'pass': 'test', 'host': 'localhost'},
    }

class ProductionConfig(BaseConfig):
    pass
