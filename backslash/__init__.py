from flask import Flask

from .models import db, migrate
from .database import configure_binds, load_connection_configs
from .installer import Bootstrapper
from .resolvers import logserver_resolver, user_management_resolver


def create_app(config_object='config.DevelopmentConfig', **overrides):
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.config.update(overrides)

    # Both connections are validated before anything touches a database.
    configs = load_connection_configs(app.config.get('DATABASES'))
    configure_binds(app, configs)

    db.init_app(app)
    migrate.init_app(app, db)

    bootstrapper = Bootstrapper(app, configs)
    bootstrapper.add_resolver(user_management_resolver)
    bootstrapper.add_resolver(logserver_resolver)

    from .cli import install_command, migrate_entities_command
    app.cli.add_command(install_command)
    app.cli.add_command(migrate_entities_command)

    return app
