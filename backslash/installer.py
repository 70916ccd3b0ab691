"""Install routine: entity migrations, lookup tables and the default admin.

Every stage is safe to re-run. Lookup rows are keyed by their enum value and
the administrator is only created when no user named ``backslash`` exists.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.schema import sort_tables

from .database import DEFAULT, DEFAULT_STATEMENT_LOG_SIZE, LOGSERVER, ConnectionRegistry
from .enums import PermissionsEnum, UserStatusTypesEnum, get_enum_models, lookup_enums
from .models import db, User, UserDetail, UserStatus, Role, RolePermission, UserRole
from .users import (get_user_by_username, insert_user, insert_user_details,
                    insert_user_status, insert_role, upsert)

BASE_MODEL_NAME = 'Model'

ADMIN_USERNAME = 'backslash'
ADMIN_EMAIL = 'user@backslash.dev'
ADMIN_ROLE = 'Backslash Admin'
DEFAULT_ADMIN_PASSWORD = '123456'


def years_ago(now: datetime, years: int) -> datetime:
    try:
        return now.replace(year=now.year - years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return now.replace(year=now.year - years, day=28)


@dataclass
class InstallReport:
    migrated: list[str] = field(default_factory=list)
    lookup_rows: int = 0
    admin: User | None = None


class Bootstrapper:
    """Runs migrations and seeding against an app's named connections."""

    def __init__(self, app, configs, lookups=lookup_enums):
        self.registry = ConnectionRegistry(
            configs, app.config.get('SQL_LOG_SIZE') or DEFAULT_STATEMENT_LOG_SIZE)
        self.lookups = lookups
        self.resolvers = []
        self._install_lock = threading.Lock()
        app.extensions['backslash'] = self

    def add_resolver(self, resolver) -> None:
        self.resolvers.append(resolver)

    def resolve_models(self) -> dict:
        models = {}
        for resolver in self.resolvers:
            models.update(resolver.resolve())
        return models

    @staticmethod
    def database_for(model) -> str:
        bind_key = model.__table__.metadata.info.get('bind_key')
        return bind_key or getattr(model, '__bind_key__', None) or DEFAULT

    def migrate_entities(self, models: dict) -> list[str]:
        """Bring the tables of ``models`` up to date on their own connection.

        The ``Model`` base is skipped if a resolver hands it over. Tables are
        migrated parents first so foreign keys resolve.
        """
        models = {name: model for name, model in models.items() if name != BASE_MODEL_NAME}
        names = {model.__table__: name for name, model in models.items()}
        migrated = []
        for table in sort_tables(names):
            name = names[table]
            model = models[name]
            self.registry.get(self.database_for(model)).migrate(model)
            migrated.append(name)
        current_app.logger.info("Migrated %d entities", len(migrated))
        return migrated

    def get_enum_models(self) -> dict:
        return get_enum_models(self.lookups)

    def create_enums_in_db(self, enum_models: dict) -> int:
        """Upsert one row per enum member, keyed by the member's value."""
        count = 0
        for enum_cls, model in enum_models.items():
            try:
                for key, value in enum_cls.describe():
                    existing = db.session.get(model, value)
                    db.session.add(enum_cls[key].build_record(existing))
                    count += 1
                db.session.commit()
            except SQLAlchemyError:
                db.session.rollback()
                raise
            current_app.logger.info("Seeded %s into %s", enum_cls.__name__, model.__table__.name)
        return count

    def create_admin(self) -> User | None:
        """Create the ``backslash`` administrator with a fully privileged role.

        Returns the new user, or ``None`` when the user already exists. All
        rows are written in one transaction.
        """
        if get_user_by_username(ADMIN_USERNAME) is not None:
            current_app.logger.info("Admin user '%s' already exists", ADMIN_USERNAME)
            return None

        now = datetime.now()
        try:
            user = User(username=ADMIN_USERNAME, email=ADMIN_EMAIL, registration_date=now,
                        approved=True, active=True)
            user.set_password(current_app.config.get('ADMIN_PASSWORD') or DEFAULT_ADMIN_PASSWORD)
            user_id = insert_user(user)

            insert_user_details(UserDetail(user_id=user_id, first_name='Michael', last_name='James',
                                           date_of_birth=years_ago(now, 30)))

            insert_user_status(UserStatus(user_id=user_id,
                                          user_status_type_id=int(UserStatusTypesEnum.ACTIVE),
                                          date_from=now, message='New Backslash User'))

            role_id = insert_role(Role(name=ADMIN_ROLE, active=True, protected=True, weight=0))

            for _, permission_id in PermissionsEnum.describe():
                upsert(RolePermission, {'permission_id': permission_id, 'role_id': role_id},
                       protected=True)

            upsert(UserRole, {'user_id': user_id, 'role_id': role_id})
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise

        current_app.logger.info("Created admin user '%s'", ADMIN_USERNAME)
        return user

    def install(self) -> InstallReport:
        with self._install_lock:
            report = InstallReport()
            models = self.resolve_models()

            self.registry.get(DEFAULT)
            report.migrated = self.migrate_entities(models)

            self.registry.get(LOGSERVER)
            report.lookup_rows = self.create_enums_in_db(self.get_enum_models())

            report.admin = self.create_admin()
            return report
