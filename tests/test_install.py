import pytest
from sqlalchemy.exc import SQLAlchemyError

import backslash.installer
from backslash.enums import PermissionsEnum, UserStatusTypesEnum
from backslash.installer import ADMIN_ROLE, ADMIN_USERNAME
from backslash.users import upsert
from backslash.models import (db, User, UserDetail, UserStatus, Role, RolePermission, UserRole,
                              UserStatusType, LogSession)


def test_install_creates_admin(bootstrapper):
    report = bootstrapper.install()
    assert report.admin.username == ADMIN_USERNAME
    assert 'LogSession' in report.migrated
    assert report.lookup_rows == len(PermissionsEnum) + len(UserStatusTypesEnum)

    user = User.query.filter_by(username=ADMIN_USERNAME).one()
    assert user.approved and user.active
    assert user.check_password('123456')

    detail = UserDetail.query.filter_by(user_id=user.id).one()
    assert (detail.first_name, detail.last_name) == ('Michael', 'James')
    assert detail.date_of_birth.year == user.registration_date.year - 30

    status = UserStatus.query.filter_by(user_id=user.id).one()
    assert status.user_status_type_id == UserStatusTypesEnum.ACTIVE
    assert status.message == 'New Backslash User'

    role = Role.query.filter_by(name=ADMIN_ROLE).one()
    assert role.protected and role.active and role.weight == 0
    grants = RolePermission.query.filter_by(role_id=role.id).all()
    assert sorted(g.permission_id for g in grants) == [p.value for p in PermissionsEnum]
    assert all(g.protected for g in grants)
    assert UserRole.query.filter_by(user_id=user.id, role_id=role.id).count() == 1


def test_install_is_idempotent(bootstrapper):
    bootstrapper.install()
    report = bootstrapper.install()
    assert report.admin is None
    assert User.query.filter_by(username=ADMIN_USERNAME).count() == 1
    assert Role.query.count() == 1
    assert RolePermission.query.count() == len(PermissionsEnum)
    assert UserRole.query.count() == 1
    assert UserStatusType.query.count() == len(UserStatusTypesEnum)
    assert LogSession.query.count() == 0


def test_admin_password_from_config(app, bootstrapper):
    app.config['ADMIN_PASSWORD'] = 'correct horse'
    bootstrapper.install()
    user = User.query.filter_by(username=ADMIN_USERNAME).one()
    assert user.check_password('correct horse')


def test_failed_admin_seed_is_rolled_back(bootstrapper, monkeypatch):
    bootstrapper.migrate_entities(bootstrapper.resolve_models())

    def broken_insert_role(role):
        raise SQLAlchemyError('role table unavailable')

    monkeypatch.setattr(backslash.installer, 'insert_role', broken_insert_role)
    with pytest.raises(SQLAlchemyError):
        bootstrapper.create_admin()
    assert User.query.count() == 0
    assert UserDetail.query.count() == 0
    assert UserStatus.query.count() == 0

    monkeypatch.undo()
    assert bootstrapper.create_admin() is not None
    assert User.query.count() == 1


def test_upsert_updates_existing_row(bootstrapper):
    bootstrapper.install()
    role = Role.query.filter_by(name=ADMIN_ROLE).one()
    key = {'role_id': role.id, 'permission_id': int(PermissionsEnum.LOGS_VIEW)}

    upsert(RolePermission, key, protected=False)
    db.session.commit()

    grants = RolePermission.query.filter_by(**key).all()
    assert len(grants) == 1
    assert grants[0].protected is False
    assert RolePermission.query.count() == len(PermissionsEnum)


def test_upsert_inserts_missing_row(bootstrapper):
    bootstrapper.install()
    role_id = Role.query.filter_by(name=ADMIN_ROLE).one().id
    user_id = User.query.filter_by(username=ADMIN_USERNAME).one().id

    upsert(UserRole, {'user_id': user_id, 'role_id': role_id + 1})
    db.session.commit()

    assert UserRole.query.filter_by(user_id=user_id).count() == 2
