"""Create/read helpers for the user management tables.

Inserts only flush so the caller decides when the transaction commits.
"""

from .models import db, User, Role


def get_user_by_username(username):
    return User.query.filter_by(username=username).first()


def _insert(record):
    db.session.add(record)
    db.session.flush()
    return record.id


def insert_user(user):
    return _insert(user)


def insert_user_details(details):
    return _insert(details)


def insert_user_status(status):
    return _insert(status)


def insert_role(role: Role) -> int:
    return _insert(role)


def upsert(model, key: dict, **values):
    """Update the row matching ``key``, or add a new one."""
    record = model.query.filter_by(**key).first()
    if record is None:
        record = model(**key)
    for name, value in values.items():
        setattr(record, name, value)
    db.session.add(record)
    return record
