"""Lookup enums and the registry that ties them to their storage models.

Each lookup enum is an :class:`~enum.IntEnum` whose members correspond one to
one with the rows of a lookup table.  The member value doubles as the row's
primary key, which is what makes re-seeding an update rather than an insert.
"""

from __future__ import annotations

import logging
from enum import IntEnum

from .exceptions import EnumConfigurationError
from .models import Permission, UserStatusType

logger = logging.getLogger(__name__)


class LookupEnum(IntEnum):
    """Base for enums backed by a lookup table.

    Subclasses are attached to a model with :meth:`LookupRegistry.register`
    and may override :meth:`build_record` to fill extra columns.
    """

    @classmethod
    def describe(cls) -> list[tuple[str, int]]:
        """Return the ``(key, value)`` pairs in definition order."""
        return [(member.name, member.value) for member in cls]

    @classmethod
    def model(cls):
        return getattr(cls, '__model__', None)

    def build_record(self, existing=None):
        """Create the row for this member, or refresh ``existing`` in place."""
        record = existing if existing is not None else type(self).model()(id=self.value)
        record.name = self.name
        record.description = self.name.replace('_', ' ').capitalize()
        return record


class LookupRegistry:
    """Ordered list of lookup enums that need seeding."""

    def __init__(self):
        self._enums = []

    def register(self, model):
        def decorator(enum_cls):
            enum_cls.__model__ = model
            self._enums.append(enum_cls)
            return enum_cls
        return decorator

    def __iter__(self):
        return iter(self._enums)

    def __len__(self):
        return len(self._enums)


lookup_enums = LookupRegistry()


def get_enum_models(registry: LookupRegistry = lookup_enums) -> dict:
    """Map every registered lookup enum to its storage model.

    Entries that are not :class:`LookupEnum` subclasses are skipped.
    """
    enum_models = {}
    for enum_cls in registry:
        if not (isinstance(enum_cls, type) and issubclass(enum_cls, LookupEnum)):
            logger.debug("Skipping %r: not a lookup enum", enum_cls)
            continue
        model = enum_cls.model()
        if model is None:
            raise EnumConfigurationError(
                f"Model is not defined in {enum_cls.__name__} enum."
            )
        enum_models[enum_cls] = model
    return enum_models


@lookup_enums.register(UserStatusType)
class UserStatusTypesEnum(LookupEnum):
    ACTIVE = 1
    INACTIVE = 2
    SUSPENDED = 3
    BANNED = 4


@lookup_enums.register(Permission)
class PermissionsEnum(LookupEnum):
    USERS_VIEW = 1
    USERS_CREATE = 2
    USERS_EDIT = 3
    USERS_DELETE = 4
    ROLES_VIEW = 5
    ROLES_EDIT = 6
    PERMISSIONS_ASSIGN = 7
    LOGS_VIEW = 8
    SETTINGS_EDIT = 9

    def build_record(self, existing=None):
        record = super().build_record(existing)
        # USERS_VIEW -> users
        record.category = self.name.split('_', 1)[0].lower()
        return record
