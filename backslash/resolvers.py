from .models import (User, UserDetail, UserStatus, Role, RolePermission, UserRole,
                     Permission, UserStatusType, LogSession)


class DependencyResolver:
    """Supplies the models a component needs migrated, keyed by class name."""

    def resolve(self) -> dict:
        raise NotImplementedError


class ModelResolver(DependencyResolver):
    def __init__(self, *models):
        self.models = models

    def resolve(self) -> dict:
        return {model.__name__: model for model in self.models}


user_management_resolver = ModelResolver(
    Permission, UserStatusType, User, UserDetail, UserStatus, Role, RolePermission, UserRole,
)
logserver_resolver = ModelResolver(LogSession)
