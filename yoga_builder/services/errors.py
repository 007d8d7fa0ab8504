class ServiceError(Exception):
    """Base for errors the API turns into user-facing messages."""


class NotFoundError(ServiceError):
    pass


class ConflictError(ServiceError):
    pass


class PermissionDeniedError(ServiceError):
    pass


class ValidationError(ServiceError):
    pass


class StorageError(ServiceError):
    pass
