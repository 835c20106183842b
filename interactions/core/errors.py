class InteractionError(Exception):
    """Base class for everything the interactions engine raises."""


class NotFoundError(InteractionError):
    def __init__(self, kind: str, entity_id: int):
        super().__init__(f"{kind} {entity_id} not found")
        self.kind = kind
        self.entity_id = entity_id


class ConflictError(InteractionError):
    """The like/watch already happened for this (user, video) pair."""


class DuplicateEventError(ConflictError):
    """Raised by a store when an event row violates its unique key."""


class StoreFailure(InteractionError):
    pass


class InvalidUploadError(InteractionError, ValueError):
    pass


class StorageUploadError(InteractionError):
    pass
