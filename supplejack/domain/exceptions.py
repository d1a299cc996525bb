"""Client exceptions raised by the transport and by resource lookups."""


class SupplejackError(Exception):
    """Base class for every error raised by this package."""


# ── Transport errors ────────────────────────────────────────────────


class TransportError(SupplejackError):
    """Raised when an HTTP call to the API fails.

    ``status_code`` is 0 when no response was received at all.
    """

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}" if status_code else message)


class ResourceNotFound(TransportError):
    """The API answered 404."""


class Unauthorized(TransportError):
    """The API answered 401."""


class Forbidden(TransportError):
    """The API answered 403."""


class ServiceUnavailable(TransportError):
    """The API answered 503; retried by the transport before surfacing."""


class ReadTimeout(TransportError):
    """No response arrived within the configured timeout."""


# ── Lookup errors ───────────────────────────────────────────────────


class EntityNotFoundError(SupplejackError):
    """Raised when a requested entity does not exist."""

    entity_type = "Entity"

    def __init__(self, entity_id: int | str | None):
        self.entity_id = entity_id
        super().__init__(f"{self.entity_type} with ID {entity_id} was not found")


class RecordNotFound(EntityNotFoundError):
    entity_type = "Record"


class ConceptNotFound(EntityNotFoundError):
    entity_type = "Concept"


class SetNotFound(EntityNotFoundError):
    entity_type = "UserSet"


class StoryNotFound(EntityNotFoundError):
    entity_type = "Story"


class StoryUnauthorised(SupplejackError):
    """Raised when a private story is requested without the owner's key."""


class MalformedRequest(SupplejackError):
    """Raised before any request is issued when an ID is not usable."""


class RequestTimeout(SupplejackError):
    """The API did not answer in time."""


class ApiNotAvailable(SupplejackError):
    """The API stayed unavailable after every retry."""


class UnknownAttributeError(AttributeError):
    """Raised when a record-like object is asked for an attribute it lacks."""

    def __init__(self, owner: str, name: str):
        self.owner = owner
        self.name = name
        super().__init__(f"undefined attribute '{name}' for {owner}")
