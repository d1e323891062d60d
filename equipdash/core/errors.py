class EquipdashError(Exception):
    """Base class for equipdash errors."""


class ConfigurationError(EquipdashError):
    """Settings are missing or malformed."""


class StoreError(EquipdashError):
    """A call against the backing store failed."""

    def __init__(self, message: str, *, table: str | None = None):
        super().__init__(message)
        self.table = table


class ValidationIndeterminate(EquipdashError):
    """
    A uniqueness lookup could not be completed.

    Callers must treat this as a rejection, never as "MAC is free".
    """

    def __init__(self, mac: str, collection: str, cause: Exception | None = None):
        super().__init__(f"could not check {mac} against {collection}: {cause}")
        self.mac = mac
        self.collection = collection
        self.cause = cause


class RemediationError(EquipdashError):
    """Removing a MAC from, or deleting, a conflicting record failed."""


class PermissionDenied(EquipdashError):
    """The action requires an elevated role."""


class RecordNotFound(EquipdashError):
    """The record named by an edit does not exist."""

    def __init__(self, table: str, record_id: str):
        super().__init__(f"no {table} record {record_id}")
        self.table = table
        self.record_id = record_id
