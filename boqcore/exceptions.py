"""
exceptions.py — Domain error taxonomy for the catalog and BOQ store

Services raise these; routers let them propagate and main.py renders them
as ErrorResponse JSON with the matching HTTP status.

Business Rules:
- NotFound (404): unknown id or name reference
- Conflict (409): unique-constraint violation on a name/code
- InvalidState (409): transition on a terminal or non-pending entity
- MissingField (400): required field missing, detected before any write
- Unauthorized (401) / Forbidden (403): role gate, raised before any mutation
- StoreUnavailable (503): connection or transaction failure; never retried here

Called by: services/*, dependencies.py, database.py
Depends on: nothing
"""


class BoqError(Exception):
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


class NotFound(BoqError):
    status_code = 404


class Conflict(BoqError):
    status_code = 409


class InvalidState(BoqError):
    status_code = 409


class MissingField(InvalidState):
    status_code = 400


class Unauthorized(BoqError):
    status_code = 401


class Forbidden(BoqError):
    status_code = 403


class StoreUnavailable(BoqError):
    status_code = 503
