# backend/utils/errors.py
# Failures raised by the request orchestration around the inventory core.
# Each one carries the HTTP status the API answers with (see main.py handler).


class InventoryError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# Missing or invalid input, rejected before any write
class ValidationError(InventoryError):
    status_code = 422


class NotFoundError(InventoryError):
    status_code = 404


# Exit or withdrawal larger than what is on the shelf
class InsufficientStockError(InventoryError):
    status_code = 400

    def __init__(self, requested: int, available: int, unit: str = ""):
        unit_suffix = f" {unit}" if unit else ""
        super().__init__(
            f"Requested quantity ({requested}) exceeds available stock ({available}{unit_suffix})"
        )
        self.requested = requested
        self.available = available


# Acting user lacks the role (or approval) for the requested action
class AuthorizationError(InventoryError):
    status_code = 403


# The database rejected the write; the session has already been rolled back
class PersistenceError(InventoryError):
    status_code = 500
