class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class SchedulingValidationError(AppError):
    """Raised for malformed times or days, missing fields and illegal lifecycle moves."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class SchedulingConflictError(AppError):
    """Raised when an instructor or room would be double-booked.

    ``details`` carries both conflict lists so callers can show the
    overlapping entries.
    """
    def __init__(self, message: str = "Scheduling conflict detected", details: dict = None):
        super().__init__(message, status_code=409, details=details)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)
        self.resource_type = resource_type
        self.resource_id = resource_id
