"""Domain-specific exceptions: framework-independent."""


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class DuplicateEntityError(Exception):
    """Raised when attempting to create a duplicate entity."""

    def __init__(self, entity_type: str, field: str, value: str):
        self.entity_type = entity_type
        self.field = field
        self.value = value
        super().__init__(f"{entity_type} with {field}='{value}' already exists")


class DuplicateWorkOrderError(DuplicateEntityError):
    """Raised when a work-order number is already taken by another job."""

    def __init__(self, work_order_number: int):
        self.work_order_number = work_order_number
        super().__init__("Job", "work_order_number", str(work_order_number))


class ValidationError(Exception):
    """Raised when a local edit or new record breaks a business rule.

    Always raised before any remote call is made.
    """

    def __init__(self, message: str, work_order_numbers: list[int] | None = None):
        self.message = message
        self.work_order_numbers = work_order_numbers or []
        super().__init__(message)


class ConflictError(Exception):
    """Raised when a row's concurrency token no longer matches the expected one."""

    def __init__(self, job_id: str, expected: object = None, actual: object = None):
        self.job_id = job_id
        self.expected = expected
        self.actual = actual
        super().__init__(f"Job '{job_id}' was modified by someone else")


class RemoteError(Exception):
    """Raised when the backing store cannot be reached or rejects an operation."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        self.message = message
        super().__init__(f"[{operation}] {message}")
