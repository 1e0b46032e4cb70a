"""Domain exceptions shared by the entity services.

Routes map NotFoundError to 404 and AlreadyExistsError to 409.
"""


class NotFoundError(Exception):
    """Raised when a lookup by id or unique key finds nothing."""

    def __init__(self, entity: str, field: str, value: object):
        self.entity = entity
        self.field = field
        self.value = value
        super().__init__(f"{entity} not found with {field}: {value}")


class AlreadyExistsError(Exception):
    """Raised when a unique field value is already taken by a live row."""

    def __init__(self, entity: str, field: str, value: object):
        self.entity = entity
        self.field = field
        self.value = value
        super().__init__(f"{entity} already exists with {field}: {value}")
