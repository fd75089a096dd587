"""Error types raised by agile-board."""


class ServiceError(Exception):
    """Raised by every remote service call that does not succeed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class EntityNotFoundError(ServiceError):
    """Raised when the gateway reports that the requested entity does not exist."""

    def __init__(self, message: str = "Entity not found") -> None:
        super().__init__(message, status_code=404)


class ScopeNotSelectedError(ValueError):
    """Raised when a command needs a selected project or team and none is stored."""

    def __init__(self, scope: str) -> None:
        self.scope = scope
        super().__init__(
            f"No {scope} selected. Select one using:\n"
            f"  agile-board select {scope} <{scope}-id>"
        )
