"""Domain exceptions mapped to HTTP responses by the exception handlers in main.py."""


class AccountsError(Exception):
    """Base class for errors that surface to the caller with a status code and message."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AccountsError):
    """Malformed input. Carries a field -> message map."""

    status_code = 400

    def __init__(self, errors: dict[str, str], message: str = "Validation Failure.") -> None:
        super().__init__(message)
        self.errors = errors


class AuthenticationFailure(AccountsError):
    status_code = 401

    def __init__(self, message: str = "Incorrect Credentials.") -> None:
        super().__init__(message)


class Forbidden(AccountsError):
    status_code = 403


class ForbiddenInactive(Forbidden):
    """Credentials were correct but the account has not been activated."""

    def __init__(self, message: str = "Account is inactive.") -> None:
        super().__init__(message)


class NotFound(AccountsError):
    status_code = 404


class InvalidToken(AccountsError):
    status_code = 400

    def __init__(self, message: str = "This account is either active or the token is invalid.") -> None:
        super().__init__(message)


class EmailDeliveryFailure(AccountsError):
    status_code = 502

    def __init__(self, message: str = "E-mail failure.") -> None:
        super().__init__(message)
