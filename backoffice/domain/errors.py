# backoffice/domain/errors.py
"""Wyjątki rzucane przez serwisy i renderowane przez warstwę API."""


class BackofficeError(Exception):
    """Bazowy wyjątek dla wszystkich błędów aplikacji."""

    status_code = 500

    def __init__(self, message="An internal error occurred", details=None, status_code=None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        rv = {"status": "error", "message": self.message}
        if self.details:
            rv["details"] = self.details
        return rv


class InvalidError(BackofficeError, ValueError):
    """Błędne dane wejściowe albo niespełniony warunek wstępny."""

    status_code = 400


class NotFoundError(BackofficeError, LookupError):
    """Wskazany obiekt nie istnieje."""

    status_code = 404

    def __init__(self, entity="Resource", **keys):
        super().__init__(f"{entity} not found", details=keys)
        self.entity = entity


class ConflictError(BackofficeError):
    """Naruszenie unikalności."""

    status_code = 409


class ChannelError(BackofficeError):
    """Zewnętrzny kanał (Telegram, Keitaro, Facebook) odrzucił wywołanie."""

    status_code = 502

    def __init__(self, message, code=None, description=None):
        details = {}
        if code is not None:
            details["code"] = code
        if description:
            details["description"] = description
        super().__init__(message, details=details)
        self.code = code
        self.description = description
