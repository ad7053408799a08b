"""Exceptions raised by the records API client."""

from typing import Optional


class ApiError(Exception):
    """A records API call failed, either at the transport level or with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self):
        if self.status_code is not None:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message
