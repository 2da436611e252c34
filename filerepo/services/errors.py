from __future__ import annotations
from typing import Optional


class RepositoryError(Exception):
    """Base of every failure the repository reports to the request boundary."""
    status_code = 500
    template = "Repository error."

    def __init__(self, subject: str = "", *, cause: Optional[BaseException] = None):
        self.subject = subject
        self.cause = cause
        super().__init__(self.message)

    @property
    def message(self) -> str:
        return self.template.format(subject=self.subject)


class AccessDenied(RepositoryError):
    status_code = 403
    template = "Access denied."


class NotFound(RepositoryError):
    status_code = 404
    template = '"{subject}" not found.'


class Forbidden(RepositoryError):
    status_code = 403
    template = '"{subject}" is reserved and cannot be modified.'


class AdminDisabled(Forbidden):
    template = "Admin area is disabled on this server."


class StorageFault(RepositoryError):
    status_code = 500
    template = "Storage failure: {subject}"


class TooLarge(RepositoryError):
    status_code = 413
    template = "File too large. Max size is {subject}."
