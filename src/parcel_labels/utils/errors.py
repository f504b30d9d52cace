from __future__ import annotations


class PortalAutomationError(RuntimeError):
    """Base for faults raised while driving the portal. May carry a diagnostic screenshot path."""

    def __init__(self, message: str, *, screenshot: str | None = None) -> None:
        super().__init__(message)
        self.screenshot = screenshot


class PreconditionError(PortalAutomationError):
    """Raised when a workflow step is invoked before the step it depends on."""


class LoginFieldsNotFoundError(PortalAutomationError):
    """Raised when the username or password control cannot be located on the login page."""


class LoginFailedError(PortalAutomationError):
    """Raised when the portal still shows the login page after submitting credentials."""


class BrowserLaunchError(PortalAutomationError):
    """Raised when a detached browser process cannot be started or reached over CDP."""
