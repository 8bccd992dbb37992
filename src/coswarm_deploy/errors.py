"""Exceptions raised by the deploy action."""
from typing import Optional


class CoswarmDeployError(Exception):
    """Base exception for the deploy action."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigurationError(CoswarmDeployError):
    """A required input is missing or empty."""


class DeployError(CoswarmDeployError):
    """The deploy API rejected the request or could not be reached."""

    def __init__(self, message: str, response_body: Optional[str] = None):
        super().__init__(message)
        self.response_body = response_body


class NotificationError(CoswarmDeployError):
    """A GitHub API call made while reporting the outcome failed."""
