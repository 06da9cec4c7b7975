"""
Dashboard Errors
Error values recorded in category slots and raised by movie sources
"""


class DashboardError(Exception):
    """Base error carrying a human-readable message"""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = str(message or self.__class__.__name__)

    def __str__(self) -> str:
        return self.message


class FetchError(DashboardError):
    """Transport, HTTP status or decoding failure while fetching movies"""


class ConfigurationError(DashboardError):
    """Invalid local configuration detected before any network call"""
