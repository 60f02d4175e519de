"""
Standard exit codes and error types for changelog.

Following Unix/POSIX conventions for command-line tools.
"""
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
NOT_FOUND = 64           # Command, package, repository or changelog not found
API_ERROR = 65           # External API call failed (GitHub, crates.io, PyPI)
CONFIG_ERROR = 66        # Configuration file error
NETWORK_ERROR = 68       # Network connection failed
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'ConnectionError': NETWORK_ERROR,
    'TimeoutError': NETWORK_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: BaseException) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    if isinstance(exc, CommandError):
        return exc.exit_code
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that carries the exit code the CLI should terminate with.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class NotFoundError(CommandError):
    """Raised when a command, package or repository cannot be found."""
    def __init__(self, message: str = "Not found"):
        super().__init__(message, NOT_FOUND)


class ChangelogNotFoundError(NotFoundError):
    """Raised when a repository has neither release notes nor a changelog file."""
    def __init__(self, message: str, releases_url: Optional[str] = None):
        super().__init__(message)
        self.releases_url = releases_url


class APIError(CommandError):
    """Raised when an external API answers with an unexpected status."""
    def __init__(self, message: str, status: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message, API_ERROR)
        self.status = status
        self.body = body


class NetworkError(CommandError):
    """Raised when a request cannot be completed at the transport level."""
    def __init__(self, message: str):
        super().__init__(message, NETWORK_ERROR)


class ConfigError(CommandError):
    """Raised when there's a configuration error."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)
