"""
Standard exit codes for calrelease commands.

Following Unix/POSIX conventions for command-line tools.
"""
# Standard POSIX exit codes
GENERAL_ERROR = 1        # General errors

# Application-specific exit codes (64-113 are typically available)
REPO_NOT_FOUND = 64      # No git repository in the working directory or above
CONFIG_ERROR = 66        # Missing identity, unknown remote, bad config file
NETWORK_ERROR = 68       # Push to the remote failed
DATA_ERROR = 70          # Tag could not be created
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'ConnectionError': NETWORK_ERROR,
    'TimeoutError': NETWORK_ERROR,
    'ValueError': DATA_ERROR,
    'GitError': GENERAL_ERROR,
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
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class RepositoryNotFoundError(CommandError):
    """Raised when no git repository is found from a directory upward."""
    def __init__(self, path: str):
        super().__init__(
            f"no git directory found in {path} or any parent directory",
            REPO_NOT_FOUND,
        )
        self.path = path


class IdentityMissingError(CommandError):
    """Raised when an annotated tag is requested without a full identity."""
    def __init__(self, name: str = "", email: str = ""):
        super().__init__(
            "both user and email are required when specifying a message, "
            "something might be wrong with your ~/.gitconfig or you didn't "
            "specify --user and --email",
            CONFIG_ERROR,
        )
        self.name = name
        self.email = email


class TagCreationError(CommandError):
    """Raised when a tag cannot be created (HEAD unresolved, duplicate name)."""
    def __init__(self, tag: str, reason: str):
        super().__init__(f"failed to create tag {tag}: {reason}", DATA_ERROR)
        self.tag = tag
        self.reason = reason


class RemoteMissingError(CommandError):
    """Raised when the named remote is not configured."""
    def __init__(self, remote: str):
        super().__init__(
            f"remote {remote} not found, cannot push, use --no-push or fix the remote",
            CONFIG_ERROR,
        )
        self.remote = remote


class PushError(CommandError):
    """
    Raised when pushing a tag fails for any reason other than the remote
    already being up to date. The local tag is left in place.
    """
    def __init__(self, tag: str, remote: str, output: str = ""):
        super().__init__(f"failed to push tag {tag} to remote {remote}", NETWORK_ERROR)
        self.tag = tag
        self.remote = remote
        self.output = output


class ConfigError(CommandError):
    """Raised when there's a configuration error."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)
