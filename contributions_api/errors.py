class ContributionsError(Exception):
    """Base class for failures of the contributions pipeline."""


class InputError(ContributionsError):
    """Raised when the year selector or format flag is malformed."""


class UserNotFoundError(ContributionsError):
    """Raised when GitHub has no contribution calendar for a username."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f'User "{username}" not found.')


class RetrievalError(ContributionsError):
    """Raised when a calendar page cannot be retrieved."""


class ParseError(ContributionsError):
    """Raised when calendar markup is unparseable or inconsistent."""
