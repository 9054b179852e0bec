"""Exception hierarchy for ccs."""


class CcsError(Exception):
    """Base exception for all ccs errors."""


class ProjectsDirNotFoundError(CcsError):
    """The transcript root directory does not exist."""

    def __init__(self, path) -> None:
        super().__init__(f"Projects directory not found: {path}")
        self.path = path
