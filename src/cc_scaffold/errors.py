"""Exception types raised by CC Scaffold."""


class ScaffoldError(Exception):
    """Base class for errors surfaced to the CLI."""


class BackupError(ScaffoldError):
    """A snapshot or restore of the configuration directory failed."""


class AnalysisError(ScaffoldError):
    """The external Claude analysis failed."""


class ClaudeUnavailableError(AnalysisError):
    """The Claude CLI binary could not be found or run."""


class AnalysisTimeoutError(AnalysisError):
    """The analysis exceeded its wall-clock timeout."""

    def __init__(self, message: str, chars_received: int = 0):
        super().__init__(message)
        self.chars_received = chars_received


class AnalysisStalledError(AnalysisError):
    """The analysis produced no output within the stall window."""
