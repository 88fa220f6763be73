"""Exception types raised by twixter."""


class TwixterError(Exception):
    """Base class for all twixter errors."""


class ConfigError(TwixterError):
    """Configuration is missing or invalid; the run cannot proceed."""


class HookError(TwixterError):
    """A pre/post tweet hook exited with a non-zero status."""

    def __init__(self, command: str, returncode: int, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        message = f"Hook {command!r} failed with exit status {returncode}"
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)
