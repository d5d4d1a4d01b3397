"""Display constants shared by the TUI widgets."""


class LogLevel:
    """Thresholds for the log panel.

    Values match the standard logging module, so records can be filtered
    with their levelno directly.
    """

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40

    _names = {
        DEBUG: "DEBUG",
        INFO: "INFO",
        WARNING: "WARNING",
        ERROR: "ERROR",
    }

    _from_string = {
        "debug": DEBUG,
        "info": INFO,
        "warning": WARNING,
        "error": ERROR,
    }

    @classmethod
    def name(cls, level: int) -> str:
        """Get the name for a log level (levels in between round down)."""
        for value in sorted(cls._names, reverse=True):
            if level >= value:
                return cls._names[value]
        return "DEBUG"

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Parse a --log-level value; unknown names mean DEBUG."""
        return cls._from_string.get(level_str.lower(), cls.DEBUG)


INPUT_HISTORY_MAX_SIZE = 100  # Submissions kept for up/down recall

LOG_TIMESTAMP_FORMAT = "%H:%M:%S.%f"
LOG_MAX_MESSAGE_LENGTH = 400  # Longer records are cut with "..."

MESSAGE_TIMESTAMP_FORMAT = "%H:%M:%S"
SUGGESTION_LABEL_LENGTH = 40  # Characters shown on a quick-suggestion button
SOURCES_HEADING = "Referenced Sources:"

DISCLAIMER = (
    "This AI tool provides an analysis and is not a definitive arbiter of truth. "
    "Always use critical thinking."
)
