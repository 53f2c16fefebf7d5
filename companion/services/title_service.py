"""Session titles derived from the first user message."""

DEFAULT_TITLE = "New Chat"


def build_session_title(message: str, max_length: int = 50) -> str:
    """Truncate a user message into a session title of at most ``max_length``."""
    title = message.strip()[:max_length].strip()
    return title or DEFAULT_TITLE
