"""Session package."""

from swish_client.session.manager import SessionManager

__all__ = ["SessionManager"]
