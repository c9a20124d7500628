"""Match Wrapped: time-released reveal of a ticket holder's match."""

from .routes import create_wrapped_blueprint

__all__ = ["create_wrapped_blueprint"]
