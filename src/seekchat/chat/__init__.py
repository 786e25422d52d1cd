from .context import SessionContext
from .session import ChatSession, TransportFactory

__all__ = ["ChatSession", "SessionContext", "TransportFactory"]
