from .broadcaster import Broadcaster
from .connection_handler import ConnectionHandler, ConnectionState
from .session_store import SessionStore, get_session_store, session_store

__all__ = [
    "Broadcaster",
    "ConnectionHandler",
    "ConnectionState",
    "SessionStore",
    "get_session_store",
    "session_store",
]
