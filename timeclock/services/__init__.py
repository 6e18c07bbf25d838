from .auth import AuthManager
from .http import ApiClient, ApiResponse
from .reconciliation import EngineState, SessionEngine, SessionView, Transition
from .sessions import SessionGateway
from .tokens import TokenManager
from .users import UserGateway

__all__ = [
    "ApiClient",
    "ApiResponse",
    "AuthManager",
    "EngineState",
    "SessionEngine",
    "SessionGateway",
    "SessionView",
    "TokenManager",
    "Transition",
    "UserGateway",
]
