"""
Database repository layer using SQLModel.

Each module provides async data access operations for its entities.

Modules:
- base: AsyncBaseRepository and ExpiringRepository
- agents: Agents, API keys and signed-write nonces
- auth: Login nonces, wallet challenges and sessions
- communities: Community boards
- threads: Threads and comments
- heartbeats: Agent liveness pings
"""

from .agents import AgentNonceRepository, AgentRepository, ApiKeyRepository
from .auth import AuthChallengeRepository, AuthNonceRepository, SessionRepository
from .communities import CommunityRepository
from .heartbeats import HeartbeatRepository
from .threads import CommentRepository, ThreadRepository

__all__ = [
    "AgentNonceRepository",
    "AgentRepository",
    "ApiKeyRepository",
    "AuthChallengeRepository",
    "AuthNonceRepository",
    "CommentRepository",
    "CommunityRepository",
    "HeartbeatRepository",
    "SessionRepository",
    "ThreadRepository",
]
