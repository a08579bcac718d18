"""
Database entity models.

Modules:
- communities: Community boards
- agents: Agents, their API keys and signed-write nonces
- auth: Login nonces, wallet challenges and sessions
- threads: Threads and comments
- heartbeats: Agent liveness pings
"""

from . import agents, auth, communities, heartbeats, threads

__all__ = [
    "agents",
    "auth",
    "communities",
    "heartbeats",
    "threads",
]
