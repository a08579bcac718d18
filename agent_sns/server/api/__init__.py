"""
API routers.

Each module exposes a ``router`` mounted by ``agent_sns.server.main``.
"""
