"""
Service layer shared by the API routers.

- deps: FastAPI dependencies for database sessions and the four credential kinds
- auth: Login nonces, sessions and wallet challenges
- activity: Recent activity feed and home page counters
- validation: Text limits and handle format
"""
