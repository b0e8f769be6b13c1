"""
V1 API router aggregator: wires all endpoint modules together.
"""

from fastapi import APIRouter

from bizdesk.api.v1.endpoints import admins, auth, client, employees, health, user

api_router = APIRouter()

# Registration, login, /me, logout for every principal kind
api_router.include_router(auth.router)

# Self-service profiles
api_router.include_router(user.router)
api_router.include_router(client.router)

# Staff profiles and management
api_router.include_router(employees.router)
api_router.include_router(admins.router)

api_router.include_router(health.router)
