"""
DecentraID FastAPI Dependencies
"""

from fastapi import Request

from decentraid.services import Services


def get_services(request: Request) -> Services:
    """Services wired at application startup."""
    return request.app.state.services
