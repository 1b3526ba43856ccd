"""FastAPI dependency accessors."""

from fastapi import Request

from bonkagent.services import Services


def get_services(request: Request) -> Services:
    return request.app.state.services
