"""FastAPI dependencies resolving app-scoped objects created at startup."""

from fastapi import Request

from files_gateway.config.settings import Settings
from files_gateway.services.gateway import GatewayService


def get_app_settings(request: Request) -> Settings:
    """Settings the app was created with."""
    return request.app.state.settings


def get_gateway(request: Request) -> GatewayService:
    """Gateway service built in the app lifespan."""
    return request.app.state.gateway
