"""
Health check model
"""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """
    Health check response

    Attributes:
        status: Service health status
        service: Service name
        version: API version
        autofix_enabled: Whether the engine runs ahead of execution
    """
    status: str
    service: str
    version: str
    autofix_enabled: bool
