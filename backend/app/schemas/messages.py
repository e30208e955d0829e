from pydantic import BaseModel


class CodeResponse(BaseModel):
    """Freshly reserved access code."""

    code: str


class HealthResponse(BaseModel):
    status: str


class InfoResponse(BaseModel):
    name: str
    version: str
    description: str
