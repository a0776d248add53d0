from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Response model for the health check endpoint."""

    status: str


class ErrorDetail(BaseModel):
    """Body of a failed /info lookup, returned under the `detail` key."""

    code: str
    message: str
    provider: str | None = None


class ErrorResponse(BaseModel):
    detail: ErrorDetail
