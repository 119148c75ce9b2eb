from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = Field(default="healthy", description="Health status of the service")
    version: str = Field(default="1.0.0", description="Version of the service")

