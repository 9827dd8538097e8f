"""
Pydantic schemas for API responses
"""

from pydantic import BaseModel, Field, model_validator
from typing import Optional
from datetime import datetime, timezone
from schemas.job import ImportCursor, JobOutcome


class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field("healthy", description="Overall system status: healthy, degraded, unhealthy")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    database_connected: bool
    import_name: str
    scheduler_running: bool = False
    cursor: Optional[ImportCursor] = None
    last_outcome: Optional[JobOutcome] = None
    last_error: Optional[str] = None

    @model_validator(mode="after")
    def determine_status(self):
        """Determine overall health status"""
        if not self.database_connected:
            self.status = "unhealthy"
        elif self.last_error or (
            self.last_outcome is not None
            and self.last_outcome.state.value in ("retry", "abandoned")
        ):
            self.status = "degraded"
        else:
            self.status = "healthy"
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "timestamp": "2024-01-15T10:30:00Z",
                "database_connected": True,
                "import_name": "snowflake_import",
                "scheduler_running": True,
                "cursor": {
                    "offset": 1500,
                    "total_rows_snapshot": None,
                    "mode": "Import continuously"
                },
                "last_outcome": {
                    "state": "success",
                    "window": {"offset": 1400, "limit": 100},
                    "next_payload": {"attempts_so_far": 0, "offset": None},
                    "delay_seconds": 60,
                    "events_ingested": 100,
                    "events_skipped": 0,
                    "error": None
                }
            }
        }
