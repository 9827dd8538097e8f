"""
Pydantic schema for events produced by row transformations
"""

from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, Union
from datetime import datetime


class TransformedEvent(BaseModel):
    """
    One event ready for the capture sink.

    Only `event` is checked: an empty name makes the event unemittable.
    Everything in `properties` is forwarded to the sink as-is.
    """

    event: str = ""
    distinct_id: Any = None
    timestamp: Optional[Union[datetime, str]] = None
    properties: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_emittable(self) -> bool:
        return bool(self.event and self.event.strip())
