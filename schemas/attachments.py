"""
Pydantic schemas for attachment documents used by transformations
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Optional


class PropertyColumns(BaseModel):
    """Which source columns hold the event name, timestamp and identity"""

    model_config = ConfigDict(populate_by_name=True)

    event: str = Field(..., min_length=1)
    timestamp: str = Field(..., min_length=1)
    distinct_id: str = Field(..., alias="distinctId", min_length=1)


class CleanedUpPropertiesConfig(BaseModel):
    """
    propertyConfigJson attachment.

    Example:
        {
            "propertyColumns": {"event": "EVENT_NAME", "timestamp": "CREATED_AT", "distinctId": "USER_ID"},
            "dataSource": "warehouse",
            "replacements": {"id": "ID", "utm": "UTM"},
            "unmatchedUserDefault": "anonymous"
        }
    """

    model_config = ConfigDict(populate_by_name=True)

    property_columns: PropertyColumns = Field(..., alias="propertyColumns")
    data_source: Optional[str] = Field(None, alias="dataSource")
    replacements: Dict[str, str] = Field(default_factory=dict)
    unmatched_user_default: Any = Field(None, alias="unmatchedUserDefault")
