"""
Passthrough transformation: the whole row becomes the event properties
"""

import logging

from ingestion.transformers.base import Row, Transformation
from ingestion.transformers.dates import format_date_to_iso_string
from schemas.events import TransformedEvent

logger = logging.getLogger(__name__)

PASSTHROUGH_EVENT_NAME = "test_event"
TIMESTAMP_COLUMN = "COMPLETED_AT_ET"


class PassthroughTransformation(Transformation):
    """
    Properties are the row exactly as read. A parseable COMPLETED_AT_ET is
    normalized onto the event timestamp only.
    """

    name = "passthrough"
    author = "tacastillo"

    def transform(self, row: Row) -> TransformedEvent:
        timestamp = None

        raw_timestamp = row.get(TIMESTAMP_COLUMN)
        if raw_timestamp is not None:
            try:
                timestamp = format_date_to_iso_string(raw_timestamp)
            except (TypeError, ValueError) as e:
                logger.debug(f"No event timestamp, {TIMESTAMP_COLUMN} is not a date: {e}")

        return TransformedEvent(
            event=PASSTHROUGH_EVENT_NAME,
            timestamp=timestamp,
            properties=dict(row)
        )
