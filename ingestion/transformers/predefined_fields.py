"""
Predefined Fields transformation: event fields named by an attached document
"""

import logging

from pydantic import ValidationError

from core.exceptions import InvalidAttachmentError
from ingestion.transformers.base import Row, Transformation, get_column
from ingestion.transformers.dates import format_date_to_iso_string
from schemas.attachments import PropertyColumns
from schemas.events import TransformedEvent

logger = logging.getLogger(__name__)


class PredefinedFieldsTransformation(Transformation):
    """
    Attachment fieldConfigJson: {"event": col, "timestamp": col, "distinctId": col}

    The named columns become the event name, timestamp and distinct_id;
    every other non-null column is kept as a property under its own name.
    """

    name = "Predefined Fields"
    author = "yakkomajuri"
    required_attachments = ("fieldConfigJson",)

    def __init__(self, config):
        super().__init__(config)
        document = self.load_json_attachment("fieldConfigJson")
        try:
            self.fields = PropertyColumns.model_validate(document)
        except ValidationError as e:
            raise InvalidAttachmentError(
                "Field configuration must name the event, timestamp and distinctId columns",
                context={"transformation": self.name, "attachment": "fieldConfigJson"},
                original_exception=e
            )
        self._field_columns = {
            self.fields.event.upper(),
            self.fields.timestamp.upper(),
            self.fields.distinct_id.upper(),
        }

    def transform(self, row: Row) -> TransformedEvent:
        event = get_column(row, self.fields.event)
        distinct_id = get_column(row, self.fields.distinct_id)

        timestamp = get_column(row, self.fields.timestamp)
        if timestamp is not None:
            try:
                timestamp = format_date_to_iso_string(timestamp)
            except (TypeError, ValueError) as e:
                logger.debug(f"Keeping raw timestamp {timestamp!r}: {e}")

        properties = {
            column: value for column, value in row.items()
            if column.upper() not in self._field_columns and value is not None
        }

        return TransformedEvent(
            event="" if event is None else str(event),
            distinct_id=distinct_id,
            timestamp=timestamp,
            properties={
                "timestamp": timestamp,
                "distinct_id": distinct_id,
                **properties,
            }
        )
