"""
Cleaned-Up Properties transformation: human-readable property names
"""

import re
from typing import Any, Dict

from pydantic import ValidationError

from core.exceptions import InvalidAttachmentError, TransformationError
from ingestion.transformers.base import Row, Transformation, get_column
from ingestion.transformers.dates import format_date_to_iso_string
from schemas.attachments import CleanedUpPropertiesConfig
from schemas.events import TransformedEvent

_WORD_RE = re.compile(r"\w\S*")


def to_title_case(text: str) -> str:
    return _WORD_RE.sub(lambda m: m.group(0)[:1].upper() + m.group(0)[1:].lower(), text)


def clean_column_name(column: str, replacements: Dict[str, str]) -> str:
    """
    ORDER_ID -> "Order Id"; with {"ID": "ID"} -> "Order ID".

    Replacements are looked up by the segment as it appears in the column
    name and are used verbatim, without title-casing.
    """
    segments = []
    for segment in column.split("_"):
        segments.append(replacements.get(segment) or to_title_case(segment))
    return " ".join(segments)


class CleanedUpPropertiesTransformation(Transformation):
    """
    Picks the event name, timestamp and identity out of the configured
    columns and renames every other column for display. Null values are
    dropped and any property whose new name mentions "timestamp" is
    reformatted as an ISO-8601 string.
    """

    name = "Cleaned-Up Properties"
    author = "tacastillo"
    required_attachments = ("propertyConfigJson",)

    def __init__(self, config):
        super().__init__(config)
        document = self.load_json_attachment("propertyConfigJson")
        try:
            self.property_config = CleanedUpPropertiesConfig.model_validate(document)
        except ValidationError as e:
            raise InvalidAttachmentError(
                "Configuration JSON file does not match the expected shape",
                context={"transformation": self.name, "attachment": "propertyConfigJson"},
                original_exception=e
            )

        columns = self.property_config.property_columns
        self._special_columns = {
            value.upper()
            for value in (
                columns.event,
                columns.timestamp,
                columns.distinct_id,
                self.property_config.data_source,
            )
            if value
        }

    def _format_timestamp(self, value: Any, column: str) -> str:
        try:
            return format_date_to_iso_string(value)
        except (TypeError, ValueError) as e:
            raise TransformationError(
                f"Column {column} is not a date",
                context={"transformation": self.name, "column": column, "value": value},
                original_exception=e
            )

    def transform(self, row: Row) -> TransformedEvent:
        columns = self.property_config.property_columns
        replacements = self.property_config.replacements

        event = get_column(row, columns.event)
        distinct_id = get_column(row, columns.distinct_id)
        if distinct_id is None or distinct_id == "":
            distinct_id = self.property_config.unmatched_user_default
        timestamp = self._format_timestamp(get_column(row, columns.timestamp), columns.timestamp)

        properties = {}
        for column, value in row.items():
            if column.upper() in self._special_columns or value is None:
                continue
            properties[clean_column_name(column, replacements)] = value

        for key in list(properties):
            if "timestamp" in key.lower():
                properties[key] = self._format_timestamp(properties[key], key)

        return TransformedEvent(
            event="" if event is None else str(event),
            distinct_id=distinct_id,
            timestamp=timestamp,
            properties={
                "timestamp": timestamp,
                "distinct_id": distinct_id,
                "source": self.property_config.data_source,
                **properties,
            }
        )
