"""
JSON Map transformation: column-to-field routing from an attached document
"""

from typing import Dict

from core.exceptions import InvalidAttachmentError
from ingestion.transformers.base import Row, Transformation
from schemas.events import TransformedEvent


class JsonMapTransformation(Transformation):
    """
    Routes each mapped column either to the event name (target "event") or
    into properties under the target key. Unmapped columns are dropped.

    Attachment rowToEventMap: {"<column>": "<target>", ...}
    """

    name = "JSON Map"
    author = "yakkomajuri"
    required_attachments = ("rowToEventMap",)

    def __init__(self, config):
        super().__init__(config)
        self.row_to_event_map = self._load_map()

    def _load_map(self) -> Dict[str, str]:
        mapping = self.load_json_attachment("rowToEventMap")
        if not isinstance(mapping, dict) or not all(
            isinstance(target, str) for target in mapping.values()
        ):
            raise InvalidAttachmentError(
                "Row to event mapping must be a JSON object of column names to field names",
                context={"transformation": self.name, "attachment": "rowToEventMap"}
            )
        return mapping

    def transform(self, row: Row) -> TransformedEvent:
        event = ""
        properties = {}

        for column, value in row.items():
            target = self.row_to_event_map.get(column)
            if not target:
                continue
            if target == "event":
                event = "" if value is None else str(value)
            else:
                properties[target] = value

        return TransformedEvent(event=event, properties=properties)
