"""
Default transformation: rows already shaped like events
"""

import json

from core.exceptions import TransformationError
from ingestion.transformers.base import Row, Transformation, get_column
from schemas.events import TransformedEvent

SOURCE_TAG = "snowflake_import"


class DefaultTransformation(Transformation):
    """
    Expects the columns event, timestamp, distinct_id and properties, the
    last holding a JSON-encoded object that is merged into the event
    properties.
    """

    name = "default"
    author = "yakkomajuri"

    def _parse_properties(self, raw) -> dict:
        if raw is None:
            return {}
        if isinstance(raw, dict):
            return dict(raw)
        try:
            parsed = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise TransformationError(
                "Column properties is not valid JSON",
                context={"transformation": self.name, "column": "properties"},
                original_exception=e
            )
        if not isinstance(parsed, dict):
            raise TransformationError(
                "Column properties must hold a JSON object",
                context={"transformation": self.name, "column": "properties"}
            )
        return parsed

    def transform(self, row: Row) -> TransformedEvent:
        event = get_column(row, "event")
        return TransformedEvent(
            event="" if event is None else str(event),
            properties={
                "timestamp": get_column(row, "timestamp"),
                "distinct_id": get_column(row, "distinct_id"),
                **self._parse_properties(get_column(row, "properties")),
                "source": SOURCE_TAG,
            }
        )
