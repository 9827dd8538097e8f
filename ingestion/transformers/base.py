"""
Abstract base class for row transformations
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple
import json
import logging

from core.exceptions import InvalidAttachmentError, MissingAttachmentError
from schemas.config import ImportConfig
from schemas.events import TransformedEvent

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]


def get_column(row: Row, name: Optional[str]) -> Any:
    """
    Look a column up by name, tolerating the warehouse's upper-casing.

    Returns None when the column is absent or null under every spelling.
    """
    if not name:
        return None
    for candidate in (name, name.upper(), name.lower()):
        value = row.get(candidate)
        if value is not None:
            return value
    return None


class Transformation(ABC):
    """
    Maps one raw row to one event.

    Subclasses declare the attachments they need in `required_attachments`;
    construction fails with MissingAttachmentError when one is absent, so a
    misconfigured import never reaches its first batch.
    """

    name: ClassVar[str]
    author: ClassVar[str]
    required_attachments: ClassVar[Tuple[str, ...]] = ()

    def __init__(self, config: ImportConfig):
        self.config = config
        missing = [
            attachment for attachment in self.required_attachments
            if config.attachment_text(attachment) is None
        ]
        if missing:
            raise MissingAttachmentError(
                f"Attachment {missing[0]} not provided!",
                context={"transformation": self.name, "attachment": missing[0]}
            )

    def load_json_attachment(self, attachment: str) -> Any:
        contents = self.config.attachment_text(attachment)
        try:
            return json.loads(contents)
        except (TypeError, ValueError) as e:
            raise InvalidAttachmentError(
                f"Attachment {attachment} contains invalid JSON!",
                context={"transformation": self.name, "attachment": attachment},
                original_exception=e
            )

    @abstractmethod
    def transform(self, row: Row) -> TransformedEvent:
        """
        Transform a single row.

        Raises:
            TransformationError: If the row cannot be mapped
        """
        pass

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "author": self.author,
            "required_attachments": list(self.required_attachments),
        }
