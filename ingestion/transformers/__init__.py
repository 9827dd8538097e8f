"""
Row-to-event transformations, selected by name from the import config.

Available:
    default                 event/timestamp/distinct_id/properties columns
    JSON Map                column routing from the rowToEventMap attachment
    Predefined Fields       event fields named by the fieldConfigJson attachment
    passthrough             whole row as properties
    Cleaned-Up Properties   display-friendly names from the propertyConfigJson attachment
"""

from typing import Dict, Type

from core.exceptions import ConfigurationError
from ingestion.transformers.base import Transformation
from ingestion.transformers.cleaned_up import CleanedUpPropertiesTransformation
from ingestion.transformers.default import DefaultTransformation
from ingestion.transformers.json_map import JsonMapTransformation
from ingestion.transformers.passthrough import PassthroughTransformation
from ingestion.transformers.predefined_fields import PredefinedFieldsTransformation
from schemas.config import ImportConfig

TRANSFORMATIONS: Dict[str, Type[Transformation]] = {
    transformation.name: transformation
    for transformation in (
        DefaultTransformation,
        JsonMapTransformation,
        PredefinedFieldsTransformation,
        PassthroughTransformation,
        CleanedUpPropertiesTransformation,
    )
}


def get_transformation(config: ImportConfig) -> Transformation:
    """
    Build the configured transformation.

    Raises:
        ConfigurationError: If the name is unknown or a required attachment is missing
        InvalidAttachmentError: If an attachment cannot be parsed
    """
    transformation_cls = TRANSFORMATIONS.get(config.transformation_name)
    if transformation_cls is None:
        raise ConfigurationError(
            f"Unknown transformation {config.transformation_name!r}",
            context={
                "config_key": "transformationName",
                "available": sorted(TRANSFORMATIONS),
            }
        )
    return transformation_cls(config)


__all__ = [
    "TRANSFORMATIONS",
    "Transformation",
    "get_transformation",
]
