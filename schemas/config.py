"""
Pydantic schema for the import configuration with validation
"""

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from typing import Optional, Dict, Any, Mapping, Set, Union
from models.base import ImportMechanism
from core.exceptions import ConfigurationError


REQUIRED_CONFIG_OPTIONS = [
    "account",
    "username",
    "password",
    "role",
    "database",
    "schema",
    "table",
    "orderBy",
    "warehouse",
    "batchSize",
    "frequency",
    "transformationName",
    "importMechanism",
]

AttachmentContents = Union[bytes, str]


class ImportConfig(BaseModel):
    """
    Validated import configuration.

    Built from the string key/value mapping the host provides. Field
    aliases match the host's camelCase keys; attachments hold the raw
    contents of uploaded documents keyed by attachment name.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    # Connection
    account: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1, repr=False)
    role: str = Field(..., min_length=1)
    warehouse: str = Field(..., min_length=1)
    database: str = Field(..., min_length=1)
    schema_name: str = Field(..., alias="schema", min_length=1)

    # Source table
    table: str = Field(..., min_length=1)
    order_by: str = Field(..., alias="orderBy", min_length=1)

    # Job cadence
    batch_size: int = Field(..., alias="batchSize")
    frequency: float

    # Behaviour
    transformation_name: str = Field(..., alias="transformationName")
    import_mechanism: ImportMechanism = Field(..., alias="importMechanism")
    events_to_ignore: Set[str] = Field(default_factory=set, alias="eventsToIgnore")

    attachments: Dict[str, AttachmentContents] = Field(default_factory=dict, repr=False)

    @field_validator("batch_size", mode="before")
    @classmethod
    def parse_batch_size(cls, v):
        """Batch size arrives as a string and must be a positive integer"""
        try:
            size = int(str(v).strip())
        except (TypeError, ValueError):
            raise ValueError("Invalid batch size input! Please insert a positive integer.")
        if size <= 0:
            raise ValueError("Invalid batch size input! Please insert a positive integer.")
        return size

    @field_validator("frequency", mode="before")
    @classmethod
    def parse_frequency(cls, v):
        """Frequency is a number of seconds between polls"""
        try:
            seconds = float(str(v).strip())
        except (TypeError, ValueError):
            raise ValueError("Invalid frequency input! Please insert a number in seconds.")
        if seconds <= 0:
            raise ValueError("Invalid frequency input! Please insert a number in seconds.")
        return seconds

    @field_validator("events_to_ignore", mode="before")
    @classmethod
    def parse_events_to_ignore(cls, v):
        if v is None:
            return set()
        if isinstance(v, str):
            return {name.strip() for name in v.split(",") if name.strip()}
        return set(v)

    @property
    def is_historical(self) -> bool:
        return self.import_mechanism == ImportMechanism.HISTORICAL

    def attachment_text(self, name: str) -> Optional[str]:
        """Return an attachment's contents as text, or None if it is absent"""
        contents = self.attachments.get(name)
        if contents is None:
            return None
        if isinstance(contents, bytes):
            return contents.decode("utf-8")
        return contents

    @classmethod
    def from_mapping(
        cls,
        config: Mapping[str, Any],
        attachments: Optional[Mapping[str, AttachmentContents]] = None
    ) -> "ImportConfig":
        """
        Validate a host config mapping.

        Raises:
            ConfigurationError: If a required key is missing or a value is invalid
        """
        missing = [
            option for option in REQUIRED_CONFIG_OPTIONS
            if config.get(option) is None or str(config.get(option)).strip() == ""
        ]
        if missing:
            raise ConfigurationError(
                f"Required config option {missing[0]} is missing!",
                context={"missing_keys": missing}
            )

        try:
            return cls.model_validate({**config, "attachments": dict(attachments or {})})
        except ValidationError as e:
            first = e.errors()[0]
            config_key = ".".join(str(part) for part in first.get("loc", ()))
            message = str(first.get("msg", "Invalid configuration")).removeprefix("Value error, ")
            raise ConfigurationError(
                message,
                context={"config_key": config_key, "errors": e.error_count()},
                original_exception=e
            )
