from sqlalchemy.orm import declarative_base
import enum

Base = declarative_base()


# ============================================================================
# ENUMS
# ============================================================================

class ImportMechanism(str, enum.Enum):
    """How far the import reads into the source table"""
    CONTINUOUS = "Import continuously"
    HISTORICAL = "Only import historical data"


class JobState(str, enum.Enum):
    """Outcome of a single import job run"""
    SCHEDULED = "scheduled"
    RUNNING = "running"
    SUCCESS = "success"
    RETRY = "retry"
    ABANDONED = "abandoned"
    TERMINATED = "terminated"
