from enum import Enum


class PublishState(str, Enum):
    """States of a single listing composition session."""

    EDITING = "EDITING"
    VALIDATING = "VALIDATING"
    UPLOADING = "UPLOADING"
    PERSISTING = "PERSISTING"
    PUBLISHED = "PUBLISHED"

    @property
    def is_publishing(self) -> bool:
        """True while network work for a publish is in flight."""
        return self in (PublishState.UPLOADING, PublishState.PERSISTING)
