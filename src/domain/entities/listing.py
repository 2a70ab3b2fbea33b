from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from src.domain.enums.validation_failure import ValidationFailure
from src.domain.errors import ValidationError
from src.domain.values.optional_field import ABSENT, OptionalField, Some

MAX_IMAGES = 10
MAX_NARRATIVE_LENGTH = 500


@dataclass(frozen=True)
class NewListing:
    """
    The field values a publish writes for a new listing.

    Owner, id and timestamps are not part of it: the owner is passed alongside,
    the rest is assigned by the backend on insert.
    """

    nomenclature: str
    price: Decimal
    image_urls: list[str]
    classification: OptionalField[str] = ABSENT
    narrative: OptionalField[str] = ABSENT
    provenance_certified: bool = True
    logistics_provided: bool = False

    def __post_init__(self) -> None:
        if not self.nomenclature.strip():
            raise ValidationError(ValidationFailure.NOMENCLATURE_REQUIRED)
        if not 1 <= len(self.image_urls) <= MAX_IMAGES:
            raise ValidationError(ValidationFailure.IMAGE_REQUIRED)
        if self.price < 0:
            raise ValidationError(ValidationFailure.INVALID_PRICE)
        if isinstance(self.narrative, Some) and len(self.narrative.value) > MAX_NARRATIVE_LENGTH:
            raise ValidationError(ValidationFailure.NARRATIVE_TOO_LONG)


@dataclass
class Listing:
    """A persisted sellable item, as read back from the backend."""

    id: str
    user_id: str
    nomenclature: str
    price: Decimal
    image_urls: list[str] = field(default_factory=list)
    classification: str | None = None
    narrative: str | None = None
    provenance_certified: bool = True
    logistics_provided: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
