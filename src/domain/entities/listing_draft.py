import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from src.domain.entities.listing import MAX_IMAGES, MAX_NARRATIVE_LENGTH, NewListing
from src.domain.enums.validation_failure import ValidationFailure
from src.domain.errors import LimitReachedError, ValidationError
from src.domain.values.optional_field import optional_text

_NON_DIGITS = re.compile(r"[^0-9]")


@dataclass
class ListingDraft:
    """
    The editable form behind the listing composer.

    Holds raw user input only; nothing here touches the network. Values stay
    intact across failed publishes and are reset by clear() after a success.
    """

    images: list[str] = field(default_factory=list)
    nomenclature: str = ""
    classification: str = ""
    price: str = ""
    narrative: str = ""
    provenance_certified: bool = True
    logistics_provided: bool = False

    # -------------------------------------------------------------------------
    # Photos
    # -------------------------------------------------------------------------

    @property
    def image_count(self) -> int:
        return len(self.images)

    @property
    def can_add_image(self) -> bool:
        return len(self.images) < MAX_IMAGES

    def add_image(self, locator: str) -> None:
        """Append a photo; a full draft rejects it with LimitReachedError."""
        if not self.can_add_image:
            raise LimitReachedError(MAX_IMAGES)
        self.images.append(locator)

    def remove_image(self, index: int) -> str:
        return self.images.pop(index)

    # -------------------------------------------------------------------------
    # Fields
    # -------------------------------------------------------------------------

    def set_price(self, raw: str) -> None:
        """Keep only the digits, so the field is always empty or a whole number."""
        self.price = _NON_DIGITS.sub("", raw)

    def validate(self) -> None:
        """Raise ValidationError for the first failing check, in form order."""
        if not self.nomenclature.strip():
            raise ValidationError(ValidationFailure.NOMENCLATURE_REQUIRED)
        if not self.images:
            raise ValidationError(ValidationFailure.IMAGE_REQUIRED)
        if self._parsed_price() is None:
            raise ValidationError(ValidationFailure.INVALID_PRICE)
        if len(self.narrative) > MAX_NARRATIVE_LENGTH:
            raise ValidationError(ValidationFailure.NARRATIVE_TOO_LONG)

    def _parsed_price(self) -> Decimal | None:
        if not self.price:
            return None
        try:
            value = Decimal(self.price)
        except InvalidOperation:
            return None
        if not value.is_finite() or value < 0:
            return None
        return value

    def to_new_listing(self, image_urls: list[str]) -> NewListing:
        """Build the record to persist from this draft and the uploaded URLs."""
        self.validate()
        return NewListing(
            nomenclature=self.nomenclature.strip(),
            classification=optional_text(self.classification),
            price=Decimal(self.price),
            narrative=optional_text(self.narrative),
            image_urls=list(image_urls),
            provenance_certified=self.provenance_certified,
            logistics_provided=self.logistics_provided,
        )

    def clear(self) -> None:
        """Reset every field to its initial value."""
        self.images = []
        self.nomenclature = ""
        self.classification = ""
        self.price = ""
        self.narrative = ""
        self.provenance_certified = True
        self.logistics_provided = False
