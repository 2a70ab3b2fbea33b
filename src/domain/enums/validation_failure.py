from enum import Enum


class ValidationFailure(str, Enum):
    """Distinct reasons a draft or credential form is rejected locally."""

    NOMENCLATURE_REQUIRED = "nomenclature required"
    IMAGE_REQUIRED = "image required"
    INVALID_PRICE = "invalid price"
    NARRATIVE_TOO_LONG = "narrative too long"

    # Auth forms
    MISSING_FIELDS = "missing fields"
    PASSWORD_TOO_SHORT = "password too short"
    TERMS_NOT_ACCEPTED = "terms not accepted"
