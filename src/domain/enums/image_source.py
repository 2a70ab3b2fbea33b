from enum import Enum


class ImageSource(str, Enum):
    """Where a draft photo came from."""

    CAMERA = "CAMERA"
    GALLERY = "GALLERY"
