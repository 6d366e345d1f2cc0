"""
Host App UUID Policy
====================
Decides which binary image's build UUID is reported as the app's dSYM UUID.

The default policy is a heuristic: crash logs list the host application
first in "Binary Images:", so the first image parsed is taken to be the app.
This holds for the common iOS layout but is not guaranteed (frameworks can be
listed ahead of the executable on some OS releases). A stricter policy, for
example one matching the header's Identifier against image paths, can be
passed to ``parse()`` without touching the parser.
"""
from typing import Callable, Iterable, Optional

from crashlog.models.report import BinaryImage

AppUUIDPolicy = Callable[[Iterable[BinaryImage]], Optional[str]]


def first_image_uuid(images: Iterable[BinaryImage]) -> Optional[str]:
    """Return the UUID of the first image, or None when no image was parsed."""
    for image in images:
        return image.uuid
    return None
