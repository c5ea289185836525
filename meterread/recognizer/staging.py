"""Meter Reader — Image Decoding & Temp-File Staging."""

import base64
import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from meterread.core.errors import InvalidDataError
from meterread.core.logging import get_logger
from meterread.workflow.validator import IMAGE_DATA_URI

logger = get_logger("recognizer.staging")

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}


@dataclass(frozen=True)
class DecodedImage:
    mime_type: str
    data: bytes

    @property
    def extension(self) -> str:
        return _EXTENSIONS.get(self.mime_type, "bin")


def decode_image(data_uri: str) -> DecodedImage:
    """Split a base64 image data URI into mime type and raw bytes."""
    match = IMAGE_DATA_URI.match(data_uri)
    if match is None:
        raise InvalidDataError({"image": ["Invalid Base64 image format"]})
    subtype = match.group("subtype")
    if subtype == "jpg":
        subtype = "jpeg"
    try:
        data = base64.b64decode(match.group("payload"), validate=True)
    except ValueError as e:
        raise InvalidDataError({"image": ["Invalid Base64 image format"]}) from e
    return DecodedImage(mime_type=f"image/{subtype}", data=data)


@contextmanager
def staged_image(image: DecodedImage, directory: Optional[str] = None) -> Iterator[Path]:
    """Write ``image`` to a temp file for the duration of the block.

    The file is removed on every exit path, including errors raised inside
    the block.
    """
    fd, name = tempfile.mkstemp(prefix="meter_", suffix=f".{image.extension}", dir=directory)
    path = Path(name)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(image.data)
        yield path
    finally:
        path.unlink(missing_ok=True)
        logger.debug(f"Staged image removed: {path.name}")
