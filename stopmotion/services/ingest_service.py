# File: stopmotion/services/ingest_service.py

"""
Image folder ingestion.

Will:
  - List a folder and keep files with a supported image extension
  - Sort them by file name so frame order does not depend on the filesystem
  - Decode each one with Pillow, skipping files that fail

Decoding can be spread over a thread pool. Results always come back in the
sorted file order, so frame indices are assigned only after every decode
attempt has finished.
"""

import io
import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from PIL import Image

from stopmotion.core.config import settings
from stopmotion.core.errors import IngestCancelled, InvalidDirectory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodedImage:
    filename: str
    format: str
    width: int
    height: int
    payload: bytes


@dataclass(frozen=True)
class ImageDecodeFailure:
    """Per-file, non-fatal: the file is left out of the frame sequence."""

    filename: str
    reason: str


# Pillow reports broken files through several exception types
DECODE_ERRORS = (OSError, ValueError, SyntaxError, Image.DecompressionBombError)


def has_image_extension(name: str, extensions: Iterable[str]) -> bool:
    suffix = Path(name).suffix
    return bool(suffix) and suffix[1:].lower() in extensions


def scan_image_directory(
    directory,
    *,
    extensions: Optional[Sequence[str]] = None,
) -> List[Path]:
    """
    Return the image files directly inside `directory`, sorted by name.

    Extensions are matched case-insensitively. Sorting is plain code point
    order on the file name. Raises InvalidDirectory if the path is missing,
    not a directory, or cannot be listed.
    """
    exts = tuple(e.lower() for e in (extensions or settings.image_extensions))
    root = Path(directory)

    if not root.is_dir():
        raise InvalidDirectory(root, "not a directory")
    if not os.access(root, os.R_OK | os.X_OK):
        raise InvalidDirectory(root, "directory is not readable")

    try:
        entries = list(root.iterdir())
    except OSError as exc:
        raise InvalidDirectory(root, str(exc)) from exc

    matched = [p for p in entries if p.is_file() and has_image_extension(p.name, exts)]
    return sorted(matched, key=lambda p: p.name)


def decode_image(path: Path) -> DecodedImage:
    """
    Read a file and fully decode it. Raises one of DECODE_ERRORS on failure.
    """
    payload = path.read_bytes()
    with Image.open(io.BytesIO(payload)) as img:
        # load() forces a full decode so truncated files fail here
        img.load()
        return DecodedImage(
            filename=path.name,
            format=img.format or "",
            width=img.width,
            height=img.height,
            payload=payload,
        )


def _try_decode(
    path: Path,
    cancel_event: Optional[threading.Event],
) -> Tuple[Optional[DecodedImage], Optional[ImageDecodeFailure]]:
    if cancel_event is not None and cancel_event.is_set():
        return None, None
    try:
        return decode_image(path), None
    except DECODE_ERRORS as exc:
        logger.warning("[INGEST] Skipping %s: %s", path.name, exc)
        return None, ImageDecodeFailure(filename=path.name, reason=str(exc) or type(exc).__name__)


def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise IngestCancelled("Image import was cancelled.")


def decode_images(
    paths: Sequence[Path],
    *,
    workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
) -> Tuple[List[DecodedImage], List[ImageDecodeFailure]]:
    """
    Decode every path, keeping the input order in both returned lists.

    Setting `cancel_event` stops any decode that has not started yet and
    raises IngestCancelled.
    """
    workers = workers or settings.ingest_workers
    results: List[Tuple[Optional[DecodedImage], Optional[ImageDecodeFailure]]] = []

    if workers <= 1 or len(paths) <= 1:
        for path in paths:
            _check_cancelled(cancel_event)
            results.append(_try_decode(path, cancel_event))
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(_try_decode, path, cancel_event) for path in paths]
            try:
                for future in futures:
                    results.append(future.result())
                    _check_cancelled(cancel_event)
            except IngestCancelled:
                for future in futures:
                    future.cancel()
                raise

    # A decode that saw the event set returns (None, None)
    _check_cancelled(cancel_event)

    decoded = [image for image, _ in results if image is not None]
    failures = [failure for _, failure in results if failure is not None]
    return decoded, failures
