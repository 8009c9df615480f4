"""
Model package validation.

A model package is a zip archive (of any file extension) holding the TFLite
model and its text manifests. Validation only probes the archive: it checks
the zip signature, that the central directory can be read and that the
required entries are present. Nothing is extracted.
"""

import io
import zipfile
from pathlib import Path
from typing import BinaryIO, Union

from cmbemu.core import constants
from cmbemu.core.exceptions import (
    CorruptArchiveError,
    MissingEntryError,
    NotAnArchiveError,
    ValidationError,
)
from cmbemu.core.logging_config import get_logger

logger = get_logger("package.validator")

PackageSource = Union[str, Path, bytes, bytearray, BinaryIO]


def _read_signature(source: PackageSource) -> bytes:
    n = len(constants.ARCHIVE_MAGIC)
    if isinstance(source, (bytes, bytearray)):
        return bytes(source[:n])
    if isinstance(source, (str, Path)):
        with open(source, "rb") as f:
            return f.read(n)
    position = source.tell()
    signature = source.read(n)
    source.seek(position)
    return signature


def open_archive(source: PackageSource) -> zipfile.ZipFile:
    """
    Open a candidate package for random access.

    Parameters
    ----------
    source : str, Path, bytes or binary file object
        Package location or contents

    Returns
    -------
    zipfile.ZipFile
        Open archive; the caller is responsible for closing it

    Raises
    ------
    NotAnArchiveError
        If the first bytes are not the zip local-file-header signature
    CorruptArchiveError
        If the archive cannot be opened
    """
    signature = _read_signature(source)
    if signature != constants.ARCHIVE_MAGIC:
        raise NotAnArchiveError(f"Not a zip archive (signature {signature.hex() or 'empty'})")

    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(bytes(source))

    try:
        return zipfile.ZipFile(source, "r")
    except (zipfile.BadZipFile, EOFError) as e:
        raise CorruptArchiveError(f"Cannot open archive: {e}") from e


def check_entries(archive: zipfile.ZipFile) -> None:
    """
    Check that every required entry is present by exact name.

    Raises
    ------
    MissingEntryError
        Naming the first missing entry
    """
    names = set(archive.namelist())
    for entry in constants.REQUIRED_ENTRIES:
        if entry not in names:
            raise MissingEntryError(entry)


def validate(source: PackageSource) -> None:
    """
    Confirm that ``source`` is a compliant model package.

    Parameters
    ----------
    source : str, Path, bytes or binary file object
        Package location or contents

    Raises
    ------
    ValidationError
        ``NotAnArchiveError``, ``CorruptArchiveError`` or ``MissingEntryError``
    """
    with open_archive(source) as archive:
        check_entries(archive)
    logger.debug("Package passed validation")


def is_valid_package(source: PackageSource) -> bool:
    """Return True if ``validate`` accepts ``source``."""
    try:
        validate(source)
    except ValidationError as e:
        logger.info(f"Rejected package: {e}")
        return False
    return True
