"""
Archive handler for reading and writing the zip envelope around price CSV files.
"""

import logging
import struct
import zlib
from tempfile import NamedTemporaryFile
from zipfile import BadZipFile, ZipFile, ZipInfo, ZIP_DEFLATED

from prices.errors import CorruptArchive, NoTextEntry, ResourceError

logger = logging.getLogger("transfer.archive_handler")

CSV_SUFFIX = ".csv"

# Fixed entry timestamp (earliest date zip supports) for reproducible archives
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)

# Errors zipfile raises for damaged, truncated or unsupported archives
ZIP_ERRORS = (
    BadZipFile,
    zlib.error,
    EOFError,
    NotImplementedError,
    RuntimeError,
    ValueError,
    IndexError,
    OSError,
    struct.error,
)


def _find_entry(zip_fp: ZipFile, suffix: str) -> ZipInfo:
    """Return the first non-directory entry whose name ends with `suffix`."""
    for file_info in zip_fp.infolist():
        if file_info.is_dir():
            continue
        if file_info.filename.lower().endswith(suffix):
            return file_info

    raise NoTextEntry(f"No {suffix} file found in archive")


def extract(data: bytes, suffix: str = CSV_SUFFIX) -> str:
    """
    Extract the text of the first CSV file in a zip archive.

    Entries are scanned in the order they are stored in the archive,
    and the first one with a matching name wins. The archive is spooled
    through a temporary file which is removed before returning.

    Args:
        data: Raw bytes of the zip archive.
        suffix: File name suffix identifying the text entry.

    Returns:
        Decoded (UTF-8) content of the entry.

    Raises:
        CorruptArchive: If the archive or the entry can't be read.
        NoTextEntry: If the archive has no matching entry.
        ResourceError: If the temporary file can't be created or written.
    """
    if not data:
        raise CorruptArchive("Uploaded archive is empty")

    try:
        temp_zip = NamedTemporaryFile(mode="w+b", prefix="upload-", suffix=".zip")
    except OSError as e:
        raise ResourceError(f"failed to create temporary file: {e}") from e

    with temp_zip:
        try:
            temp_zip.write(data)
            temp_zip.flush()
            temp_zip.seek(0)
        except OSError as e:
            raise ResourceError(f"failed to save uploaded file: {e}") from e

        try:
            with ZipFile(temp_zip, "r") as zip_fp:
                file_info = _find_entry(zip_fp, suffix)
                logger.debug(f"Reading {file_info.filename} from archive")
                content = zip_fp.read(file_info)
        except ZIP_ERRORS as e:
            raise CorruptArchive(f"failed to open zip: {e}") from e

    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise CorruptArchive(f"{file_info.filename} is not valid UTF-8: {e}") from e


def package(text: str, entry_name: str = "data.csv") -> bytes:
    """
    Create a zip archive containing a single text file.

    The entry timestamp and permissions are fixed, so packaging the same
    text always produces the same bytes.

    Args:
        text: Content of the file.
        entry_name: Name of the file inside the archive.

    Returns:
        Raw bytes of the zip archive.

    Raises:
        ResourceError: If the temporary file can't be created or written.
    """
    file_info = ZipInfo(entry_name, date_time=ZIP_EPOCH)
    file_info.compress_type = ZIP_DEFLATED
    file_info.external_attr = 0o644 << 16

    try:
        with NamedTemporaryFile(mode="w+b", prefix="export-", suffix=".zip") as temp_zip:
            with ZipFile(temp_zip, "w") as zf:
                zf.writestr(file_info, text.encode("utf-8"))
            temp_zip.seek(0)
            return temp_zip.read()
    except OSError as e:
        raise ResourceError(f"failed to create zip archive: {e}") from e
