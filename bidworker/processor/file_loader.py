from pathlib import Path, PurePath

from bidworker.database.models import BidRecord
from bidworker.extraction.models import RawDocument
from bidworker.processor.exceptions import UnsupportedStorageDiskError


def document_file_path(files_root: Path, owner_id: int, uuid: str, filename: str) -> Path:
    """Build path to a bid document: {files_root}/{owner_id}/{uuid}{suffix}.

    The suffix is taken from the uploaded filename, lowercased.
    """
    suffix = PurePath(filename).suffix.lower()
    return files_root / str(owner_id) / f"{uuid}{suffix}"


class FileLoader:
    """Reads a bid's uploaded document from local storage."""

    def __init__(self, files_root: Path) -> None:
        self._files_root = files_root

    def load(self, bid: BidRecord) -> RawDocument:
        """Return the bid's document as a RawDocument.

        Raises:
            FileNotFoundError: if the file does not exist at resolved path.
            UnsupportedStorageDiskError: if storage_disk is not 'local'.
        """
        if bid.storage_disk != "local":
            raise UnsupportedStorageDiskError(
                f"storage_disk '{bid.storage_disk}' is not supported"
            )
        path = document_file_path(
            self._files_root, bid.owner_id, bid.document_uuid, bid.document_filename
        )
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        return RawDocument(
            data=path.read_bytes(),
            filename=bid.document_filename,
            mime_type=bid.document_mime_type,
        )
