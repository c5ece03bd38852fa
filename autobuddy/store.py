"""YAML-file backed document store.

Documents are addressed by slash-separated paths with an even number of
segments (collection/id/collection/id...). Each document is a YAML file:

    users/u1/vehicles/ABC123  ->  {root}/users/u1/vehicles/ABC123.yaml

Writes replace the whole document (create-or-replace); there is no locking,
so concurrent writers to the same document resolve as last write wins.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from .errors import InvalidKeyError, StoreError

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIX = ".yaml"
ENCODING = "utf-8"

# Everything a read or write of a document file can fail with
FILE_ERRORS = (OSError, UnicodeError, yaml.YAMLError)


def check_segment(segment: str) -> str:
    """Validate one path segment (a user id or a plate) and return it."""
    if not isinstance(segment, str) or not segment:
        raise InvalidKeyError("Key segments must be non-empty strings")
    if "/" in segment or "\\" in segment or "\x00" in segment:
        raise InvalidKeyError(f"Key segment {segment!r} contains a reserved character")
    if segment in (".", ".."):
        raise InvalidKeyError(f"Key segment {segment!r} is reserved")
    return segment


def _split(path: str) -> List[str]:
    return [check_segment(s) for s in path.split("/")]


class DocumentStore:
    """Create-or-replace document store over a directory of YAML files."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def _document_file(self, path: str) -> Path:
        segments = _split(path)
        if len(segments) % 2:
            raise InvalidKeyError(f"'{path}' is a collection path, not a document path")
        *parents, doc_id = segments
        return self.root.joinpath(*parents) / f"{doc_id}{DOCUMENT_SUFFIX}"

    def _collection_dir(self, path: str) -> Path:
        segments = _split(path)
        if not len(segments) % 2:
            raise InvalidKeyError(f"'{path}' is a document path, not a collection path")
        return self.root.joinpath(*segments)

    def get(self, path: str) -> Optional[Dict[str, Any]]:
        """Read one document; None when it does not exist."""
        filename = self._document_file(path)
        try:
            with open(filename, "r", encoding=ENCODING) as fp:
                body = yaml.load(fp, Loader=yaml.SafeLoader)
        except FileNotFoundError:
            return None
        except FILE_ERRORS as e:
            logger.exception("Failed to read document %s", path)
            raise StoreError(f"Failed to read '{path}': {e}") from e
        # An empty file is an empty document, not a missing one
        return {} if body is None else body

    def list(self, path: str) -> List[Tuple[str, Any]]:
        """Read every document of a collection as (id, body) pairs, sorted by id."""
        directory = self._collection_dir(path)
        if not directory.is_dir():
            return []
        documents = []
        try:
            for filename in sorted(directory.glob(f"*{DOCUMENT_SUFFIX}")):
                with open(filename, "r", encoding=ENCODING) as fp:
                    body = yaml.load(fp, Loader=yaml.SafeLoader)
                doc_id = filename.name[: -len(DOCUMENT_SUFFIX)]
                documents.append((doc_id, {} if body is None else body))
        except FILE_ERRORS as e:
            logger.exception("Failed to list collection %s", path)
            raise StoreError(f"Failed to list '{path}': {e}") from e
        return documents

    def set(self, path: str, body: Dict[str, Any]) -> None:
        """Write one document, replacing any existing body."""
        filename = self._document_file(path)
        try:
            filename.parent.mkdir(parents=True, exist_ok=True)
            with open(filename, "w", encoding=ENCODING) as fp:
                yaml.dump(
                    body,
                    fp,
                    default_flow_style=False,
                    allow_unicode=True,
                    sort_keys=False,
                    width=120,
                )
        except FILE_ERRORS as e:
            logger.exception("Failed to write document %s", path)
            raise StoreError(f"Failed to write '{path}': {e}") from e
