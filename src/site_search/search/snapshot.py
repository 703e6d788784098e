"""Persist and restore SearchIndex snapshots as (optionally gzipped) JSON."""

from __future__ import annotations

import gzip
import logging
from pathlib import Path

import orjson

from site_search.search.models import IndexSnapshotError, SearchIndex


logger = logging.getLogger(__name__)

_GZIP_MAGIC = b"\x1f\x8b"


def dumps_index(index: SearchIndex) -> bytes:
    return orjson.dumps(index.to_dict())


def loads_index(payload: bytes) -> SearchIndex:
    try:
        data = orjson.loads(payload)
    except orjson.JSONDecodeError as exc:
        raise IndexSnapshotError(f"Index snapshot is not valid JSON: {exc}") from exc
    return SearchIndex.from_dict(data)


def dump_index(index: SearchIndex, path: Path, *, compress: bool | None = None) -> int:
    """Write ``index`` to ``path``; gzip when ``compress`` is set or the name ends in ``.gz``.

    Returns the number of bytes written.
    """
    if compress is None:
        compress = path.suffix == ".gz"
    payload = dumps_index(index)
    if compress:
        payload = gzip.compress(payload)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(payload)
    logger.info("Wrote index snapshot %s (%d bytes, %d documents)", path, len(payload), index.total_docs)
    return len(payload)


def load_index(path: Path) -> SearchIndex:
    """Read a snapshot written by :func:`dump_index`, detecting gzip automatically."""
    payload = path.read_bytes()
    if payload.startswith(_GZIP_MAGIC):
        try:
            payload = gzip.decompress(payload)
        except (OSError, EOFError) as exc:
            raise IndexSnapshotError(f"Corrupt gzip snapshot {path}: {exc}") from exc
    index = loads_index(payload)
    logger.debug("Loaded index snapshot %s with %d documents", path, index.total_docs)
    return index
