"""
Sinks that persist record batches.
Stores batches as NDJSON on disk or posts them to an Elasticsearch bulk endpoint.
"""

import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Sequence

import requests

import config
from timeline.errors import SinkError
from timeline.records import Record, encode_bulk, encode_ndjson

logger = logging.getLogger(__name__)


class Sink(ABC):
    """Accepts an ordered batch of records and persists all of it or raises."""

    @abstractmethod
    def persist(self, records: Sequence[Record]) -> None:
        """Persist a batch.

        Raises:
            SinkError: the batch was not persisted
        """


class JsonFileSink(Sink):
    """Appends batches to an NDJSON file."""

    def __init__(self, path: str = config.JSON_OUTPUT_PATH):
        """Initialize file sink.

        Args:
            path: Output file, created on first write and appended to after;
                reset() truncates it
        """
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def reset(self):
        """Truncate the output file so a run starts from an empty timeline."""
        try:
            with self._lock, open(self.path, "w"):
                pass
        except OSError as e:
            raise SinkError(f"Could not reset {self.path}: {e}") from e
        logger.debug("Reset %s", self.path)

    def persist(self, records: Sequence[Record]) -> None:
        body = encode_ndjson(records)
        try:
            with self._lock, open(self.path, "a") as f:
                f.write(body)
        except OSError as e:
            raise SinkError(f"Could not write {self.path}: {e}", len(records)) from e


class ElasticsearchSink(Sink):
    """Posts batches to the bulk API of an Elasticsearch index."""

    def __init__(
        self,
        url: str = config.SINK_URL,
        index: str = config.INDEX_NAME,
        mapping: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = config.SINK_TIMEOUT,
    ):
        """Initialize Elasticsearch sink.

        Args:
            url: Cluster base URL
            index: Target index
            mapping: Index body (JSON) used when the index is recreated
            session: HTTP session, shared by every dispatch worker
            timeout: Per-request timeout in seconds
        """
        self.url = url.rstrip("/")
        self.index = index
        self.mapping = mapping
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    @property
    def index_url(self) -> str:
        return f"{self.url}/{self.index}"

    def prepare(self):
        """Recreate the index and wait for the cluster to accept writes."""
        logger.debug("Resetting index %s...", self.index)
        try:
            self.session.delete(self.index_url, timeout=self.timeout)
            response = self.session.put(
                self.index_url,
                data=self.mapping,
                headers={"Content-Type": "application/json"} if self.mapping else None,
                timeout=self.timeout,
            )
            if not response.ok:
                raise SinkError(
                    f"Could not create index {self.index}: HTTP {response.status_code} {response.text[:500]}"
                )
            self.session.get(
                f"{self.url}/_cluster/health",
                params={"wait_for_status": "yellow"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise SinkError(f"Could not reach {self.url}: {e}") from e

    def refresh(self):
        """Make everything written so far searchable."""
        try:
            self.session.post(f"{self.index_url}/_refresh", timeout=self.timeout)
        except requests.RequestException as e:
            raise SinkError(f"Could not refresh {self.index}: {e}") from e

    def persist(self, records: Sequence[Record]) -> None:
        if not records:
            return

        body = encode_bulk(records)
        logger.debug("Bulk: %d kb (%d elements)", len(body) // 1024, len(records))
        try:
            response = self.session.post(
                f"{self.index_url}/_bulk",
                data=body,
                headers={"Content-Type": "application/x-ndjson"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise SinkError(f"Bulk request failed: {e}", len(records)) from e

        if not response.ok:
            raise SinkError(
                f"Bulk request failed: HTTP {response.status_code} {response.text[:500]}",
                len(records),
            )

        try:
            result = response.json()
            if result.get("errors"):
                reasons = [
                    item.get("index", {}).get("error", {}).get("reason")
                    for item in result.get("items", [])
                    if "error" in item.get("index", {})
                ]
            else:
                reasons = None
        except (ValueError, AttributeError, TypeError) as e:
            raise SinkError(f"Unreadable bulk response: {e}", len(records)) from e

        if reasons is not None:
            raise SinkError(f"Bulk request had item errors: {reasons[:5]}", len(records))
