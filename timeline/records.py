"""
Output records and their wire encodings.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List

import config

START = datetime.strptime(config.START_TIMESTAMP, config.TIMESTAMP_FORMAT)


def hour_timestamp(hour: int) -> datetime:
    """Timestamp of a simulated hour."""
    return START + timedelta(hours=hour)


@dataclass(frozen=True)
class Record:
    """One generated data point for a (node, query, metric) tuple."""
    node: int
    metric: int
    query: int
    hour: datetime
    value: float
    disruption: int  # 0 none, 1 node, 2 query, 3 metric

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape of the record."""
        return {
            "node": self.node,
            "metric": self.metric,
            "query": self.query,
            "hour": self.hour.strftime(config.TIMESTAMP_FORMAT),
            "value": self.value,
            "disruption": self.disruption,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Record":
        """Parse a record from its wire shape."""
        return cls(
            node=int(data["node"]),
            metric=int(data["metric"]),
            query=int(data["query"]),
            hour=datetime.strptime(data["hour"], config.TIMESTAMP_FORMAT),
            value=float(data["value"]),
            disruption=int(data["disruption"]),
        )


def encode_ndjson(records: Iterable[Record]) -> str:
    """One JSON document per line."""
    return "".join(json.dumps(r.to_dict()) + "\n" for r in records)


def encode_bulk(records: Iterable[Record]) -> str:
    """Bulk API body: an index action line before every document."""
    lines: List[str] = []
    for r in records:
        lines.append('{"index":{}}')
        lines.append(json.dumps(r.to_dict()))
    return "\n".join(lines) + "\n" if lines else ""


def decode_ndjson(text: str) -> List[Record]:
    """Parse NDJSON produced by encode_ndjson."""
    return [Record.from_dict(json.loads(line)) for line in text.splitlines() if line.strip()]
