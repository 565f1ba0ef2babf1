"""
Reporting over file-sink output.
Loads the NDJSON timeline into pandas for percentile summaries and plots.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

import config

DISRUPTION_LABELS = {
    config.DISRUPTION_NONE: "none",
    config.DISRUPTION_NODE: "node",
    config.DISRUPTION_QUERY: "query",
    config.DISRUPTION_METRIC: "metric",
}


def load_records(path: str = config.JSON_OUTPUT_PATH) -> pd.DataFrame:
    """Load an NDJSON timeline into a DataFrame with a parsed hour column."""
    path = Path(path)
    if not path.exists() or path.stat().st_size == 0:
        return pd.DataFrame(columns=config.RECORD_FIELDS)

    df = pd.read_json(path, lines=True, convert_dates=False)
    df["hour"] = pd.to_datetime(df["hour"], format=config.TIMESTAMP_FORMAT)
    return df[config.RECORD_FIELDS]


class TimelineReport:
    """Summaries of a generated timeline."""

    def __init__(
        self,
        records: pd.DataFrame,
        output_dir: str = config.REPORT_DIR,
        run_id: str = "default",
        percentiles: Optional[List[float]] = None,
    ):
        """Initialize timeline report.

        Args:
            records: DataFrame as returned by load_records
            output_dir: Output directory for reports
            run_id: Identifier for this run
            percentiles: Quantiles to report, e.g. [0.5, 0.9]
        """
        self.records = records
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.run_id = run_id
        self.percentiles = percentiles or config.REPORT_PERCENTILES

    def _quantile_columns(self, grouped) -> pd.DataFrame:
        table = grouped["value"].quantile(self.percentiles).unstack()
        table.columns = [f"p{int(q * 100)}" for q in self.percentiles]
        return table

    def disruption_percentiles(self) -> Dict[str, Dict[str, float]]:
        """Value percentiles per disruption kind.

        Returns:
            {"none": {"p50": ..., "p90": ...}, "node": {...}, ...}
        """
        if self.records.empty:
            return {}
        table = self._quantile_columns(self.records.groupby("disruption"))
        return {
            DISRUPTION_LABELS[int(code)]: row.to_dict()
            for code, row in table.iterrows()
        }

    def metric_percentiles(self) -> Dict[int, Dict[str, float]]:
        """90th percentile per metric, split by calm vs disrupted hours."""
        if self.records.empty:
            return {}
        df = self.records.assign(disrupted=self.records["disruption"] != config.DISRUPTION_NONE)
        table = df.groupby(["metric", "disrupted"])["value"].quantile(0.9).unstack()
        table = table.rename(columns={False: "calm_p90", True: "disrupted_p90"})

        return {
            int(metric): {
                k: (None if pd.isna(v) else float(v)) for k, v in row.to_dict().items()
            }
            for metric, row in table.iterrows()
        }

    def disrupted_hours(self) -> int:
        """Hours during which any disruption was active."""
        if self.records.empty:
            return 0
        flagged = self.records[self.records["disruption"] != config.DISRUPTION_NONE]
        return int(flagged["hour"].nunique())

    def generate_report(self) -> Dict:
        """Generate the summary report.

        Returns:
            Report dictionary
        """
        df = self.records
        return {
            "run_id": self.run_id,
            "records": int(len(df)),
            "hours": int(df["hour"].nunique()) if not df.empty else 0,
            "tuples": int(df.groupby(["node", "query", "metric"]).ngroups) if not df.empty else 0,
            "disrupted_hours": self.disrupted_hours(),
            "disruption_counts": {
                DISRUPTION_LABELS[int(code)]: int(n)
                for code, n in df["disruption"].value_counts().sort_index().items()
            },
            "disruption_percentiles": self.disruption_percentiles(),
            "metric_percentiles": self.metric_percentiles(),
        }

    def save_report_json(self, report: Dict) -> str:
        """Save report as JSON file.

        Args:
            report: Report dictionary

        Returns:
            Path to saved file
        """
        path = self.output_dir / f"report_{self.run_id}.json"

        def default_serializer(obj):
            if isinstance(obj, (np.integer, np.floating)):
                return obj.item()
            return str(obj)

        with open(path, "w") as f:
            json.dump(report, f, indent=2, default=default_serializer)

        return str(path)

    def plot_tuple_series(self, node: int, query: int, metric: int) -> str:
        """Plot one tuple's values over time, disrupted hours highlighted.

        Returns:
            Path to saved figure, empty if the tuple has no records
        """
        df = self.records[
            (self.records["node"] == node)
            & (self.records["query"] == query)
            & (self.records["metric"] == metric)
        ].sort_values("hour")

        if df.empty:
            return ""

        fig, ax = plt.subplots(figsize=(12, 6))
        ax.plot(df["hour"], df["value"], linewidth=1, label="value")

        disrupted = df[df["disruption"] != config.DISRUPTION_NONE]
        if not disrupted.empty:
            ax.scatter(disrupted["hour"], disrupted["value"], color="r", s=8,
                       label="disruption active", zorder=3)

        ax.set_xlabel("Hour")
        ax.set_ylabel("Value")
        ax.set_title(f"Node {node} / Query {query} / Metric {metric}")
        ax.legend()
        ax.grid(True, alpha=0.3)

        path = self.output_dir.parent / "plots" / f"tuple_{node}_{query}_{metric}_{self.run_id}.png"
        path.parent.mkdir(parents=True, exist_ok=True)
        plt.tight_layout()
        plt.savefig(path, dpi=150)
        plt.close(fig)

        return str(path)
