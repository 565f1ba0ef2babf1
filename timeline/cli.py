"""
Command line entry point: generate a timeline into a file or Elasticsearch.
"""

import argparse
import logging
import sys
from typing import List, Optional

import config
from timeline.errors import TimelineError
from timeline.generator import TimelineSummary, generate_timeline
from timeline.report import TimelineReport, load_records
from timeline.settings import SimulationConfig, load_config
from timeline.sinks import ElasticsearchSink, JsonFileSink, Sink


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a synthetic cluster timeline with injected disruptions."
    )
    parser.add_argument("--config", default=config.CONFIG_PATH, help="TOML config file")
    parser.add_argument("--json", action="store_true",
                        help="Write records to a JSON file instead of Elasticsearch")
    parser.add_argument("--output", default=config.JSON_OUTPUT_PATH,
                        help="Output file for --json")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--report", action="store_true",
                        help="Summarize the JSON output after the run (requires --json)")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def print_configuration(sim_config: SimulationConfig, sink: Sink):
    print(f"Timeline Generator")
    print(f"=" * 50)
    print(f"Configuration:")
    print(f"  Tuples: {sim_config.nodes} nodes x {sim_config.queries} queries x {sim_config.metrics} metrics")
    print(f"  Hours: {sim_config.hours}")
    print(f"  Disruptions: {sim_config.disruptions}")
    print(f"  Bulk size: {sim_config.bulk_size} records, {sim_config.threads} in flight")
    print(f"  Sink: {type(sink).__name__}")
    print(f"=" * 50)


def print_summary(summary: TimelineSummary):
    print(f"\n{'=' * 50}")
    print(f"SUMMARY")
    print(f"{'=' * 50}")
    print(f"  Records emitted: {summary.records_emitted}")
    print(f"  Records sent:    {summary.records_sent} ({summary.batches_sent} batches)")
    print(f"  Records lost:    {summary.records_lost} ({summary.batches_failed} batches)")
    print(f"  Disruptions:     {summary.disruptions_scheduled} scheduled, "
          f"{summary.disrupted_hours} hours disrupted")
    print(f"  Elapsed:         {summary.elapsed_seconds:.1f} s")


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the timeline generator."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.report and not args.json:
        print("--report needs --json output", file=sys.stderr)
        return 2

    try:
        sim_config = load_config(args.config)
        if args.json:
            sink: Sink = JsonFileSink(args.output)
            sink.reset()
        else:
            sink = ElasticsearchSink(sim_config.sink_url, sim_config.index, sim_config.mapping)
            sink.prepare()

        print_configuration(sim_config, sink)
        summary = generate_timeline(sim_config, sink, seed=args.seed)

        if isinstance(sink, ElasticsearchSink):
            sink.refresh()
    except TimelineError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_summary(summary)

    if args.report:
        report = TimelineReport(load_records(args.output))
        summary_report = report.generate_report()
        print(f"\nReport: {report.save_report_json(summary_report)}")
        print(f"Plot:   {report.plot_tuple_series(0, 0, 0)}")

    return 0
