"""Main entry point for the tri-bureau reconciliation core."""

import argparse
import json
import logging
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config.settings import LOG_LEVEL, PAYLOAD_DIR, VERBOSE_MODE
from data.loader import load_bureau_payloads, load_form, load_identity_payloads
from pipeline import build_verification
from schemas.source import get_bureau_display_name
from utils.helpers import print_header, print_section


def print_result(result):
    """Human-readable rundown of a VerificationResult."""
    print_header("Tri-Bureau Verification")

    print_section("Sources")
    for source, record in result.records.items():
        name = get_bureau_display_name(source)
        if record is None:
            print(f"  {name:<12} unavailable")
        else:
            print(f"  {name:<12} score={record.score_value}  tradelines={len(record.tradelines)}")

    print_section("Data Quality")
    print(f"  Score: {result.data_quality.score}/100  {result.data_quality.summary}")
    for finding in result.data_quality.findings:
        where = get_bureau_display_name(finding.bureau) if finding.bureau else finding.source
        print(f"  [{finding.severity}] {where}: {finding.message}")

    print_section("Duplicate Tradelines")
    if not result.duplicate_groups:
        print("  None")
    for group in result.duplicate_groups:
        where = ", ".join(get_bureau_display_name(ref.source) for ref in group.refs)
        print(f"  {group.suggested_label} ({len(group.refs)}x: {where})")

    print_section("Identity Anomalies")
    if not result.anomaly_report.has_anomalies:
        print("  None")
    for anomaly in result.anomaly_report.anomalies:
        hint = f" -> suggested '{anomaly.suggested_value}'" if anomaly.suggested_value else ""
        print(f"  [{anomaly.severity}] {anomaly.field_label}: {anomaly.message}{hint}")

    print_section("Green Readiness")
    if result.readiness is None:
        print(f"  {result.readiness_error}")
    else:
        r = result.readiness
        print(f"  Tier {r.tier} ({r.score}/100) from {get_bureau_display_name(r.source)}")
        for factor in r.factors:
            print(f"  - {factor.label}: {factor.description}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Reconcile tri-bureau payloads against a submitted form.")
    parser.add_argument("payload_dir", nargs="?", default=PAYLOAD_DIR,
                        help="Directory with <bureau>.json, form.json and optional flexid/fraud_finder JSON")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    payloads = load_bureau_payloads(args.payload_dir)
    identity = load_identity_payloads(args.payload_dir)
    result = build_verification(
        payloads,
        load_form(args.payload_dir),
        flexid_payload=identity["flexid"],
        fraud_payload=identity["fraud_finder"],
    )

    if args.json or not VERBOSE_MODE:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print_result(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
