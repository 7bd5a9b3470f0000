#!/usr/bin/env python3
"""
Demo script for the fraud signal engine.
Scores simulated transactions offline, without Redis or Kafka.
"""

import os
import sys
import argparse
import logging
from collections import Counter

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from fraud_signals.ingestion.data_simulator import TransactionSimulator
from fraud_signals.processing.transaction_processor import TransactionProcessor


def main():
    parser = argparse.ArgumentParser(description="Score simulated transactions")
    parser.add_argument("--count", type=int, default=20, help="Transactions to score")
    parser.add_argument("--fraud-rate", type=float, default=0.25)
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    simulator = TransactionSimulator({"seed": args.seed})
    processor = TransactionProcessor({"max_workers": 4})

    responses = processor.process_transactions_batch(
        simulator.generate_transactions(args.count, args.fraud_rate)
    )

    flagged_types = Counter()
    for response in responses:
        flagged = [s for s in response["fraudSignals"] if s["potentialFraud"]]
        flagged_types.update(s["signalType"] for s in flagged)
        marker = "FLAG" if flagged else " ok "
        print(
            f"[{marker}] {response['customerName']:<16} "
            f"{response['transactionDetails']['merchantName']:<14} "
            f"{response['paymentDetails']['purchaseAmount']:>8}  "
            + "; ".join(d for s in flagged for d in s["details"])
        )

    print()
    print(f"Scored {len(responses)} transactions")
    for signal_type, count in sorted(flagged_types.items()):
        print(f"  {signal_type:<13} flagged {count}")
    print(f"Metrics: {processor.get_metrics()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
