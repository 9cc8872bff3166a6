#!/usr/bin/env python3
"""Run simulated PromptPay sessions end to end.

Each session generates a beneficiary, opens a transaction, prints its QR
payload, then delivers a bank webhook and lets the state machine settle.

Usage::

    python scripts/simulate_session.py --sessions 3 --mismatch-rate 0.3
    python scripts/simulate_session.py --amount 250000 --approve
    python scripts/simulate_session.py --realtime --output-dir output
"""

import argparse
import logging
import random
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from promptpay_gateway.config import AppConfig
from promptpay_gateway.engine.scheduler import ManualScheduler, ThreadingScheduler
from promptpay_gateway.gateway import PaymentGateway
from promptpay_gateway.generators import BeneficiaryGenerator, WebhookGenerator
from promptpay_gateway.logging import setup_logging
from promptpay_gateway.models.enums import TransactionStatus
from promptpay_gateway.sinks import ConsoleSink, JsonFileSink, KafkaSink

logger = logging.getLogger("simulate_session")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate PromptPay gateway sessions")
    parser.add_argument("--sessions", type=int, default=1, help="Number of sessions to run")
    parser.add_argument("--amount", type=str, default=None, help="THB amount (default from config)")
    parser.add_argument("--mismatch-rate", type=float, default=0.0, help="Share of webhooks with a wrong sender name")
    parser.add_argument("--approve", action="store_true", help="Approve transactions held for multi-sig")
    parser.add_argument("--realtime", action="store_true", help="Use real verification/settlement delays")
    parser.add_argument("--output-dir", type=Path, default=None, help="Write JSON Lines snapshots here")
    parser.add_argument("--kafka", action="store_true", help="Publish snapshots to Kafka")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--log-format", choices=["standard", "json"], default="standard")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    config = AppConfig.from_env()
    setup_logging(config.log_level, args.log_format)

    seed = args.seed if args.seed is not None else config.seed
    if seed is not None:
        random.seed(seed)

    scheduler = ThreadingScheduler() if args.realtime else ManualScheduler()
    gateway = PaymentGateway(config.gateway, engine_config=config.engine, scheduler=scheduler)

    sinks = []
    if args.output_dir:
        sinks.append(JsonFileSink(args.output_dir))
    if args.kafka:
        sinks.append(KafkaSink(config.kafka))
    if not sinks:
        sinks.append(ConsoleSink(pretty=False))
    for sink in sinks:
        gateway.attach_sink(sink, "transactions")
        gateway.attach_sink(sink, "audit_log")

    beneficiaries = BeneficiaryGenerator(seed=seed)
    webhooks = WebhookGenerator(seed=seed)
    outcomes: dict[str, int] = {}

    for _ in range(args.sessions):
        tx = gateway.open_transaction(beneficiaries.generate(), args.amount)
        print(f"QR payload for {tx.reference_id}: {tx.qr_payload}")

        matching = random.random() >= args.mismatch_rate
        gateway.deliver(webhooks.generate(tx, matching=matching))
        _drain(scheduler)

        if args.approve and gateway.active_transaction.status is TransactionStatus.AWAITING_APPROVAL:
            gateway.approve()
            _drain(scheduler)

        final = gateway.active_transaction
        outcomes[final.status.value] = outcomes.get(final.status.value, 0) + 1
        if final.failure_reason:
            logger.warning("%s failed: %s", final.reference_id, final.failure_reason)

    reserves = gateway.reserves()
    print(f"Outcomes: {outcomes}")
    print(f"Reserves: THB {reserves.thb_reserves} / USDT {reserves.usdt_reserves}")

    for sink in sinks:
        sink.close()
    return 0


def _drain(scheduler: ManualScheduler | ThreadingScheduler) -> None:
    if isinstance(scheduler, ManualScheduler):
        scheduler.run_until_idle()
    else:
        scheduler.join()


if __name__ == "__main__":
    sys.exit(main())
