#!/usr/bin/env python3
"""
Basic Usage Example - TVBridge Signal Staging Pipeline

This script walks one signal through the whole system in-process. It shows how to:
- Normalize a webhook payload into a queue message
- Consume a batch from the in-memory queue
- Poll staged directives as the downstream executor would
- Acknowledge consumed directives

Run: python examples/basic_usage.py
"""

import json
from pathlib import Path

from tvbridge_app.config.loader import ConfigLoader
from tvbridge_app.data.normalizer import SignalNormalizer
from tvbridge_app.engine import BatchProcessor
from tvbridge_app.logging import configure_logging
from tvbridge_app.transport.memory import InMemoryQueue


def main() -> None:
    configure_logging(level="INFO")

    config_dir = Path(__file__).parent.parent / "config"
    loader = ConfigLoader.create(config_dir, environ={"MIN_INTERVAL_MS": "0"})

    processor = BatchProcessor.in_memory(config_loader=loader)
    processor.bootstrap_symbol_mappings()

    queue = InMemoryQueue()
    normalizer = SignalNormalizer()

    payloads = [
        {"signal": "LONG", "symbol": "eurusd", "timeframe": "15", "price": "1.2345",
         "bar_time": "2025-10-27T10:00:00Z"},
        {"signal": "TP", "symbol": "XAUUSD", "timeframe": "60",
         "bar_time": "2025-10-27T10:00:00Z"},
        # Redelivered webhook for the same bar: deduplicated
        {"signal": "LONG", "symbol": "EURUSD", "timeframe": "15",
         "bar_time": "2025-10-27T10:00:00Z"},
        {"signal": "FLAT", "symbol": "EURUSD", "timeframe": "5",
         "bar_time": "2025-10-27T10:05:00Z"},
    ]

    print("\n📥 Enqueueing webhooks")
    for payload in payloads:
        raw_signal = normalizer.normalize(payload, source_ip="127.0.0.1", user_agent="example")
        queue.send(raw_signal.to_dict())
        print(f"  {raw_signal.signal:<5} {raw_signal.symbol_norm:<7} idem={raw_signal.idempotency_key[:12]}")

    result = processor.process_batch(queue.receive_batch(max_batch_size=10))
    print(f"\n⚙️  Batch: stored={result.stored} duplicate={result.duplicate} "
          f"no_action={result.no_action} retried={result.retried}")

    pending = processor.pending_directives()
    poll = pending.list(limit=10)
    print(f"\n📤 {len(poll.items)} pending directives")
    for record in poll.items:
        print(json.dumps(record.to_dict(), indent=2))

    ack = pending.acknowledge([record.key for record in poll.items])
    print(f"\n✅ Acknowledged {ack.acknowledged}, missing {ack.missing}")
    print(f"   Remaining after ack: {len(pending.list().items)}")


if __name__ == "__main__":
    main()
