"""
TVBridge App - Trading Signal Staging Pipeline

Consumes queued trading-signal webhooks, deduplicates and rate-limits them,
maps symbols to canonical instruments, decides a trade directive for each
signal and stages the directive for pickup by an external execution client.
"""

__version__ = "0.1.0"
__author__ = "TVBridge Team"
