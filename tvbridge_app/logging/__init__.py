"""
Logging configuration and utilities for the TVBridge pipeline.
"""
from .config import configure_logging, get_logger, get_pipeline_logger, log_gate_decision

__all__ = ["configure_logging", "get_logger", "get_pipeline_logger", "log_gate_decision"]
