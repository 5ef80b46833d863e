"""
Signal data models and ingress normalization.

Converts inbound webhook payloads into immutable queue messages and defines
the directive and pending-record structures used by the pipeline.
"""
