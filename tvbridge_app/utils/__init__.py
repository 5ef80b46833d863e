"""
Utility functions module.

Time Semantics:
- All pipeline timestamps are integer epoch milliseconds (UTC)
- The wall clock is read through an injectable callable so tests control it
- Record keys embed the timestamp zero-padded to 13 digits
"""
