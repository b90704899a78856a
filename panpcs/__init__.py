"""Client library for the Baidu netdisk PCS and pan web APIs."""

__version__ = "0.1.0"

__all__ = [
    "common",
    "errors",
    "expiry",
    "files",
    "manip",
    "panhome",
    "session",
]