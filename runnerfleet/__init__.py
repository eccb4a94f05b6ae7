"""Reconciliation logic, schedule matching, hashing and HTTP helpers for fleets of self-hosted CI runners."""

__version__ = "0.1.0"
__all__ = [
    "deployment",
    "fakegithub",
    "hashing",
    "labels",
    "logsetup",
    "models",
    "replicaset",
    "schedule",
    "transports",
]