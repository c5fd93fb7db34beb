"""
roster_core package: athlete records, backend adapters, optimistic roster sync, and spreadsheet import.
"""
__all__ = [
    "constants",
    "models",
    "config",
    "adapters",
    "store",
    "sync",
    "importer",
    "progress",
    "access",
]
