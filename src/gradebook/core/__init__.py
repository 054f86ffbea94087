"""Core module.

- gradebook: Gradebook facade over the database repositories
"""

__all__ = [
    "gradebook",
]
