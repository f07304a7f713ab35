"""
.. include:: ../README.md
"""

__all__ = [
    "civil",
    "convert",
    "exceptions",
    "gregorian",
    "policy",
    "timezone",
    "tzif",
    "tzinfo",
]
