"""CITZN district resolution package.

Resolves a US ZIP code to the political geography used across the platform:
- congressional, state senate and state assembly districts
- county and city, with incorporated/unincorporated status
- coverage level and elected representatives for the area
"""

__all__ = [
    "audit",
    "config",
    "counties",
    "coverage",
    "errors",
    "geocoding",
    "jurisdiction",
    "mapping",
    "representatives",
    "resilience",
    "resolver",
    "validation",
    "zip_prefix_fallback",
    "zip_table",
]
