"""Court Order Interest Act (British Columbia) interest library.

This package computes prejudgment and postjudgment simple interest on court
awards using the published semi-annual COIA rate tables.

Key modules:
- valuation: interest periods, payment allocation, case recalculation
- schedule: rate-period segment generation
- rates: rate tables and rate data loaders
- conventions: day count conventions and interest types
- utils: date normalization helpers
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
    # Main modules are imported via subpackages
    "valuation",
    "schedule",
    "rates",
    "conventions",
    "utils",
    "config",
]
