"""
Service binding engine.

Turns backing service selectors into ServiceContext values:
- core: model, errors, annotation layering, merge policies
- binding: annotation grammar and handlers
- context: service context builder and owned resource walker
- watch: watch registry and CSV watch mapper
"""

__version__ = "0.1.0"
