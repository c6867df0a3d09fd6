"""
Marketplace load generator.

Repeatedly sends synthetic purchase orders to registered sellers, checks
each seller's bill against the expected one, and keeps track of seller
cash and health.
"""

__version__ = "0.1.0"
