# src/valve_lookup/__init__.py
"""
valve_lookup package.

Staff lookup tool for the water-valve network:
- load the Valve Sheet + Zone Sheet
- join them into a valve -> zones/lots graph (cached)
- answer valve / zone / lot searches and classify shutoff impact
"""

__all__ = []
__version__ = "0.1.0"
