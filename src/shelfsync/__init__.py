"""Shelfsync — shared inventories with live updates.

Anyone holding an inventory's UUID can view and edit its product list;
every open viewer of the same UUID sees changes as they happen.
"""

__version__ = "0.1.0"
