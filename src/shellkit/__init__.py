"""Shell convenience utilities: safe delete, restore and repository status."""

__version__ = "0.1.0"
