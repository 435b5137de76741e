"""
Cabinete - organize files into folders by their modification date.
"""

__version__ = "0.1.0"
