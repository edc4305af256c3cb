"""ITX Portal CLI"""

__version__ = "0.1.0"
