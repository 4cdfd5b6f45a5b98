"""
readers package - Raw file reading.
"""

from .delimited import load_table, sniff_delimiter

__all__ = ["load_table", "sniff_delimiter"]
