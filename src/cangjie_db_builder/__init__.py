"""
Cangjie Database Builder

Builds the Cangjie input method character database from tab-separated
table files, writing records in asynchronous batches.
"""

__version__ = "1.0.0"
