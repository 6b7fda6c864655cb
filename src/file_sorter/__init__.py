"""
Rule-based file sorter: classify the files of a directory and move them into
category subfolders, once or on a fixed interval.
"""

__version__ = "1.0.0"
