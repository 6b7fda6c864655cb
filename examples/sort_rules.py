"""
Example sorting script.

file-sorter calls ``sort_file`` with the path of each file that no extension
rule claimed (or every file, with ``--script-position before``). Return a
folder name, or None to leave the file where it is.
"""

import os
from datetime import datetime


def sort_file(path):
    name = os.path.basename(path).lower()

    if name.endswith(".log"):
        return "Logs"

    if name.startswith("invoice"):
        return "Invoices"

    # screenshots land in one folder per year
    if name.startswith("screenshot"):
        year = datetime.fromtimestamp(os.path.getmtime(path)).year
        return f"Screenshots {year}"

    return None
