#!/usr/bin/env python3
"""
Demo script showing rule resolution and an organize pass.
"""

import logging
import shutil
import tempfile
from pathlib import Path

from file_sorter.file_access import CandidateFile, Scanner
from file_sorter.organization_logic import OrganizeRun, Resolver, Rule, RuleSet
from file_sorter.utils.report_generator import ReportGenerator

# Set up logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


def log_script(path):
    """Sorting hook used by the demo."""
    return "Logs" if path.endswith(".log") else None


def demo_resolution():
    """Demonstrate first-match-wins resolution."""
    print("=== Rule Resolution Demo ===\n")

    rules = RuleSet(
        [
            Rule.for_extension(".txt", "TextFiles"),
            Rule.for_extension(".jpg", "Images"),
            Rule.for_script(log_script, name="log_script"),
        ]
    )
    resolver = Resolver()

    for name in ["notes.txt", "PHOTO.JPG", "server.log", "archive.tar.gz"]:
        candidate = CandidateFile.from_path(Path(name))
        destination = resolver.resolve(candidate, rules)
        print(f"{name:20} -> {destination or '(no match)'}")


def demo_organize_pass():
    """Demonstrate two passes over the same directory."""
    print("\n=== Organize Pass Demo ===\n")

    root = Path(tempfile.mkdtemp())
    try:
        for name in ["a.txt", "b.jpg", "c.unknown", "app.log"]:
            (root / name).write_text(name)
        (root / "TextFiles").mkdir()
        (root / "TextFiles" / "a.txt").write_text("already here")

        rules = RuleSet.from_mapping({".txt": "TextFiles", ".jpg": "Images"}) + RuleSet(
            [Rule.for_script(log_script)]
        )
        organizer = OrganizeRun(scanner=Scanner(recursive=True))

        first = organizer.run(root, rules)
        print(ReportGenerator(first).generate_summary_report())

        second = organizer.run(root, rules)
        print("\nSecond pass:", ReportGenerator(second).generate_summary_line())
    finally:
        shutil.rmtree(root)


if __name__ == "__main__":
    demo_resolution()
    demo_organize_pass()
