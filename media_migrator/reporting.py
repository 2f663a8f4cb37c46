import csv
import logging
from pathlib import Path
from typing import List

from .models import FileItem


class RunReport:
    """
    Failures, size-regression warnings and skips of one run.

    Items are held by reference and never removed; the report has no say in
    control flow.
    """

    def __init__(self, total: int = 0):
        self.total = total
        self.failed: List[FileItem] = []
        self.warned: List[FileItem] = []
        self.skipped: List[FileItem] = []

    def add_failure(self, item: FileItem):
        self.failed.append(item)

    def add_warning(self, item: FileItem):
        self.warned.append(item)

    def add_skipped(self, item: FileItem):
        self.skipped.append(item)

    @property
    def processed(self) -> int:
        return self.total - len(self.failed)

    @property
    def ok(self) -> bool:
        return not self.failed

    def summary_lines(self) -> List[str]:
        lines = [f"Done! Processed {self.processed} of {self.total} files"]

        if self.failed:
            lines.append("Errors:")
            lines.extend(f"    {item.path}: {item.error}" for item in self.failed)

        if self.warned:
            lines.append("Warnings:")
            lines.extend(f"    {item.path}: {item.warning}" for item in self.warned)

        if self.skipped:
            lines.append("Skipped:")
            lines.extend(f"    {item.path}: {item.skip_reason}" for item in self.skipped)

        return lines

    def log_summary(self):
        head, *details = self.summary_lines()
        logging.info(head)
        for line in details:
            logging.warning(line)

    def write_csv(self, output_csv: Path):
        """One row per item that needs a second look."""
        headers = ["Source Path", "Status", "Destination Path", "Message"]

        rows = []
        for item in self.failed:
            rows.append([str(item.path), "Failed", str(item.destination or ""), str(item.error)])
        for item in self.warned:
            rows.append([str(item.path), "Warning", str(item.destination or ""), item.warning])
        for item in self.skipped:
            rows.append([str(item.path), "Skipped", str(item.destination or ""), item.skip_reason])

        with open(output_csv, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(headers)
            writer.writerows(rows)

        logging.info(f"Report written to {output_csv} ({len(rows)} rows)")
