"""Host list input and result output files for the CLI."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from csv import DictReader as CSVReader, DictWriter as CSVWriter
from dataclasses import dataclass, field
from json import dumps as json_dumps, loads as json_loads
from typing import TYPE_CHECKING, Literal

from openpyxl import load_workbook as openpyxl_load_workbook
from openpyxl.workbook import Workbook as OpenPyXLWorkbook

if TYPE_CHECKING:
    from pathlib import Path

    from telnet_session.types import JSON_TYPE


@dataclass(slots=True)
class FileReader:
    """Read host rows from a file."""

    path: Path
    type: Literal["csv", "json", "xlsx"]
    data: list[dict[str, JSON_TYPE]] = field(init=False)

    def __post_init__(self) -> None:
        """Load the file.

        Raises:
            ValueError: If the file type is invalid or the content is not a list of rows.
        """
        match self.type:
            case "csv":
                self._read_csv()
            case "json":
                self._read_json()
            case "xlsx":
                self._read_xlsx()
            case _:
                msg = f"Invalid file type: {self.type}"
                raise ValueError(msg)

    def _read_csv(self) -> None:
        """Read rows from a CSV file with a header line."""
        self.data = list(CSVReader(self.path.read_text().splitlines()))

    def _read_json(self) -> None:
        """Read rows from a JSON list of objects, or a plain list of host names.

        Raises:
            ValueError: If the document is not a list.
        """
        content = json_loads(self.path.read_text())
        if not isinstance(content, list):
            msg = f"Expected a list of hosts in {self.path}"
            raise ValueError(msg)
        self.data = [row if isinstance(row, dict) else {"host": row} for row in content]

    def _read_xlsx(self) -> None:
        """Read rows from the active sheet of an Excel workbook."""
        worksheet = openpyxl_load_workbook(filename=self.path, data_only=True, read_only=True).active
        rows = worksheet.iter_rows(values_only=True)
        headers = [str(value) for value in next(rows, ())]
        self.data = [
            dict(zip(headers, row, strict=False)) for row in rows if any(value is not None for value in row)
        ]


def format_plain(data: list[dict[str, JSON_TYPE]]) -> str:
    """Format result rows as readable text.

    Scalar fields come first as ``key: value`` lines, then each nested
    mapping (command output) as ``--- command`` followed by its text.

    Returns:
        One block per row, separated by blank lines
    """
    blocks = []
    for row in data:
        lines = [f"{key}: {value}" for key, value in row.items() if not isinstance(value, Mapping)]
        for value in row.values():
            if isinstance(value, Mapping):
                lines.extend(f"--- {command}\n{output}" for command, output in value.items())
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) + "\n"


@dataclass(slots=True)
class FileWriter:
    """Write session results to a file in various formats."""

    path: Path
    type: Literal["csv", "json", "plain", "xlsx"]
    data: list[dict[str, JSON_TYPE]]

    def __post_init__(self) -> None:
        """Write the file.

        Raises:
            ValueError: If the file type is invalid.
        """
        match self.type:
            case "csv":
                self._write_csv()
            case "json":
                self._write_json()
            case "plain":
                self._write_plain()
            case "xlsx":
                self._write_xlsx()
            case _:
                msg = f"Invalid file type: {self.type}"
                raise ValueError(msg)

    @staticmethod
    def _flatten(value: JSON_TYPE) -> JSON_TYPE:
        """Turn nested values into text for flat formats."""
        if isinstance(value, Mapping):
            return "\n\n".join(f"{key}:\n{item}" for key, item in value.items())
        if isinstance(value, Iterable) and not isinstance(value, str):
            return "\n".join(str(item) for item in value)
        return value

    def _write_csv(self) -> None:
        """Write one CSV row per result."""
        with self.path.open("w", newline="") as handle:
            writer = CSVWriter(handle, fieldnames=list(self.data[0].keys()) if self.data else [])
            writer.writeheader()
            for row in self.data:
                writer.writerow({key: self._flatten(value) for key, value in row.items()})

    def _write_json(self) -> None:
        """Write the results as a JSON list."""
        self.path.write_text(json_dumps(self.data, indent=2))

    def _write_plain(self) -> None:
        """Write the results as readable text, one block per host."""
        self.path.write_text(format_plain(self.data))

    def _write_xlsx(self) -> None:
        """Write one worksheet row per result, with a header row.

        Raises:
            ValueError: If there is nothing to write.
        """
        if not self.data:
            msg = "No data to write to file"
            raise ValueError(msg)

        workbook = OpenPyXLWorkbook()
        worksheet = workbook.active
        headers = list(self.data[0].keys())
        [worksheet.cell(row=1, column=col_idx, value=header) for col_idx, header in enumerate(headers, 1)]
        [
            worksheet.cell(row=row_idx, column=col_idx, value=self._flatten(row_data.get(key)))
            for row_idx, row_data in enumerate(self.data, 2)
            for col_idx, key in enumerate(headers, 1)
        ]
        workbook.save(self.path)
