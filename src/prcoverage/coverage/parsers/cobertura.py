"""Cobertura XML format parser.

Cobertura XML is used by many coverage tools across languages:
- Python: coverage.py (``coverage xml``)
- .NET: coverlet
- Go: gocover-cobertura

Structure:
<coverage line-rate="0.85" branch-rate="0.50" ...>
  <packages>
    <package name="...">
      <classes>
        <class name="..." filename="..." line-rate="...">
          <lines>
            <line number="1" hits="1"/>
            <line number="2" hits="0" branch="true" condition-coverage="50% (1/2)"/>
          </lines>
        </class>
      </classes>
    </package>
  </packages>
</coverage>

Only class-level ``<lines>`` are read; method-level lines repeat them.
Relative filenames are resolved against ``<sources><source>``.
"""

import xml.etree.ElementTree as ET
from pathlib import Path, PurePosixPath, PureWindowsPath

from prcoverage.core.errors import MalformedCoverageReportError
from prcoverage.coverage.models import CoverageReport, FileCoverage
from prcoverage.coverage.parsers.base import normalize_path, parse_count


def _resolve(filename: str, sources: list[str]) -> str:
    """Prefix a relative ``filename`` with its ``<source>`` root.

    With several roots, the first one under which the file exists wins;
    otherwise the first root is used.
    """
    path = filename.replace("\\", "/")
    if not sources or PurePosixPath(path).is_absolute() or PureWindowsPath(path).is_absolute():
        return filename

    candidates = [source.replace("\\", "/").rstrip("/") + "/" + path for source in sources]
    for candidate in candidates:
        if Path(candidate).is_file():
            return candidate
    return candidates[0]


class CoberturaParser:
    """Parser for Cobertura XML format."""

    @property
    def format_id(self) -> str:
        return "cobertura"

    def can_parse(self, document: str) -> bool:
        """Check if the document looks like Cobertura XML."""
        header = document[:2048]
        # line-rate distinguishes Cobertura from Clover's <coverage generated=...>
        return "<coverage" in header and "line-rate=" in header

    def parse(self, document: str, *, base_path: str | None = None) -> CoverageReport:
        """Parse Cobertura XML into CoverageReport."""
        try:
            root = ET.fromstring(document)
        except ET.ParseError as e:
            raise MalformedCoverageReportError.invalid("cobertura", f"invalid XML: {e}") from e

        # Strip namespace if present
        for elem in root.iter():
            if isinstance(elem.tag, str) and "}" in elem.tag:
                elem.tag = elem.tag.split("}", 1)[1]

        if root.tag != "coverage":
            raise MalformedCoverageReportError.invalid(
                "cobertura", f"root element is <{root.tag}>, expected <coverage>"
            )
        if root.find("packages") is None:
            raise MalformedCoverageReportError.invalid("cobertura", "missing <packages> element")

        sources = [s.text.strip() for s in root.iter("source") if s.text and s.text.strip()]
        files: dict[str, FileCoverage] = {}

        for cls in root.iter("class"):
            filename = cls.get("filename")
            if not filename:
                raise MalformedCoverageReportError.invalid(
                    "cobertura", f"<class name={cls.get('name', '')!r}> without filename"
                )

            normalized_path = normalize_path(_resolve(filename, sources), base_path)
            file_cov = files.setdefault(normalized_path, FileCoverage(path=normalized_path))

            for line in cls.findall("./lines/line"):
                line_num = parse_count("cobertura", line.get("number"), "line number")
                if line_num == 0:
                    raise MalformedCoverageReportError.invalid("cobertura", "line number 0")
                # A class split across several <class> entries keeps the max
                file_cov.record(line_num, parse_count("cobertura", line.get("hits"), "hits"))

        return CoverageReport(source_format="cobertura", files=files)
