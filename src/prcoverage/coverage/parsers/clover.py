"""Clover XML format parser.

Clover is used by multiple tools:
- PHP: phpunit --coverage-clover
- Kotlin: kover
- Java: OpenClover (historical)

Structure:
<coverage generated="..." clover="...">
  <project timestamp="...">
    <metrics ...aggregate stats.../>
    <package name="com.example">
      <file name="/path/to/Foo.php">
        <class name="FooClass" .../>
        <line num="10" type="method" name="bar" count="2"/>
        <line num="11" type="stmt" count="2"/>
        <line num="12" type="cond" count="0" truecount="1" falsecount="0"/>
        <metrics ...file stats.../>
      </file>
    </package>
  </project>
</coverage>

Line types:
- stmt: statement line (instrumented)
- cond: conditional line (instrumented as a statement; branch data ignored)
- method: method declaration (not an executable statement, not counted)
"""

import xml.etree.ElementTree as ET

from prcoverage.core.errors import MalformedCoverageReportError
from prcoverage.coverage.models import CoverageReport, FileCoverage
from prcoverage.coverage.parsers.base import normalize_path, parse_count

_STATEMENT_TYPES = frozenset({"stmt", "cond"})


class CloverParser:
    """Parser for Clover XML format."""

    @property
    def format_id(self) -> str:
        return "clover"

    def can_parse(self, document: str) -> bool:
        """Check if the document looks like Clover XML."""
        header = document[:2048]
        if '<coverage generated="' in header or 'clover="' in header:
            return True
        return '<project timestamp="' in header and '<line num="' in header

    def parse(self, document: str, *, base_path: str | None = None) -> CoverageReport:
        """Parse Clover XML into CoverageReport."""
        try:
            root = ET.fromstring(document)
        except ET.ParseError as e:
            raise MalformedCoverageReportError.invalid("clover", f"invalid XML: {e}") from e

        if root.tag != "coverage":
            raise MalformedCoverageReportError.invalid(
                "clover", f"root element is <{root.tag}>, expected <coverage>"
            )
        if root.find("project") is None:
            raise MalformedCoverageReportError.invalid("clover", "missing <project> element")

        files: dict[str, FileCoverage] = {}

        for file_elem in root.iter("file"):
            file_path = file_elem.get("path") or file_elem.get("name")
            if not file_path:
                raise MalformedCoverageReportError.invalid("clover", "<file> without a name")

            normalized_path = normalize_path(file_path, base_path)
            file_cov = files.setdefault(normalized_path, FileCoverage(path=normalized_path))

            for line in file_elem.findall("line"):
                num = parse_count("clover", line.get("num"), "line number")
                if num == 0:
                    raise MalformedCoverageReportError.invalid("clover", "line number 0")
                if line.get("type", "stmt") not in _STATEMENT_TYPES:
                    continue
                file_cov.record(num, parse_count("clover", line.get("count"), "line count"))

        return CoverageReport(source_format="clover", files=files)
