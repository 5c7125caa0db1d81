"""
Code fragment extraction from raw work logs.

Recovers up to a bounded number of code snippets from the user's log text,
tags each with a language and caps its length. Works only on the raw log,
never on generated output, and never raises.
"""

import re
from dataclasses import dataclass
from typing import List, Pattern, Tuple

MAX_FRAGMENTS = 3
MAX_LINES = 20
TRUNCATION_MARKER = "// ... truncated"
PLAINTEXT = "plaintext"

FENCED_BLOCK = re.compile(r"```(\w+)?\n([\s\S]*?)```")
INDENT_UNIT = re.compile(r"^(?: {4}|\t)")

# Evaluated top to bottom, first match wins. Order matters: typescript
# shadows javascript, and json/yaml only catch what nothing above claimed.
LANGUAGE_RULES: List[Tuple[str, Pattern[str]]] = [
    ("typescript", re.compile(
        r"(?:interface\s+\w+|type\s+\w+\s*=|:\s*(?:string|number|boolean)\b"
        r"|import\s+.*\s+from\s+['\"])"
    )),
    ("javascript", re.compile(r"(?:const\s+\w+\s*=|let\s+\w+\s*=|function\s+\w+|=>|require\s*\()")),
    ("python", re.compile(r"(?:def\s+\w+\s*\(|import\s+\w+|from\s+\w+\s+import|class\s+\w+.*:|print\s*\()")),
    ("java", re.compile(r"(?:public\s+(?:class|static|void)|private\s+|System\.out\.|import\s+java\.)")),
    ("go", re.compile(r"(?:func\s+\w+|package\s+\w+|import\s+\(|fmt\.|:=)")),
    ("rust", re.compile(r"(?:fn\s+\w+|let\s+mut\s+|impl\s+|pub\s+fn|println!\()")),
    ("sql", re.compile(
        r"(?:SELECT\s+.*FROM|INSERT\s+INTO|CREATE\s+TABLE|ALTER\s+TABLE|UPDATE\s+\w+\s+SET)",
        re.IGNORECASE,
    )),
    ("bash", re.compile(r"(?:#!/.+|echo\s+|if\s+\[\s|fi\b|done\b|\$\{?\w+\}?)")),
    ("html", re.compile(r"(?:</?(?:div|span|html|head|body|p|a|img)\b|<!DOCTYPE)", re.IGNORECASE)),
    ("css", re.compile(r"(?:\{[^}]*(?:display|margin|padding|color|font-size)\s*:|@media\s)")),
    ("json", re.compile(r"\A\s*[{\[][\s\S]*[}\]]\s*\Z")),
    ("yaml", re.compile(r"^[\w-]+:\s+.+$", re.MULTILINE)),
]


@dataclass(frozen=True)
class CodeFragment:
    """A code snippet recovered from a raw log."""
    language: str
    code: str
    truncated: bool = False

    def __post_init__(self):
        if not self.code:
            raise ValueError("code cannot be empty")

    def to_dict(self) -> dict:
        return {"language": self.language, "code": self.code, "truncated": self.truncated}


def detect_language(code: str) -> str:
    """Guess the language of a snippet from the ordered rule table.

    Args:
        code: Snippet text

    Returns:
        Language tag of the first matching rule, or "plaintext"
    """
    for language, pattern in LANGUAGE_RULES:
        if pattern.search(code):
            return language
    return PLAINTEXT


def truncate_code(code: str, max_lines: int = MAX_LINES) -> Tuple[str, bool]:
    """Cap a snippet at max_lines, appending a marker line when cut.

    Returns:
        (code, truncated)
    """
    lines = code.split("\n")
    if len(lines) <= max_lines:
        return code, False
    return "\n".join(lines[:max_lines] + [TRUNCATION_MARKER]), True


def extract_code_fragments(
    raw_log: str,
    max_fragments: int = MAX_FRAGMENTS,
    max_lines: int = MAX_LINES
) -> List[CodeFragment]:
    """Extract code fragments from raw log text.

    Fenced blocks (```lang ... ```) are collected first, in source order.
    Indented blocks (runs of lines starting with four spaces or a tab) are
    only scanned when fewer than max_fragments fenced blocks were found.

    Args:
        raw_log: The user's raw work log
        max_fragments: Upper bound on fragments returned
        max_lines: Line cap applied to each fragment

    Returns:
        List of CodeFragment (empty if none found)
    """
    fragments: List[CodeFragment] = []

    def _accept(code: str, language: str) -> bool:
        text, truncated = truncate_code(code, max_lines)
        fragments.append(CodeFragment(language=language, code=text, truncated=truncated))
        return len(fragments) >= max_fragments

    for match in FENCED_BLOCK.finditer(raw_log):
        code = match.group(2).strip()
        if not code:
            continue
        if _accept(code, match.group(1) or detect_language(code)):
            return fragments

    for block in _indented_blocks(raw_log):
        code = "\n".join(block).strip()
        if not code:
            continue
        if _accept(code, detect_language(code)):
            return fragments

    return fragments


def _indented_blocks(raw_log: str) -> List[List[str]]:
    """Split raw text into candidate indented runs of at least two lines.

    One indent unit is stripped from each line. Blank lines are kept inside
    a run but never start one; trailing blank lines are not counted.
    """
    blocks: List[List[str]] = []
    run: List[str] = []

    def _close() -> None:
        while run and not run[-1].strip():
            run.pop()
        if len(run) >= 2:
            blocks.append(list(run))
        run.clear()

    for line in raw_log.split("\n"):
        if not line.strip():
            if run:
                run.append("")
        elif INDENT_UNIT.match(line):
            run.append(INDENT_UNIT.sub("", line, count=1))
        else:
            _close()
    _close()
    return blocks
