"""Command pattern compilation and matching.

A pattern is literal text interleaved with named placeholders, e.g.
``hello {name}`` or ``add {a:integer} {b:integer}``. Patterns are compiled
once into an anchored regular expression; the whole text must match.
"""
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from core.errors import PatternError

PLACEHOLDER_RE = re.compile(r"\{(\w+)(?::(\w+))?\}")

# placeholder type -> regex fragment
PLACEHOLDER_TYPES: Dict[str, str] = {
    "string": r".+?",
    "integer": r"[-+]?\d+",
}


@dataclass
class MatchResult:
    """Parameters captured by a successful pattern match.

    Attributes:
        params: Placeholder name -> captured text
    """
    params: Dict[str, str] = field(default_factory=dict)

    def string(self, name: str) -> str:
        """Return the captured text for ``name``; raises KeyError if unknown."""
        return self.params[name]

    def integer(self, name: str) -> int:
        """Return the captured text for ``name`` converted to int."""
        return int(self.params[name])


@dataclass(frozen=True)
class PatternRule:
    """A compiled command pattern.

    Attributes:
        pattern: The pattern as registered
        regex: Anchored regular expression built from the pattern
        names: Placeholder names in order of appearance
    """
    pattern: str
    regex: "re.Pattern[str]"
    names: tuple

    def match(self, text: str) -> Optional[MatchResult]:
        """Match the entire text; returns None on mismatch."""
        m = self.regex.fullmatch(text)
        if m is None:
            return None
        return MatchResult(params={name: m.group(name) for name in self.names})


def compile_pattern(pattern: str) -> PatternRule:
    """Compile a command pattern into a PatternRule.

    Raises:
        PatternError: on an unknown placeholder type or a repeated name
    """
    parts: List[str] = []
    names: List[str] = []
    pos = 0
    for m in PLACEHOLDER_RE.finditer(pattern):
        name, kind = m.group(1), m.group(2) or "string"
        if kind not in PLACEHOLDER_TYPES:
            raise PatternError(f"Unknown placeholder type {kind!r} in pattern {pattern!r}")
        if name in names:
            raise PatternError(f"Duplicate placeholder {name!r} in pattern {pattern!r}")
        parts.append(re.escape(pattern[pos:m.start()]))
        parts.append(f"(?P<{name}>{PLACEHOLDER_TYPES[kind]})")
        names.append(name)
        pos = m.end()
    parts.append(re.escape(pattern[pos:]))

    return PatternRule(
        pattern=pattern,
        regex=re.compile("".join(parts), re.DOTALL),
        names=tuple(names),
    )
