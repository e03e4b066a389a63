"""
Glob matching of page paths for collection patterns.

Patterns are matched segment by segment: `*`, `?` and `[...]` never cross a
`/`, a `**` segment matches zero or more directories, `{a,b}` alternations
are expanded and a leading `!` excludes paths.
"""

import fnmatch
import re
from typing import Iterable, List, Sequence, Union

BRACE_PATTERN = re.compile(r"\{([^{}]*,[^{}]*)\}")
GLOBSTAR = "**"


def expand_braces(pattern: str) -> List[str]:
    """Expand `{a,b}` alternations into separate patterns (no nesting)."""
    m = BRACE_PATTERN.search(pattern)
    if not m:
        return [pattern]
    head, tail = pattern[: m.start()], pattern[m.end() :]
    expanded: List[str] = []
    for option in m.group(1).split(","):
        expanded.extend(expand_braces(f"{head}{option}{tail}"))
    return expanded


def split_segments(path: str) -> List[str]:
    return [segment for segment in path.replace("\\", "/").split("/") if segment]


def match_segments(pattern: Sequence[str], path: Sequence[str]) -> bool:
    """Match path segments against pattern segments, expanding `**`."""
    if not pattern:
        return not path
    head = pattern[0]
    if head == GLOBSTAR:
        # `**` consumes zero or more whole segments
        return any(match_segments(pattern[1:], path[i:]) for i in range(len(path) + 1))
    if not path:
        return False
    if not fnmatch.fnmatchcase(path[0], head):
        return False
    return match_segments(pattern[1:], path[1:])


def glob_match(pattern: str, path: str) -> bool:
    return match_segments(split_segments(pattern), split_segments(path))


def match(patterns: Union[str, Iterable[str]], paths: Iterable[str]) -> List[str]:
    """
    Return the paths matched by `patterns`, keeping the order of `paths`.

    A path is matched when it matches at least one positive pattern and no
    pattern prefixed with `!`.
    """
    if isinstance(patterns, str):
        patterns = [patterns]

    include: List[str] = []
    exclude: List[str] = []
    for pattern in patterns:
        if pattern.startswith("!"):
            exclude.extend(expand_braces(pattern[1:]))
        else:
            include.extend(expand_braces(pattern))

    matched = []
    for path in paths:
        if not any(glob_match(p, path) for p in include):
            continue
        if any(glob_match(p, path) for p in exclude):
            continue
        matched.append(path)
    return matched
