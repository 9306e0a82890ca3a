"""
Wildcard host pattern matching
'*' matches any run of characters, '?' matches one character
"""

import re
from functools import lru_cache


@lru_cache(maxsize=1024)
def compile_pattern(pattern):
    """Translate a wildcard host pattern into an anchored, case-insensitive regex"""
    parts = []
    for char in pattern:
        if char == '*':
            parts.append('.*')
        elif char == '?':
            parts.append('.')
        else:
            parts.append(re.escape(char))
    return re.compile('^' + ''.join(parts) + '$', re.IGNORECASE)


def matches(pattern, candidate):
    """Check a hostname against a wildcard pattern (whole-string match only)"""
    return compile_pattern(pattern).fullmatch(candidate) is not None


def matches_any(patterns, candidate):
    return any(matches(p, candidate) for p in patterns)
