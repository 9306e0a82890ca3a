"""
Obfuscation Scorer
Simple percentage heuristics for how much of a script is obfuscated
"""

import re
from typing import Dict

import logger

NOT_COMPUTED = -0.01
DEFAULT_LIMIT = 25.0

UNICODE_ESCAPE = re.compile(r'\\u0')
HEX_ESCAPE = re.compile(r'\\x[0-9a-fA-F]{2}')
PERCENT_ESCAPE = re.compile(r'%')

# Preamble of Dean Edwards style packers: function(p,a,c,k,e,r) / function(p,a,c,k,e,d)
PACKER_SIGNATURE = 'function(p,a,c,k,e'
PACKED_SCORE = 100.0


def ratio(count, denominator):
    """Percentage rounded to 2 decimals, or NOT_COMPUTED when there are no matches"""
    if count <= 0:
        return NOT_COMPUTED
    return round(count / denominator * 100, 2)


class ObfuscationScore:
    """Per-technique obfuscation ratios for one script"""

    TECHNIQUES = ('unicode', 'hex', 'escaped', 'packed')

    def __init__(self, unicode=NOT_COMPUTED, hex=NOT_COMPUTED,
                 escaped=NOT_COMPUTED, packed=NOT_COMPUTED, computed=True):
        self.unicode = unicode
        self.hex = hex
        self.escaped = escaped
        self.packed = packed
        self.computed = computed

    @classmethod
    def not_computed(cls):
        return cls(computed=False)

    def as_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in self.TECHNIQUES}

    def over_limit(self, limit):
        """Techniques whose ratio reaches the limit"""
        return [name for name, value in self.as_dict().items() if value >= limit]

    def is_obfuscated(self, limit=DEFAULT_LIMIT):
        return bool(self.over_limit(limit))

    def __eq__(self, other):
        if not isinstance(other, ObfuscationScore):
            return NotImplemented
        return self.as_dict() == other.as_dict() and self.computed == other.computed

    def __repr__(self):
        values = ', '.join(f"{k}={v}" for k, v in self.as_dict().items())
        return f"ObfuscationScore({values})"


class ObfuscationScorer:
    """Scores script bodies and applies the obfuscation threshold"""

    def __init__(self, limit=DEFAULT_LIMIT):
        self.limit = limit

    @staticmethod
    def score(content) -> ObfuscationScore:
        """Compute all four ratios for a script body"""
        total = len(content)
        if total == 0:
            return ObfuscationScore.not_computed()

        return ObfuscationScore(
            # a raw unicode escape is counted against 2 chars, hex against 4
            unicode=ratio(len(UNICODE_ESCAPE.findall(content)), total / 2),
            hex=ratio(len(HEX_ESCAPE.findall(content)), total / 4),
            escaped=ratio(len(PERCENT_ESCAPE.findall(content)), total),
            packed=PACKED_SCORE if PACKER_SIGNATURE in content else NOT_COMPUTED,
        )

    def analyze(self, content, host, path=''):
        """
        Score a script and decide whether its host should be flagged

        Args:
            content (str): Script body
            host (str): Host the script was loaded from
            path (str): Script path, for log context

        Returns:
            bool: True if any technique reaches the limit
        """
        if not content:
            logger.log(f"[obf] host={host} error=zero length script detected - "
                       f"possibly blocked by Cross-Origin Read Blocking")
            return False

        try:
            result = self.score(content)
        except Exception as e:
            logger.warn(f"[obf] host={host} path={path} error={e}")
            return False

        flagged = result.over_limit(self.limit)
        for technique in flagged:
            logger.log(f"[obf][{technique}] obfuscated script loaded from host={host} "
                       f"path={path} obfuscation={getattr(result, technique)}")

        return bool(flagged)
