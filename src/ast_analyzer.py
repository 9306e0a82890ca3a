"""
Suspicious-Call Detector
Walks a script's esprima AST for member calls to dangerous runtime functions
(eval, atob, btoa by default)
"""

from typing import List, Optional

import esprima

import logger
from config import DEFAULT_SUSPICIOUS_CALLS


class ParseResult:
    """Outcome of a tolerant parse: a tree plus recovered errors, or a fatal error"""

    def __init__(self, tree=None, diagnostics=None, error=None):
        self.tree = tree
        self.diagnostics: List[str] = list(diagnostics or [])
        self.error: Optional[str] = error

    @property
    def ok(self):
        return self.tree is not None


class SuspiciousCall:
    """One suspicious member access found in a script"""

    def __init__(self, name, line=0, column=0):
        self.name = name
        self.line = line
        self.column = column

    def __repr__(self):
        return f"SuspiciousCall({self.name!r}, line={self.line}, column={self.column})"


def parse_script(source):
    """
    Parse JavaScript in tolerant mode

    Recoverable syntax errors are collected as diagnostics so minified or
    unusual (but executable) code can still be scanned.
    """
    try:
        tree = esprima.parseScript(source, {'tolerant': True, 'loc': True})
    except Exception as e:
        return ParseResult(error=str(e))

    diagnostics = [getattr(err, 'description', None) or str(err)
                   for err in (getattr(tree, 'errors', None) or [])]
    return ParseResult(tree=tree, diagnostics=diagnostics)


def _is_node(value):
    return isinstance(getattr(value, 'type', None), str)


def iter_nodes(tree):
    """Yield every AST node (anything with a string 'type') below and including tree"""
    stack = [tree]
    while stack:
        node = stack.pop()
        yield node
        for key, value in vars(node).items():
            if key.startswith('_'):
                continue
            if isinstance(value, list):
                stack.extend(item for item in reversed(value) if _is_node(item))
            elif _is_node(value):
                stack.append(value)


def member_property_name(node):
    """Name accessed by a MemberExpression (obj.name or obj['name'])"""
    prop = getattr(node, 'property', None)
    if prop is None:
        return None

    prop_type = getattr(prop, 'type', '')
    if prop_type == 'Identifier' and not getattr(node, 'computed', False):
        return getattr(prop, 'name', None)
    if prop_type == 'Literal' and isinstance(getattr(prop, 'value', None), str):
        return prop.value
    return None


def _location(node):
    loc = getattr(node, 'loc', None)
    if loc is None:
        return 0, 0
    try:
        return int(loc.start.line), int(loc.start.column)
    except (TypeError, ValueError, AttributeError):
        return 0, 0


class SuspiciousCallDetector:
    """Flags scripts whose AST accesses a suspicious member function"""

    def __init__(self, suspicious_names=None):
        self.suspicious_names = set(suspicious_names or DEFAULT_SUSPICIOUS_CALLS)
        self.matches: List[SuspiciousCall] = []

    def find_calls(self, tree):
        found = []
        for node in iter_nodes(tree):
            if getattr(node, 'type', None) != 'MemberExpression':
                continue
            name = member_property_name(node)
            if name in self.suspicious_names:
                line, column = _location(node)
                found.append(SuspiciousCall(name, line, column))
        return found

    def detect(self, source, host='', path=''):
        """
        Scan a script for suspicious member calls

        Args:
            source (str): Script body
            host (str): Host the script came from, for log context
            path (str): Script path, for log context

        Returns:
            bool: True if at least one suspicious call was found
        """
        self.matches = []
        logger.log(f"[ast] analyzing script path={path}")

        result = parse_script(source)
        if not result.ok:
            logger.warn(f"[ast] host={host} path={path} parse error={result.error}")
            return False

        for diagnostic in result.diagnostics:
            logger.log(f"[ast] host={host} path={path} recovered from: {diagnostic}")

        try:
            self.matches = self.find_calls(result.tree)
        except Exception as e:
            logger.warn(f"[ast] host={host} path={path} traversal error={e}")
            return False

        for match in self.matches:
            logger.warn(f"[ast] script from host={host} path={path} called suspicious "
                        f"function={match.name} line={match.line} column={match.column}")

        return bool(self.matches)
