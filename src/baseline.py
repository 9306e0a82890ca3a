"""
Baseline Comparator
Diffs observed hosts against the authorized host configuration
"""

import json
from pathlib import Path
from typing import Dict, List

import logger
from host_patterns import matches_any
from utils import save_json


class BaselineError(Exception):
    """Raised when the baseline file exists but cannot be used"""


class BaselineConfig:
    """Category name -> ordered list of authorized wildcard host patterns"""

    def __init__(self, patterns=None, path=None):
        self.patterns: Dict[str, List[str]] = {k: list(v) for k, v in (patterns or {}).items()}
        self.path = path

    @property
    def established(self):
        """A baseline only counts once at least one category has a pattern"""
        return any(len(p) > 0 for p in self.patterns.values())

    def has_category(self, category):
        return category in self.patterns

    def patterns_for(self, category):
        return self.patterns.get(category, [])


def load_baseline(path):
    """
    Load the authorized hosts file

    Returns:
        BaselineConfig, or None if the file does not exist
    """
    path = Path(path)
    if not path.exists():
        return None

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise BaselineError(f"could not read baseline {path}: {e}")

    if not isinstance(data, dict):
        raise BaselineError(f"baseline {path} must be a JSON object of category -> host patterns")

    for category, patterns in data.items():
        if not isinstance(patterns, list) or not all(isinstance(p, str) for p in patterns):
            raise BaselineError(f"baseline {path}: '{category}' must be a list of host patterns")

    return BaselineConfig(data, path=str(path))


def compare(observations, baseline):
    """
    Build the report of unauthorized hosts

    Args:
        observations (dict): Category name -> observed hosts
        baseline (BaselineConfig): Authorized patterns

    Returns:
        dict: Category name -> sorted list of hosts not matched by any pattern
    """
    report = {}
    for category, hosts in observations.items():
        if baseline.has_category(category):
            patterns = baseline.patterns_for(category)
            report[category] = sorted(h for h in hosts if not matches_any(patterns, h))
        else:
            # no authorized hosts for this category
            report[category] = sorted(hosts)
    return report


def recommend(observations, baseline_path, output_path=None):
    """Emit the current observations as a starting baseline"""
    recommendation = {category: sorted(hosts) for category, hosts in observations.items()}

    print(f"\n-+-+-+- No baseline config found. Add the following to `{baseline_path}` "
          f"to set the current baseline:\n")
    print(json.dumps(recommendation, indent=2))

    if output_path:
        save_json(recommendation, output_path)
        logger.log(f"recommended baseline written to {output_path}")

    return recommendation
