# rules.py
"""
Defines the group-to-group interaction rules.

A RuleTable is an ordered, immutable list of (source, target, g) entries.
The order is significant: the simulation applies the rules one after
another within a tick, so reordering them changes the emergent pattern.
"""
import logging
import math
from typing import Any, Dict, Iterator, NamedTuple, Sequence, Tuple

from utils import config_error, is_number

# --- Data Contracts ---
#
# class RuleTable:
#   - __init__(self, entries: Sequence, group_names: Sequence[str]):
#     - Inputs:
#       - entries: Ordered rule entries, each either [source, target, g]
#         or {"source": ..., "target": ..., "g": ...}.
#       - group_names: Names of all particle groups in the world.
#     - Side Effects: None. Raises ConfigurationError if an entry is
#       malformed, references an unknown group, has a non-finite g, or
#       repeats a (source, target) pair.
#
#   - lookup(self, source: str, target: str) -> float:
#     - Outputs: The coefficient for the pair, or 0.0 if none is set.
#     - Invariants: Never raises; the table is total.


class Rule(NamedTuple):
    source: str
    target: str
    g: float


def _parse_entry(entry: Any) -> Tuple[Any, Any, Any]:
    if isinstance(entry, dict):
        try:
            return entry['source'], entry['target'], entry['g']
        except KeyError as e:
            raise config_error(f"rule {entry!r} is missing key {e}.") from e
    if isinstance(entry, (list, tuple)) and len(entry) == 3:
        return tuple(entry)
    raise config_error(
        f"rule {entry!r} must be [source, target, g] or a mapping with those keys."
    )


class RuleTable:
    """
    Ordered, read-only table of interaction coefficients between groups.

    The force on a source particle points along (source - target) scaled by
    g, so positive coefficients push the source group away from the target
    group and negative ones pull it closer. Pairs without an entry do not
    interact.
    """
    def __init__(self, entries: Sequence, group_names: Sequence[str]):
        known = set(group_names)
        rules = []
        coefficients: Dict[Tuple[str, str], float] = {}

        for entry in entries:
            source, target, g = _parse_entry(entry)
            for name in (source, target):
                if not isinstance(name, str) or name not in known:
                    raise config_error(
                        f"rule {entry!r} references unknown group {name!r}; "
                        f"known groups are {list(group_names)}."
                    )
            if not is_number(g) or not math.isfinite(g):
                raise config_error(f"rule {entry!r} needs a finite numeric coefficient.")
            if (source, target) in coefficients:
                raise config_error(f"rule {source} -> {target} is defined more than once.")

            rule = Rule(source, target, float(g))
            coefficients[(source, target)] = rule.g
            rules.append(rule)

        self._rules = tuple(rules)
        self._coefficients = coefficients

        logging.info(f"RuleTable initialized with {len(self._rules)} rules.")
        for rule in self._rules:
            logging.debug(f"Rule {rule.source} -> {rule.target}: g={rule.g:+.3f}")

    @classmethod
    def from_params(cls, params: Dict[str, Any]) -> "RuleTable":
        """Builds the table from validated simulation parameters."""
        return cls(params['rules'], params['groups'])

    def lookup(self, source: str, target: str) -> float:
        """Returns g(source -> target), or 0.0 when the pair has no rule."""
        return self._coefficients.get((source, target), 0.0)

    @property
    def groups(self) -> set:
        """Every group name that appears in at least one rule."""
        return {name for rule in self._rules for name in (rule.source, rule.target)}

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"RuleTable({list(self._rules)!r})"
