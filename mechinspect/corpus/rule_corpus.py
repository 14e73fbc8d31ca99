"""
Rule Corpus
===========
Loads the curated transformation-rule corpus and derives filtered working sets.

The corpus file is a JSON list of rule records (see
:mod:`mechinspect.models.rule_models`).  Resolution order for the file:
explicit ``path`` argument, then ``$MECHINSPECT_RULES_PATH``, then the
bundled ``data/validation_rules.json``.

Filtering never mutates a corpus: each filter returns a new one, so the
same loaded corpus can feed validation and expansion runs of different
arities.

Public API:
    RuleCorpus.load(path=None)                 -> RuleCorpus
    RuleCorpus.filter_by_substrate_arity(n)    -> RuleCorpus
    RuleCorpus.filter_by_curation_status(...)  -> RuleCorpus
    RuleCorpus.rules()                         -> Tuple[TransformationRule, ...]
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Optional, Tuple, Union

from mechinspect.common.constants import DEFAULT_RULES_FILE, RULES_PATH_ENV
from mechinspect.common.errors import CorpusLoadError
from mechinspect.common.status import CurationStatus
from mechinspect.models import RuleId, TransformationRule

__all__ = ["RuleCorpus", "read_json_list", "resolve_data_path"]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def resolve_data_path(path: Optional[Union[str, Path]], env_var: str, default: Path) -> Path:
    """Explicit path, else the environment override, else the bundled default."""
    raw = path or os.getenv(env_var)
    return Path(raw) if raw else default


def read_json_list(path: Path, what: str) -> List[Any]:
    """Read a JSON file whose top level must be a list.

    Raises:
        CorpusLoadError: If the file is missing, unreadable, not JSON, or not a list.
    """
    if not path.exists():
        raise CorpusLoadError(f"{what} file not found: {path}")
    try:
        payload = json.loads(path.read_text(encoding="utf-8-sig"))
    except (OSError, ValueError) as exc:
        raise CorpusLoadError(f"{what} file {path} is not valid JSON: {exc}") from exc
    if not isinstance(payload, list):
        raise CorpusLoadError(f"{what} file {path} must contain a JSON list, got {type(payload).__name__}")
    return payload


# ---------------------------------------------------------------------------
# RuleCorpus
# ---------------------------------------------------------------------------

class RuleCorpus:
    """An ordered, read-only working set of transformation rules."""

    def __init__(self, rules: Iterable[TransformationRule] = ()) -> None:
        self._rules: Tuple[TransformationRule, ...] = tuple(rules)

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "RuleCorpus":
        """Load the corpus from JSON.

        Raises:
            CorpusLoadError: If the file is missing or any record is malformed.
                A partially valid corpus is rejected as a whole.
        """
        resolved = resolve_data_path(path, RULES_PATH_ENV, DEFAULT_RULES_FILE)
        payload = read_json_list(resolved, "rule corpus")

        rules: List[TransformationRule] = []
        seen_ids: set = set()
        for index, raw in enumerate(payload):
            if not isinstance(raw, dict):
                raise CorpusLoadError(f"rule corpus {resolved}: record #{index} is not an object")
            try:
                rule = TransformationRule.from_dict(raw)
            except (TypeError, ValueError) as exc:
                raise CorpusLoadError(f"rule corpus {resolved}: record #{index}: {exc}") from exc
            if rule.rule_id in seen_ids:
                raise CorpusLoadError(f"rule corpus {resolved}: duplicate rule id {rule.rule_id!r}")
            seen_ids.add(rule.rule_id)
            rules.append(rule)

        logger.info("Loaded %d transformation rules from %s", len(rules), resolved)
        return cls(rules)

    # -- Filters -----------------------------------------------------------

    def filter_by_substrate_arity(self, arity: int) -> "RuleCorpus":
        """Return a new corpus with only the rules expecting *arity* inputs."""
        filtered = RuleCorpus(r for r in self._rules if r.substrate_arity == arity)
        logger.debug("Arity filter %d kept %d of %d rules", arity, len(filtered), len(self))
        return filtered

    def filter_by_curation_status(self, statuses: Iterable[CurationStatus]) -> "RuleCorpus":
        """Return a new corpus with only the rules whose status is in *statuses*."""
        wanted = frozenset(statuses)
        return RuleCorpus(r for r in self._rules if r.curation_status in wanted)

    # -- Access ------------------------------------------------------------

    def rules(self) -> Tuple[TransformationRule, ...]:
        return self._rules

    def get(self, rule_id: RuleId) -> Optional[TransformationRule]:
        for rule in self._rules:
            if rule.rule_id == rule_id:
                return rule
        return None

    def __iter__(self) -> Iterator[TransformationRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"RuleCorpus({len(self._rules)} rules)"
