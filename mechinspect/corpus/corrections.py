"""
Identifier corrections — known-bad structure identifiers and their replacements.

Some identifiers in the knowledge graph do not parse, or parse into the
wrong structure.  The corrections table swaps them for a curated
identifier before the chemistry engine sees them.  File format::

    [
        {"wrong": "InChI=1S/...", "correct": "InChI=1S/..."},
        ...
    ]
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional, Union

from mechinspect.common.constants import CORRECTIONS_PATH_ENV, DEFAULT_CORRECTIONS_FILE
from mechinspect.common.errors import CorpusLoadError
from mechinspect.corpus.rule_corpus import read_json_list, resolve_data_path

__all__ = ["IdentifierCorrections"]

logger = logging.getLogger(__name__)


class IdentifierCorrections:
    """Lookup table of identifier replacements."""

    def __init__(self, corrections: Optional[Dict[str, str]] = None) -> None:
        self._corrections: Dict[str, str] = dict(corrections or {})

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "IdentifierCorrections":
        """Load the table from JSON.

        Raises:
            CorpusLoadError: If the file is missing or an entry is malformed.
        """
        resolved = resolve_data_path(path, CORRECTIONS_PATH_ENV, DEFAULT_CORRECTIONS_FILE)
        corrections: Dict[str, str] = {}
        for index, entry in enumerate(read_json_list(resolved, "identifier corrections")):
            if not isinstance(entry, dict):
                raise CorpusLoadError(f"identifier corrections {resolved}: entry #{index} is not an object")
            wrong = entry.get("wrong")
            correct = entry.get("correct")
            if not isinstance(wrong, str) or not isinstance(correct, str) or not wrong or not correct:
                raise CorpusLoadError(
                    f"identifier corrections {resolved}: entry #{index} needs non-empty 'wrong' and 'correct'"
                )
            corrections[wrong] = correct
        logger.info("Loaded %d identifier corrections from %s", len(corrections), resolved)
        return cls(corrections)

    def rename(self, identifier: str) -> str:
        """Return the corrected identifier, or *identifier* unchanged."""
        corrected = self._corrections.get(identifier)
        if corrected is None:
            return identifier
        logger.debug("Replacing identifier %s with %s", identifier, corrected)
        return corrected

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._corrections

    def __len__(self) -> int:
        return len(self._corrections)
