"""
Reference corpora — transformation rules and identifier corrections.
"""

from .rule_corpus import RuleCorpus
from .corrections import IdentifierCorrections
