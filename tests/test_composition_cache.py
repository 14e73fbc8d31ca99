"""
Tests for composition keys and the composition cache
"""

import threading
import unittest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from mechinspect.common import ChemicalRole, ReactionProcessingError
from mechinspect.models import CompositionKey, ObservedReaction, ScoreRanking
from mechinspect.validation import (
    CoefficientPolicy,
    CompositionCache,
    build_composition_key,
    coefficient_for,
)


class TestCoefficientFor(unittest.TestCase):
    """Test coefficient lookup policies"""

    def setUp(self):
        self.reaction = ObservedReaction(reaction_id=1, substrates={"A": 2}, products={"B": 3})

    def test_role_accessor(self):
        self.assertEqual(coefficient_for(self.reaction, "A", ChemicalRole.SUBSTRATE), 2)
        self.assertEqual(coefficient_for(self.reaction, "B", ChemicalRole.PRODUCT), 3)

    def test_substrate_accessor_for_products(self):
        policy = CoefficientPolicy.SUBSTRATE_ACCESSOR
        self.assertEqual(coefficient_for(self.reaction, "A", ChemicalRole.SUBSTRATE, policy), 2)
        self.assertIsNone(coefficient_for(self.reaction, "B", ChemicalRole.PRODUCT, policy))


class TestBuildCompositionKey(unittest.TestCase):
    """Test key uniqueness under both policies"""

    def setUp(self):
        self.single = ObservedReaction(reaction_id=1, substrates={"A": 1}, products={"B": 1})
        self.double = ObservedReaction(reaction_id=2, substrates={"A": 1}, products={"B": 2})

    def test_role_accessor_keeps_product_stoichiometry(self):
        self.assertNotEqual(build_composition_key(self.single), build_composition_key(self.double))
        self.assertEqual(build_composition_key(self.double).product_map(), {"B": 2})

    def test_substrate_accessor_drops_product_stoichiometry(self):
        policy = CoefficientPolicy.SUBSTRATE_ACCESSOR
        key_single = build_composition_key(self.single, policy)
        key_double = build_composition_key(self.double, policy)
        self.assertEqual(key_single, key_double)
        self.assertEqual(key_double.product_map(), {"B": None})

    def test_same_composition_different_reaction(self):
        other = ObservedReaction(reaction_id=99, substrates={"A": 1}, products={"B": 1},
                                 substrate_cofactors=["NAD"])
        self.assertEqual(build_composition_key(self.single), build_composition_key(other))

    def test_substrate_coefficients_distinguish(self):
        other = ObservedReaction(reaction_id=3, substrates={"A": 2}, products={"B": 1})
        for policy in CoefficientPolicy:
            self.assertNotEqual(build_composition_key(self.single, policy),
                                build_composition_key(other, policy))


class TestCompositionCache(unittest.TestCase):
    """Test cache get/put and single computation"""

    def setUp(self):
        self.cache = CompositionCache()
        self.key = CompositionKey.from_mappings({"A": 1}, {"B": 1})

    def test_get_put(self):
        self.assertIsNone(self.cache.get(self.key))
        ranking = ScoreRanking({4: ["R1"]})
        self.cache.put(self.key, ranking)
        self.assertIs(self.cache.get(self.key), ranking)
        self.assertIn(self.key, self.cache)
        self.assertEqual(len(self.cache), 1)
        self.assertEqual((self.cache.hits, self.cache.misses), (1, 1))

    def test_empty_ranking_is_cached(self):
        self.cache.put(self.key, ScoreRanking())
        self.assertIsNotNone(self.cache.get(self.key))

    def test_clear(self):
        self.cache.put(self.key, ScoreRanking())
        self.cache.clear()
        self.assertEqual(len(self.cache), 0)
        self.assertEqual(self.cache.hits, 0)

    def test_get_or_compute_once(self):
        calls = []

        def compute():
            calls.append(1)
            return ScoreRanking({2: ["R2"]})

        first = self.cache.get_or_compute(self.key, compute)
        second = self.cache.get_or_compute(self.key, compute)
        self.assertIs(first, second)
        self.assertEqual(len(calls), 1)

    def test_get_or_compute_error_leaves_no_entry(self):
        def compute():
            raise ReactionProcessingError("bad substrate")

        with self.assertRaises(ReactionProcessingError):
            self.cache.get_or_compute(self.key, compute)
        self.assertNotIn(self.key, self.cache)
        self.assertEqual(self.cache.pending_keys(), 0)

    def test_lock_table_does_not_grow(self):
        for n in range(1, 6):
            key = CompositionKey.from_mappings({"A": n}, {"B": 1})
            self.cache.get_or_compute(key, ScoreRanking)
        self.assertEqual(len(self.cache), 5)
        self.assertEqual(self.cache.pending_keys(), 0)

    def test_counters_consistent_across_threads(self):
        keys = [CompositionKey.from_mappings({"A": n}, {"B": 1}) for n in range(1, 5)]

        def worker():
            for _ in range(50):
                for key in keys:
                    self.cache.get_or_compute(key, ScoreRanking)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(len(self.cache), 4)
        self.assertEqual(self.cache.hits + self.cache.misses, 4 * 50 * 4)
        self.assertGreaterEqual(self.cache.misses, 4)

    def test_get_or_compute_concurrent_callers(self):
        calls = []
        gate = threading.Event()
        results = []

        def compute():
            calls.append(1)
            gate.wait(1)
            return ScoreRanking({4: ["R1"]})

        def worker():
            results.append(self.cache.get_or_compute(self.key, compute))

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        gate.set()
        for t in threads:
            t.join()
        self.assertEqual(len(calls), 1)
        self.assertEqual(len(results), 4)
        self.assertTrue(all(r is results[0] for r in results))


if __name__ == "__main__":
    unittest.main()
