"""Unit tests and toy example for the batch cross-similarity engine."""

from __future__ import annotations

import unittest

import numpy as np

from chroma_crosssim import CrossSimilarityMatrix, EngineConfig, cross_similarity_matrix
from chroma_crosssim.errors import (
    EmptyInputError,
    EmptyResultError,
    InvalidInputError,
    InvalidParameterError,
)
from chroma_crosssim.features import DEFAULT_CONFIG

# Identity-pattern chroma: first and last frames are equal
IDENTITY_CHROMA = np.array(
    [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0], [1.0, 0.0, 0.0]]
)


def _random_chroma(n_frames: int, seed: int, n_bins: int = 12) -> np.ndarray:
    return np.random.default_rng(seed).random((n_frames, n_bins))


class TestEngineConfig(unittest.TestCase):
    """Tests for EngineConfig validation."""

    def test_defaults(self) -> None:
        cfg = EngineConfig()
        self.assertEqual(cfg.embed_dimension, 9)
        self.assertEqual(cfg.min_frames_size, 10)
        self.assertAlmostEqual(cfg.percentile, 9.5)

    def test_out_of_range(self) -> None:
        with self.assertRaises(InvalidParameterError):
            EngineConfig(tau=0)
        with self.assertRaises(InvalidParameterError):
            EngineConfig(embed_dimension=0)
        with self.assertRaises(InvalidParameterError):
            EngineConfig(noti=-1)
        with self.assertRaises(InvalidParameterError):
            EngineConfig(kappa=1.5)
        with self.assertRaises(InvalidParameterError):
            EngineConfig(kappa="0.5")
        with self.assertRaises(InvalidParameterError):
            EngineConfig(kappa=None)
        with self.assertRaises(InvalidParameterError):
            EngineConfig(kappa=True)
        with self.assertRaises(InvalidParameterError):
            EngineConfig(tau=2.0)

    def test_numpy_scalars_accepted(self) -> None:
        """Parameters read out of numpy arrays are stored as plain Python numbers."""
        cfg = EngineConfig(
            tau=np.int64(2),
            embed_dimension=np.int32(3),
            noti=np.int64(11),
            kappa=np.float32(0.5),
        )
        self.assertEqual(cfg.tau, 2)
        self.assertIs(type(cfg.tau), int)
        self.assertIs(type(cfg.embed_dimension), int)
        self.assertIs(type(cfg.noti), int)
        self.assertIs(type(cfg.kappa), float)
        self.assertEqual(cfg.min_frames_size, 7)

    def test_kappa_int_stored_as_float(self) -> None:
        cfg = EngineConfig(kappa=1)
        self.assertIs(type(cfg.kappa), float)
        self.assertEqual(cfg.percentile, 100.0)

    def test_booleans_must_be_bool(self) -> None:
        with self.assertRaises(InvalidParameterError):
            EngineConfig(oti="yes")
        with self.assertRaises(InvalidParameterError):
            EngineConfig(optimise_threshold=1)

    def test_from_options_camel_case(self) -> None:
        cfg = EngineConfig.from_options(embedDimension=3, otiBinary=True, tau=2)
        self.assertEqual(cfg.embed_dimension, 3)
        self.assertTrue(cfg.oti_binary)
        self.assertEqual(cfg.tau, 2)

    def test_from_options_unknown(self) -> None:
        with self.assertRaises(InvalidParameterError):
            EngineConfig.from_options(binarizePercentile=0.1)


class TestCrossSimilarityMatrix(unittest.TestCase):
    """Tests for the batch engine."""

    def setUp(self) -> None:
        self.query = _random_chroma(20, seed=1)
        self.reference = _random_chroma(15, seed=2)

    def test_identity_pattern_self_similarity(self) -> None:
        """Every frame is recognised as similar to itself, whatever kappa."""
        for kappa in (0.0, 0.5, 1.0):
            engine = CrossSimilarityMatrix(
                EngineConfig(
                    embed_dimension=1,
                    oti=False,
                    oti_binary=False,
                    optimise_threshold=True,
                    kappa=kappa,
                )
            )
            csm = engine.compute(IDENTITY_CHROMA, IDENTITY_CHROMA)
            self.assertEqual(csm.shape, (4, 4))
            np.testing.assert_array_equal(np.diag(csm), np.ones(4))

    def test_identity_pattern_full_matrix(self) -> None:
        engine = CrossSimilarityMatrix(
            EngineConfig(embed_dimension=1, oti=False, optimise_threshold=True, kappa=0.0)
        )
        expected = np.array(
            [[1.0, 0.0, 0.0, 1.0], [0.0, 1.0, 0.0, 0.0], [0.0, 0.0, 1.0, 0.0], [1.0, 0.0, 0.0, 1.0]]
        )
        np.testing.assert_array_equal(engine(IDENTITY_CHROMA, IDENTITY_CHROMA), expected)

    def test_shape_embedded(self) -> None:
        engine = CrossSimilarityMatrix(EngineConfig(embed_dimension=3, tau=2))
        self.assertEqual(engine.compute(self.query, self.reference).shape, (14, 9))

    def test_shape_no_embedding(self) -> None:
        engine = CrossSimilarityMatrix(EngineConfig(embed_dimension=1, tau=3))
        self.assertEqual(engine.compute(self.query, self.reference).shape, (20, 15))

    def test_uses_shared_default_config(self) -> None:
        self.assertIs(CrossSimilarityMatrix().config, DEFAULT_CONFIG)

    def test_default_config(self) -> None:
        csm = CrossSimilarityMatrix().compute(self.query, self.reference)
        self.assertEqual(csm.shape, (11, 6))
        self.assertTrue(set(np.unique(csm)) <= {0.0, 1.0})

    def test_thresholded_both_axes_binary(self) -> None:
        engine = CrossSimilarityMatrix(EngineConfig(embed_dimension=2, kappa=0.2, oti=False))
        csm = engine.compute(self.query, self.reference)
        self.assertTrue(set(np.unique(csm)) <= {0.0, 1.0})
        self.assertGreater(csm.sum(), 0)

    def test_empty_query(self) -> None:
        with self.assertRaises(EmptyInputError):
            CrossSimilarityMatrix().compute(np.zeros((0, 12)), self.reference)

    def test_empty_reference(self) -> None:
        with self.assertRaises(EmptyInputError):
            CrossSimilarityMatrix().compute(self.query, np.zeros((0, 12)))

    def test_bin_mismatch(self) -> None:
        with self.assertRaises(InvalidInputError):
            CrossSimilarityMatrix().compute(self.query, _random_chroma(15, seed=2, n_bins=24))

    def test_too_short_for_embedding(self) -> None:
        engine = CrossSimilarityMatrix(EngineConfig(embed_dimension=3, tau=1))
        with self.assertRaises(EmptyResultError):
            engine.compute(self.query[:3], self.reference)
        with self.assertRaises(InvalidInputError):
            engine.compute(self.query[:2], self.reference)

    def test_inputs_not_modified(self) -> None:
        reference = np.roll(self.query, 4, axis=1)
        before = reference.copy()
        CrossSimilarityMatrix(EngineConfig(embed_dimension=2, oti=True)).compute(self.query, reference)
        np.testing.assert_array_equal(reference, before)

    def test_oti_transposes_reference(self) -> None:
        """A key-shifted copy of the query is recognised once transposed."""
        reference = np.roll(self.query, 4, axis=1)
        cfg = EngineConfig(embed_dimension=1, oti=True, optimise_threshold=True, kappa=0.0)
        csm = CrossSimilarityMatrix(cfg).compute(self.query, reference)
        np.testing.assert_array_equal(np.diag(csm), np.ones(20))

    def test_invalid_optimise_threshold(self) -> None:
        """A non-boolean optimise_threshold that slipped past validation raises."""
        cfg = EngineConfig(embed_dimension=1)
        object.__setattr__(cfg, "optimise_threshold", None)
        with self.assertRaises(InvalidParameterError):
            CrossSimilarityMatrix(cfg).compute(self.query, self.reference)


class TestOtiBinaryMode(unittest.TestCase):
    """Tests for the OTI binary similarity mode."""

    def setUp(self) -> None:
        self.query = _random_chroma(6, seed=3)
        self.reference = _random_chroma(5, seed=4)

    def test_blocked_uses_embedding(self) -> None:
        cfg = EngineConfig(oti_binary=True, to_blocked=True, embed_dimension=2, tau=1)
        self.assertEqual(CrossSimilarityMatrix(cfg).compute(self.query, self.reference).shape, (4, 3))

    def test_unblocked_uses_raw_frames(self) -> None:
        cfg = EngineConfig(oti_binary=True, to_blocked=False, embed_dimension=2, tau=1)
        self.assertEqual(CrossSimilarityMatrix(cfg).compute(self.query, self.reference).shape, (6, 5))

    def test_self_similarity(self) -> None:
        cfg = EngineConfig(oti_binary=True, to_blocked=False)
        csm = CrossSimilarityMatrix(cfg).compute(self.query, self.query)
        np.testing.assert_array_equal(np.diag(csm), np.ones(6))

    def test_helper_with_options(self) -> None:
        csm = cross_similarity_matrix(
            self.query, self.reference, otiBinary=True, toBlocked=False, noti=0
        )
        np.testing.assert_array_equal(csm, np.ones((6, 5)))


def run_toy_example() -> None:
    """Toy: cross-similarity of a chromagram against a transposed copy of itself."""
    print("=== Toy example: batch cross-similarity ===\n")
    query = _random_chroma(30, seed=0)
    reference = np.roll(query, 2, axis=1)
    csm = CrossSimilarityMatrix(EngineConfig(embed_dimension=3)).compute(query, reference)
    print(f"csm shape: {csm.shape}, recurrences: {int(csm.sum())}")
    print(f"diagonal recurrences: {int(np.trace(csm))} / {min(csm.shape)}")
    print("Done.")


if __name__ == "__main__":
    run_toy_example()
    print("\n--- Running unit tests ---")
    unittest.main(argv=[""], exit=False, verbosity=2)
