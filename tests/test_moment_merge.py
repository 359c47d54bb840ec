import math
import unittest

import numpy as np

from online_stats.moments import (
    MomentState,
    OnlineCovariance,
    OnlineStandardScaler,
    PairedMomentState,
    RunningStats,
    combine_moments,
    combine_paired_moments,
    merge_all,
)


def _close(actual, expected, rel_tol=1e-10):
    return math.isclose(actual, expected, rel_tol=rel_tol, abs_tol=1e-12)


class TestCombineFunctions(unittest.TestCase):
    def test_combine_moments_is_pure(self):
        first = MomentState(count=2, mean=1.5, m2=0.5)
        second = MomentState(count=3, mean=4.0, m2=2.0)
        combined = combine_moments(first, second)

        self.assertEqual(first, MomentState(count=2, mean=1.5, m2=0.5))
        self.assertEqual(second, MomentState(count=3, mean=4.0, m2=2.0))
        self.assertEqual(combined.count, 5)
        self.assertAlmostEqual(combined.mean, 3.0)
        self.assertAlmostEqual(combined.m2, 10.0)

    def test_combine_with_empty_returns_copy(self):
        filled = MomentState(count=1, mean=2.0, m2=0.0)
        result = combine_moments(MomentState(), filled)
        self.assertEqual(result, filled)
        self.assertIsNot(result, filled)

        paired = PairedMomentState(count=2, mean_x=1.0, mean_y=2.0, m2_x=0.5, m2_y=0.5, c=0.5)
        paired_result = combine_paired_moments(paired, PairedMomentState())
        self.assertEqual(paired_result, paired)
        self.assertIsNot(paired_result, paired)

    def test_combine_paired_moments_cross_term(self):
        left = OnlineCovariance()
        right = OnlineCovariance()
        whole = OnlineCovariance()
        xs = [1.0, 2.0, 3.0, 4.0]
        ys = [1.0, 4.0, 9.0, 16.0]
        left.observe_batch(xs[:2], ys[:2])
        right.observe_batch(xs[2:], ys[2:])
        whole.observe_batch(xs, ys)

        combined = combine_paired_moments(left.snapshot(), right.snapshot())
        self.assertEqual(combined.count, 4)
        self.assertAlmostEqual(combined.c, whole.snapshot().c, places=12)
        self.assertAlmostEqual(combined.m2_y, whole.snapshot().m2_y, places=12)


class TestMergeOrdering(unittest.TestCase):
    def setUp(self):
        rng = np.random.default_rng(31337)
        self.xs = rng.normal(3.0, 2.0, size=90)
        self.ys = 0.5 * self.xs + rng.normal(0.0, 1.0, size=90)
        self.cuts = [(0, 17), (17, 61), (61, 90)]

    def _univariate_parts(self):
        parts = []
        for start, stop in self.cuts:
            stats = RunningStats()
            stats.push_batch(self.xs[start:stop])
            parts.append(stats)
        return parts

    def _paired_parts(self):
        parts = []
        for start, stop in self.cuts:
            cov = OnlineCovariance()
            cov.observe_batch(self.xs[start:stop], self.ys[start:stop])
            parts.append(cov)
        return parts

    def test_univariate_merge_is_associative_and_commutative(self):
        a, b, c = self._univariate_parts()
        left_first = a.merged(b).merged(c)
        right_first = a.merged(b.merged(c))
        swapped = a.merged(c).merged(b)

        for result in (right_first, swapped):
            self.assertEqual(result.count(), left_first.count())
            self.assertTrue(_close(result.mean(), left_first.mean(), rel_tol=1e-12))
            self.assertTrue(_close(result.variance_sample(), left_first.variance_sample()))

    def test_paired_merge_is_associative_and_commutative(self):
        a, b, c = self._paired_parts()
        left_first = a.merged(b).merged(c)
        right_first = a.merged(b.merged(c))
        swapped = c.merged(a).merged(b)

        for result in (right_first, swapped):
            self.assertEqual(result.count(), left_first.count())
            self.assertTrue(_close(result.mean_x(), left_first.mean_x(), rel_tol=1e-12))
            self.assertTrue(_close(result.mean_y(), left_first.mean_y(), rel_tol=1e-12))
            self.assertTrue(
                _close(result.covariance_sample(), left_first.covariance_sample())
            )
            self.assertTrue(_close(result.correlation(), left_first.correlation()))


class TestMergeAll(unittest.TestCase):
    def test_merge_all_matches_single_pass(self):
        values = np.random.default_rng(8).normal(-1.0, 5.0, size=257)
        whole = RunningStats()
        whole.push_batch(values)

        for shards in (1, 2, 3, 7, 16):
            parts = []
            for chunk in np.array_split(values, shards):
                stats = RunningStats()
                stats.push_batch(chunk)
                parts.append(stats)
            before = [part.to_state() for part in parts]

            merged = merge_all(parts)

            self.assertEqual([part.to_state() for part in parts], before)
            self.assertEqual(merged.count(), 257)
            self.assertTrue(_close(merged.mean(), whole.mean(), rel_tol=1e-12))
            self.assertTrue(_close(merged.variance_population(), whole.variance_population()))

    def test_merge_all_covariance_and_scaler(self):
        rng = np.random.default_rng(77)
        xs = rng.uniform(-5.0, 5.0, size=120)
        ys = xs * xs + 2.0 * xs + rng.normal(size=120)

        whole = OnlineCovariance()
        whole.observe_batch(xs, ys)
        partials = []
        scalers = []
        for x_chunk, y_chunk in zip(np.array_split(xs, 5), np.array_split(ys, 5)):
            cov = OnlineCovariance()
            cov.observe_batch(x_chunk, y_chunk)
            partials.append(cov)
            scaler = OnlineStandardScaler()
            scaler.observe_batch(x_chunk)
            scalers.append(scaler)

        merged = merge_all(partials)
        self.assertEqual(merged.count(), 120)
        self.assertTrue(_close(merged.covariance_population(), whole.covariance_population()))
        self.assertTrue(_close(merged.correlation(), whole.correlation()))

        merged_scaler = merge_all(scalers)
        self.assertTrue(merged_scaler.ready())
        self.assertTrue(_close(merged_scaler.mean(), whole.mean_x(), rel_tol=1e-12))

    def test_merge_all_rejects_empty_and_mixed_input(self):
        with self.assertRaises(ValueError):
            merge_all([])
        with self.assertRaises(TypeError):
            merge_all([RunningStats(), OnlineCovariance()])


if __name__ == "__main__":
    unittest.main()
