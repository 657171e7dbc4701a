import unittest

from feelflick.services.content_scoring import ContentScorer, ContentScores
from feelflick.services.reference_data import GenreAttributeTable


class TestContentScorer(unittest.TestCase):
    def setUp(self):
        self.scorer = ContentScorer()

    def test_empty_genres_are_neutral(self):
        self.assertEqual(self.scorer.score([]), ContentScores(5, 5, 5))
        self.assertEqual(self.scorer.score(None, runtime=200, vote_average=9.0), ContentScores(5, 5, 5))

    def test_single_genre_uses_its_weights(self):
        self.assertEqual(self.scorer.score([28]), ContentScores(9, 8, 4))

    def test_mean_rounds_half_away_from_zero(self):
        # Action + Drama: pacing 6.5 -> 7, intensity 7, depth 6.5 -> 7
        self.assertEqual(self.scorer.score([28, 18]), ContentScores(7, 7, 7))

    def test_duplicate_genres_count_once(self):
        self.assertEqual(self.scorer.score([28, 18, 18]), self.scorer.score([28, 18]))

    def test_unknown_genre_weighs_neutral(self):
        # Action + unknown: pacing (9 + 5) / 2 = 7, intensity 6.5 -> 7, depth 4.5 -> 5
        self.assertEqual(self.scorer.score([28, 424242]), ContentScores(7, 7, 5))

    def test_runtime_adjusts_pacing(self):
        self.assertEqual(self.scorer.score([18], runtime=85).pacing, 5)
        self.assertEqual(self.scorer.score([18], runtime=120).pacing, 4)
        self.assertEqual(self.scorer.score([18], runtime=160).pacing, 3)
        # boundaries are exclusive
        self.assertEqual(self.scorer.score([18], runtime=90).pacing, 4)
        self.assertEqual(self.scorer.score([18], runtime=150).pacing, 4)

    def test_runtime_is_monotonic(self):
        short = self.scorer.score([35], runtime=80).pacing
        normal = self.scorer.score([35], runtime=110).pacing
        long = self.scorer.score([35], runtime=180).pacing
        self.assertGreaterEqual(short, normal)
        self.assertGreaterEqual(normal, long)

    def test_vote_average_adjusts_depth(self):
        self.assertEqual(self.scorer.score([28], vote_average=8.0).emotional_depth, 5)
        self.assertEqual(self.scorer.score([28], vote_average=7.0).emotional_depth, 4)
        self.assertEqual(self.scorer.score([28], vote_average=5.9).emotional_depth, 3)

    def test_scores_are_clamped(self):
        table = GenreAttributeTable.from_dimension_maps({
            "pacing": {1: 10, 2: 1},
            "intensity": {1: 10, 2: 1},
            "emotional_depth": {1: 10, 2: 1},
        })
        scorer = ContentScorer(table)
        high = scorer.score([1], runtime=60, vote_average=9.5)
        self.assertEqual(high, ContentScores(10, 10, 10))
        low = scorer.score([2], runtime=200, vote_average=2.0)
        self.assertEqual(low, ContentScores(1, 1, 1))

    def test_all_known_genres_stay_in_range(self):
        for genre_id in (28, 12, 16, 35, 80, 99, 18, 10751, 14, 36, 27, 10402, 9648, 10749, 878, 10770, 53, 10752, 37):
            for runtime in (None, 60, 120, 200):
                for vote in (None, 3.0, 7.0, 9.0):
                    scores = self.scorer.score([genre_id], runtime, vote)
                    for value in scores.as_dict().values():
                        self.assertTrue(1 <= value <= 10)

    def test_tmdb_genre_dicts_are_accepted(self):
        self.assertEqual(self.scorer.score([{"id": 28, "name": "Action"}]), ContentScores(9, 8, 4))


if __name__ == "__main__":
    unittest.main()
