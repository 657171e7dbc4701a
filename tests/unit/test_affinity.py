import unittest

from feelflick.services.affinity import (
    AffinityScorer,
    distance_match,
    genre_match,
    popularity_boost,
    quality_multiplier,
)
from feelflick.services.content_scoring import ContentScores
from feelflick.services.reference_data import DEFAULT_MOOD_PROFILES, MoodProfile

# Targets in the middle, no genre preferences: isolates the numeric components
FLAT = MoodProfile(name="Flat", pacing=5, intensity=5, emotional_depth=5)


class TestAffinityComponents(unittest.TestCase):
    def test_avoided_genre_floors_genre_match(self):
        cozy = DEFAULT_MOOD_PROFILES.get("Cozy")
        self.assertEqual(genre_match([27], cozy), 0.0)

    def test_genre_hits_accumulate(self):
        cozy = DEFAULT_MOOD_PROFILES.get("Cozy")
        self.assertEqual(genre_match([35, 10749], cozy), 30.0)
        self.assertEqual(genre_match([35, 10749, 27], cozy), 0.0)
        self.assertEqual(genre_match([18], cozy), 0.0)

    def test_genre_match_caps_at_100(self):
        profile = MoodProfile("Wide", 5, 5, 5, preferred_genres=frozenset(range(1, 9)))
        self.assertEqual(genre_match(range(1, 9), profile), 100.0)

    def test_distance_match(self):
        self.assertEqual(distance_match(9, 3), 40.0)
        self.assertEqual(distance_match(3, 3), 100.0)
        self.assertEqual(distance_match(1, 10), 10.0)

    def test_quality_multiplier(self):
        self.assertAlmostEqual(quality_multiplier(9.0), 1.3)
        self.assertEqual(quality_multiplier(6.0), 1.0)
        self.assertEqual(quality_multiplier(4.5), 1.0)
        self.assertEqual(quality_multiplier(None), 1.0)

    def test_popularity_boost(self):
        self.assertEqual(popularity_boost(250.0), 2.5)
        self.assertEqual(popularity_boost(5000.0), 10.0)
        self.assertEqual(popularity_boost(None), 0.0)
        self.assertEqual(popularity_boost(-20.0), 0.0)


class TestAffinityScorer(unittest.TestCase):
    def setUp(self):
        self.scorer = AffinityScorer()

    def test_cozy_horror(self):
        cozy = DEFAULT_MOOD_PROFILES.get("cozy")
        result = self.scorer.score(ContentScores(3, 2, 5), [27], cozy)
        self.assertEqual(result.genre_match_score, 0.0)
        self.assertEqual(result.pacing_match_score, 100.0)
        self.assertEqual(result.intensity_match_score, 100.0)
        # 0 * 0.40 + 100 * 0.25 + 100 * 0.20 + 100 * 0.15
        self.assertEqual(result.score, 60.0)

    def test_quality_multiplier_applied_to_base(self):
        # base = 0 + 25 + 50 * 0.2 + 15 = 50
        result = self.scorer.score(ContentScores(5, 10, 5), [], FLAT, vote_average=9.0)
        self.assertEqual(result.score, 65.0)
        self.assertEqual(result.intensity_match_score, 50.0)

    def test_popularity_boost_is_capped(self):
        capped = self.scorer.score(ContentScores(5, 10, 5), [], FLAT, popularity=5000.0)
        self.assertEqual(capped.score, 60.0)
        small = self.scorer.score(ContentScores(5, 10, 5), [], FLAT, popularity=250.0)
        self.assertEqual(small.score, 52.5)

    def test_score_is_clamped_to_100(self):
        cozy = DEFAULT_MOOD_PROFILES.get("Cozy")
        result = self.scorer.score(ContentScores(3, 2, 5), [35, 10749, 10751], cozy, vote_average=10.0, popularity=9999.0)
        self.assertEqual(result.score, 100.0)

    def test_score_stays_in_range(self):
        votes = (None, -5.0, 0.0, 6.0, 10.0, 42.0)
        popularities = (None, -100.0, 0.0, 1e6)
        for profile in DEFAULT_MOOD_PROFILES:
            for scores in (ContentScores(1, 1, 1), ContentScores(10, 10, 10), ContentScores(5, 5, 5)):
                for genres in ([], [27, 53, 80, 18], [35, 10751, 16]):
                    for vote in votes:
                        for popularity in popularities:
                            result = self.scorer.score(scores, genres, profile, vote_average=vote, popularity=popularity)
                            self.assertTrue(0.0 <= result.score <= 100.0, (profile.name, scores, genres, vote, popularity))

    def test_out_of_range_inputs(self):
        # a negative vote never shrinks the base, a negative popularity adds nothing
        base = self.scorer.score(ContentScores(5, 10, 5), [], FLAT)
        low = self.scorer.score(ContentScores(5, 10, 5), [], FLAT, vote_average=-5.0, popularity=-100.0)
        self.assertEqual(low.score, base.score)
        self.assertEqual(low.score, 50.0)
        high = self.scorer.score(ContentScores(5, 10, 5), [], FLAT, vote_average=42.0)
        self.assertEqual(high.score, 100.0)

    def test_breakdown_omits_emotional_depth(self):
        result = self.scorer.score(ContentScores(5, 5, 5), [], FLAT)
        self.assertEqual(
            set(result.as_dict()),
            {"score", "genre_match_score", "pacing_match_score", "intensity_match_score"},
        )


if __name__ == "__main__":
    unittest.main()
