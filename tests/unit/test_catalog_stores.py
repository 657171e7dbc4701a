import json
import unittest
from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from fakes import sqlite_session_factory
from feelflick import models
from feelflick.scripts.seed_reference_data import seed_reference_data
from feelflick.services.catalog import (
    AffinityStore,
    ContentScoreStore,
    ExperienceTypeStore,
    MoodStore,
    MovieCatalog,
    ViewingContextStore,
)
from feelflick.services.content_scoring import ContentScores
from feelflick.services.precompute import AffinityPrecomputeJob, ContentScoringJob
from feelflick.services.ranking import CandidateRetrievalError, RecommendationRanker
from feelflick.services.records import AffinityRow


def add_movies(session_factory, *movies):
    db = session_factory()
    try:
        for m in movies:
            m = dict(m)
            m["genres"] = json.dumps(m.get("genres", []))
            db.add(models.Movie(**m))
        db.commit()
    finally:
        db.close()


class TestCatalogStores(unittest.TestCase):
    def setUp(self):
        self.sf = sqlite_session_factory()
        add_movies(
            self.sf,
            {"id": 1, "title": "Paddington 2", "genres": [12, 35, 10751], "runtime": 103, "vote_average": 7.6, "popularity": 40.0, "release_date": "2017-11-09"},
            {"id": 2, "title": "Hereditary", "genres": [27, 9648, 53], "runtime": 127, "vote_average": 7.3, "popularity": 80.0},
            {"id": 3, "title": "Retired", "genres": [18], "active": False},
        )

    def test_movie_catalog(self):
        catalog = MovieCatalog(self.sf)
        self.assertEqual([m.id for m in catalog.list_active()], [1, 2])
        paddington = catalog.get_by_id(1)
        self.assertEqual(paddington.genre_ids, (12, 35, 10751))
        self.assertEqual(paddington.release_date, "2017-11-09")
        self.assertIsNone(catalog.get_by_id(404))

    def test_malformed_genres_read_as_empty(self):
        db = self.sf()
        try:
            db.add(models.Movie(id=9, title="Broken", genres="not json"))
            db.commit()
        finally:
            db.close()
        self.assertEqual(MovieCatalog(self.sf).get_by_id(9).genre_ids, ())

    def test_content_score_upsert_overwrites(self):
        store = ContentScoreStore(self.sf)
        store.upsert(1, ContentScores(6, 4, 5))
        store.upsert(1, ContentScores(7, 4, 5))
        self.assertEqual(store.get(1), ContentScores(7, 4, 5))
        self.assertEqual(store.load_all(), {1: ContentScores(7, 4, 5)})
        self.assertIsNone(store.get(2))

    def test_affinity_upsert_is_keyed_by_movie_and_mood(self):
        store = AffinityStore(self.sf)
        stamp = datetime(2024, 1, 2, tzinfo=timezone.utc)
        store.upsert(AffinityRow(1, 5, 61.0, 45.0, 90.0, 80.0, stamp))
        store.upsert(AffinityRow(1, 5, 64.5, 45.0, 90.0, 80.0, stamp))
        store.upsert(AffinityRow(2, 5, 12.0, 0.0, 30.0, 20.0, stamp))
        self.assertEqual(store.count(), 2)
        self.assertEqual(store.count(mood_id=5), 2)
        row = store.get(1, 5)
        self.assertEqual(row.score, 64.5)
        self.assertEqual(row.last_updated_at, stamp)

    def test_fetch_candidates_ordering_floor_and_window(self):
        store = AffinityStore(self.sf)
        add_movies(self.sf, {"id": 4, "title": "Tie Breaker", "genres": [35]})
        store.upsert(AffinityRow(2, 1, 55.0, 0, 0, 0))
        store.upsert(AffinityRow(4, 1, 55.0, 0, 0, 0))
        store.upsert(AffinityRow(1, 1, 70.0, 0, 0, 0))
        store.upsert(AffinityRow(3, 1, 29.9, 0, 0, 0))
        store.upsert(AffinityRow(1, 2, 99.0, 0, 0, 0))

        candidates = store.fetch_candidates(1, 30.0, 100)
        self.assertEqual([(c.movie.id, c.score) for c in candidates], [(1, 70.0), (2, 55.0), (4, 55.0)])
        self.assertEqual(len(store.fetch_candidates(1, 30.0, 2)), 2)
        self.assertEqual(store.fetch_candidates(7, 30.0, 100), [])

    def test_fetch_candidates_storage_error_is_retryable(self):
        # no tables in this database
        broken = sessionmaker(bind=create_engine("sqlite://"))
        with self.assertRaises(CandidateRetrievalError):
            AffinityStore(broken).fetch_candidates(1, 30.0, 100)

    def test_mood_lookup_storage_error_is_retryable(self):
        broken = sessionmaker(bind=create_engine("sqlite://"))
        with self.assertRaises(CandidateRetrievalError):
            MoodStore(broken).get_by_id(1)
        ranker = RecommendationRanker(AffinityStore(broken), MoodStore(broken))
        with self.assertRaises(CandidateRetrievalError):
            ranker.recommend(1, None, None, limit=5, timeout=1.0)

    def test_reference_stores_follow_display_order(self):
        counts = seed_reference_data(self.sf)
        self.assertEqual(counts, {"genres": 19, "moods": 12, "viewing_contexts": 5, "experience_types": 5})
        # re-seeding updates in place
        self.assertEqual(seed_reference_data(self.sf), counts)

        moods = MoodStore(self.sf).list_active()
        self.assertEqual(moods[0].name, "Cozy")
        self.assertEqual(moods[-1].name, "Overwhelmed")
        contexts = ViewingContextStore(self.sf).list_active()
        self.assertEqual([c.name for c in contexts], ["Alone", "Partner", "Friends", "Family", "Kids"])
        self.assertTrue(contexts[4].prefer_shorter_runtime)
        self.assertEqual(contexts[4].content_rating_filter, "G,PG")
        escape = ExperienceTypeStore(self.sf).list_active()[0]
        self.assertEqual(escape.name, "Escape")
        self.assertEqual(escape.preferred_genres, frozenset({14, 878, 12, 16}))
        self.assertEqual(escape.avoided_genres, frozenset({99, 36}))

    def test_inactive_reference_rows_are_hidden(self):
        seed_reference_data(self.sf)
        db = self.sf()
        try:
            db.query(models.Mood).filter(models.Mood.name == "Dark").update({"active": False})
            db.commit()
        finally:
            db.close()
        names = [m.name for m in MoodStore(self.sf).list_active()]
        self.assertNotIn("Dark", names)
        self.assertEqual(len(names), 11)


class TestScoringPipeline(unittest.TestCase):
    """Content scores -> affinities -> ranked recommendations against SQLite."""

    def test_end_to_end(self):
        sf = sqlite_session_factory()
        seed_reference_data(sf)
        add_movies(
            sf,
            {"id": 1, "title": "Paddington 2", "genres": [12, 35, 10751], "runtime": 103, "vote_average": 7.6, "popularity": 40.0},
            {"id": 2, "title": "Hereditary", "genres": [27, 9648, 53], "runtime": 127, "vote_average": 7.3, "popularity": 80.0},
            {"id": 3, "title": "The Holiday", "genres": [35, 10749], "runtime": 138, "vote_average": 7.1, "popularity": 30.0},
        )

        content_report = ContentScoringJob(MovieCatalog(sf), ContentScoreStore(sf)).run()
        self.assertEqual(content_report.succeeded, 3)

        job = AffinityPrecomputeJob(
            MoodStore(sf), MovieCatalog(sf), ContentScoreStore(sf), AffinityStore(sf), max_workers=1,
        )
        report = job.run()
        self.assertEqual(report.attempted, 36)
        self.assertEqual(report.succeeded, 36)
        self.assertEqual(AffinityStore(sf).count(), 36)

        # re-running overwrites in place
        job.run()
        self.assertEqual(AffinityStore(sf).count(), 36)

        moods = {m.name: m.id for m in MoodStore(sf).list_active()}
        contexts = {c.name: c.id for c in ViewingContextStore(sf).list_active()}
        experiences = {e.name: e.id for e in ExperienceTypeStore(sf).list_active()}
        ranker = RecommendationRanker(AffinityStore(sf), MoodStore(sf), ExperienceTypeStore(sf), ViewingContextStore(sf))

        cozy = ranker.recommend(moods["Cozy"], contexts["Alone"], experiences["Laugh"], limit=10)
        ids = [r.movie.id for r in cozy]
        self.assertNotIn(2, ids)
        self.assertIn(1, ids)
        self.assertEqual(ids, [r.movie.id for r in sorted(cozy, key=lambda r: -r.final_score)])
        self.assertTrue(all(r.final_score >= 30 for r in cozy))


if __name__ == "__main__":
    unittest.main()
