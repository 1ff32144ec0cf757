import math
import unittest

import numpy as np

from ml_engine import MLEngine, VideoTfidfVectorizer


class TestVideoTfidfVectorizer(unittest.TestCase):
    def test_vocabulary_indices_are_contiguous(self):
        vectorizer = VideoTfidfVectorizer().fit(
            ["cooking pasta recipe", "rocket launch engineering"])
        self.assertEqual(len(vectorizer.vocabulary_), 6)
        self.assertEqual(sorted(vectorizer.vocabulary_.values()), list(range(6)))
        self.assertEqual(len(vectorizer.idf_), 6)

    def test_smoothed_idf(self):
        vectorizer = VideoTfidfVectorizer().fit(["pasta sauce", "pasta bake", "rocket"])
        vocab = vectorizer.vocabulary_
        self.assertAlmostEqual(vectorizer.idf_[vocab["pasta"]], math.log(3 / 3) + 1)
        self.assertAlmostEqual(vectorizer.idf_[vocab["sauce"]], math.log(3 / 2) + 1)

    def test_document_frequency_counts_once_per_document(self):
        vectorizer = VideoTfidfVectorizer().fit(["pasta pasta pasta", "rocket"])
        self.assertAlmostEqual(vectorizer.idf_[vectorizer.vocabulary_["pasta"]], math.log(2 / 2) + 1)

    def test_universal_term_stays_positive(self):
        vectorizer = VideoTfidfVectorizer().fit(["pasta sauce", "pasta bake"])
        self.assertGreater(vectorizer.idf_[vectorizer.vocabulary_["pasta"]], 0)

    def test_empty_corpus_gives_empty_vocabulary(self):
        vectorizer = VideoTfidfVectorizer().fit([])
        self.assertEqual(vectorizer.vocabulary_, {})
        self.assertEqual(vectorizer.transform(["anything at all"]).shape, (1, 0))

    def test_stop_word_only_corpus_gives_empty_vocabulary(self):
        vectorizer = VideoTfidfVectorizer().fit(["the and", "is it", ""])
        self.assertEqual(vectorizer.vocabulary_, {})
        self.assertEqual(vectorizer.n_documents_, 3)

    def test_rows_are_unit_length_or_zero(self):
        docs = ["cooking pasta recipe", "pasta pasta sauce", "rocket launch", "the and of"]
        vectors = VideoTfidfVectorizer().fit_transform(docs)
        norms = np.linalg.norm(vectors, axis=1)
        for norm in norms[:3]:
            self.assertAlmostEqual(norm, 1.0, delta=1e-9)
        self.assertEqual(norms[3], 0.0)

    def test_term_count_scales_weight(self):
        vectorizer = VideoTfidfVectorizer().fit(["pasta pasta sauce", "rocket"])
        vector = vectorizer.transform(["pasta pasta sauce"])[0]
        vocab = vectorizer.vocabulary_
        self.assertAlmostEqual(vector[vocab["pasta"]] / vector[vocab["sauce"]], 2.0)

    def test_unseen_terms_are_ignored(self):
        vectorizer = VideoTfidfVectorizer().fit(["cooking pasta recipe"])
        vectors = vectorizer.transform(["unknown words", "pasta unknown"])
        self.assertEqual(vectors.shape, (2, 3))
        self.assertFalse(vectors[0].any())
        self.assertAlmostEqual(vectors[1][vectorizer.vocabulary_["pasta"]], 1.0)

    def test_vocabulary_never_shrinks_when_appending_documents(self):
        corpus = ["cooking pasta recipe", "rocket launch engineering"]
        before = len(VideoTfidfVectorizer().fit(corpus).vocabulary_)
        after = len(VideoTfidfVectorizer().fit(corpus + ["guitar lesson chords"]).vocabulary_)
        self.assertGreaterEqual(after, before)
        self.assertEqual(after, before + 3)


class TestMLEngine(unittest.TestCase):
    def setUp(self):
        self.engine = MLEngine()

    def test_create_metadata_soup_basic(self):
        videos = [
            {"id": 1, "title": "Pasta", "description": "Fresh dough", "category": "Food"},
            {"id": 2, "title": "Rocket", "description": "Launch day", "category": "Tech"},
        ]
        soup = self.engine._create_metadata_soup(videos)
        self.assertEqual(soup, ["Pasta Fresh dough Food", "Rocket Launch day Tech"])

    def test_create_metadata_soup_none_values(self):
        soup = self.engine._create_metadata_soup(
            [{"id": 1, "title": "Pasta", "description": None, "category": None}])
        self.assertEqual(soup[0].strip(), "Pasta")

    def test_create_metadata_soup_missing_keys(self):
        soup = self.engine._create_metadata_soup([{"id": 1}])
        self.assertEqual(soup, ["  "])

    def test_cold_start_ranks_by_views(self):
        videos = [
            {"id": "A", "title": "alpha", "views": 5},
            {"id": "B", "title": "bravo", "views": 50},
            {"id": "C", "title": "charlie", "views": 10},
        ]
        self.assertEqual(self.engine.recommend(videos, [], top_n=3), ["B", "C", "A"])

    def test_cold_start_when_history_left_the_catalog(self):
        videos = [
            {"id": "A", "title": "alpha", "views": 5},
            {"id": "B", "title": "bravo", "views": 50},
        ]
        self.assertEqual(self.engine.recommend(videos, ["gone"], top_n=5), ["B", "A"])

    def test_warm_start_ranks_similar_first(self):
        videos = [
            {"id": "A", "title": "cooking pasta recipe"},
            {"id": "B", "title": "cooking pasta recipe"},
            {"id": "C", "title": "rocket launch engineering", "views": 1000},
        ]
        self.assertEqual(self.engine.recommend(videos, {"A"}, top_n=2), ["B", "C"])

    def test_watched_videos_are_never_recommended(self):
        videos = [{"id": i, "title": f"cooking pasta recipe {i}", "views": i} for i in range(1, 6)]
        recs = self.engine.recommend(videos, {2, 4}, top_n=10)
        self.assertEqual(sorted(recs), [1, 3, 5])

    def test_ids_compared_by_string_form(self):
        videos = [
            {"id": 1, "title": "cooking pasta recipe"},
            {"id": 2, "title": "cooking pasta dinner"},
        ]
        self.assertEqual(self.engine.recommend(videos, ["1"], top_n=5), [2])

    def test_limit_respected(self):
        videos = [{"id": i, "title": "video", "views": i} for i in range(10)]
        self.assertEqual(len(self.engine.recommend(videos, [], top_n=2)), 2)
        self.assertEqual(self.engine.recommend(videos, [], top_n=0), [])

    def test_empty_catalog(self):
        self.assertEqual(self.engine.recommend([], ["A"], top_n=5), [])
        self.assertEqual(self.engine.recommend([], [], top_n=5), [])

    def test_deterministic(self):
        videos = [
            {"id": "A", "title": "cooking pasta recipe", "category": "Food"},
            {"id": "B", "title": "pasta sauce", "category": "Food"},
            {"id": "C", "title": "rocket launch", "category": "Tech"},
            {"id": "D", "title": "baking bread", "category": "Food"},
        ]
        first = self.engine.recommend(videos, ["A"], top_n=3)
        second = self.engine.recommend(videos, ["A"], top_n=3)
        self.assertEqual(first, second)
        self.assertEqual(first[0], "B")

    def test_ties_keep_catalog_order(self):
        videos = [{"id": name, "title": "video", "views": 7} for name in ("x", "y", "z")]
        self.assertEqual(self.engine.recommend(videos, [], top_n=3), ["x", "y", "z"])

    def test_missing_text_fields_do_not_crash(self):
        videos = [
            {"id": "A", "title": None, "description": None, "category": "Music"},
            {"id": "B", "title": "guitar", "category": None},
            {"id": "C"},
        ]
        recs = self.engine.recommend(videos, ["A"], top_n=5)
        self.assertEqual(set(recs), {"B", "C"})

    def test_no_vocabulary_means_no_similarity_recommendations(self):
        videos = [{"id": "A", "title": "the"}, {"id": "B", "title": "and it"}]
        self.assertEqual(self.engine.recommend(videos, ["A"], top_n=5), [])


if __name__ == "__main__":
    unittest.main()
