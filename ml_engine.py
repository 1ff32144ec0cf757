# ml_engine.py
import logging
from typing import Any, Dict, Iterable, List

import numpy as np
from sklearn.feature_extraction.text import CountVectorizer
from sklearn.preprocessing import normalize

from tokenizer import tokenize

logger = logging.getLogger(__name__)


class VideoTfidfVectorizer:
    """
    TF-IDF weighting over video metadata using the smoothed IDF
    ln(N / (1 + df)) + 1. Rows returned by transform() are L2-normalized,
    so the dot product of two rows is their cosine similarity.
    """

    def __init__(self):
        # Counting is delegated to sklearn; our own tokenizer decides what a term is
        self._counter = CountVectorizer(analyzer=tokenize, dtype=np.float64)
        self.vocabulary_: Dict[str, int] = {}
        self.idf_ = np.zeros(0, dtype=np.float64)
        self.n_documents_ = 0

    def fit(self, documents: Iterable[str]) -> "VideoTfidfVectorizer":
        documents = list(documents)
        self.n_documents_ = len(documents)

        try:
            counts = self._counter.fit_transform(documents)
        except ValueError:
            # No documents, or none of them has a single usable token
            self.vocabulary_ = {}
            self.idf_ = np.zeros(0, dtype=np.float64)
            return self

        self.vocabulary_ = {term: int(idx) for term, idx in self._counter.vocabulary_.items()}

        # Each (document, term) pair is stored once, so column occupancy is the document frequency
        df = np.bincount(counts.indices, minlength=counts.shape[1])
        self.idf_ = np.log(self.n_documents_ / (1.0 + df)) + 1.0
        return self

    def transform(self, documents: Iterable[str]) -> np.ndarray:
        documents = list(documents)
        if not self.vocabulary_:
            return np.zeros((len(documents), 0), dtype=np.float64)

        counts = self._counter.transform(documents)
        counts.data *= self.idf_[counts.indices]
        # normalize() leaves all-zero rows untouched instead of dividing by zero
        return normalize(counts, norm="l2", copy=False).toarray()

    def fit_transform(self, documents: Iterable[str]) -> np.ndarray:
        documents = list(documents)
        return self.fit(documents).transform(documents)


class MLEngine:
    def _create_metadata_soup(self, videos: List[Dict]) -> List[str]:
        """
        Combines title, description and category into a single string
        for each video to analyze. All three fields carry equal weight.
        """
        soup_list = []
        for video in videos:
            title = video.get('title') or ''
            description = video.get('description') or ''
            category = video.get('category') or ''
            soup_list.append(" ".join([title, description, category]))
        return soup_list

    def _similarity_scores(self, videos: List[Dict], watched_mask: np.ndarray):
        """
        1. Vectors every video in the catalog
        2. Sums the watched vectors into a 'User Profile'
        3. Scores every video by cosine similarity to the profile

        Returns None when the catalog has no usable vocabulary.
        """
        vectorizer = VideoTfidfVectorizer()
        vectors = vectorizer.fit_transform(self._create_metadata_soup(videos))
        if not vectorizer.vocabulary_:
            return None

        user_profile = vectors[watched_mask].sum(axis=0)
        magnitude = np.linalg.norm(user_profile)
        if magnitude > 0:
            user_profile /= magnitude

        # Both sides are unit length (or zero), so the dot product is the cosine
        return vectors @ user_profile

    def recommend(self, videos: List[Dict], watched_ids: Iterable[Any], top_n: int = 20) -> List[Any]:
        """
        Ranks the catalog for one user and returns the ids of the best
        `top_n` videos the user has not watched yet.

        Users with watch history get content-based similarity scores; users
        without any (or whose watched videos are no longer in the catalog)
        get the catalog ordered by view count.
        """
        if not videos or top_n <= 0:
            return []

        # Ids may arrive as ints, strings or ObjectId-like values
        watched = {str(video_id) for video_id in watched_ids}
        watched_mask = np.array([str(v['id']) in watched for v in videos], dtype=bool)

        if watched_mask.any():
            scores = self._similarity_scores(videos, watched_mask)
            if scores is None:
                logger.warning("Catalog has no indexable text. No similarity recommendations possible.")
                return []
        else:
            scores = np.array([float(v.get('views') or 0) for v in videos], dtype=np.float64)

        # Watched videos are dropped before sorting; ties keep catalog order
        candidates = np.flatnonzero(~watched_mask)
        ranked = candidates[np.argsort(-scores[candidates], kind="stable")]
        return [videos[idx]['id'] for idx in ranked[:top_n]]
