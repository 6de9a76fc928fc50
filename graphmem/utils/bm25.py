"""
Okapi BM25 lexical re-ranker for graph search results.
"""

import math
from collections import Counter
from typing import Dict, List, Sequence


class BM25:
    """Score a fixed set of tokenized documents against tokenized queries.

    Args:
        documents: Tokenized documents
        k1: Term frequency saturation
        b: Document length normalization
    """

    def __init__(self, documents: Sequence[Sequence[str]], k1: float = 1.5, b: float = 0.75):
        self.documents = [list(doc) for doc in documents]
        self.k1 = k1
        self.b = b
        self.doc_lengths = [len(doc) for doc in self.documents]
        self.avg_doc_length = sum(self.doc_lengths) / len(self.documents) if self.documents else 0.0
        self.term_frequencies = [Counter(doc) for doc in self.documents]
        self.doc_freq: Dict[str, int] = {}
        self.idf: Dict[str, float] = {}
        self._compute_idf()

    def _compute_idf(self) -> None:
        n_docs = len(self.documents)
        for doc in self.documents:
            for term in set(doc):
                self.doc_freq[term] = self.doc_freq.get(term, 0) + 1
        for term, freq in self.doc_freq.items():
            self.idf[term] = math.log((n_docs - freq + 0.5) / (freq + 0.5) + 1)

    def score(self, query: Sequence[str], index: int) -> float:
        """BM25 score of the document at ``index`` for ``query``."""
        score = 0.0
        doc_length = self.doc_lengths[index]
        frequencies = self.term_frequencies[index]
        if self.avg_doc_length:
            length_norm = 1 - self.b + self.b * doc_length / self.avg_doc_length
        else:
            length_norm = 1 - self.b
        for term in query:
            tf = frequencies.get(term, 0)
            if not tf:
                continue
            idf = self.idf.get(term, 0.0)
            score += idf * tf * (self.k1 + 1) / (tf + self.k1 * length_norm)
        return score

    def get_scores(self, query: Sequence[str]) -> List[float]:
        return [self.score(query, idx) for idx in range(len(self.documents))]

    def search(self, query: Sequence[str]) -> List[List[str]]:
        """
        Rank documents by descending score.

        Ties keep their original order.

        Args:
            query: Tokenized query

        Returns:
            Documents sorted from best to worst match
        """
        scores = self.get_scores(query)
        order = sorted(range(len(self.documents)), key=lambda idx: scores[idx], reverse=True)
        return [self.documents[idx] for idx in order]
