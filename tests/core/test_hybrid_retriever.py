"""
Tests for the hybrid retrieval engine.

System role: Verification of vector, lexical, keyword and hybrid search
"""

import math
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from knowledge_base.core.exceptions import EmbeddingError, RetrievalError
from knowledge_base.core.retrieval.hybrid_retriever import (
    HybridRetrievalEngine,
    keyword_score,
    query_terms,
)
from knowledge_base.models.chunk_record import SourceType
from knowledge_base.models.search import SearchFilters, SearchMode


def unit(cos: float) -> list[float]:
    """2-d unit vector whose cosine with [1, 0] is cos."""
    return [cos, math.sqrt(1 - cos * cos)]


@pytest.fixture
def query_provider() -> AsyncMock:
    provider = AsyncMock()
    provider.embed_query = AsyncMock(return_value=[1.0, 0.0])
    return provider


@pytest.fixture
def engine(store, query_provider) -> HybridRetrievalEngine:
    return HybridRetrievalEngine(store, query_provider, candidate_multiplier=5)


class TestKeywordScore:
    """Test keyword_score and query_terms."""

    def test_fraction_of_terms_found(self) -> None:
        assert keyword_score("The quick brown fox", ["quick", "fox", "cat"]) == pytest.approx(2 / 3)

    def test_substring_of_token_counts(self) -> None:
        assert keyword_score("Refunds are processed weekly", ["refund"]) == 1.0

    def test_case_insensitive(self) -> None:
        assert keyword_score("PRICING Table", query_terms("pricing table")) == 1.0

    def test_no_terms_is_zero(self) -> None:
        assert keyword_score("anything", []) == 0.0

    def test_query_terms_keeps_repeats_and_lowercases(self) -> None:
        assert query_terms("Alpha beta ALPHA  gamma") == ["alpha", "beta", "alpha", "gamma"]

    def test_repeated_query_terms_each_count(self) -> None:
        assert keyword_score("big data here", query_terms("data data science")) == pytest.approx(2 / 3)


class TestValidation:
    """Test query validation."""

    @pytest.mark.parametrize("tenant_id,query", [("", "q"), ("42", ""), ("42", "   ")])
    async def test_blank_inputs_raise(self, engine, tenant_id: str, query: str) -> None:
        with pytest.raises(RetrievalError):
            await engine.search(tenant_id, query)

    async def test_non_positive_limit_raises(self, engine) -> None:
        with pytest.raises(RetrievalError):
            await engine.search("42", "q", limit=0)


class TestVectorSearch:
    """Test VECTOR mode."""

    async def test_sorted_by_similarity_and_truncated(self, engine, store, make_record) -> None:
        # Arrange
        await store.insert_many(
            [
                make_record(document_id="low", embedding=unit(0.1)),
                make_record(document_id="high", embedding=unit(0.95)),
                make_record(document_id="mid", embedding=unit(0.5)),
            ]
        )

        # Act
        hits = await engine.search("42", "anything", limit=2, mode=SearchMode.VECTOR)

        # Assert
        assert [h.document_id for h in hits] == ["high", "mid"]
        assert hits[0].score == pytest.approx(0.95)

    async def test_inactive_and_other_tenant_records_excluded(self, engine, store, make_record) -> None:
        await store.insert_many(
            [
                make_record(document_id="active", embedding=unit(0.3)),
                make_record(document_id="inactive", embedding=unit(0.99), is_active=False),
                make_record(tenant_id="7", document_id="foreign", embedding=unit(0.99)),
            ]
        )

        hits = await engine.search("42", "anything", mode=SearchMode.VECTOR)

        assert [h.document_id for h in hits] == ["active"]

    async def test_records_without_embeddings_are_skipped(self, engine, store, make_record) -> None:
        await store.insert_many(
            [
                make_record(document_id="empty", embedding=[]),
                make_record(document_id="full", embedding=unit(0.4)),
            ]
        )

        hits = await engine.search("42", "anything", mode=SearchMode.VECTOR)

        assert [h.document_id for h in hits] == ["full"]

    async def test_candidate_set_is_bounded(self, store, query_provider, make_record) -> None:
        # Arrange: 6 candidates, limit 1 x multiplier 2 scans the 2 most recent
        engine = HybridRetrievalEngine(store, query_provider, candidate_multiplier=2)
        await store.insert_many(
            [make_record(document_id=f"d{i}", embedding=unit(0.1 * (i + 1)), minutes=i) for i in range(6)]
        )

        # Act
        hits = await engine.search("42", "anything", limit=1, mode=SearchMode.VECTOR)

        # Assert
        assert [h.document_id for h in hits] == ["d5"]

    async def test_embedding_failure_propagates(self, engine, query_provider, store, make_record) -> None:
        await store.insert_many([make_record()])
        query_provider.embed_query.side_effect = EmbeddingError("provider down")

        with pytest.raises(EmbeddingError):
            await engine.search("42", "anything", mode=SearchMode.VECTOR)


class TestLexicalSearch:
    """Test LEXICAL mode."""

    async def test_ranked_by_relevance_then_recency(self, engine, store, make_record) -> None:
        # Arrange
        await store.insert_many(
            [
                make_record(document_id="old-full", content="refund policy details", minutes=1),
                make_record(document_id="new-full", content="our refund policy", minutes=5),
                make_record(document_id="partial", content="policy only", minutes=10),
                make_record(document_id="none", content="unrelated", minutes=20),
            ]
        )

        # Act
        hits = await engine.search("42", "refund policy", mode=SearchMode.LEXICAL)

        # Assert
        assert [h.document_id for h in hits] == ["new-full", "old-full", "partial"]
        assert [h.score for h in hits] == [1.0, 1.0, 0.5]

    async def test_structured_filters(self, engine, store, make_record) -> None:
        await store.insert_many(
            [
                make_record(document_id="pdf", content="pricing", file_type=".pdf", minutes=1),
                make_record(document_id="txt", content="pricing", file_type=".txt", minutes=2),
                make_record(
                    document_id="url",
                    content="pricing",
                    source_type=SourceType.URL,
                    file_name=None,
                    file_type=None,
                    minutes=3,
                ),
            ]
        )

        by_type = await engine.search(
            "42", "pricing", mode=SearchMode.LEXICAL, filters=SearchFilters(file_type=".pdf")
        )
        by_source = await engine.search(
            "42", "pricing", mode=SearchMode.LEXICAL, filters=SearchFilters(source_type=SourceType.URL)
        )
        by_date = await engine.search(
            "42",
            "pricing",
            mode=SearchMode.LEXICAL,
            filters=SearchFilters(
                date_from=datetime(2024, 1, 1, 0, 2, tzinfo=timezone.utc),
                date_to=datetime(2024, 1, 1, 0, 3, tzinfo=timezone.utc),
            ),
        )

        assert [h.document_id for h in by_type] == ["pdf"]
        assert [h.document_id for h in by_source] == ["url"]
        assert {h.document_id for h in by_date} == {"txt", "url"}


class TestKeywordSearch:
    """Test KEYWORD mode."""

    async def test_scores_by_term_fraction(self, engine, store, make_record) -> None:
        await store.insert_many(
            [
                make_record(document_id="two", content="Shipping takes two days"),
                make_record(document_id="one", content="Shipping is free"),
                make_record(document_id="zero", content="Returns accepted"),
            ]
        )

        hits = await engine.search("42", "shipping days", mode=SearchMode.KEYWORD)

        assert [(h.document_id, h.score) for h in hits] == [("two", 1.0), ("one", 0.5)]

    async def test_like_wildcards_in_query_are_literal(self, engine, store, make_record) -> None:
        await store.insert_many([make_record(document_id="d", content="plain words")])

        hits = await engine.search("42", "%", mode=SearchMode.KEYWORD)

        assert hits == []


class TestHybridSearch:
    """Test HYBRID mode."""

    async def test_vector_and_keyword_hits_are_merged(self, engine, store, make_record) -> None:
        # Arrange: A is a strong vector match only, B a weak vector but full keyword match
        await store.insert_many(
            [
                make_record(document_id="A", content="unrelated text here", embedding=unit(0.9)),
                make_record(document_id="B", content="alpha beta gamma together", embedding=unit(0.2)),
            ]
        )

        # Act
        hits = await engine.search("42", "alpha beta gamma", limit=2, mode=SearchMode.HYBRID)

        # Assert
        assert [(h.document_id, h.score) for h in hits] == [("B", 1.0), ("A", pytest.approx(0.9))]

    async def test_no_duplicate_document_chunk_pairs(self, engine, store, make_record) -> None:
        await store.insert_many(
            [
                make_record(document_id="d", chunk_index=i, content=f"alpha chunk {i}", embedding=unit(0.1 * (i + 1)))
                for i in range(6)
            ]
        )

        hits = await engine.search("42", "alpha", limit=6, mode=SearchMode.HYBRID)

        keys = [(h.document_id, h.chunk_index) for h in hits]
        assert len(keys) == len(set(keys))
        assert len(hits) <= 6

    async def test_vector_failure_degrades_to_keyword(self, engine, query_provider, store, make_record) -> None:
        # Arrange
        await store.insert_many([make_record(document_id="kw", content="alpha")])
        query_provider.embed_query.side_effect = EmbeddingError("provider down")

        # Act
        hits = await engine.search("42", "alpha", mode=SearchMode.HYBRID)

        # Assert
        assert [h.document_id for h in hits] == ["kw"]

    async def test_default_mode_is_hybrid(self, engine, store, make_record) -> None:
        await store.insert_many([make_record(document_id="A", content="no match", embedding=unit(0.7))])

        hits = await engine.search("42", "zzz")

        assert [h.document_id for h in hits] == ["A"]
