"""
Tests for cosine similarity.

System role: Verification of vector scoring properties
"""

import pytest

from knowledge_base.core.retrieval.similarity import cosine_similarity


class TestCosineSimilarity:
    """Test cosine_similarity."""

    @pytest.mark.parametrize(
        "vector",
        [[1.0], [0.3, 0.4], [1.0, 2.0, 3.0], [-1.0, 5.0, 0.25, 7.0]],
    )
    def test_reflexive(self, vector: list[float]) -> None:
        assert cosine_similarity(vector, vector) == pytest.approx(1.0)

    def test_symmetric(self) -> None:
        a = [0.1, 0.7, 0.2]
        b = [0.5, 0.1, 0.9]

        assert cosine_similarity(a, b) == cosine_similarity(b, a)

    def test_length_mismatch_is_zero(self) -> None:
        assert cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0]) == 0.0

    def test_zero_norm_is_zero(self) -> None:
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0
        assert cosine_similarity([1.0, 1.0], [0.0, 0.0]) == 0.0

    def test_empty_vectors_are_zero(self) -> None:
        assert cosine_similarity([], []) == 0.0

    def test_orthogonal_is_zero(self) -> None:
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == 0.0

    def test_opposite_is_clamped_to_zero(self) -> None:
        assert cosine_similarity([1.0, 2.0], [-1.0, -2.0]) == 0.0

    def test_known_value(self) -> None:
        # cos(45 degrees)
        assert cosine_similarity([1.0, 0.0], [1.0, 1.0]) == pytest.approx(0.70710678)
