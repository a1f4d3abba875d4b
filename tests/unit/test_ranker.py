"""Tests for the ranker: location filtering, ordering, limit clamping."""

import logging
import sqlite3

import pytest

from src.core.config import RankingConfig
from src.core.db import init_db, insert_painter
from src.core.errors import StoreUnavailable
from src.core.schemas import LocationFilters, Painter
from src.pipeline.ranker import clamp_limit, rank_painters


def _painter(
    id: str,
    *,
    region: str = "Sydney",
    area: str = "Inner West",
    postcode: str = "2000",
    suburb: str = "Newtown",
    star_rating: float = 4.0,
    number_of_reviews: int = 10,
    rejection_rate: float | None = 10.0,
) -> Painter:
    return Painter(
        id=id,
        name=f"Painter {id}",
        region=region,
        area=area,
        postcode=postcode,
        suburb=suburb,
        star_rating=star_rating,
        number_of_reviews=number_of_reviews,
        rejection_rate=rejection_rate,
    )


@pytest.fixture()
def db(tmp_path) -> sqlite3.Connection:  # type: ignore[no-untyped-def]
    return init_db(tmp_path / "test.db")


class TestClampLimit:
    @pytest.mark.parametrize(
        ("requested", "expected"),
        [(0, 1), (-3, 1), (1, 1), (5, 5), (10, 10), (11, 10), (999, 10), (None, 5), ("x", 5)],
    )
    def test_clamped(self, requested: object, expected: int) -> None:
        assert clamp_limit(requested, RankingConfig()) == expected


class TestRankPainters:
    def test_empty_store_returns_empty_list(self, db: sqlite3.Connection) -> None:
        assert rank_painters(db, {}) == []

    def test_no_match_returns_empty_list(self, db: sqlite3.Connection) -> None:
        insert_painter(db, _painter("1"))
        assert rank_painters(db, {"region": "Perth"}) == []

    def test_filters_case_insensitive(self, db: sqlite3.Connection) -> None:
        insert_painter(db, _painter("1", region="Sydney"))
        result = rank_painters(db, {"region": "SYDNEY"})
        assert [s.painter.id for s in result] == ["1"]

    def test_filters_are_anded(self, db: sqlite3.Connection) -> None:
        insert_painter(db, _painter("1", region="Sydney", area="Inner West"))
        insert_painter(db, _painter("2", region="Sydney", area="North Shore"))
        result = rank_painters(db, LocationFilters(region="sydney", area="north shore"))
        assert [s.painter.id for s in result] == ["2"]

    def test_blank_filters_ignored(self, db: sqlite3.Connection) -> None:
        insert_painter(db, _painter("1"))
        result = rank_painters(db, {"region": "  ", "postcode": ""})
        assert len(result) == 1

    def test_sorted_by_score(self, db: sqlite3.Connection) -> None:
        insert_painter(db, _painter("low", star_rating=2.0))
        insert_painter(db, _painter("high", star_rating=5.0))
        insert_painter(db, _painter("mid", star_rating=3.5))
        result = rank_painters(db, {}, weights={"quality": 1, "reliability": 0, "value": 0})
        assert [s.painter.id for s in result] == ["high", "mid", "low"]

    def test_tie_broken_by_reviews(self, db: sqlite3.Connection) -> None:
        insert_painter(db, _painter("a", number_of_reviews=5))
        insert_painter(db, _painter("b", number_of_reviews=50))
        result = rank_painters(db, {})
        assert [s.painter.id for s in result] == ["b", "a"]

    def test_deterministic(self, db: sqlite3.Connection) -> None:
        for i in range(8):
            insert_painter(db, _painter(str(i), star_rating=4.0, number_of_reviews=3))
        first = [s.painter.id for s in rank_painters(db, {}, limit=10)]
        second = [s.painter.id for s in rank_painters(db, {}, limit=10)]
        assert first == second

    def test_weights_attached(self, db: sqlite3.Connection) -> None:
        insert_painter(db, _painter("1"))
        result = rank_painters(db, {}, weights={"quality": 1, "reliability": 1, "value": 2})
        assert result[0].weights.value == pytest.approx(0.5)

    @pytest.mark.parametrize(("limit", "expected"), [(0, 1), (3, 3), (999, 10), (None, 5)])
    def test_limit_clamping(self, db: sqlite3.Connection, limit: object, expected: int) -> None:
        for i in range(12):
            insert_painter(db, _painter(f"p{i:02d}", star_rating=float(i % 5)))
        assert len(rank_painters(db, {}, limit=limit)) == expected

    def test_limit_larger_than_matches(self, db: sqlite3.Connection) -> None:
        insert_painter(db, _painter("1"))
        insert_painter(db, _painter("2"))
        assert len(rank_painters(db, {}, limit=8)) == 2

    def test_unfiltered_logs_warning(
        self, db: sqlite3.Connection, caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="src.pipeline.ranker"):
            rank_painters(db, {})
        assert "no location filter" in caplog.text

    def test_unfiltered_warning_can_be_disabled(
        self, db: sqlite3.Connection, caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="src.pipeline.ranker"):
            rank_painters(db, {}, config=RankingConfig(warn_unfiltered=False))
        assert "no location filter" not in caplog.text

    def test_store_failure_raises(self, db: sqlite3.Connection) -> None:
        db.execute("DROP TABLE painters")
        with pytest.raises(StoreUnavailable, match="query_painters"):
            rank_painters(db, {"region": "Sydney"})
