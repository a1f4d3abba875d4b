"""Tests for the keyword price estimator and room paint calculator."""

import pytest

from src.core.errors import InputError
from src.pipeline.estimator import calculate_room_paint, estimate_price


class TestEstimatePrice:
    def test_two_bedroom_interior(self) -> None:
        result = estimate_price("paint 2 bedroom interior")
        assert result.min_price == 880
        assert result.max_price == 1320
        assert result.days == 2

    def test_base_price(self) -> None:
        result = estimate_price("paint the fence")
        assert (result.min_price, result.max_price, result.days) == (400, 600, 1)

    def test_exterior_adds_days(self) -> None:
        result = estimate_price("Exterior house repaint")
        assert (result.min_price, result.max_price) == (3200, 4800)
        assert result.days == 7

    def test_compound_room_names_count_as_rooms(self) -> None:
        for description in ("repaint the bathroom", "Paint the Living Room", "new colour for the bedroom"):
            result = estimate_price(description)
            assert (result.min_price, result.max_price, result.days) == (640, 960, 1)

    def test_apartment(self) -> None:
        result = estimate_price("2 bedroom apartment")
        assert (result.min_price, result.max_price, result.days) == (1680, 2520, 3)

    def test_postcode_and_notes_carried(self) -> None:
        result = estimate_price("paint the fence", postcode="2000")
        assert result.postcode == "2000"
        assert len(result.notes) == 4

    @pytest.mark.parametrize("description", ["", "abc", "    "])
    def test_too_short(self, description: str) -> None:
        with pytest.raises(InputError):
            estimate_price(description)


class TestCalculateRoomPaint:
    def test_standard_room(self) -> None:
        result = calculate_room_paint(4, 3, 2.4)
        assert result.wall_area == pytest.approx(29.6)
        assert result.ceiling_area == pytest.approx(12.0)
        assert result.coats == 2
        assert result.wall_litres == 6
        assert result.ceiling_litres == 3
        assert result.total_litres == 9

    def test_numeric_strings_accepted(self) -> None:
        result = calculate_room_paint("4", "3", "2.4")  # type: ignore[arg-type]
        assert result.total_litres == 9

    def test_tiny_room_wall_area_floors_at_zero(self) -> None:
        result = calculate_room_paint(0.5, 0.5, 1)
        assert result.wall_area == 0.0
        assert result.wall_litres == 0

    @pytest.mark.parametrize(
        ("length", "width", "height"),
        [(0, 3, 2.4), (4, -1, 2.4), (4, 3, "tall"), (4, None, 2.4), (float("inf"), 3, 2.4)],
    )
    def test_invalid_dimensions(self, length: object, width: object, height: object) -> None:
        with pytest.raises(InputError):
            calculate_room_paint(length, width, height)  # type: ignore[arg-type]
