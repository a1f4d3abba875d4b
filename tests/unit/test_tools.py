"""Tests for the tool catalogue and dispatcher."""

import sqlite3
from pathlib import Path
from unittest.mock import patch

import pytest

from src.core.config import Settings
from src.core.db import init_db, insert_job, insert_painter
from src.core.documents import DocumentStore
from src.core.errors import InputError, StoreUnavailable
from src.core.schemas import Painter, PhotoDescription
from src.tools.registry import TOOLS, ToolContext, call_tool, list_tools


@pytest.fixture()
def ctx(tmp_path: Path) -> ToolContext:
    conn = init_db(tmp_path / "test.db")
    docs = tmp_path / "docs" / "painting"
    docs.mkdir(parents=True)
    (docs / "knowledge_base.txt").write_text("Ask about ceilings.")
    return ToolContext(conn=conn, settings=Settings(), documents=DocumentStore(tmp_path / "docs"))


def _seed_painters(conn: sqlite3.Connection) -> None:
    insert_painter(conn, Painter(id="1", name="Brush Co", region="Sydney",
                                 star_rating=4.9, number_of_reviews=40, rejection_rate=5.0))
    insert_painter(conn, Painter(id="2", name="Roller Bros", region="Sydney",
                                 star_rating=3.0, number_of_reviews=2, rejection_rate=50.0))
    insert_painter(conn, Painter(id="3", name="Perth Paints", region="Perth", star_rating=5.0))


class TestCatalogue:
    def test_tool_names(self) -> None:
        assert set(TOOLS) == {
            "rank_painters", "get_painter", "get_job", "browse_jobs",
            "analyze_job_description", "estimate_price", "calculate_room_paint",
            "create_job_request", "read_document", "describe_job_photo",
        }

    def test_list_tools_has_schemas(self) -> None:
        tools = {t["name"]: t for t in list_tools()}
        schema = tools["calculate_room_paint"]["input_schema"]
        assert set(schema["required"]) == {"length", "width", "height"}
        assert tools["rank_painters"]["description"]


class TestCallTool:
    def test_unknown_tool(self, ctx: ToolContext) -> None:
        with pytest.raises(InputError, match="Unknown tool 'nope'"):
            call_tool("nope", {}, ctx)

    def test_invalid_arguments(self, ctx: ToolContext) -> None:
        with pytest.raises(InputError, match="Invalid arguments for 'calculate_room_paint'"):
            call_tool("calculate_room_paint", {"length": -1, "width": 3, "height": 2.4}, ctx)

    def test_rank_painters(self, ctx: ToolContext) -> None:
        _seed_painters(ctx.conn)
        result = call_tool("rank_painters", {"region": "sydney", "limit": 10}, ctx)
        assert result["count"] == 2
        assert [p["id"] for p in result["painters"]] == ["1", "2"]
        assert result["painters"][0]["score"] > result["painters"][1]["score"]
        assert sum(result["weights"].values()) == pytest.approx(1.0)
        assert "message" not in result

    def test_rank_painters_no_match(self, ctx: ToolContext) -> None:
        result = call_tool("rank_painters", {"postcode": "9999"}, ctx)
        assert result["count"] == 0
        assert result["painters"] == []
        assert result["message"] == "No painters found for the specified location"

    def test_rank_painters_preferences(self, ctx: ToolContext) -> None:
        _seed_painters(ctx.conn)
        result = call_tool(
            "rank_painters", {"region": "Sydney", "preferences": {"value": 1, "quality": 0,
                                                                 "reliability": 0}}, ctx,
        )
        assert result["weights"] == {"quality": 0.0, "reliability": 0.0, "value": 1.0}

    def test_get_painter(self, ctx: ToolContext) -> None:
        _seed_painters(ctx.conn)
        assert call_tool("get_painter", {"id": 1}, ctx)["painter"]["name"] == "Brush Co"
        assert call_tool("get_painter", {"id": "99"}, ctx) == {"found": False, "painter": None}

    def test_get_job_and_browse(self, ctx: ToolContext) -> None:
        job_id = insert_job(ctx.conn, job_description="Paint fence", category="exterior")
        found = call_tool("get_job", {"id": job_id}, ctx)
        assert found["found"] is True
        assert found["job"]["category"] == "exterior"
        browsed = call_tool("browse_jobs", {"category": "exterior", "limit": 5}, ctx)
        assert browsed["count"] == 1
        assert browsed["limit"] == 5

    def test_analyze(self, ctx: ToolContext) -> None:
        result = call_tool(
            "analyze_job_description",
            {"description": "paint my 2 bedrooms", "facets": ["classification"]},
            ctx,
        )
        assert result["classification"]["size"] == "medium"
        assert "next_question" not in result

    def test_analyze_unknown_facet(self, ctx: ToolContext) -> None:
        with pytest.raises(InputError):
            call_tool("analyze_job_description",
                      {"description": "paint my fence", "facets": ["weather"]}, ctx)

    def test_estimate_and_paint_calc(self, ctx: ToolContext) -> None:
        estimate = call_tool("estimate_price", {"description": "paint 2 bedroom interior"}, ctx)
        assert (estimate["min_price"], estimate["max_price"]) == (880, 1320)
        calc = call_tool("calculate_room_paint", {"length": 4, "width": 3, "height": 2.4}, ctx)
        assert calc["total_litres"] == 9

    def test_create_job_request(self, ctx: ToolContext) -> None:
        result = call_tool(
            "create_job_request",
            {
                "customer_name": "Sam Lee",
                "customer_email": "sam@example.com",
                "customer_mobile": "0400000000",
                "dealname": "Fence repaint",
                "job_description": "Repaint 20 m timber fence",
            },
            ctx,
        )
        assert result["status"] == "recorded"
        assert result["id"] == 1
        assert isinstance(result["request"]["created_at"], str)

    def test_create_job_request_bad_email(self, ctx: ToolContext) -> None:
        with pytest.raises(InputError, match="customer_email"):
            call_tool(
                "create_job_request",
                {
                    "customer_name": "Sam", "customer_email": "nope",
                    "customer_mobile": "0400000000", "dealname": "Fence",
                    "job_description": "Repaint fence",
                },
                ctx,
            )

    def test_read_document(self, ctx: ToolContext) -> None:
        result = call_tool("read_document", {"category": "Painting"}, ctx)
        assert result["text"] == "Ask about ceilings."
        assert result["kind"] == "knowledge_base"

    def test_read_document_bad_kind(self, ctx: ToolContext) -> None:
        with pytest.raises(InputError):
            call_tool("read_document", {"category": "Painting", "kind": "brochure"}, ctx)

    def test_describe_job_photo(self, ctx: ToolContext) -> None:
        description = PhotoDescription(
            source="https://example.com/a.jpg", provider="openai",
            question="q", description="Peeling fence",
        )
        with patch("src.tools.registry.describe_job_photo", return_value=description) as mock:
            result = call_tool("describe_job_photo", {"image": "https://example.com/a.jpg"}, ctx)
        assert result["description"] == "Peeling fence"
        mock.assert_called_once_with("https://example.com/a.jpg", ctx.settings.llm, None)

    def test_store_failure_propagates(self, ctx: ToolContext) -> None:
        ctx.conn.execute("DROP TABLE painters")
        with pytest.raises(StoreUnavailable):
            call_tool("rank_painters", {"region": "Sydney"}, ctx)
