"""Transport-agnostic tool catalogue.

Each tool pairs a pydantic argument model with a handler. call_tool()
validates raw arguments, dispatches, and returns a JSON-serialisable dict;
whatever request-handling layer sits in front maps these to its own framing.
"""

import logging
import sqlite3
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from src.core.config import Settings
from src.core.db import browse_jobs, get_job, get_painter, insert_job_request
from src.core.documents import DOCUMENT_KINDS, DocumentStore
from src.core.errors import InputError
from src.core.schemas import Facet, JobBrowseFilters, JobRequest, LocationFilters
from src.pipeline.analyzer import analyze_description
from src.pipeline.estimator import calculate_room_paint, estimate_price
from src.pipeline.photo import describe_job_photo
from src.pipeline.ranker import rank_painters
from src.pipeline.weights import normalize_weights

logger = logging.getLogger(__name__)


@dataclass
class ToolContext:
    """Collaborators shared by every tool call."""

    conn: sqlite3.Connection
    settings: Settings
    documents: DocumentStore


# ---------------------------------------------------------------------------
# Argument models
# ---------------------------------------------------------------------------


class RankPaintersArgs(BaseModel):
    postcode: str | None = None
    suburb: str | None = None
    area: str | None = None
    region: str | None = None
    limit: int = Field(default=5, description="Number of painters to return (clamped to 1-10)")
    preferences: dict[str, Any] = Field(
        default_factory=dict,
        description="Relative weights for quality, reliability and value",
    )


class LookupArgs(BaseModel):
    id: str = Field(min_length=1)

    @field_validator("id", mode="before")
    @classmethod
    def id_as_string(cls, v: Any) -> Any:
        return str(v).strip() if isinstance(v, int | str) else v


class AnalyzeArgs(BaseModel):
    description: str = Field(description="Customer's job description")
    known_details: dict[str, Any] = Field(default_factory=dict)
    facets: list[Facet] | None = None
    sample_size: int | None = None


class EstimateArgs(BaseModel):
    description: str = Field(min_length=5)
    postcode: str | None = None


class PaintCalcArgs(BaseModel):
    length: float = Field(gt=0, description="Room length in metres")
    width: float = Field(gt=0, description="Room width in metres")
    height: float = Field(gt=0, description="Room height in metres")


class DocumentArgs(BaseModel):
    category: str = Field(min_length=1)
    kind: Literal["knowledge_base", "pricing_reference", "pricing_analysis_guide"] = "knowledge_base"


class PhotoArgs(BaseModel):
    image: str = Field(min_length=1, description="Image URL, data: URL or local path")
    question: str | None = None


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _rank(ctx: ToolContext, args: RankPaintersArgs) -> dict[str, Any]:
    filters = LocationFilters(
        postcode=args.postcode, suburb=args.suburb, area=args.area, region=args.region,
    )
    ranked = rank_painters(
        ctx.conn, filters, args.limit, args.preferences, ctx.settings.ranking,
    )
    weights = normalize_weights(args.preferences, ctx.settings.ranking.default_weights)
    result: dict[str, Any] = {
        "count": len(ranked),
        "weights": weights.model_dump(),
        "painters": [
            {**s.painter.model_dump(), "score": round(s.score, 4)} for s in ranked
        ],
    }
    if not ranked:
        result["message"] = "No painters found for the specified location"
    return result


def _get_painter(ctx: ToolContext, args: LookupArgs) -> dict[str, Any]:
    painter = get_painter(ctx.conn, args.id)
    return {"found": painter is not None, "painter": painter.model_dump() if painter else None}


def _get_job(ctx: ToolContext, args: LookupArgs) -> dict[str, Any]:
    job = get_job(ctx.conn, args.id)
    return {"found": job is not None, "job": job.model_dump() if job else None}


def _browse(ctx: ToolContext, args: JobBrowseFilters) -> dict[str, Any]:
    jobs = browse_jobs(ctx.conn, args)
    return {
        "limit": args.limit,
        "offset": args.offset,
        "count": len(jobs),
        "jobs": [j.model_dump() for j in jobs],
    }


def _analyze(ctx: ToolContext, args: AnalyzeArgs) -> dict[str, Any]:
    result = analyze_description(
        ctx.conn,
        args.description,
        known_details=args.known_details,
        facets=args.facets,
        sample_size=args.sample_size,
        config=ctx.settings.analysis,
    )
    return result.to_dict()


def _estimate(ctx: ToolContext, args: EstimateArgs) -> dict[str, Any]:
    return estimate_price(args.description, args.postcode).model_dump()


def _paint_calc(ctx: ToolContext, args: PaintCalcArgs) -> dict[str, Any]:
    return calculate_room_paint(args.length, args.width, args.height).model_dump()


def _create_request(ctx: ToolContext, args: JobRequest) -> dict[str, Any]:
    request_id = insert_job_request(ctx.conn, args)
    logger.info("Recorded job request %d (%s)", request_id, args.dealname)
    return {"id": request_id, "status": "recorded", "request": args.model_dump(mode="json")}


def _read_document(ctx: ToolContext, args: DocumentArgs) -> dict[str, Any]:
    text = ctx.documents.read_document(args.category, args.kind)
    return {"category": args.category, "kind": args.kind, "text": text}


def _describe_photo(ctx: ToolContext, args: PhotoArgs) -> dict[str, Any]:
    return describe_job_photo(args.image, ctx.settings.llm, args.question).model_dump()


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    args_model: type[BaseModel]
    handler: Callable[[ToolContext, Any], dict[str, Any]]


TOOLS: dict[str, Tool] = {
    t.name: t
    for t in (
        Tool(
            "rank_painters",
            "Return a ranked shortlist of painters for a location.",
            RankPaintersArgs,
            _rank,
        ),
        Tool("get_painter", "Fetch a single painter by record id.", LookupArgs, _get_painter),
        Tool("get_job", "Fetch one historical job by id.", LookupArgs, _get_job),
        Tool(
            "browse_jobs",
            "Browse historical jobs with optional filters and pagination.",
            JobBrowseFilters,
            _browse,
        ),
        Tool(
            "analyze_job_description",
            "Analyze a job description against similar past jobs: next question, "
            "classification, missing details, price factors, completion check.",
            AnalyzeArgs,
            _analyze,
        ),
        Tool(
            "estimate_price",
            "Rough painting price range and duration from a description.",
            EstimateArgs,
            _estimate,
        ),
        Tool(
            "calculate_room_paint",
            "Calculate litres of paint needed for a room.",
            PaintCalcArgs,
            _paint_calc,
        ),
        Tool(
            "create_job_request",
            "Record a customer's request for painting quotes.",
            JobRequest,
            _create_request,
        ),
        Tool(
            "read_document",
            f"Read a category reference document ({', '.join(DOCUMENT_KINDS)}).",
            DocumentArgs,
            _read_document,
        ),
        Tool(
            "describe_job_photo",
            "Describe surface, scope and condition shown in a job photo.",
            PhotoArgs,
            _describe_photo,
        ),
    )
}


def list_tools() -> list[dict[str, Any]]:
    """Name, description and JSON schema of every tool."""
    return [
        {
            "name": t.name,
            "description": t.description,
            "input_schema": t.args_model.model_json_schema(),
        }
        for t in TOOLS.values()
    ]


def call_tool(
    name: str,
    arguments: Mapping[str, Any] | None,
    ctx: ToolContext,
) -> dict[str, Any]:
    """Validate arguments and run a tool.

    Raises:
        InputError: Unknown tool or invalid arguments.
        StoreUnavailable: The record store could not be read.
    """
    tool = TOOLS.get(name)
    if tool is None:
        msg = f"Unknown tool '{name}'. Available: {', '.join(TOOLS)}"
        raise InputError(msg)

    try:
        args = tool.args_model.model_validate(dict(arguments or {}))
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}"
            for err in e.errors()
        )
        msg = f"Invalid arguments for '{name}': {problems}"
        raise InputError(msg) from e

    logger.debug("Calling tool %s with %s", name, args.model_dump())
    return tool.handler(ctx, args)
