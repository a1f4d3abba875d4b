"""Tests for the command-line entry point."""

import json
from pathlib import Path

import pytest

from main import main, parse_args, parse_known, tool_call_for
from src.core.errors import InputError


@pytest.fixture()
def config(tmp_path: Path) -> Path:
    docs = tmp_path / "docs" / "painting"
    docs.mkdir(parents=True)
    (docs / "knowledge_base.txt").write_text("Ask about ceilings.")
    path = tmp_path / "settings.yaml"
    path.write_text(
        f"database:\n  path: {tmp_path / 'cli.db'}\n"
        f"documents:\n  root: {tmp_path / 'docs'}\n"
    )
    return path


def _run(capsys: pytest.CaptureFixture[str], *argv: str) -> object:
    main(list(argv))
    return json.loads(capsys.readouterr().out)


class TestParseKnown:
    def test_pairs(self) -> None:
        assert parse_known(["category=interior", " size = small "]) == {
            "category": "interior", "size": "small",
        }

    def test_bad_pair(self) -> None:
        with pytest.raises(InputError, match="KEY=VALUE"):
            parse_known(["category"])


class TestToolCallFor:
    def test_rank(self) -> None:
        args = parse_args(["rank", "--region", "Sydney", "--quality", "2"])
        name, arguments = tool_call_for(args)
        assert name == "rank_painters"
        assert arguments["region"] == "Sydney"
        assert arguments["preferences"] == {"quality": 2.0}
        assert arguments["limit"] == 5

    def test_analyze(self) -> None:
        args = parse_args([
            "analyze", "paint my fence", "--known", "category=exterior",
            "--facet", "price_factors", "--facet", "classification",
        ])
        name, arguments = tool_call_for(args)
        assert name == "analyze_job_description"
        assert arguments["known_details"] == {"category": "exterior"}
        assert arguments["facets"] == ["price_factors", "classification"]

    def test_call_requires_json_object(self) -> None:
        with pytest.raises(InputError, match="JSON object"):
            tool_call_for(parse_args(["call", "get_job", "--args", "[1]"]))
        with pytest.raises(InputError, match="not valid JSON"):
            tool_call_for(parse_args(["call", "get_job", "--args", "{oops"]))


class TestMain:
    def test_import_then_rank(
        self, config: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        csv_path = tmp_path / "painters.csv"
        csv_path.write_text(
            "record_id,company_name,region,star_rating,number_of_reviews,rejection_rate\n"
            "1,Brush Co,Sydney,4.8,12,10\n"
            "2,Roller Bros,Sydney,3.1,1,40\n"
        )
        imported = _run(capsys, "import", "painters", str(csv_path), "--config", str(config))
        assert imported == {"table": "painters", "imported": 2}

        ranked = _run(capsys, "rank", "--region", "sydney", "--config", str(config))
        assert [p["id"] for p in ranked["painters"]] == ["1", "2"]  # type: ignore[index]

    def test_analyze(self, config: Path, capsys: pytest.CaptureFixture[str]) -> None:
        result = _run(capsys, "analyze", "paint my 2 bedrooms", "--config", str(config))
        assert result["classification"]["size"] == "medium"  # type: ignore[index]
        assert result["confidence"] == "low"  # type: ignore[index]

    def test_doc(self, config: Path, capsys: pytest.CaptureFixture[str]) -> None:
        result = _run(capsys, "doc", "Painting", "--config", str(config))
        assert result["text"] == "Ask about ceilings."  # type: ignore[index]

    def test_tools(self, config: Path, capsys: pytest.CaptureFixture[str]) -> None:
        result = _run(capsys, "tools", "--config", str(config))
        assert "analyze_job_description" in {t["name"] for t in result}  # type: ignore[attr-defined]

    def test_input_error_exits_1(
        self, config: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        with pytest.raises(SystemExit) as exc:
            main(["analyze", "hi", "--config", str(config)])
        assert exc.value.code == 1
        assert "at least 5" in capsys.readouterr().err

    def test_missing_config_exits_1(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc:
            main(["tools", "--config", str(tmp_path / "missing.yaml")])
        assert exc.value.code == 1

    def test_store_failure_exits_2(
        self, config: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        from src.core.db import init_db

        conn = init_db(tmp_path / "cli.db")
        conn.execute("DROP TABLE painters")
        conn.execute("CREATE TABLE painters (legacy TEXT)")
        conn.commit()
        conn.close()
        with pytest.raises(SystemExit) as exc:
            main(["rank", "--region", "Sydney", "--config", str(config)])
        assert exc.value.code == 2
        assert "Record store unavailable" in capsys.readouterr().err

    def test_unopenable_database_exits_2(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text(f"database:\n  path: {tmp_path}\n")
        with pytest.raises(SystemExit) as exc:
            main(["rank", "--region", "Sydney", "--config", str(path)])
        assert exc.value.code == 2
        assert "Record store unavailable during init_db" in capsys.readouterr().err
