"""Tests for CLI memory admin commands."""

import asyncio
from datetime import datetime

import pytest
import typer

from finrecall.cli.memory_cmd import (
    _format_timestamp,
    _parse_before,
    _parse_type,
    clean_command,
    init_command,
    query_command,
    view_command,
)
from finrecall.memory.persistent import MEMORY_COLLECTION_NAME
from finrecall.memory.schema import MemoryType


def _seed(store, *records):
    async def add_all():
        for record in records:
            await store.add_memory(record)

    asyncio.run(add_all())


def _rows(vector_database):
    return vector_database.collections[MEMORY_COLLECTION_NAME]["rows"]


class TestParsers:
    def test_format_timestamp(self):
        expected = datetime.fromtimestamp(1.5).strftime("%Y-%m-%d %H:%M:%S")
        assert _format_timestamp(1500) == expected

    def test_parse_type(self):
        assert _parse_type(None) is None
        assert _parse_type("routing_decision") is MemoryType.ROUTING_DECISION

    def test_parse_type_unknown(self):
        with pytest.raises(typer.BadParameter, match="registration_step"):
            _parse_type("gossip")

    def test_parse_before_epoch_ms(self):
        assert _parse_before("1700000000000") == 1_700_000_000_000

    def test_parse_before_iso_date(self):
        expected = int(datetime(2024, 1, 15).timestamp() * 1000)
        assert _parse_before("2024-01-15") == expected

    def test_parse_before_invalid(self):
        with pytest.raises(typer.BadParameter):
            _parse_before("last tuesday")


class TestInit:
    def test_creates_collection(self, patched_store, vector_database, capsys):
        init_command()

        assert MEMORY_COLLECTION_NAME in vector_database.collections
        assert "is ready" in capsys.readouterr().out

    def test_database_unreachable(self, patched_store, vector_database):
        vector_database.fail = True

        with pytest.raises(typer.Exit) as exc_info:
            init_command()

        assert exc_info.value.exit_code == 1

    def test_invalid_config(self, tmp_config_path):
        tmp_config_path.write_text("coordinator: [unbalanced")

        with pytest.raises(typer.Exit) as exc_info:
            init_command(config_path=str(tmp_config_path))

        assert exc_info.value.exit_code == 1


class TestView:
    def test_lists_user_memories(self, patched_store, make_record, capsys):
        _seed(
            patched_store.store,
            make_record("Prefers weekly summaries"),
            make_record("Someone else", user_id="u2"),
        )

        view_command("u1")

        out = capsys.readouterr().out
        assert "Prefers weekly summaries" in out
        assert "Someone else" not in out

    def test_type_filter(self, patched_store, make_record, capsys):
        _seed(
            patched_store.store,
            make_record("Prefers weekly summaries"),
            make_record("Paid rent", type=MemoryType.ACTION),
        )

        view_command("u1", memory_type="action")

        out = capsys.readouterr().out
        assert "Paid rent" in out
        assert "weekly" not in out

    def test_no_memories(self, patched_store, capsys):
        view_command("nobody")

        assert "No memories stored for nobody" in capsys.readouterr().out

    def test_database_failure(self, patched_store, vector_database):
        vector_database.fail = True

        with pytest.raises(typer.Exit):
            view_command("u1")


class TestQuery:
    def test_finds_similar_memories(self, patched_store, make_record, capsys):
        _seed(patched_store.store, make_record("prefers monthly budget review"))

        query_command("u1", "monthly budget")

        out = capsys.readouterr().out
        assert "prefers monthly budget review" in out
        assert "0.707" in out

    def test_min_score_override(self, patched_store, make_record, capsys):
        _seed(patched_store.store, make_record("prefers monthly budget review"))

        query_command("u1", "monthly budget", min_score=0.9)

        assert "No matching memories" in capsys.readouterr().out


class TestClean:
    def test_refuses_without_criteria(self, patched_store, vector_database):
        with pytest.raises(typer.Exit) as exc_info:
            clean_command(yes=True)

        assert exc_info.value.exit_code == 1
        assert vector_database.deleted_where == []

    def test_deletes_matching(self, patched_store, vector_database, make_record, capsys):
        _seed(
            patched_store.store,
            make_record("old", timestamp=1000),
            make_record("new", timestamp=5000),
        )

        clean_command(user_id="u1", before="2000", yes=True)

        assert [r["document"] for r in _rows(vector_database)] == ["new"]
        assert "Deleted memories where user=u1" in capsys.readouterr().out

    def test_aborts_when_not_confirmed(self, patched_store, vector_database, monkeypatch):
        monkeypatch.setattr(typer, "confirm", lambda *args, **kwargs: False)

        with pytest.raises(typer.Exit) as exc_info:
            clean_command(memory_type="conversation")

        assert exc_info.value.exit_code == 0
        assert vector_database.deleted_where == []

    def test_confirmed(self, patched_store, vector_database, monkeypatch):
        monkeypatch.setattr(typer, "confirm", lambda *args, **kwargs: True)

        clean_command(memory_type="conversation")

        assert vector_database.deleted_where == [{"type": {"$eq": "conversation"}}]

    def test_database_failure(self, patched_store, vector_database):
        vector_database.fail = True

        with pytest.raises(typer.Exit) as exc_info:
            clean_command(user_id="u1", yes=True)

        assert exc_info.value.exit_code == 1
