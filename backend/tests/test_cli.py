"""Tests for CLI tool.

Command handlers run against the in-memory test database via db_session;
main() is exercised with the session factory and handlers patched.
"""

import argparse
from unittest.mock import AsyncMock, MagicMock, Mock, patch

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from subway.cli import (
    COMMAND_HANDLERS,
    build_parser,
    cmd_create_station,
    cmd_list_lines,
    cmd_list_stations,
    cmd_show_line,
    main,
)
from subway.models import Line, Station


@pytest.fixture
async def line(db_session: AsyncSession, gangnam: Station, yeoksam: Station, jihacheol: Station) -> Line:
    """신분당선 running 강남역 -> 역삼역 -> 지하철역."""
    line = Line.create(name="신분당선", color="bg-red-600", up_station=gangnam, down_station=yeoksam, distance=10)
    line.add_section(yeoksam, jihacheol, 5)
    db_session.add(line)
    await db_session.commit()
    return line


@pytest.mark.asyncio
async def test_cmd_create_station(db_session: AsyncSession, capsys: pytest.CaptureFixture[str]) -> None:
    """Test create-station stores the station and reports its id."""
    exit_code = await cmd_create_station(argparse.Namespace(name="선릉역"), db_session)

    assert exit_code == 0
    station = (await db_session.execute(select(Station))).scalar_one()
    assert station.name == "선릉역"
    assert f"Created station {station.id}: 선릉역" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_cmd_list_stations_empty(db_session: AsyncSession, capsys: pytest.CaptureFixture[str]) -> None:
    """Test list-stations with no data."""
    assert await cmd_list_stations(argparse.Namespace(), db_session) == 0
    assert "No stations found" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_cmd_list_stations(
    db_session: AsyncSession,
    gangnam: Station,
    yeoksam: Station,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Test list-stations prints every station."""
    assert await cmd_list_stations(argparse.Namespace(), db_session) == 0

    out = capsys.readouterr().out
    assert "강남역" in out
    assert "역삼역" in out


@pytest.mark.asyncio
async def test_cmd_list_lines_empty(db_session: AsyncSession, capsys: pytest.CaptureFixture[str]) -> None:
    """Test list-lines with no data."""
    assert await cmd_list_lines(argparse.Namespace(), db_session) == 0
    assert "No lines found" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_cmd_list_lines(db_session: AsyncSession, line: Line, capsys: pytest.CaptureFixture[str]) -> None:
    """Test list-lines shows name, section count and distance."""
    assert await cmd_list_lines(argparse.Namespace(), db_session) == 0

    row = capsys.readouterr().out.splitlines()[-1]
    assert row.split() == [str(line.id), "신분당선", "bg-red-600", "2", "15"]


@pytest.mark.asyncio
async def test_cmd_show_line(db_session: AsyncSession, line: Line, capsys: pytest.CaptureFixture[str]) -> None:
    """Test show-line prints stations in route order and each section."""
    assert await cmd_show_line(argparse.Namespace(line_id=line.id), db_session) == 0

    out = capsys.readouterr().out
    assert "신분당선 (bg-red-600) - distance 15" in out
    assert "Stations: 강남역 -> 역삼역 -> 지하철역" in out
    assert "역삼역 -> 지하철역 (5)" in out


@pytest.mark.asyncio
async def test_cmd_show_line_not_found(db_session: AsyncSession, capsys: pytest.CaptureFixture[str]) -> None:
    """Test show-line reports unknown lines on stderr."""
    assert await cmd_show_line(argparse.Namespace(line_id=9), db_session) == 1
    assert "Line not found. Line id: 9" in capsys.readouterr().err


class TestMain:
    """Tests for the main entry point."""

    @staticmethod
    def _session_factory() -> Mock:
        session_cm = MagicMock()
        session_cm.__aenter__.return_value = MagicMock(spec=AsyncSession)
        return Mock(return_value=session_cm)

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that running without a command fails with usage."""
        assert main([]) == 1
        assert "usage:" in capsys.readouterr().out

    def test_parser_arguments(self) -> None:
        """Test subcommand argument parsing."""
        args = build_parser().parse_args(["show-line", "3"])
        assert args.command == "show-line"
        assert args.line_id == 3

    def test_dispatches_to_handler(self) -> None:
        """Test that commands run inside a session and return the handler's exit code."""
        handler = AsyncMock(return_value=0)

        with (
            patch.dict(COMMAND_HANDLERS, {"list-lines": handler}),
            patch("subway.cli.get_session_factory", return_value=self._session_factory()),
        ):
            assert main(["list-lines"]) == 0

        handler.assert_awaited_once()
        assert handler.call_args[0][0].command == "list-lines"

    def test_unexpected_error_returns_1(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that handler exceptions are reported instead of raised."""
        handler = AsyncMock(side_effect=RuntimeError("connection refused"))

        with (
            patch.dict(COMMAND_HANDLERS, {"list-stations": handler}),
            patch("subway.cli.get_session_factory", return_value=self._session_factory()),
        ):
            assert main(["list-stations"]) == 1

        assert "Unexpected error: connection refused" in capsys.readouterr().err

    def test_init_db(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test init-db creates tables through the engine."""
        conn = AsyncMock()
        begin_ctx = AsyncMock()
        begin_ctx.__aenter__.return_value = conn
        engine = Mock()
        engine.begin.return_value = begin_ctx

        with patch("subway.cli.get_engine", return_value=engine):
            assert main(["init-db"]) == 0

        conn.run_sync.assert_awaited_once()
        assert "Database tables created" in capsys.readouterr().out
