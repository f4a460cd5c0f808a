import json
from pathlib import Path

from typer.testing import CliRunner

from fantasy_football_tiers.cli.app import app

runner = CliRunner()

_PLAYERS = [
    {"id": "1", "name": "Bijan Robinson", "team": "ATL", "position": "RB", "averageRank": 1.2},
    {"id": "2", "name": "Jahmyr Gibbs", "team": "DET", "position": "RB", "averageRank": 2.0},
    {"id": "3", "name": "Saquon Barkley", "team": "PHI", "position": "RB", "averageRank": 3.1},
    {"id": "4", "name": "Derrick Henry", "team": "BAL", "position": "RB", "averageRank": 10.5},
    {"id": "5", "name": "Josh Jacobs", "team": "GB", "position": "RB", "averageRank": 11.0},
    {"id": "6", "name": "Kyren Williams", "team": "LAR", "position": "RB", "averageRank": 25.0},
]


def _write(tmp_path: Path, payload: object) -> Path:
    path = tmp_path / "players.json"
    path.write_text(json.dumps(payload))
    return path


class TestTiersCommand:
    def test_prints_tiers(self, tmp_path: Path) -> None:
        path = _write(tmp_path, _PLAYERS)
        result = runner.invoke(
            app,
            ["tiers", str(path), "--tiers", "3", "--algorithm", "rank-gap", "--config", str(tmp_path / "none.yaml")],
        )
        assert result.exit_code == 0, result.output
        assert "rank-gap" in result.output
        assert "Elite" in result.output
        assert "Bijan Robinson" in result.output

    def test_accepts_players_envelope(self, tmp_path: Path) -> None:
        path = _write(tmp_path, {"players": _PLAYERS})
        result = runner.invoke(
            app, ["tiers", str(path), "--scoring", "half", "-c", "RB", "--config", str(tmp_path / "none.yaml")]
        )
        assert result.exit_code == 0, result.output
        assert "HALF_PPR" in result.output

    def test_bad_record_exits_with_error(self, tmp_path: Path) -> None:
        path = _write(tmp_path, [{"name": "No Rank"}])
        result = runner.invoke(app, ["tiers", str(path), "--config", str(tmp_path / "none.yaml")])
        assert result.exit_code == 1

    def test_unknown_scoring_format_exits_with_error(self, tmp_path: Path) -> None:
        path = _write(tmp_path, _PLAYERS)
        result = runner.invoke(app, ["tiers", str(path), "--scoring", "2qb", "--config", str(tmp_path / "none.yaml")])
        assert result.exit_code == 1

    def test_non_finite_rank_exits_with_error(self, tmp_path: Path) -> None:
        path = _write(tmp_path, [*_PLAYERS, {"id": "7", "name": "Bad Feed", "averageRank": "NaN"}])
        result = runner.invoke(app, ["tiers", str(path), "--config", str(tmp_path / "none.yaml")])
        assert result.exit_code == 1
