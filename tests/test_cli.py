"""Smoke tests for the CLI."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner
from garden.cli import app
from garden.config import GardenConfig, GardenSectionConfig
from garden.layout import init_garden
from garden.lifecycle import plant

PLANTED = "2024-01-01T00:00:00.000Z"


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _no_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("GARDEN_ROOT", "GARDEN_STORE", "GARDEN_TEMPLATES"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def garden(tmp_path: Path) -> Path:
    """An initialized garden root."""
    init_garden(GardenConfig(garden=GardenSectionConfig(root=str(tmp_path))))
    return tmp_path


def _seed(root: Path, *titles: str) -> None:
    config = GardenConfig(garden=GardenSectionConfig(root=str(root)))
    for title in titles:
        plant(config, title, f"<p>{title}</p>", timestamp=PLANTED)


def _store(root: Path) -> list[dict]:
    return json.loads((root / "posts.json").read_text(encoding="utf-8"))


class TestCLI:
    def test_main_help(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "sync" in result.output

    def test_main_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "garden" in result.output


class TestMenu:
    def test_shows_menu_and_exits(self, runner: CliRunner, garden: Path) -> None:
        result = runner.invoke(app, ["--root", str(garden)], input="5\n")
        assert result.exit_code == 0
        assert "Digital Garden Admin CLI" in result.output
        assert "Add new seed" in result.output
        assert not (garden / "posts.json").exists()

    def test_invalid_option(self, runner: CliRunner, garden: Path) -> None:
        result = runner.invoke(app, ["--root", str(garden)], input="9\n")
        assert result.exit_code == 0
        assert "Invalid choice" in result.output

    def test_add_seed(self, runner: CliRunner, garden: Path) -> None:
        result = runner.invoke(
            app,
            ["--root", str(garden)],
            input="1\nIdea A\n<p>Hello</p>\nideas, , notes\nhttps://a.example\n",
        )
        assert result.exit_code == 0
        assert "Seed post created at seeds/idea-a.html" in result.output

        posts = _store(garden)
        assert len(posts) == 1
        assert posts[0]["stage"] == "seed"
        assert posts[0]["tags"] == ["ideas", "notes"]
        assert posts[0]["links"] == ["https://a.example"]
        assert posts[0]["dates"]["growingStarted"] is None
        assert (garden / "seeds" / "idea-a.html").exists()

    def test_grow_selected_post(self, runner: CliRunner, garden: Path) -> None:
        _seed(garden, "Idea A", "Idea B")

        result = runner.invoke(app, ["--root", str(garden)], input="2\n2\n")

        assert result.exit_code == 0
        assert "Available seed posts:" in result.output
        assert "1) Idea A" in result.output
        assert "moved to growing stage" in result.output
        stages = {p["title"]: p["stage"] for p in _store(garden)}
        assert stages == {"Idea A": "seed", "Idea B": "growing"}
        assert (garden / "growing" / "idea-b.html").exists()
        assert not (garden / "seeds" / "idea-b.html").exists()

    def test_harvest_with_no_growing_posts(self, runner: CliRunner, garden: Path) -> None:
        _seed(garden, "Idea A")
        result = runner.invoke(app, ["--root", str(garden)], input="3\n")
        assert result.exit_code == 0
        assert 'No posts in stage "growing"' in result.output

    def test_abandon_lists_stage(self, runner: CliRunner, garden: Path) -> None:
        _seed(garden, "Idea A")
        result = runner.invoke(app, ["--root", str(garden)], input="4\n1\n")
        assert result.exit_code == 0
        assert "1) [seed] Idea A" in result.output
        assert _store(garden)[0]["stage"] == "abandoned"
        assert (garden / "abandoned" / "idea-a.html").exists()

    @pytest.mark.parametrize("pick", ["0", "7", "abc", ""])
    def test_invalid_selection_aborts(self, runner: CliRunner, garden: Path, pick: str) -> None:
        _seed(garden, "Idea A")
        before = (garden / "posts.json").read_text(encoding="utf-8")

        result = runner.invoke(app, ["--root", str(garden)], input=f"2\n{pick}\n")

        assert result.exit_code == 0
        assert "Invalid choice." in result.output
        assert (garden / "posts.json").read_text(encoding="utf-8") == before
        assert (garden / "seeds" / "idea-a.html").exists()

    def test_corrupt_store_reports_error(self, runner: CliRunner, garden: Path) -> None:
        (garden / "posts.json").write_text("not json", encoding="utf-8")
        result = runner.invoke(app, ["--root", str(garden)], input="2\n")
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_missing_template_reports_error(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(app, ["--root", str(tmp_path)], input="1\nIdea A\nx\n\n\n")
        assert result.exit_code == 1
        assert "Template not found" in result.output
        assert not (tmp_path / "posts.json").exists()


class TestSyncCommand:
    def test_sync_updates_store(self, runner: CliRunner, garden: Path) -> None:
        _seed(garden, "Idea A")
        path = garden / "seeds" / "idea-a.html"
        path.write_text(
            path.read_text(encoding="utf-8").replace("<p>Idea A</p>", "<p>Edited</p>"),
            encoding="utf-8",
        )

        result = runner.invoke(app, ["--root", str(garden), "sync"])

        assert result.exit_code == 0
        assert "Synced content for: Idea A" in result.output
        assert _store(garden)[0]["content"] == "<p>Edited</p>"
        assert _store(garden)[0]["dates"]["lastUpdated"] != PLANTED

    def test_sync_reports_skips(self, runner: CliRunner, garden: Path) -> None:
        _seed(garden, "Idea A")
        (garden / "growing" / "stray.html").write_text(
            '<title>Stray</title><div id="content">x</div>', encoding="utf-8"
        )

        result = runner.invoke(app, ["--root", str(garden), "sync"])

        assert result.exit_code == 0
        assert "Skipped files" in result.output
        assert "1 synced, 1 skipped" in result.output


class TestListCommand:
    def test_lists_posts(self, runner: CliRunner, garden: Path) -> None:
        _seed(garden, "Idea A", "Idea B")
        result = runner.invoke(app, ["--root", str(garden), "list"])
        assert result.exit_code == 0
        assert "Idea A" in result.output
        assert "Idea B" in result.output
        assert "2024-01-01" in result.output

    def test_filter_by_stage(self, runner: CliRunner, garden: Path) -> None:
        _seed(garden, "Idea A")
        result = runner.invoke(app, ["--root", str(garden), "list", "--stage", "growing"])
        assert result.exit_code == 0
        assert "No posts found" in result.output

    def test_store_option(self, runner: CliRunner, garden: Path) -> None:
        (garden / "archive.json").write_text(
            json.dumps([{"title": "Archived", "stage": "harvested"}]), encoding="utf-8"
        )
        result = runner.invoke(app, ["--root", str(garden), "--store", "archive.json", "list"])
        assert result.exit_code == 0
        assert "Archived" in result.output

    def test_hand_edited_dates(self, runner: CliRunner, garden: Path) -> None:
        (garden / "posts.json").write_text(
            json.dumps([{"title": "Odd", "tags": None, "dates": {"lastUpdated": 1704067200000}}]),
            encoding="utf-8",
        )
        result = runner.invoke(app, ["--root", str(garden), "list"])
        assert result.exit_code == 0
        assert "Odd" in result.output

    def test_empty_store(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(app, ["--root", str(tmp_path), "list"])
        assert result.exit_code == 0
        assert "No posts found" in result.output


class TestInitCommand:
    def test_init_creates_layout(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(app, ["--root", str(tmp_path), "init"])
        assert result.exit_code == 0
        assert (tmp_path / "seeds").is_dir()
        assert (tmp_path / "templates" / "seed-template.html").exists()

    def test_init_twice(self, runner: CliRunner, garden: Path) -> None:
        result = runner.invoke(app, ["--root", str(garden), "init"])
        assert result.exit_code == 0
        assert "already initialized" in result.output
