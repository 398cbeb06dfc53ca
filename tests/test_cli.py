"""
Tests for lazyinstaller.cli module.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from lazyinstaller.cli import main
from lazyinstaller.exceptions import VersionFetchError
from lazyinstaller.results import UpdateResult


def run(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


def fake_result(status="installed", action="install"):
    return UpdateResult(
        app_name="Helium Browser",
        app_id="helium-browser",
        action=action,
        installed_version="0.0.0",
        available_version="0.4.7.1",
        install_dir=Path("/opt/helium-browser"),
        launcher_path=Path("/usr/bin/helium-browser"),
        status=status,
    )


class TestUpdateCommand:
    """Tests for 'lazyinstaller update'."""

    def test_success(self, create_yaml_file, github_recipe_data, capsys):
        recipe = create_yaml_file("r.yaml", github_recipe_data)
        with patch("lazyinstaller.cli.update_app", return_value=fake_result()) as upd:
            assert run(["update", str(recipe), "-y"]) == 0

        _, kwargs = upd.call_args
        assert kwargs["confirm"] is None
        assert kwargs["check_only"] is False
        out = capsys.readouterr().out
        assert "UPDATE RESULTS" in out
        assert "[SUCCESS]" in out

    def test_check(self, create_yaml_file, github_recipe_data):
        recipe = create_yaml_file("r.yaml", github_recipe_data)
        with patch(
            "lazyinstaller.cli.update_app", return_value=fake_result("available")
        ) as upd:
            assert run(["update", "--check", str(recipe)]) == 0
        assert upd.call_args.kwargs["check_only"] is True

    def test_prompt_used_without_yes(self, create_yaml_file, github_recipe_data):
        recipe = create_yaml_file("r.yaml", github_recipe_data)
        with patch("lazyinstaller.cli.update_app", return_value=fake_result()) as upd:
            run(["update", str(recipe)])
        assert callable(upd.call_args.kwargs["confirm"])

    def test_error_exit_code(self, create_yaml_file, github_recipe_data, capsys):
        recipe = create_yaml_file("r.yaml", github_recipe_data)
        with patch(
            "lazyinstaller.cli.update_app", side_effect=VersionFetchError("offline")
        ):
            assert run(["update", str(recipe), "-y"]) == 1
        assert "Error: offline" in capsys.readouterr().err

    def test_interrupted(self, create_yaml_file, github_recipe_data):
        recipe = create_yaml_file("r.yaml", github_recipe_data)
        with patch("lazyinstaller.cli.update_app", side_effect=KeyboardInterrupt):
            assert run(["update", str(recipe), "-y"]) == 130

    def test_missing_recipe(self, tmp_test_dir):
        assert run(["update", str(tmp_test_dir / "none.yaml")]) == 1


class TestValidateCommand:
    """Tests for 'lazyinstaller validate'."""

    def test_valid(self, create_yaml_file, github_recipe_data, capsys):
        recipe = create_yaml_file("r.yaml", github_recipe_data)
        assert run(["validate", str(recipe)]) == 0
        assert "[SUCCESS] Recipe is valid!" in capsys.readouterr().out

    def test_invalid(self, create_yaml_file, capsys):
        recipe = create_yaml_file("r.yaml", {"app": {}})
        assert run(["validate", str(recipe)]) == 1
        assert "[FAILED]" in capsys.readouterr().out


class TestFlagsCommand:
    """Tests for 'lazyinstaller flags'."""

    def test_prints_arguments(
        self, create_yaml_file, github_recipe_data, tmp_test_dir, monkeypatch, capsys
    ):
        etc = tmp_test_dir / "etc"
        etc.mkdir()
        (etc / "helium-browser-flags.conf").write_text(
            "--ozone-platform=wayland\n--evil $(rm -rf /)\n"
        )
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_test_dir / "cfg"))
        monkeypatch.setenv("HELIUM_USER_FLAGS", "--incognito")
        recipe = create_yaml_file("r.yaml", github_recipe_data)

        assert run(["flags", str(recipe), "--new-window", "a b"]) == 0

        captured = capsys.readouterr()
        assert captured.out.splitlines() == [
            str(tmp_test_dir / "opt" / "helium-browser" / "helium-browser.AppImage"),
            "--ozone-platform=wayland",
            "--incognito",
            "--new-window",
            "a b",
        ]
        assert "ignoring unsafe line 2" in captured.err
