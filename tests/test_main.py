"""
Tests for the command line entry point.
"""

import json

import pytest

from jsonconfig.main import build_parser, main


@pytest.fixture
def config_files(tmp_path, write_json):
    default = write_json(tmp_path / "default.json", {"Ui": {"Theme": "dark", "Size": 12}, "Plugins": ["core"]})
    user = write_json(tmp_path / "app.json", {"Ui": {"Theme": "light"}, "Plugins": ["extra"]})
    return default, user


class TestMain:
    """Printing the effective configuration."""

    def test_prints_effective_tree(self, config_files, capsys):
        default, user = config_files

        assert main([str(user), "--default", str(default)]) == 0

        output = json.loads(capsys.readouterr().out)
        assert output == {"Ui": {"Theme": "light", "Size": 12}, "Plugins": ["extra", "core"]}

    def test_without_default(self, config_files, capsys):
        _, user = config_files

        assert main([str(user)]) == 0

        assert json.loads(capsys.readouterr().out) == {"Ui": {"Theme": "light"}, "Plugins": ["extra"]}

    def test_get_single_value(self, config_files, capsys):
        default, user = config_files

        assert main([str(user), "--default", str(default), "--get", "Ui.Size"]) == 0
        assert capsys.readouterr().out.strip() == "12"

    def test_get_missing_value(self, config_files, capsys):
        default, user = config_files

        assert main([str(user), "--default", str(default), "--get", "Ui.Missing.Deep"]) == 0
        assert capsys.readouterr().out.strip() == "null"

    def test_missing_user_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.json")]) == 1
        assert "error:" in capsys.readouterr().err

    def test_colliding_files(self, tmp_path, write_json, capsys):
        default = write_json(tmp_path / "default.json", {"Ui": {"Theme": "dark"}})
        user = write_json(tmp_path / "app.json", {"Ui": "light"})

        assert main([str(user), "--default", str(default)]) == 1
        assert "error:" in capsys.readouterr().err


class TestParser:
    """Argument parsing."""

    def test_defaults(self):
        args = build_parser().parse_args(["app.json"])

        assert args.user_file == "app.json"
        assert args.default_file is None
        assert args.key is None
        assert not args.watch
        assert args.log_level == "WARNING"

    def test_requires_user_file(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])
