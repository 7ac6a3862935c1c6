import pytest

from depmap.config import ConfigError, FormatConfig, load_project_config, parse_format_config

from conftest import write_files


def test_format_config_accessors():
    config = FormatConfig({"pretty": False, "depth": 3.0, "name": "x", "ratio": 2, "flag": 1})
    assert config.get_bool("pretty", True) is False
    assert config.get_bool("flag", True) is True
    assert config.get_bool("missing", True) is True
    assert config.get_int("depth", 0) == 3
    assert config.get_int("name", 7) == 7
    assert config.get_int("pretty", 7) == 7
    assert config.get_str("name", "") == "x"
    assert config.get_str("depth", "d") == "d"
    assert config.get_float("ratio", 0.0) == 2.0
    assert config.has("name")
    assert not config.has("missing")


def test_parse_format_config():
    assert parse_format_config(None) == {}
    assert parse_format_config('{"pretty": false}') == {"pretty": False}
    with pytest.raises(ConfigError):
        parse_format_config("{not json")
    with pytest.raises(ConfigError):
        parse_format_config("[1, 2]")


def test_defaults_without_config(tmp_path):
    config = load_project_config(tmp_path)
    assert config.exclude is None
    assert config.include_tests is False
    assert config.format is None
    assert config.formatter == {}


def test_depmap_toml_takes_precedence(tmp_path):
    write_files(
        tmp_path,
        {
            ".depmap.toml": """
                [depmap]
                exclude = ["gen"]
                components = true

                [depmap.formatter]
                pretty = false
            """,
            "pyproject.toml": """
                [tool.depmap]
                format = "d3js"
            """,
        },
    )
    config = load_project_config(tmp_path)
    assert config.exclude == ["gen"]
    assert config.components is True
    assert config.format is None
    assert config.formatter == {"pretty": False}


def test_pyproject_section(tmp_path):
    write_files(
        tmp_path,
        {
            "pyproject.toml": """
                [tool.depmap]
                format = "d3js"
                include_tests = true
            """,
        },
    )
    config = load_project_config(tmp_path)
    assert config.format == "d3js"
    assert config.include_tests is True


def test_invalid_toml_is_ignored(tmp_path):
    (tmp_path / ".depmap.toml").write_text("[depmap\n")
    assert load_project_config(tmp_path).format is None


def test_bad_exclude_type(tmp_path):
    write_files(tmp_path, {".depmap.toml": '[depmap]\nexclude = "gen"\n'})
    with pytest.raises(ConfigError):
        load_project_config(tmp_path)
