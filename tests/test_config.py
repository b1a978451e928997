from pathlib import Path

import pytest

from orgraph.config import DEFAULT_CONFIG, config_from_dict, find_config, load_config


def test_empty_config_keeps_defaults() -> None:
    config = config_from_dict({})

    assert config == DEFAULT_CONFIG
    assert config.history_limit == 100
    assert config.span.healthy == 8
    assert config.layout.default.node_separation == 240


def test_toml_overrides_only_named_keys(tmp_path: Path) -> None:
    path = tmp_path / "orgraph.toml"
    path.write_text(
        "[history]\nlimit = 20\n\n"
        "[span]\nhealthy = 5\nhigh = 7\n\n"
        "[layout.cleanup.spacious]\nnode_separation = 320\n",
        encoding="utf-8",
    )
    config = load_config(path)

    assert config.history_limit == 20
    assert (config.span.healthy, config.span.high) == (5, 7)
    assert config.layout.spacious.node_separation == 320
    assert config.layout.spacious.rank_separation == 350
    assert config.layout.compact == DEFAULT_CONFIG.layout.compact
    assert config.duplicates == DEFAULT_CONFIG.duplicates


def test_yaml_config(tmp_path: Path) -> None:
    path = tmp_path / "orgraph.yml"
    path.write_text(
        "duplicates:\n  strong_match: 0.95\nanalysis:\n  max_paths: 3\n",
        encoding="utf-8",
    )
    config = load_config(path)

    assert config.duplicates.strong_match == 0.95
    assert config.duplicates.review_match == 0.7
    assert config.analysis.max_paths == 3


def test_empty_yaml_file_is_default(tmp_path: Path) -> None:
    path = tmp_path / "orgraph.yaml"
    path.write_text("", encoding="utf-8")

    assert load_config(path) == DEFAULT_CONFIG


def test_yaml_list_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "orgraph.yml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid configuration"):
        load_config(path)


@pytest.mark.parametrize(
    ("data", "message"),
    [
        ({"history": {"limit": 0}}, "history.limit must be a positive integer"),
        ({"history": {"limit": True}}, "history.limit must be a positive integer"),
        ({"span": {"healthy": "eight"}}, "span.healthy must be a number"),
        ({"span": {"healthy": 7.5}}, "span.healthy must be an integer"),
        ({"span": {"healthy": 12}}, "span.healthy must not exceed span.high"),
        ({"layout": {"default": 5}}, "layout.default must be a table"),
    ],
)
def test_invalid_values_raise(data: dict, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        config_from_dict(data)


def test_config_from_dict_leaves_input_untouched() -> None:
    data = {"layout": {"cleanup": {"compact": {"margin_x": 90}}}}
    config = config_from_dict(data)

    assert config.layout.compact.margin_x == 90
    assert "cleanup" in data["layout"]


def test_find_config_walks_up(tmp_path: Path) -> None:
    (tmp_path / "orgraph.toml").write_text("", encoding="utf-8")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)

    assert find_config(nested) == (tmp_path / "orgraph.toml").resolve()


def test_find_config_prefers_toml(tmp_path: Path) -> None:
    (tmp_path / "orgraph.yml").write_text("", encoding="utf-8")
    (tmp_path / "orgraph.toml").write_text("", encoding="utf-8")

    assert find_config(tmp_path).name == "orgraph.toml"
