"""Tests for pichu.config and pichu.config_loader."""

from pathlib import Path

import pytest

from pichu._errors import ConfigError
from pichu.config import PichuConfig
from pichu.config_loader import load_config


class TestPichuConfig:
    """PichuConfig — frozen dataclass with sensible defaults."""

    def test_defaults(self) -> None:
        config = PichuConfig()
        assert config.workers == 0
        assert config.debounce_ms == 200
        assert config.encoding == "utf-8"
        assert config.highlight_style == "default"
        assert config.max_workers is None

    def test_frozen(self) -> None:
        config = PichuConfig()
        with pytest.raises(AttributeError):
            config.workers = 4  # type: ignore[misc]

    def test_root_made_absolute(self) -> None:
        config = PichuConfig(root=Path("site"))
        assert config.root.is_absolute()

    def test_output_path_from_root(self, tmp_path: Path) -> None:
        config = PichuConfig(root=tmp_path)
        assert config.output_path == tmp_path / "dist"

    def test_absolute_output_preserved(self, tmp_path: Path) -> None:
        output = Path("/tmp/custom-output")
        config = PichuConfig(root=tmp_path, output=output)
        assert config.output_path == output

    def test_max_workers(self) -> None:
        assert PichuConfig(workers=3).max_workers == 3

    def test_negative_workers(self) -> None:
        with pytest.raises(ConfigError):
            PichuConfig(workers=-1)

    def test_zero_debounce(self) -> None:
        with pytest.raises(ConfigError):
            PichuConfig(debounce_ms=0)


class TestLoadConfig:
    """load_config — file config merged with overrides."""

    def test_no_file(self, tmp_path: Path) -> None:
        config = load_config(tmp_path)
        assert config == PichuConfig(root=tmp_path)

    def test_yaml(self, tmp_path: Path) -> None:
        (tmp_path / "pichu.yaml").write_text("workers: 4\noutput: public\n")
        config = load_config(tmp_path)
        assert config.workers == 4
        assert config.output_path == tmp_path / "public"

    def test_yaml_section(self, tmp_path: Path) -> None:
        (tmp_path / "pichu.yml").write_text("pichu:\n  debounce_ms: 500\n")
        assert load_config(tmp_path).debounce_ms == 500

    def test_toml(self, tmp_path: Path) -> None:
        (tmp_path / "pichu.toml").write_text('[pichu]\nhighlight_style = "monokai"\n')
        assert load_config(tmp_path).highlight_style == "monokai"

    def test_overrides_win(self, tmp_path: Path) -> None:
        (tmp_path / "pichu.yaml").write_text("workers: 4\n")
        assert load_config(tmp_path, workers=8).workers == 8

    def test_unknown_key(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Unknown config keys: port"):
            load_config(tmp_path, port=3000)

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        (tmp_path / "pichu.yaml").write_text("workers: [4\n")
        with pytest.raises(ConfigError, match="Failed to parse"):
            load_config(tmp_path)

    def test_non_mapping_yaml(self, tmp_path: Path) -> None:
        (tmp_path / "pichu.yaml").write_text("- just\n- a list\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(tmp_path)

    def test_malformed_toml(self, tmp_path: Path) -> None:
        (tmp_path / "pichu.toml").write_text("workers = \n")
        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_unknown_encoding(self, tmp_path: Path) -> None:
        (tmp_path / "pichu.yaml").write_text("encoding: klingon\n")
        with pytest.raises(ConfigError, match="unknown encoding"):
            load_config(tmp_path)
