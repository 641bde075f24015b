"""Configuration file support for go-sortimports."""

from dataclasses import dataclass
from dataclasses import replace
from pathlib import Path
import tomllib
from typing import Any, Dict, Optional

from go_sortimports.errors import ConfigError

CONFIG_FILE = ".sortimports.toml"
STRATEGIES = ("heuristic", "go-list")
FORMATTERS = ("gofmt", "gofumpt", "none")


@dataclass(frozen=True)
class Config:
    local_prefix: Optional[str] = None
    strategy: str = "heuristic"
    formatter: str = "gofmt"

    def override(self, **options: Optional[str]) -> "Config":
        """Return a copy with every option that is not None replaced."""
        return replace(self, **{key: value for key, value in options.items() if value is not None})


def _load_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"cannot read {path}: {exc}") from exc


def read_config(root: str) -> Config:
    """Read settings from .sortimports.toml, or [tool.sortimports] in pyproject.toml."""
    root_path = Path(root)
    data: Dict[str, Any] = {}

    config_path = root_path / CONFIG_FILE
    toml_path = root_path / "pyproject.toml"
    if config_path.exists():
        data = _load_toml(config_path)
    elif toml_path.exists():
        data = _load_toml(toml_path).get("tool", {}).get("sortimports", {})
        config_path = toml_path

    config = Config(
        local_prefix=data.get("local-prefix"),
        strategy=data.get("strategy", Config.strategy),
        formatter=data.get("formatter", Config.formatter),
    )
    if config.local_prefix is not None and not isinstance(config.local_prefix, str):
        raise ConfigError(f"{config_path}: local-prefix must be a string")
    if config.strategy not in STRATEGIES:
        raise ConfigError(f"{config_path}: unknown strategy {config.strategy!r}")
    if config.formatter not in FORMATTERS:
        raise ConfigError(f"{config_path}: unknown formatter {config.formatter!r}")
    return config
