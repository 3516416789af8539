"""Configuration Management Package"""

import fnmatch
import json
import os
import sys
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Valid configuration values
VALID_PROVIDERS = {"auto", "claude", "ollama", "openai", "groq", "gemini"}
VALID_STYLES = {"simple", "conventional", "detailed"}

# Environment variables, highest precedence after CLI args
ENV_PROVIDER = "PUSHSCRIPT_LLM_PROVIDER"
ENV_MODEL = "PUSHSCRIPT_LLM_MODEL"
ENV_API_KEY = "PUSHSCRIPT_LLM_API_KEY"

# "anthropic" is accepted as an alias for the claude provider
PROVIDER_ALIASES = {"anthropic": "claude"}


@dataclass
class Config:
    """User configuration with sensible defaults."""
    provider: str = "auto"
    model: Optional[str] = None
    style: str = "conventional"
    include_body: bool = True
    max_subject_length: int = 72
    default_branch: str = "main"
    scan_secrets: bool = True
    confirm_push: bool = True
    disabled_patterns: list[str] = field(default_factory=list)
    ignore_paths: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}

    def validate(self) -> list[str]:
        """Validate config values and return list of warnings.

        Invalid values are replaced with defaults after warning.
        """
        warnings = []
        defaults = Config()

        self.provider = PROVIDER_ALIASES.get(self.provider, self.provider)
        if self.provider not in VALID_PROVIDERS:
            warnings.append(f"Invalid provider '{self.provider}', using '{defaults.provider}'")
            self.provider = defaults.provider

        if self.style not in VALID_STYLES:
            warnings.append(f"Invalid style '{self.style}', using '{defaults.style}'")
            self.style = defaults.style

        if not isinstance(self.max_subject_length, int) or self.max_subject_length <= 0:
            warnings.append(f"Invalid max_subject_length '{self.max_subject_length}', using {defaults.max_subject_length}")
            self.max_subject_length = defaults.max_subject_length

        if not isinstance(self.default_branch, str) or not self.default_branch.strip():
            warnings.append(f"Invalid default_branch '{self.default_branch}', using '{defaults.default_branch}'")
            self.default_branch = defaults.default_branch

        for name in ("disabled_patterns", "ignore_paths"):
            value = getattr(self, name)
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                warnings.append(f"Invalid {name} '{value}', expected a list of strings")
                setattr(self, name, [])

        return warnings

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        config = cls(**filtered)
        for warning in config.validate():
            print(f"Config warning: {warning}", file=sys.stderr)
        return config


class ConfigManager:
    """Manages loading and saving configuration."""

    CONFIG_FILENAME = ".pushscript.json"

    def __init__(self):
        self._config: Optional[Config] = None
        self._config_path: Optional[Path] = None

    def load(self) -> Config:
        if self._config is not None:
            return self._config

        for path in (Path.cwd() / self.CONFIG_FILENAME, Path.home() / self.CONFIG_FILENAME):
            if path.exists():
                self._config = self._load_from_file(path)
                self._config_path = path
                return self._config

        self._config = Config()
        return self._config

    def _load_from_file(self, path: Path) -> Config:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("top-level value must be an object")
            return Config.from_dict(data)
        except (json.JSONDecodeError, ValueError, OSError) as e:
            print(f"Warning: Could not load {path}: {e}", file=sys.stderr)
            return Config()

    def save(self, config: Config, global_config: bool = False) -> Path:
        path = Path.home() / self.CONFIG_FILENAME if global_config else Path.cwd() / self.CONFIG_FILENAME
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(config.to_dict(), f, indent=2)
        return path

    def get_config_path(self) -> Optional[Path]:
        return self._config_path


_manager = ConfigManager()


def load_config() -> Config:
    return _manager.load()


def get_config_path() -> Optional[Path]:
    return _manager.get_config_path()


def load_environment(path: str | None = None) -> bool:
    """Load a .env file into os.environ without overriding what is already set."""
    return load_dotenv(dotenv_path=path or Path.cwd() / ".env", override=False)


def resolve_provider_and_model(cli_provider: str | None, cli_model: str | None,
                               config: Config) -> tuple[str, str | None]:
    """Precedence: CLI args > environment variables > config file."""
    provider = cli_provider or os.environ.get(ENV_PROVIDER) or config.provider
    provider = PROVIDER_ALIASES.get(provider.lower(), provider.lower())
    model = cli_model or os.environ.get(ENV_MODEL) or config.model
    return provider, model


def apply_overrides(findings: list, config: Config) -> list:
    """Drop findings for disabled patterns or ignored paths."""
    disabled = set(config.disabled_patterns)
    return [
        f for f in findings
        if f.pattern_name not in disabled
        and not any(fnmatch.fnmatch(f.file, glob) for glob in config.ignore_paths)
    ]


__all__ = [
    "Config",
    "ConfigManager",
    "load_config",
    "get_config_path",
    "load_environment",
    "resolve_provider_and_model",
    "apply_overrides",
    "VALID_PROVIDERS",
    "VALID_STYLES",
    "ENV_PROVIDER",
    "ENV_MODEL",
    "ENV_API_KEY",
]
