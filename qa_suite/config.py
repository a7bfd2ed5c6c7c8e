from __future__ import annotations
import json
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

USER_CFG = Path.home() / ".config" / "qa-suite" / "config.toml"
PROJECT_CFG = Path.cwd() / "qa-suite.toml"

PROVIDER_URLS: Dict[str, str] = {
    "gemini": "https://generativelanguage.googleapis.com/v1beta/openai/",
    "openai": "https://api.openai.com/v1",
    "local": "http://localhost:8080/v1",
}

# Settings field -> environment variables, first non-empty one wins
ENV_VARS: Dict[str, List[str]] = {
    "provider": ["QA_SUITE_PROVIDER"],
    "model": ["QA_SUITE_MODEL"],
    "base_url": ["QA_SUITE_BASE_URL"],
    "api_key": ["QA_SUITE_API_KEY", "API_KEY", "GEMINI_API_KEY"],
    "temperature": ["QA_SUITE_TEMPERATURE"],
    "max_tokens": ["QA_SUITE_MAX_TOKENS"],
    "timeout": ["QA_SUITE_TIMEOUT"],
}


class Settings(BaseModel):
    """Resolved settings for talking to the generation service."""
    provider: str = "gemini"
    model: str = "gemini-2.5-pro"
    base_url: Optional[str] = None
    api_key: Optional[str] = Field(None, repr=False)
    temperature: float = 0.2
    max_tokens: int = 8192
    timeout: float = 120.0

    def resolved_base_url(self) -> str:
        if self.base_url:
            return self.base_url
        return PROVIDER_URLS.get(self.provider, PROVIDER_URLS["local"])

    @property
    def is_hosted(self) -> bool:
        return self.provider != "local"


def _read_toml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("rb") as f:
        return tomllib.load(f)


def init_default_config(force: bool = False) -> Path:
    """Write a starter user config listing every setting at its default."""
    target = USER_CFG
    target.parent.mkdir(parents=True, exist_ok=True)
    if target.exists() and not force:
        return target

    lines = [
        "# qa-suite config (user)",
        "# Any of these can be overridden in a project-local ./qa-suite.toml",
        f"# provider: {' | '.join(PROVIDER_URLS)}",
        "# Prefer the QA_SUITE_API_KEY environment variable over storing keys here",
        "",
    ]
    for name, field in Settings.model_fields.items():
        if field.default is None:
            lines.append(f'# {name} = ""')
        else:
            lines.append(f"{name} = {json.dumps(field.default)}")
    target.write_text("\n".join(lines) + "\n")
    return target


def _coerce(name: str, v: Optional[str]) -> Any:
    """Convert an environment string to the type of the matching Settings field."""
    if v is None:
        return None
    annotation = Settings.model_fields[name].annotation
    if annotation in (int, float):
        try:
            return annotation(v)
        except ValueError:
            return None
    return v


def _env_layer() -> Dict[str, Any]:
    layer = {}
    for name, variables in ENV_VARS.items():
        raw = next((os.environ[var] for var in variables if os.environ.get(var)), None)
        layer[name] = _coerce(name, raw)
    return layer


def merged_config() -> Dict[str, Any]:
    """Settings defaults, then user file, then project file, then environment."""
    settings = Settings().model_dump()
    for layer in (_read_toml(USER_CFG), _read_toml(PROJECT_CFG), _env_layer()):
        settings.update({
            name: value for name, value in layer.items()
            if name in Settings.model_fields and value is not None
        })
    return settings


def load_settings(**overrides) -> Settings:
    """Merged config with explicit (e.g. command line) overrides applied last."""
    cfg = merged_config()
    cfg.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**cfg)
