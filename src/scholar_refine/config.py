"""Application configuration loaded from config.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

DEFAULT_INSTRUCTION = "Optimize for academic clarity and verify against the paper."


@dataclass(frozen=True)
class LLMConfig:
    model: str = "claude-sonnet-4-5-20250929"
    temperature: float = 0.1
    max_tokens: int = 4096
    # None leaves the SDK's own transport timeout in place
    timeout: float | None = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.temperature <= 1.0:
            raise ValueError(f"temperature must be between 0 and 1, got {self.temperature}")
        if self.max_tokens < 1:
            raise ValueError(f"max_tokens must be at least 1, got {self.max_tokens}")
        if self.timeout is not None and self.timeout < 1:
            raise ValueError(f"timeout must be at least 1 second, got {self.timeout}")


@dataclass(frozen=True)
class RefineConfig:
    default_instruction: str = DEFAULT_INSTRUCTION

    def __post_init__(self) -> None:
        if not self.default_instruction.strip():
            raise ValueError("default_instruction must not be blank")


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    refine: RefineConfig = field(default_factory=RefineConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text()) or {}

    return AppConfig(
        llm=_section(LLMConfig, raw, "llm"),
        refine=_section(RefineConfig, raw, "refine"),
    )


def _section(cls, raw: dict, name: str):
    values = raw.get(name) or {}
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f"Unknown {name} setting(s) in config.yaml: {', '.join(unknown)}")
    return cls(**values)
