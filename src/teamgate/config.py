"""Teamgate configuration management."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass
class Config:
    """Teamgate configuration."""

    home_path: Path = field(default_factory=lambda: Path.home() / ".teamgate")
    log_level: str = "INFO"
    wal_mode: bool = True

    # Where unauthenticated visitors are sent by route guards
    sign_in_route: str = "/auth"

    # Per-source timeout during role resolution (seconds, 0 disables)
    resolve_timeout_seconds: float = 5.0

    # Session tokens
    jwt_secret: str = "test-secret-key-do-not-use"
    token_exp_minutes: int = 60

    @classmethod
    def load(cls, home_path: Path | None = None) -> Config:
        """Load config from YAML file, env vars, then defaults."""
        config = cls()

        if home_path:
            config.home_path = home_path

        # Override from env
        env_home = os.environ.get("TEAMGATE_HOME")
        if env_home:
            config.home_path = Path(env_home)

        # Load YAML config if exists
        config_file = config.home_path / "config.yaml"
        if config_file.exists():
            with open(config_file) as f:
                data = yaml.safe_load(f) or {}
            for key, value in data.items():
                if hasattr(config, key):
                    expected_type = type(getattr(config, key))
                    if expected_type is Path:
                        setattr(config, key, Path(value))
                    else:
                        setattr(config, key, expected_type(value))

        env_log = os.environ.get("TEAMGATE_LOG_LEVEL")
        if env_log:
            config.log_level = env_log

        env_secret = os.environ.get("TEAMGATE_JWT_SECRET")
        if env_secret:
            config.jwt_secret = env_secret

        env_sign_in = os.environ.get("TEAMGATE_SIGN_IN_ROUTE")
        if env_sign_in:
            config.sign_in_route = env_sign_in

        env_timeout = os.environ.get("TEAMGATE_RESOLVE_TIMEOUT")
        if env_timeout:
            config.resolve_timeout_seconds = float(env_timeout)

        return config

    @property
    def metadata_db_path(self) -> Path:
        return self.home_path / "teamgate.db"

    @property
    def resolve_timeout(self) -> float | None:
        """Timeout to hand to the resolver; None when disabled."""
        if self.resolve_timeout_seconds <= 0:
            return None
        return self.resolve_timeout_seconds

    def save(self) -> None:
        """Save current config to YAML. The JWT secret is never written."""
        self.home_path.mkdir(parents=True, exist_ok=True)
        config_file = self.home_path / "config.yaml"
        data = {
            "log_level": self.log_level,
            "wal_mode": self.wal_mode,
            "sign_in_route": self.sign_in_route,
            "resolve_timeout_seconds": self.resolve_timeout_seconds,
            "token_exp_minutes": self.token_exp_minutes,
        }
        with open(config_file, "w") as f:
            yaml.dump(data, f, default_flow_style=False)
