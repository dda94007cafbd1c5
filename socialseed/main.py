from __future__ import annotations

import json
import sys
from typing import Optional

import typer
from pydantic import ValidationError

from socialseed.config import Settings, get_settings
from socialseed.errors import ConfigError, SocialSeedError
from socialseed.infrastructure.db_factory import PoolConfig
from socialseed.orchestrator import run_migrate, run_seed
from socialseed.seed.abstract import SeedPlan
from socialseed.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Seed the social-network database with synthetic data.")
log = get_logger("socialseed")


def _settings() -> Settings:
    try:
        return get_settings()
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigError(f"invalid settings: {problems}") from exc


def _pool_config(settings: Settings, addr: Optional[str]) -> PoolConfig:
    config = PoolConfig.from_settings(settings)
    if addr:
        config = PoolConfig.build(**{**config.model_dump(), "addr": addr})
    return config


def _fail(exc: SocialSeedError) -> typer.Exit:
    log.error(f"{type(exc).__name__}: {exc}")
    return typer.Exit(code=1)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    try:
        settings = _settings()
    except SocialSeedError as exc:
        raise _fail(exc) from exc
    try:
        db = PoolConfig.from_settings(settings).redacted_addr()
    except SocialSeedError as exc:
        db = f"<invalid: {exc}>"
    try:
        plan = SeedPlan.from_settings(settings)
        volumes = (
            f"users={plan.users} posts={plan.posts} comments={plan.comments} "
            f"follows={plan.follows} seed={plan.random_seed}"
        )
    except SocialSeedError as exc:
        volumes = f"plan=<invalid: {exc}>"
    typer.echo(
        f"DB={db} | pool(open={settings.db_max_open_conns} idle={settings.db_max_idle_conns} "
        f"lifetime={settings.db_max_lifetime}) | {volumes}"
    )


@app.command()
def seed(
    addr: Optional[str] = typer.Option(
        None,
        "--addr",
        "-a",
        help="Database address override (default from DB_ADDR).",
    ),
    migrate: bool = typer.Option(
        False,
        "--migrate",
        help="Create the tables first if they do not exist.",
    ),
) -> None:
    """
    Populate the database with baseline users, posts, comments and follows.
    """
    try:
        settings = _settings()
        configure_logging(level=settings.log_level, json_logs=settings.log_json)
        config = _pool_config(settings, addr)
        report = run_seed(config, SeedPlan.from_settings(settings), migrate=migrate)
    except SocialSeedError as exc:
        raise _fail(exc) from exc
    typer.echo(json.dumps(report.as_dict(), indent=2))


@app.command()
def migrate(
    addr: Optional[str] = typer.Option(
        None,
        "--addr",
        "-a",
        help="Database address override (default from DB_ADDR).",
    ),
) -> None:
    """
    Create the social-network tables if they do not exist.
    """
    try:
        settings = _settings()
        configure_logging(level=settings.log_level, json_logs=settings.log_json)
        run_migrate(_pool_config(settings, addr))
    except SocialSeedError as exc:
        raise _fail(exc) from exc


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
