"""
Run configuration: which organization, repository and teams to report on, and how to reach GitHub.

Values are resolved in order: explicit overrides (CLI flags) > environment variables > YAML config file > defaults.
"""
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import yaml

from errors import ConfigError
from ingest.github import DEFAULT_API_URL

DEFAULT_TOTAL = 600
DEFAULT_OUTPUT = 'tsv'

ENV_VARS = {
    'token': 'GITHUB_TOKEN',
    'org': 'PRFLOW_ORG',
    'repo': 'PRFLOW_REPO',
    'team_filter': 'PRFLOW_TEAM_FILTER',
    'total': 'PRFLOW_TOTAL',
    'api_url': 'PRFLOW_API_URL',
}


@dataclass(frozen=True)
class RunConfig:
    org: str
    repo: str
    token: str
    team_filter: str = ''
    total: int = DEFAULT_TOTAL
    api_url: str = DEFAULT_API_URL
    output: str = DEFAULT_OUTPUT


def load_config_file(path: Optional[str]) -> Dict[str, Any]:
    """Load a YAML mapping of config keys; a missing path yields an empty mapping."""
    if not path:
        return {}
    if not os.path.exists(path):
        raise ConfigError(f"config file not found: {path}")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"config file {path} is not valid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")
    return data


def _parse_total(value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"total must be a non-negative integer, got {value!r}")
    try:
        total = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"total must be a non-negative integer, got {value!r}") from None
    if total < 0:
        raise ConfigError(f"total must be a non-negative integer, got {value!r}")
    return total


def load_config(
    overrides: Optional[Mapping[str, Any]] = None,
    config_path: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> RunConfig:
    """Resolve a RunConfig; raises ConfigError naming every missing required value."""
    if env is None:
        env = os.environ
    resolved: Dict[str, Any] = dict(load_config_file(config_path))
    for key, var in ENV_VARS.items():
        if env.get(var):
            resolved[key] = env[var]
    for key, value in (overrides or {}).items():
        if value is not None and value != '':
            resolved[key] = value

    missing = [f"{key} (env {ENV_VARS[key]})" for key in ('org', 'repo', 'token') if not resolved.get(key)]
    if missing:
        raise ConfigError('missing required settings: ' + ', '.join(missing))

    return RunConfig(
        org=str(resolved['org']),
        repo=str(resolved['repo']),
        token=str(resolved['token']),
        team_filter=str(resolved.get('team_filter') or ''),
        total=_parse_total(resolved.get('total', DEFAULT_TOTAL)),
        api_url=str(resolved.get('api_url') or DEFAULT_API_URL),
        output=str(resolved.get('output') or DEFAULT_OUTPUT).lower(),
    )
