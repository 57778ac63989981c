"""
실행 설정 모듈
프로세스 전역 플래그 대신 RunConfig 값을 각 컴포넌트 호출에 명시적으로 전달합니다.
"""

import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from modeler.errors import ConfigError, NotFound

DEFAULT_PLATFORM = "Oracle Database 12c"
DEFAULT_EXTENSIONS: Tuple[str, ...] = (".xml",)

# 환경 변수 -> RunConfig 필드
ENV_KEYS = {
    "MODELER_PLATFORM": "platform",
    "MODELER_TYPES": "types_path",
    "MODELER_WORKERS": "workers",
}


@dataclass(frozen=True)
class RunConfig:
    """한 번의 변환 실행에 필요한 설정"""
    model_path: Optional[str] = None
    types_path: Optional[str] = None
    platform: str = DEFAULT_PLATFORM
    sql_path: Optional[str] = None
    json_path: Optional[str] = None
    extensions: Tuple[str, ...] = field(default=DEFAULT_EXTENSIONS)
    workers: int = 1
    include_comments: bool = False
    dry_run: bool = False
    verbose: bool = False

    def __post_init__(self):
        if self.workers < 1:
            raise ConfigError(f"workers must be >= 1, got {self.workers}")
        normalized = tuple(normalize_extension(ext) for ext in self.extensions)
        object.__setattr__(self, "extensions", normalized)

    def merged(self, **overrides: Any) -> "RunConfig":
        """None이 아닌 값만 덮어쓴 새 설정을 반환합니다."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values)

    def validate(self) -> None:
        """
        실행 전 필수 파라미터를 검사합니다.

        Raises:
            ConfigError: 모델 경로가 없거나 출력 대상이 하나도 없는 경우
        """
        if not self.model_path:
            raise ConfigError("model path is required (-m/--model)")
        if not self.dry_run and not (self.sql_path or self.json_path):
            raise ConfigError("at least one output is required (-s/--sql or -j/--json)")


def normalize_extension(ext: str) -> str:
    ext = ext.strip().lower()
    if not ext:
        raise ConfigError("empty file extension")
    return ext if ext.startswith(".") else f".{ext}"


def _coerce(name: str, value: Any) -> Any:
    if name == "workers":
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigError(f"workers must be an integer, got {value!r}")
    if name in ("include_comments", "dry_run", "verbose"):
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)
    if name == "extensions":
        if isinstance(value, str):
            return (value,)
        return tuple(value)
    return value


def config_from_mapping(data: Mapping[str, Any], base: Optional[RunConfig] = None) -> RunConfig:
    """dict 형태의 설정값으로 RunConfig를 만듭니다. 알 수 없는 키는 ConfigError."""
    base = base or RunConfig()
    known = set(RunConfig.__dataclass_fields__)
    values: Dict[str, Any] = {}
    for key, value in data.items():
        name = key.replace("-", "_")
        if name not in known:
            raise ConfigError(f"unknown config key: {key}")
        values[name] = _coerce(name, value)
    return base.merged(**values)


def load_config_file(path: str, base: Optional[RunConfig] = None) -> RunConfig:
    """
    YAML 설정 파일을 읽어 RunConfig를 만듭니다.

    형식:
        platform: Oracle Database 12c
        types_path: types.xml
        workers: 4

    Raises:
        NotFound: 파일이 없는 경우
        ConfigError: YAML이 잘못되었거나 알 수 없는 키가 있는 경우
    """
    if not os.path.isfile(path):
        raise NotFound(path, "config file")
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid config file {path}: {e}")
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")
    return config_from_mapping(data, base)


def config_from_env(environ: Mapping[str, str], base: Optional[RunConfig] = None) -> RunConfig:
    """MODELER_* 환경 변수를 기본값으로 반영합니다."""
    values = {
        field_name: environ[env_key]
        for env_key, field_name in ENV_KEYS.items()
        if environ.get(env_key)
    }
    return config_from_mapping(values, base)
