"""
변환 실행 모듈
프래그먼트 탐색 -> 모델 로딩 -> (DDL 생성 | JSON 직렬화) -> 출력 쓰기

SQL과 JSON은 서로 독립적으로 생성됩니다. 한쪽이 실패해도 다른 쪽은 생성/기록되며,
각 출력은 메모리에서 완성된 뒤에만 기록되므로 부분 출력이 남지 않습니다.
"""

import os
import tempfile
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from modeler.composer.ddl_generator import generate_ddl, render_ddl
from modeler.composer.model_serializer import serialize_model
from modeler.config import RunConfig
from modeler.errors import ModelerError, WriteFailure
from modeler.model_manager.draft.type_mapping import load_type_catalog
from modeler.model_manager.loader.model_loader import load_model
from modeler.model_manager.utils.file_loader import locate_fragments
from modeler.types.model_types import Model
from utils.logger import setup_logger

logger = setup_logger("pipeline")

Writer = Callable[[str, str], None]


def write_text(path: str, text: str) -> None:
    """
    텍스트를 파일에 기록합니다. 임시 파일에 쓴 뒤 교체하므로 실패 시 기존 파일이 유지됩니다.

    Raises:
        WriteFailure: 쓰기에 실패한 경우
    """
    directory = os.path.dirname(os.path.abspath(path))
    tmp_path = None
    try:
        os.makedirs(directory, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=directory, delete=False, suffix=".tmp"
        ) as f:
            tmp_path = f.name
            f.write(text)
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path and os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise WriteFailure(path, e)


@dataclass
class ConversionResult:
    """한 번의 변환 결과"""
    model: Optional[Model] = None
    sql: Optional[str] = None
    json: Optional[str] = None
    written: List[str] = field(default_factory=list)
    errors: List[ModelerError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def build_sql(model: Model, config: RunConfig) -> str:
    catalog = load_type_catalog(config.types_path)
    mapping = catalog.for_platform(config.platform)
    return render_ddl(generate_ddl(model, mapping, config))


def run_conversion(config: RunConfig, writer: Writer = write_text) -> ConversionResult:
    """
    설정에 따라 변환을 실행합니다.

    모델 로딩 실패는 그대로 전파되고 (출력 없음),
    SQL/JSON 각각의 실패는 result.errors에 담깁니다.

    Raises:
        ConfigError: 필수 파라미터가 없는 경우
        NotFound, FragmentParseError, ConflictingDefinition, DanglingReference: 모델 로딩 실패
    """
    config.validate()
    result = ConversionResult()

    paths = locate_fragments(config.model_path, config.extensions)
    result.model = load_model(paths, config)

    if config.types_path:
        try:
            result.sql = build_sql(result.model, config)
        except ModelerError as e:
            logger.error(f"SQL 생성 실패: {e}")
            result.errors.append(e)
    elif config.sql_path:
        logger.warning(f"타입 파일이 없어 SQL 출력을 건너뜁니다: {config.sql_path}")
    else:
        logger.info("타입 파일이 없어 DDL 생성을 건너뜁니다")

    result.json = serialize_model(result.model)

    outputs = [(config.sql_path, result.sql, "SQL"), (config.json_path, result.json, "JSON")]
    for path, text, label in outputs:
        if not path or text is None:
            continue
        if config.dry_run:
            logger.info(f"[dry-run] {label} 출력 생략: {path} ({len(text)} chars)")
            logger.debug(text)
            continue
        try:
            writer(path, text)
        except WriteFailure as e:
            logger.error(str(e))
            result.errors.append(e)
            continue
        result.written.append(path)
        logger.info(f"{label} 출력 완료: {path}")

    return result
