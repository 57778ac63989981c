"""
논리 타입을 플랫폼별 네이티브 타입으로 매핑하는 모듈
타입 문서(XML)를 읽어 (플랫폼, 논리 타입) -> 네이티브 타입 템플릿 매핑을 만듭니다.

지원하는 문서 형식 (한 문서에 함께 있어도 됨):

    <types>
      <platform name="Oracle Database 12c">
        <type logical="integer" native="NUMBER"/>
        <type logical="varchar" native="VARCHAR2({length})"/>
      </platform>
      <logicaltype name="integer">
        <mapping platform="PostgreSQL 11" native="INTEGER"/>
      </logicaltype>
    </types>
"""

import os
import re
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple

from modeler.errors import ConflictingDefinition, FragmentParseError, NotFound, UnknownPlatform
from modeler.model_manager.utils.xml_utils import child_elements, local_name, parse_xml, text_value
from utils.logger import setup_logger

logger = setup_logger("type_mapping")

_PLACEHOLDER_RE = re.compile(r"\{(length|precision|scale)\}")
# 플레이스홀더를 포함한 괄호 인자 목록: VARCHAR2({length}), NUMBER({precision},{scale})
_ARGS_RE = re.compile(r"\s*\(([^()]*\{(?:length|precision|scale)\}[^()]*)\)")


class TypeMapping:
    """한 플랫폼의 논리 타입 -> 네이티브 타입 템플릿 매핑 (불변)"""

    def __init__(self, platform: str, templates: Mapping[str, str]):
        self.platform = platform
        self._templates = MappingProxyType(
            {logical.casefold(): template for logical, template in templates.items()}
        )

    def __len__(self) -> int:
        return len(self._templates)

    def __contains__(self, logical_type: str) -> bool:
        return logical_type.casefold() in self._templates

    def template_for(self, logical_type: str) -> Optional[str]:
        return self._templates.get(logical_type.casefold())

    def render(
        self,
        logical_type: str,
        length: Optional[int] = None,
        precision: Optional[int] = None,
        scale: Optional[int] = None,
    ) -> Optional[str]:
        """
        네이티브 타입 문자열을 만듭니다. 매핑이 없으면 None.
        """
        template = self.template_for(logical_type)
        if template is None:
            return None
        return render_template(template, {"length": length, "precision": precision, "scale": scale})


def render_template(template: str, params: Mapping[str, Optional[int]]) -> str:
    """
    템플릿의 {length}/{precision}/{scale}을 값으로 치환합니다.

    괄호 인자 목록 안에서 값이 없는 인자는 빠지고, 인자가 모두 빠지면 괄호도 제거:
        NUMBER({precision},{scale}) + precision=10 -> NUMBER(10)
        NUMBER({precision},{scale}) + 값 없음      -> NUMBER
    """
    def replace_args(match: re.Match) -> str:
        kept = []
        for arg in match.group(1).split(","):
            names = _PLACEHOLDER_RE.findall(arg)
            if any(params.get(name) is None for name in names):
                continue
            kept.append(_substitute(arg.strip(), params))
        if not kept:
            return ""
        prefix = match.group(0)[: match.group(0).index("(")]
        return f"{prefix}({','.join(kept)})"

    rendered = _ARGS_RE.sub(replace_args, template)
    # 괄호 밖의 플레이스홀더
    return _substitute(rendered, params)


def _substitute(text: str, params: Mapping[str, Optional[int]]) -> str:
    return _PLACEHOLDER_RE.sub(
        lambda m: "" if params.get(m.group(1)) is None else str(params[m.group(1)]),
        text,
    )


class TypeCatalog:
    """타입 문서 전체: 플랫폼명(대소문자 무시) -> TypeMapping"""

    def __init__(self, path: str, mappings: Dict[str, Dict[str, str]], display_names: Dict[str, str]):
        self.path = path
        self._mappings = {
            key: TypeMapping(display_names[key], templates)
            for key, templates in mappings.items()
        }

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(m.platform for m in self._mappings.values()))

    def platforms(self) -> Tuple[str, ...]:
        return tuple(self)

    def for_platform(self, platform: str) -> TypeMapping:
        """
        플랫폼 매핑을 반환합니다. 기본 플랫폼으로 대체하지 않습니다.

        Raises:
            UnknownPlatform: 문서에 해당 플랫폼이 없는 경우
        """
        mapping = self._mappings.get(platform.strip().casefold())
        if mapping is None:
            raise UnknownPlatform(platform, self.platforms())
        logger.debug(f"플랫폼 매핑 선택: {mapping.platform} (논리 타입 {len(mapping)}개)")
        return mapping


class _CatalogBuilder:
    def __init__(self, path: str):
        self.path = path
        self.mappings: Dict[str, Dict[str, str]] = {}
        self.display_names: Dict[str, str] = {}

    def add(self, el, platform: Optional[str], logical: Optional[str], native: Optional[str]) -> None:
        if not platform or not logical or native is None:
            raise FragmentParseError(
                self.path,
                f"<{el.tag}> requires platform, logical type and native type",
                el.sourceline,
            )
        key = platform.casefold()
        self.display_names.setdefault(key, platform)
        templates = self.mappings.setdefault(key, {})
        logical_key = logical.casefold()
        existing = templates.get(logical_key)
        if existing is not None and existing != native:
            raise ConflictingDefinition(
                f"{platform}/{logical}",
                self.path,
                f"{self.path}:{el.sourceline}",
                f"{existing!r} != {native!r}",
            )
        templates[logical_key] = native


def load_type_catalog(path: str) -> TypeCatalog:
    """
    타입 문서를 읽어 TypeCatalog를 만듭니다.

    Args:
        path: 타입 문서 경로

    Raises:
        NotFound: 파일이 없는 경우
        FragmentParseError: 마크업이 잘못되었거나 필수 속성이 없는 경우
        ConflictingDefinition: 같은 (플랫폼, 논리 타입)에 서로 다른 템플릿이 있는 경우
    """
    if not os.path.isfile(path):
        raise NotFound(path, "types file")

    root = parse_xml(path)
    builder = _CatalogBuilder(path)

    for el in child_elements(root):
        tag = local_name(el)
        if tag == "platform":
            platform = text_value(el, "name")
            for type_el in child_elements(el):
                if local_name(type_el) != "type":
                    continue
                builder.add(
                    type_el,
                    platform,
                    text_value(type_el, "logical"),
                    _native(type_el),
                )
        elif tag == "logicaltype":
            logical = text_value(el, "name")
            for map_el in child_elements(el):
                if local_name(map_el) != "mapping":
                    continue
                builder.add(
                    map_el,
                    text_value(map_el, "platform"),
                    logical,
                    _native(map_el),
                )
        else:
            logger.debug(f"{path}:{el.sourceline}: 알 수 없는 요소 무시 <{el.tag}>")

    catalog = TypeCatalog(path, builder.mappings, builder.display_names)
    logger.info(f"타입 매핑 로드 완료: {path} (플랫폼 {len(builder.mappings)}개)")
    return catalog


def _native(el) -> Optional[str]:
    # 네이티브 타입은 공백을 그대로 유지 (예: "DOUBLE PRECISION")
    value = el.get("native")
    if value is None:
        value = el.text
    return value.strip() if value is not None and value.strip() else None
