"""
프래그먼트 XML 파서
파일 하나를 독립적으로 파싱하여 부분 객체(DesignObject) 목록을 만듭니다.
다른 파일에 대한 사전 지식 없이 동작하므로 병렬로 실행해도 결과가 같습니다.

지원하는 객체 요소: Table, Column, Domain, Relationship
루트 요소가 객체 요소가 아니면 컨테이너로 보고 자식 요소들을 순회합니다.
"""

from typing import Callable, Dict, List, Optional

from lxml import etree

from modeler.errors import FragmentParseError
from modeler.model_manager.utils.fragment_types import (
    ColumnObject,
    DesignObject,
    DomainObject,
    FragmentResult,
    RelationshipObject,
    TableObject,
)
from modeler.model_manager.utils.xml_utils import (
    child_elements,
    find_child,
    local_name,
    parse_xml,
    ref_value,
    text_value,
)
from modeler.types.model_types import Cardinality
from utils.logger import setup_logger

logger = setup_logger("fragment_parser")

_TRUE = {"true", "yes", "y", "1"}
_FALSE = {"false", "no", "n", "0"}

# 도메인이 컬럼에 물려줄 수 있는 타입 속성
TYPE_ATTRIBUTES = ("logical_type", "length", "precision", "scale")


class FragmentParser:
    """프래그먼트 파일 하나를 파싱하는 파서"""

    def __init__(self, path: str):
        self.path = path
        self.objects: List[DesignObject] = []
        self._handlers: Dict[str, Callable[[etree._Element], None]] = {
            "table": self._parse_table,
            "column": self._parse_detached_column,
            "domain": self._parse_domain,
            "relationship": self._parse_relationship,
        }

    def parse(self) -> FragmentResult:
        root = parse_xml(self.path)
        if local_name(root) in self._handlers:
            self._dispatch(root)
        else:
            for el in child_elements(root):
                self._dispatch(el)
        logger.debug(f"{self.path}: 객체 {len(self.objects)}개 파싱")
        return FragmentResult(path=self.path, objects=self.objects)

    def _dispatch(self, el: etree._Element) -> None:
        handler = self._handlers.get(local_name(el))
        if handler is None:
            logger.debug(f"{self.path}:{el.sourceline}: 알 수 없는 요소 무시 <{el.tag}>")
            return
        handler(el)

    # ------------------------------------------------------------------
    # 공통 헬퍼
    # ------------------------------------------------------------------

    def _error(self, el: etree._Element, message: str) -> FragmentParseError:
        return FragmentParseError(self.path, message, el.sourceline)

    def _new(self, cls, el: etree._Element) -> DesignObject:
        design_id = (el.get("id") or "").strip()
        if not design_id:
            raise self._error(el, f"<{el.tag}> element has no 'id' attribute")
        obj = cls(design_id=design_id, source=self.path, line=el.sourceline)
        self.objects.append(obj)
        return obj

    def _int(self, el: etree._Element, name: str) -> Optional[int]:
        value = text_value(el, name)
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            raise self._error(el, f"'{name}' must be an integer, got {value!r}")

    def _bool(self, el: etree._Element, name: str) -> Optional[bool]:
        value = text_value(el, name)
        if value is None:
            return None
        lowered = value.lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise self._error(el, f"'{name}' must be a boolean, got {value!r}")

    def _type_attributes(self, obj: DesignObject, el: etree._Element) -> None:
        obj.set("logical_type", text_value(el, "logicalType"))
        obj.set("length", self._int(el, "length"))
        obj.set("precision", self._int(el, "precision"))
        obj.set("scale", self._int(el, "scale"))

    # ------------------------------------------------------------------
    # 객체별 파싱
    # ------------------------------------------------------------------

    def _parse_table(self, el: etree._Element) -> None:
        table = self._new(TableObject, el)
        table.set("name", text_value(el, "name"))
        table.set("schema", text_value(el, "schema"))
        table.set("comment", text_value(el, "comment"))

        # 컬럼: <columns> 아래 또는 Table 바로 아래
        column_elements = []
        for child in child_elements(el):
            tag = local_name(child)
            if tag == "columns":
                column_elements.extend(
                    c for c in child_elements(child) if local_name(c) == "column"
                )
            elif tag == "column":
                column_elements.append(child)

        for ordinal, col_el in enumerate(column_elements, start=1):
            column = self._parse_column(col_el)
            owner = ref_value(col_el, "table")
            if owner is not None and owner != table.design_id:
                raise self._error(
                    col_el,
                    f"column '{column.design_id}' nested in table '{table.design_id}' "
                    f"declares owner '{owner}'",
                )
            column.set("table", table.design_id)
            column.ordinal = ordinal

        pk_el = find_child(el, "primaryKey")
        if pk_el is not None:
            refs = []
            for ref_el in child_elements(pk_el):
                if local_name(ref_el) != "columnref":
                    continue
                ref = (ref_el.get("ref") or ref_el.text or "").strip()
                if not ref:
                    raise self._error(ref_el, "<columnRef> without a column ID")
                refs.append(ref)
            if not refs:
                raise self._error(pk_el, f"primary key of table '{table.design_id}' has no columns")
            table.set("pk_refs", tuple(refs))
            table.set("pk_name", text_value(pk_el, "name"))

    def _parse_column(self, el: etree._Element) -> ColumnObject:
        column = self._new(ColumnObject, el)
        column.set("name", text_value(el, "name"))
        column.set("position", self._int(el, "position"))
        self._type_attributes(column, el)
        column.set("nullable", self._bool(el, "nullable"))
        column.set("default", text_value(el, "default"))
        column.set("comment", text_value(el, "comment"))
        column.set("domain", ref_value(el, "domain"))
        return column

    def _parse_detached_column(self, el: etree._Element) -> None:
        column = self._parse_column(el)
        column.set("table", ref_value(el, "table"))

    def _parse_domain(self, el: etree._Element) -> None:
        domain = self._new(DomainObject, el)
        domain.set("name", text_value(el, "name"))
        self._type_attributes(domain, el)

    def _parse_relationship(self, el: etree._Element) -> None:
        rel = self._new(RelationshipObject, el)
        rel.set("name", text_value(el, "name"))
        rel.set("parent", ref_value(el, "parent"))
        rel.set("child", ref_value(el, "child"))

        cardinality = text_value(el, "cardinality")
        if cardinality is not None:
            try:
                rel.set("cardinality", Cardinality.parse(cardinality))
            except ValueError as e:
                raise self._error(el, str(e))

        pairs = []
        for pair_el in child_elements(el):
            if local_name(pair_el) != "columnpair":
                continue
            child_col = (pair_el.get("child") or "").strip()
            parent_col = (pair_el.get("parent") or "").strip()
            if not child_col or not parent_col:
                raise self._error(pair_el, "<columnPair> requires 'child' and 'parent' column IDs")
            pairs.append((child_col, parent_col))
        if pairs:
            rel.set("pairs", tuple(pairs))


def parse_fragment(path: str) -> FragmentResult:
    """
    프래그먼트 파일을 파싱합니다.

    Args:
        path: 프래그먼트 파일 경로

    Returns:
        파일에서 발견된 부분 객체 목록 (문서 순서)

    Raises:
        FragmentParseError: 마크업이 잘못되었거나 필수 속성이 없는 경우
    """
    return FragmentParser(path).parse()
