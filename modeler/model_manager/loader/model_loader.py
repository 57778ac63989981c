"""
모델 로더
프래그먼트 파일들을 두 단계로 읽어 하나의 동결된 Model을 만듭니다.

1. 인덱싱: 각 파일을 독립적으로 파싱해 design ID 레지스트리에 등록 (병합/충돌 검사)
2. 해석: 레지스트리의 ID 참조(소유 테이블, 도메인, PK, FK)를 실제 객체로 연결

상태 전이: UNPARSED -> INDEXED -> RESOLVED -> FROZEN
해석은 INDEXED에서만, 동결은 RESOLVED에서만 허용되며 FROZEN 이후에는 변경할 수 없습니다.
"""

import math
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from modeler.config import RunConfig
from modeler.errors import (
    ConflictingDefinition,
    DanglingReference,
    FragmentParseError,
    LoaderStateError,
)
from modeler.model_manager.parser.fragment_parser import TYPE_ATTRIBUTES, parse_fragment
from modeler.model_manager.utils.file_loader import sorted_paths
from modeler.model_manager.utils.fragment_types import (
    ColumnObject,
    DesignObject,
    DesignRegistry,
    FragmentResult,
)
from modeler.types.model_types import Cardinality, Column, ColumnPair, Model, Relationship, Table
from utils.logger import setup_logger

logger = setup_logger("model_loader")


class LoadState(str, Enum):
    UNPARSED = "unparsed"
    INDEXED = "indexed"
    RESOLVED = "resolved"
    FROZEN = "frozen"


class ModelLoader:
    """
    2-pass 모델 로더.

    사용 예:
        model = ModelLoader(config).index(paths).resolve().freeze()
    """

    def __init__(self, config: Optional[RunConfig] = None):
        self.config = config or RunConfig()
        self.state = LoadState.UNPARSED
        self.sources: List[str] = []
        self._registry: Optional[DesignRegistry] = DesignRegistry()
        self._tables: List[Table] = []
        self._relationships: List[Relationship] = []
        self._model: Optional[Model] = None

    def _require(self, expected: LoadState, action: str) -> None:
        if self.state != expected:
            raise LoaderStateError(
                f"cannot {action} in state '{self.state.value}' "
                f"(requires '{expected.value}')"
            )

    @property
    def registry(self) -> DesignRegistry:
        if self._registry is None:
            raise LoaderStateError("design registry is discarded once the model is frozen")
        return self._registry

    @property
    def model(self) -> Model:
        self._require(LoadState.FROZEN, "read the model")
        return self._model

    # ------------------------------------------------------------------
    # 1단계: 인덱싱
    # ------------------------------------------------------------------

    def index(self, paths: Iterable[str]) -> "ModelLoader":
        """
        모든 프래그먼트를 파싱해 레지스트리에 등록합니다.
        입력 순서와 무관하게 정규 정렬 순서로 등록하므로 결과가 결정적입니다.

        Raises:
            FragmentParseError: 마크업이 잘못된 경우
            ConflictingDefinition: 같은 ID의 속성 값이 충돌하는 경우
        """
        self._require(LoadState.UNPARSED, "index fragments")
        self.sources = sorted_paths(list(paths))

        for result in self._parse_all(self.sources):
            for obj in result.objects:
                self._registry.register(obj)

        counts = self._registry.counts()
        logger.info(
            f"인덱싱 완료: 파일 {len(self.sources)}개, 객체 {len(self._registry)}개 "
            f"(table={counts.get('table', 0)}, column={counts.get('column', 0)}, "
            f"domain={counts.get('domain', 0)}, relationship={counts.get('relationship', 0)})"
        )
        self.state = LoadState.INDEXED
        return self

    def _parse_all(self, paths: List[str]) -> List[FragmentResult]:
        workers = min(self.config.workers, len(paths))
        if workers <= 1:
            return [parse_fragment(path) for path in paths]
        logger.debug(f"프래그먼트 병렬 파싱 (workers={workers})")
        with ThreadPoolExecutor(max_workers=workers) as pool:
            # map()은 입력 순서대로 결과를 돌려줌
            return list(pool.map(parse_fragment, paths))

    # ------------------------------------------------------------------
    # 2단계: 해석
    # ------------------------------------------------------------------

    def resolve(self) -> "ModelLoader":
        """
        레지스트리의 모든 참조를 해석합니다.

        Raises:
            DanglingReference: 인덱싱되지 않은 ID를 참조하는 경우
            ConflictingDefinition: 테이블명/컬럼명이 중복되는 경우
            FragmentParseError: 필수 속성(name, logicalType 등)이 없는 경우
        """
        self._require(LoadState.INDEXED, "resolve references")

        columns_by_table = self._resolve_columns()
        self._tables = self._resolve_tables(columns_by_table)
        self._relationships = self._resolve_relationships()

        logger.info(
            f"참조 해석 완료: 테이블 {len(self._tables)}개, 관계 {len(self._relationships)}개"
        )
        self.state = LoadState.RESOLVED
        return self

    def _lookup(self, ref: str, kind: str, referrer: DesignObject, attr: str) -> DesignObject:
        target = self._registry.get(ref)
        if target is None:
            raise DanglingReference(ref, referrer.source_of(attr), referrer.design_id)
        if target.kind != kind:
            raise DanglingReference(
                ref,
                referrer.source_of(attr),
                referrer.design_id,
                f"expected a {kind}, found a {target.kind}",
            )
        return target

    def _required(self, obj: DesignObject, attr: str) -> object:
        value = obj.get(attr)
        if value is None:
            raise FragmentParseError(
                obj.source, f"{obj.kind} '{obj.design_id}' has no '{attr}'", obj.line
            )
        return value

    def _resolve_columns(self) -> Dict[str, List[ColumnObject]]:
        grouped: Dict[str, List[ColumnObject]] = {}
        for col in self._registry.of_kind("column"):
            owner = self._required(col, "table")
            self._lookup(owner, "table", col, "table")

            domain_ref = col.get("domain")
            if domain_ref is not None:
                domain = self._lookup(domain_ref, "domain", col, "domain")
                self._inherit_domain(col, domain)

            self._required(col, "name")
            self._required(col, "logical_type")
            grouped.setdefault(owner, []).append(col)
        return grouped

    @staticmethod
    def _inherit_domain(col: ColumnObject, domain: DesignObject) -> None:
        """
        컬럼에 없는 타입 속성을 도메인에서 가져옵니다.
        컬럼이 도메인과 다른 logical_type을 명시하면 크기 속성도 상속하지 않습니다.
        """
        own_type = col.get("logical_type")
        domain_type = domain.get("logical_type")
        if own_type is not None and (domain_type is None or own_type.casefold() != domain_type.casefold()):
            return
        for attr in TYPE_ATTRIBUTES:
            if col.get(attr) is None and domain.get(attr) is not None:
                col.attrs[attr] = domain.get(attr)
                col.sources[attr] = domain.source_of(attr)

    def _resolve_tables(self, columns_by_table: Dict[str, List[ColumnObject]]) -> List[Table]:
        tables: List[Table] = []
        seen_names: Dict[str, DesignObject] = {}

        for obj in self._registry.of_kind("table"):
            name = self._required(obj, "name")
            if name in seen_names:
                first = seen_names[name]
                raise ConflictingDefinition(
                    obj.design_id,
                    first.source_of("name"),
                    obj.source_of("name"),
                    f"table name '{name}' already used by '{first.design_id}'",
                )
            seen_names[name] = obj

            col_objects = columns_by_table.get(obj.design_id, [])
            if not col_objects:
                raise FragmentParseError(obj.source, f"table '{obj.design_id}' has no columns", obj.line)
            columns = self._build_columns(obj, col_objects)

            pk_names: Tuple[str, ...] = ()
            pk_refs = obj.get("pk_refs")
            if pk_refs:
                names = []
                for ref in pk_refs:
                    col = self._lookup(ref, "column", obj, "pk_refs")
                    if col.get("table") != obj.design_id:
                        raise DanglingReference(
                            ref,
                            obj.source_of("pk_refs"),
                            obj.design_id,
                            f"primary key column belongs to '{col.get('table')}'",
                        )
                    names.append(col.get("name"))
                pk_names = tuple(names)

            tables.append(Table(
                design_id=obj.design_id,
                name=name,
                schema=obj.get("schema"),
                columns=columns,
                primary_key=pk_names,
                primary_key_name=obj.get("pk_name"),
                comment=obj.get("comment"),
            ))
        return tables

    def _build_columns(self, table: DesignObject, col_objects: List[ColumnObject]) -> Tuple[Column, ...]:
        def sort_key(col: ColumnObject):
            position = col.get("position")
            if position is None:
                position = col.ordinal if col.ordinal is not None else math.inf
            return (position, col.seq)

        columns: List[Column] = []
        names: Dict[str, ColumnObject] = {}
        last_position = 0
        for col in sorted(col_objects, key=sort_key):
            name = col.get("name")
            if name in names:
                raise ConflictingDefinition(
                    col.design_id,
                    names[name].source_of("name"),
                    col.source_of("name"),
                    f"duplicate column name '{name}' in table '{table.get('name')}'",
                )
            names[name] = col

            position = col.get("position")
            if position is None:
                position = col.ordinal if col.ordinal is not None else last_position + 1
            last_position = max(last_position, position)

            columns.append(Column(
                design_id=col.design_id,
                name=name,
                logical_type=col.get("logical_type"),
                position=position,
                length=col.get("length"),
                precision=col.get("precision"),
                scale=col.get("scale"),
                nullable=col.get("nullable", True),
                default=col.get("default"),
                comment=col.get("comment"),
            ))
        return tuple(columns)

    def _resolve_relationships(self) -> List[Relationship]:
        relationships: List[Relationship] = []
        for rel in self._registry.of_kind("relationship"):
            parent = self._lookup(self._required(rel, "parent"), "table", rel, "parent")
            child = self._lookup(self._required(rel, "child"), "table", rel, "child")
            pairs = self._required(rel, "pairs")

            column_pairs = []
            for child_ref, parent_ref in pairs:
                child_col = self._pair_column(rel, child_ref, child)
                parent_col = self._pair_column(rel, parent_ref, parent)
                column_pairs.append(ColumnPair(child=child_col.get("name"), parent=parent_col.get("name")))

            relationships.append(Relationship(
                design_id=rel.design_id,
                parent_id=parent.design_id,
                child_id=child.design_id,
                columns=tuple(column_pairs),
                cardinality=rel.get("cardinality", Cardinality.ONE_TO_MANY),
                name=rel.get("name"),
            ))
        return relationships

    def _pair_column(self, rel: DesignObject, ref: str, table: DesignObject) -> DesignObject:
        col = self._lookup(ref, "column", rel, "pairs")
        if col.get("table") != table.design_id:
            raise DanglingReference(
                ref,
                rel.source_of("pairs"),
                rel.design_id,
                f"column does not belong to table '{table.design_id}'",
            )
        return col

    # ------------------------------------------------------------------
    # 동결
    # ------------------------------------------------------------------

    def freeze(self) -> Model:
        """해석된 결과로 Model을 만들고 레지스트리를 폐기합니다."""
        self._require(LoadState.RESOLVED, "freeze the model")
        self._model = Model(tables=tuple(self._tables), relationships=tuple(self._relationships))
        self._registry = None
        self._tables = []
        self._relationships = []
        self.state = LoadState.FROZEN
        return self._model


def load_model(paths: Iterable[str], config: Optional[RunConfig] = None) -> Model:
    """
    프래그먼트 파일 목록으로 동결된 Model을 만듭니다.

    Args:
        paths: 프래그먼트 파일 경로 (순서 무관, 내부에서 정규 정렬)
        config: 실행 설정 (workers 등)

    Returns:
        동결된 Model
    """
    return ModelLoader(config).index(paths).resolve().freeze()
