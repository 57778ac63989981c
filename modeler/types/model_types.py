"""
정규화된 스키마 모델 타입 정의
Model은 ModelLoader가 한 번 만들어 동결(frozen)한 뒤에는 읽기 전용입니다.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from modeler.types.type_commons import BaseType, list_to_dict


class Cardinality(str, Enum):
    ONE_TO_ONE = "1:1"
    ONE_TO_MANY = "1:N"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Cardinality":
        if value is None or not value.strip():
            return cls.ONE_TO_MANY
        normalized = value.strip().upper().replace(" ", "")
        aliases = {
            "1:1": cls.ONE_TO_ONE,
            "ONE-TO-ONE": cls.ONE_TO_ONE,
            "1:N": cls.ONE_TO_MANY,
            "1:*": cls.ONE_TO_MANY,
            "ONE-TO-MANY": cls.ONE_TO_MANY,
        }
        if normalized not in aliases:
            raise ValueError(f"unknown cardinality: {value}")
        return aliases[normalized]


@dataclass(frozen=True)
class Column(BaseType):
    """컬럼 정보 (position이 출력 순서를 결정)"""
    design_id: str
    name: str
    logical_type: str
    position: int
    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    nullable: bool = True
    default: Optional[str] = None
    comment: Optional[str] = None

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Column":
        return Column(
            design_id=d["design_id"],
            name=d["name"],
            logical_type=d["logical_type"],
            position=d["position"],
            length=d.get("length"),
            precision=d.get("precision"),
            scale=d.get("scale"),
            nullable=d.get("nullable", True),
            default=d.get("default"),
            comment=d.get("comment"),
        )


@dataclass(frozen=True)
class ColumnPair(BaseType):
    """FK 컬럼 쌍 (child 컬럼 -> parent 컬럼)"""
    child: str
    parent: str

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "ColumnPair":
        return ColumnPair(child=d["child"], parent=d["parent"])


@dataclass(frozen=True)
class Table(BaseType):
    """테이블 정보"""
    design_id: str
    name: str
    schema: Optional[str] = None
    columns: Tuple[Column, ...] = ()
    primary_key: Tuple[str, ...] = ()
    primary_key_name: Optional[str] = None
    comment: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "design_id": self.design_id,
            "name": self.name,
            "schema": self.schema,
            "comment": self.comment,
            "columns": list_to_dict(self.columns),
            "primary_key": list(self.primary_key),
            "primary_key_name": self.primary_key_name,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Table":
        return Table(
            design_id=d["design_id"],
            name=d["name"],
            schema=d.get("schema"),
            columns=tuple(Column.from_dict(c) for c in d.get("columns") or []),
            primary_key=tuple(d.get("primary_key") or ()),
            primary_key_name=d.get("primary_key_name"),
            comment=d.get("comment"),
        )


@dataclass(frozen=True)
class Relationship(BaseType):
    """
    테이블 간 FK 관계.
    parent_id/child_id는 테이블의 design ID이며 로딩 중에 한 번만 해석됩니다.
    """
    design_id: str
    parent_id: str
    child_id: str
    columns: Tuple[ColumnPair, ...]
    cardinality: Cardinality = Cardinality.ONE_TO_MANY
    name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "design_id": self.design_id,
            "name": self.name,
            "parent_id": self.parent_id,
            "child_id": self.child_id,
            "cardinality": self.cardinality.value,
            "columns": list_to_dict(self.columns),
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Relationship":
        return Relationship(
            design_id=d["design_id"],
            parent_id=d["parent_id"],
            child_id=d["child_id"],
            columns=tuple(ColumnPair.from_dict(p) for p in d.get("columns") or []),
            cardinality=Cardinality.parse(d.get("cardinality")),
            name=d.get("name"),
        )


@dataclass(frozen=True)
class Model:
    """
    동결된 스키마 모델.
    tables: 인덱싱 단계에서 처음 등장한 순서
    relationships: 선언 순서
    """
    tables: Tuple[Table, ...] = ()
    relationships: Tuple[Relationship, ...] = ()
    _by_id: Dict[str, Table] = field(default=None, init=False, repr=False, compare=False, hash=False)

    def __post_init__(self):
        by_id: Dict[str, Table] = {}
        names = set()
        for table in self.tables:
            if table.name in names:
                raise ValueError(f"duplicate table name in model: {table.name}")
            names.add(table.name)
            by_id[table.design_id] = table
        object.__setattr__(self, "_by_id", by_id)

    def table_by_id(self, design_id: str) -> Table:
        return self._by_id[design_id]

    def table_by_name(self, name: str) -> Optional[Table]:
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def relationships_of(self, table: Table) -> List[Tuple[int, Relationship]]:
        """child 테이블 기준 관계 목록을 (전역 순서, 관계) 형태로 반환합니다."""
        return [
            (idx, rel)
            for idx, rel in enumerate(self.relationships)
            if rel.child_id == table.design_id
        ]
