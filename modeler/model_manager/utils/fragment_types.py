"""
프래그먼트 파싱에 사용되는 데이터 타입 정의
인덱싱 단계에서만 존재하는 부분 객체(DesignObject)와 그 레지스트리입니다.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Iterator, List, Optional

from modeler.errors import ConflictingDefinition


@dataclass
class DesignObject:
    """design ID로 식별되는 부분 객체"""
    kind: ClassVar[str] = "object"

    design_id: str
    source: str  # 처음 선언된 프래그먼트 파일
    line: Optional[int] = None
    attrs: Dict[str, Any] = field(default_factory=dict)
    sources: Dict[str, str] = field(default_factory=dict)
    # 레지스트리 등록 순서 (처음 등장한 순서)
    seq: int = -1

    def set(self, name: str, value: Any) -> None:
        """값이 있는 속성만 기록합니다."""
        if value is None:
            return
        self.attrs[name] = value
        self.sources[name] = self.source

    def get(self, name: str, default: Any = None) -> Any:
        return self.attrs.get(name, default)

    def source_of(self, name: str) -> str:
        return self.sources.get(name, self.source)

    def merge(self, other: "DesignObject") -> None:
        """
        같은 design ID의 다른 선언을 병합합니다.
        새로운 속성은 추가하고, 값이 다른 속성은 ConflictingDefinition.
        """
        if other.kind != self.kind:
            raise ConflictingDefinition(
                self.design_id,
                self.source,
                other.source,
                f"declared as {self.kind} and as {other.kind}",
            )
        for name, value in other.attrs.items():
            if name not in self.attrs:
                self.attrs[name] = value
                self.sources[name] = other.source_of(name)
            elif self.attrs[name] != value:
                raise ConflictingDefinition(
                    self.design_id,
                    self.source_of(name),
                    other.source_of(name),
                    f"{name}: {self.attrs[name]!r} != {value!r}",
                )


@dataclass
class TableObject(DesignObject):
    kind: ClassVar[str] = "table"


@dataclass
class ColumnObject(DesignObject):
    """
    컬럼. 'table' 속성이 소유 테이블의 design ID입니다.
    'ordinal'은 테이블 요소 안에서의 암묵적 순서로, 병합 시 충돌로 보지 않습니다.
    """
    kind: ClassVar[str] = "column"
    ordinal: Optional[int] = None

    def merge(self, other: "DesignObject") -> None:
        super().merge(other)
        if self.ordinal is None and isinstance(other, ColumnObject):
            self.ordinal = other.ordinal


@dataclass
class DomainObject(DesignObject):
    """재사용 가능한 타입 별칭 (logical_type, length, precision, scale)"""
    kind: ClassVar[str] = "domain"


@dataclass
class RelationshipObject(DesignObject):
    """FK 관계. 'pairs'는 (child 컬럼 ID, parent 컬럼 ID) 튜플의 튜플"""
    kind: ClassVar[str] = "relationship"


@dataclass
class FragmentResult:
    """프래그먼트 파일 하나의 파싱 결과"""
    path: str
    objects: List[DesignObject] = field(default_factory=list)


class DesignRegistry:
    """design ID -> DesignObject 평면 레지스트리"""

    def __init__(self):
        self._objects: Dict[str, DesignObject] = {}
        self._seq = 0

    def __len__(self) -> int:
        return len(self._objects)

    def __contains__(self, design_id: str) -> bool:
        return design_id in self._objects

    def register(self, obj: DesignObject) -> DesignObject:
        existing = self._objects.get(obj.design_id)
        if existing is not None:
            existing.merge(obj)
            return existing
        obj.seq = self._seq
        self._seq += 1
        self._objects[obj.design_id] = obj
        return obj

    def get(self, design_id: str) -> Optional[DesignObject]:
        return self._objects.get(design_id)

    def of_kind(self, kind: str) -> Iterator[DesignObject]:
        """등록 순서(처음 등장한 순서)대로 반환합니다."""
        for obj in self._objects.values():
            if obj.kind == kind:
                yield obj

    def counts(self) -> Dict[str, int]:
        result: Dict[str, int] = {}
        for obj in self._objects.values():
            result[obj.kind] = result.get(obj.kind, 0) + 1
        return result

