from __future__ import annotations
from dataclasses import asdict
from typing import Any, Dict, Iterable, List


# -------- Common Base Class with shared utilities --------
class BaseType:
    """Base class for all model objects (subclasses are frozen dataclasses)"""

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "BaseType":
        raise NotImplementedError("Subclasses must implement from_dict")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# -------- Serialization Helper Functions --------

def list_to_dict(items: Iterable[Any]) -> List[Dict[str, Any]]:
    """
    객체 리스트를 딕셔너리 리스트로 변환.
    각 객체의 to_dict() 메서드를 호출.
    """
    return [item.to_dict() for item in items]


def safe_from_dict(
    object_class: type,
    data: Any,
    object_name: str = "object"
) -> Any:
    """
    from_dict 호출 시 에러 처리를 표준화한 헬퍼.
    """
    if not isinstance(data, dict):
        raise ValueError(f"{object_name} must be an object, got {type(data).__name__}")
    if "name" not in data:
        raise ValueError(
            f"Missing required field 'name' in {object_name}. "
            f"Available keys: {list(data.keys())}"
        )

    try:
        return object_class.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(
            f"Failed to create {object_name} '{data.get('name', 'unknown')}': {str(e)}"
        )
