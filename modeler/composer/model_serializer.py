"""
Model <-> JSON 직렬화
테이블 레코드 배열(Model 순서)이며 각 레코드는 컬럼과,
자신이 child인 관계를 담습니다. 관계의 전역 순서는 position으로 복원합니다.
"""

import json
from typing import Any, Dict, List, Tuple

from modeler.errors import FragmentParseError
from modeler.types.model_types import Model, Relationship, Table
from modeler.types.type_commons import safe_from_dict

SOURCE_NAME = "<json>"


def model_to_records(model: Model) -> List[Dict[str, Any]]:
    records = []
    for table in model.tables:
        record = table.to_dict()
        record["relationships"] = [
            dict(rel.to_dict(), position=position)
            for position, rel in model.relationships_of(table)
        ]
        records.append(record)
    return records


def serialize_model(model: Model) -> str:
    return json.dumps(model_to_records(model), indent=2, ensure_ascii=False) + "\n"


def records_to_model(records: Any) -> Model:
    """
    serialize_model() 결과를 Model로 되돌립니다.

    Raises:
        ValueError: 레코드 구조가 올바르지 않은 경우
    """
    if not isinstance(records, list):
        raise ValueError("serialized model must be an array of table records")

    tables: List[Table] = []
    positioned: List[Tuple[int, Relationship]] = []
    for record in records:
        tables.append(safe_from_dict(Table, record, "table"))
        for rel_record in record.get("relationships") or []:
            if "position" not in rel_record:
                raise ValueError(f"relationship '{rel_record.get('design_id')}' has no position")
            positioned.append((rel_record["position"], Relationship.from_dict(rel_record)))

    positioned.sort(key=lambda item: item[0])
    return Model(tables=tuple(tables), relationships=tuple(rel for _, rel in positioned))


def deserialize_model(text: str, source: str = SOURCE_NAME) -> Model:
    """
    JSON 텍스트로 Model을 만듭니다.

    Raises:
        FragmentParseError: JSON이 잘못되었거나 구조가 맞지 않는 경우
    """
    try:
        records = json.loads(text)
    except json.JSONDecodeError as e:
        raise FragmentParseError(source, e.msg, e.lineno, e.colno)
    try:
        return records_to_model(records)
    except (KeyError, TypeError, ValueError) as e:
        raise FragmentParseError(source, f"invalid model document: {e}")
