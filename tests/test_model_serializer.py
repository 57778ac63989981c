"""
Model Serializer Tests

Run with:
    pytest tests/test_model_serializer.py -v
"""

import json

import pytest

from modeler.composer.model_serializer import deserialize_model, serialize_model
from modeler.errors import FragmentParseError
from modeler.model_manager.loader.model_loader import load_model
from modeler.model_manager.utils.file_loader import locate_fragments
from modeler.types.model_types import Cardinality, Column, ColumnPair, Model, Relationship, Table


def _rich_model():
    a = Table(
        "T_A", "A", schema="HR", comment="부모 테이블",
        columns=(
            Column("A1", "id", "integer", 1, nullable=False),
            Column("A2", "amount", "decimal", 2, precision=10, scale=2, default="0", comment="금액"),
        ),
        primary_key=("id",), primary_key_name="A_PK",
    )
    b = Table("T_B", "B", columns=(Column("B1", "a_id", "integer", 1),))
    return Model(
        tables=(b, a),
        relationships=(
            Relationship("R2", "T_A", "T_B", (ColumnPair("a_id", "id"),), Cardinality.ONE_TO_ONE, "B_A_FK"),
            Relationship("R1", "T_B", "T_A", (ColumnPair("id", "a_id"),)),
        ),
    )


class TestSerializeModel:

    def test_table_records_in_model_order(self, scenario_dir):
        model = load_model(locate_fragments(str(scenario_dir)))

        records = json.loads(serialize_model(model))

        assert [r["name"] for r in records] == ["A", "B"]
        assert [c["name"] for c in records[0]["columns"]] == ["id", "name"]
        assert records[0]["relationships"] == []
        (rel,) = records[1]["relationships"]
        assert rel["parent_id"] == "T_A"
        assert rel["columns"] == [{"child": "a_id", "parent": "id"}]
        assert rel["cardinality"] == "1:N"

    def test_non_ascii_preserved(self):
        text = serialize_model(_rich_model())
        assert "부모 테이블" in text


class TestRoundTrip:

    def test_loaded_model(self, scenario_dir):
        model = load_model(locate_fragments(str(scenario_dir)))
        assert deserialize_model(serialize_model(model)) == model

    def test_relationship_order_restored(self):
        model = _rich_model()
        restored = deserialize_model(serialize_model(model))

        assert restored == model
        assert [r.design_id for r in restored.relationships] == ["R2", "R1"]

    def test_empty_model(self):
        assert deserialize_model(serialize_model(Model())) == Model()


class TestDeserializeErrors:

    def test_invalid_json(self):
        with pytest.raises(FragmentParseError) as exc:
            deserialize_model("[{", source="model.json")
        assert exc.value.path == "model.json"
        assert exc.value.line == 1

    def test_not_an_array(self):
        with pytest.raises(FragmentParseError, match="array"):
            deserialize_model('{"name": "A"}')

    def test_missing_table_name(self):
        with pytest.raises(FragmentParseError, match="name"):
            deserialize_model('[{"design_id": "T"}]')
