"""
Fragment Parser Tests

Run with:
    pytest tests/test_fragment_parser.py -v
"""

import pytest

from modeler.errors import FragmentParseError
from modeler.model_manager.parser.fragment_parser import parse_fragment
from modeler.types.model_types import Cardinality

from conftest import REL_B_A, TABLE_A


class TestParseFragment:

    def test_container_with_table_and_nested_columns(self, write_file):
        result = parse_fragment(write_file("a.xml", TABLE_A))

        kinds = [(obj.kind, obj.design_id) for obj in result.objects]
        assert kinds == [("table", "T_A"), ("column", "C_A_ID"), ("column", "C_A_NAME")]

        table = result.objects[0]
        assert table.get("name") == "A"
        assert table.get("pk_refs") == ("C_A_ID",)

        name_col = result.objects[2]
        assert name_col.get("table") == "T_A"
        assert name_col.get("length") == 50
        assert name_col.get("nullable") is None
        assert name_col.ordinal == 2
        assert result.objects[1].get("nullable") is False

    def test_single_object_root(self, write_file):
        result = parse_fragment(write_file("rel.xml", REL_B_A))

        (rel,) = result.objects
        assert rel.kind == "relationship"
        assert rel.get("parent") == "T_A"
        assert rel.get("child") == "T_B"
        assert rel.get("pairs") == (("C_B_A_ID", "C_A_ID"),)
        assert rel.get("cardinality") is Cardinality.ONE_TO_MANY

    def test_detached_column_and_domain(self, write_file):
        path = write_file("extra.xml", """\
            <design>
              <Domain id="D_1" name="Code" logicalType="varchar" length="10"/>
              <Column id="C_9" table="T_A" name="code">
                <domain ref="D_1"/>
                <default>'X'</default>
              </Column>
            </design>
            """)
        domain, column = parse_fragment(path).objects

        assert domain.kind == "domain"
        assert domain.get("length") == 10
        assert column.get("table") == "T_A"
        assert column.get("domain") == "D_1"
        assert column.get("default") == "'X'"
        assert column.ordinal is None

    def test_every_attribute_records_its_source(self, write_file):
        path = write_file("a.xml", TABLE_A)
        table = parse_fragment(path).objects[0]
        assert table.source_of("name") == path

    def test_unknown_elements_ignored(self, write_file):
        path = write_file("x.xml", "<design><View id='V_1'/><Table id='T_1' name='t'/></design>")
        assert [obj.design_id for obj in parse_fragment(path).objects] == ["T_1"]


class TestParseErrors:

    def test_malformed_markup_names_file_and_position(self, write_file):
        path = write_file("bad.xml", "<design>\n  <Table id='T_1'>\n</design>\n")
        with pytest.raises(FragmentParseError) as exc:
            parse_fragment(path)
        assert exc.value.path == path
        assert exc.value.line == 3
        assert "bad.xml:3" in str(exc.value)

    def test_missing_id(self, write_file):
        path = write_file("noid.xml", "<design>\n<Table name='t'/>\n</design>")
        with pytest.raises(FragmentParseError) as exc:
            parse_fragment(path)
        assert exc.value.line == 2

    def test_non_integer_length(self, write_file):
        path = write_file("len.xml", "<Column id='C' table='T' name='c' logicalType='varchar' length='abc'/>")
        with pytest.raises(FragmentParseError, match="length"):
            parse_fragment(path)

    def test_invalid_boolean(self, write_file):
        path = write_file("null.xml", "<Column id='C' table='T' name='c' logicalType='x' nullable='maybe'/>")
        with pytest.raises(FragmentParseError, match="nullable"):
            parse_fragment(path)

    def test_invalid_cardinality(self, write_file):
        path = write_file("card.xml", "<Relationship id='R' cardinality='M:N'/>")
        with pytest.raises(FragmentParseError, match="cardinality"):
            parse_fragment(path)

    def test_nested_column_with_other_owner(self, write_file):
        path = write_file("own.xml", """\
            <Table id="T_1" name="t">
              <Column id="C_1" table="T_2" name="c" logicalType="integer"/>
            </Table>
            """)
        with pytest.raises(FragmentParseError, match="T_2"):
            parse_fragment(path)

    def test_empty_primary_key(self, write_file):
        path = write_file("pk.xml", "<Table id='T_1' name='t'><primaryKey/></Table>")
        with pytest.raises(FragmentParseError, match="primary key"):
            parse_fragment(path)
