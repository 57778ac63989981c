"""
Type Mapping Loader Tests

Run with:
    pytest tests/test_type_mapping.py -v
"""

import pytest

from modeler.errors import ConflictingDefinition, FragmentParseError, NotFound, UnknownPlatform
from modeler.model_manager.draft.type_mapping import load_type_catalog, render_template


# ============================================================================
# CATALOG LOADING
# ============================================================================

class TestLoadTypeCatalog:

    def test_platform_centric_layout(self, types_path):
        mapping = load_type_catalog(types_path).for_platform("Oracle Database 12c")
        assert mapping.template_for("integer") == "NUMBER"
        assert mapping.template_for("varchar") == "VARCHAR2({length})"

    def test_logicaltype_centric_layout(self, types_path):
        mapping = load_type_catalog(types_path).for_platform("PostgreSQL 11")
        assert mapping.template_for("integer") == "INTEGER"
        assert len(mapping) == 2

    def test_platform_lookup_is_case_insensitive(self, types_path):
        mapping = load_type_catalog(types_path).for_platform("oracle database 12C")
        assert mapping.platform == "Oracle Database 12c"

    def test_logical_type_lookup_is_case_insensitive(self, types_path):
        mapping = load_type_catalog(types_path).for_platform("Oracle Database 12c")
        assert "INTEGER" in mapping
        assert mapping.render("VarChar", length=10) == "VARCHAR2(10)"

    def test_unknown_platform_no_default_substitution(self, types_path):
        catalog = load_type_catalog(types_path)
        with pytest.raises(UnknownPlatform) as exc:
            catalog.for_platform("Oracle Database")
        assert exc.value.platform == "Oracle Database"
        assert "PostgreSQL 11" in exc.value.known

    def test_platforms_listed_sorted(self, types_path):
        assert load_type_catalog(types_path).platforms() == ("Oracle Database 12c", "PostgreSQL 11")

    def test_missing_file(self, tmp_path):
        with pytest.raises(NotFound):
            load_type_catalog(str(tmp_path / "types.xml"))

    def test_malformed_document_reports_position(self, write_file):
        path = write_file("types.xml", "<types>\n  <platform name='x'>\n</types>\n")
        with pytest.raises(FragmentParseError) as exc:
            load_type_catalog(path)
        assert exc.value.path == path
        assert exc.value.line is not None

    def test_conflicting_template(self, write_file):
        path = write_file("types.xml", """\
            <types>
              <platform name="P"><type logical="integer" native="NUMBER"/></platform>
              <logicaltype name="integer"><mapping platform="p" native="INT"/></logicaltype>
            </types>
            """)
        with pytest.raises(ConflictingDefinition) as exc:
            load_type_catalog(path)
        assert "integer" in exc.value.design_id

    def test_identical_redeclaration_accepted(self, write_file):
        path = write_file("types.xml", """\
            <types>
              <platform name="P"><type logical="integer" native="NUMBER"/></platform>
              <logicaltype name="integer"><mapping platform="P" native="NUMBER"/></logicaltype>
            </types>
            """)
        assert load_type_catalog(path).for_platform("P").template_for("integer") == "NUMBER"

    def test_native_type_as_element_text(self, write_file):
        path = write_file("types.xml", """\
            <types>
              <platform name="P"><type logical="double">DOUBLE PRECISION</type></platform>
            </types>
            """)
        assert load_type_catalog(path).for_platform("P").render("double") == "DOUBLE PRECISION"

    def test_incomplete_entry(self, write_file):
        path = write_file("types.xml", """\
            <types>
              <platform name="P"><type native="NUMBER"/></platform>
            </types>
            """)
        with pytest.raises(FragmentParseError):
            load_type_catalog(path)


# ============================================================================
# TEMPLATE RENDERING
# ============================================================================

class TestRenderTemplate:

    def test_length_substitution(self):
        assert render_template("VARCHAR2({length})", {"length": 50}) == "VARCHAR2(50)"

    def test_precision_and_scale(self):
        params = {"precision": 10, "scale": 2}
        assert render_template("NUMBER({precision},{scale})", params) == "NUMBER(10,2)"

    def test_missing_trailing_argument_dropped(self):
        assert render_template("NUMBER({precision},{scale})", {"precision": 10}) == "NUMBER(10)"

    def test_empty_argument_list_removed(self):
        assert render_template("NUMBER({precision},{scale})", {}) == "NUMBER"
        assert render_template("VARCHAR2 ({length})", {}) == "VARCHAR2"

    def test_template_without_placeholders_unchanged(self):
        assert render_template("DATE", {"length": 8}) == "DATE"

    def test_literal_arguments_kept(self):
        assert render_template("TIMESTAMP({precision}) WITH TIME ZONE", {"precision": 6}) == \
            "TIMESTAMP(6) WITH TIME ZONE"
        assert render_template("VARCHAR2({length} CHAR)", {"length": 20}) == "VARCHAR2(20 CHAR)"
