import textwrap
from pathlib import Path

import pytest


TABLE_A = """\
<design>
  <Table id="T_A" name="A">
    <columns>
      <Column id="C_A_ID" name="id" position="1">
        <logicalType>integer</logicalType>
        <nullable>false</nullable>
      </Column>
      <Column id="C_A_NAME" name="name" position="2">
        <logicalType>varchar</logicalType>
        <length>50</length>
      </Column>
    </columns>
    <primaryKey>
      <columnRef ref="C_A_ID"/>
    </primaryKey>
  </Table>
</design>
"""

TABLE_B = """\
<Table id="T_B" name="B">
  <columns>
    <Column id="C_B_ID" name="id" position="1" logicalType="integer" nullable="false"/>
    <Column id="C_B_A_ID" name="a_id" position="2" logicalType="integer"/>
  </columns>
  <primaryKey>
    <columnRef ref="C_B_ID"/>
  </primaryKey>
</Table>
"""

REL_B_A = """\
<Relationship id="R_B_A" cardinality="1:N">
  <parent ref="T_A"/>
  <child ref="T_B"/>
  <columnPair child="C_B_A_ID" parent="C_A_ID"/>
</Relationship>
"""

TYPES = """\
<types>
  <platform name="Oracle Database 12c">
    <type logical="integer" native="NUMBER"/>
    <type logical="varchar" native="VARCHAR2({length})"/>
    <type logical="decimal" native="NUMBER({precision},{scale})"/>
  </platform>
  <logicaltype name="integer">
    <mapping platform="PostgreSQL 11" native="INTEGER"/>
  </logicaltype>
  <logicaltype name="varchar">
    <mapping platform="PostgreSQL 11" native="VARCHAR({length})"/>
  </logicaltype>
</types>
"""

EXPECTED_SCENARIO = [
    "CREATE TABLE A (id NUMBER NOT NULL, name VARCHAR2(50), PRIMARY KEY (id));",
    "CREATE TABLE B (id NUMBER NOT NULL, a_id NUMBER, PRIMARY KEY (id));",
    "ALTER TABLE B ADD FOREIGN KEY (a_id) REFERENCES A (id);",
]


@pytest.fixture()
def write_file(tmp_path):
    """tmp_path 아래에 파일을 만들고 경로(str)를 돌려주는 헬퍼"""
    def _write(relative: str, content: str) -> str:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content), encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture()
def scenario_dir(tmp_path, write_file) -> Path:
    """테이블 A, B와 B->A 관계가 세 파일에 나뉘어 있는 모델"""
    write_file("model/a.xml", TABLE_A)
    write_file("model/b.xml", TABLE_B)
    write_file("model/rel/b_a.xml", REL_B_A)
    return tmp_path / "model"


@pytest.fixture()
def types_path(write_file) -> str:
    return write_file("types.xml", TYPES)
