"""
DDL 생성 모듈
동결된 Model과 플랫폼 TypeMapping으로 SQL 문장 목록을 만듭니다.

- 1단계: 모든 테이블의 CREATE TABLE (Model 순서)
- (옵션) 주석: COMMENT ON TABLE / COLUMN
- 2단계: 모든 관계의 ALTER TABLE ... ADD FOREIGN KEY (선언 순서)

FK는 항상 모든 CREATE TABLE 뒤에 오므로 순환 참조가 있어도 위상 정렬이 필요 없습니다.
"""

from typing import List, Optional

from sqlglot import exp

from modeler.config import RunConfig
from modeler.errors import UnresolvedTypeMapping
from modeler.model_manager.draft.type_mapping import TypeMapping
from modeler.types.model_types import Column, Model, Relationship, Table
from utils.logger import setup_logger

logger = setup_logger("ddl_generator")

# 플랫폼명 키워드 -> sqlglot dialect (앞에서부터 먼저 일치하는 것 사용)
PLATFORM_DIALECTS = (
    ("oracle", "oracle"),
    ("postgres", "postgres"),
    ("mariadb", "mysql"),
    ("mysql", "mysql"),
    ("sql server", "tsql"),
    ("sqlserver", "tsql"),
    ("mssql", "tsql"),
    ("sqlite", "sqlite"),
    ("bigquery", "bigquery"),
    ("snowflake", "snowflake"),
    ("duckdb", "duckdb"),
)


def dialect_for_platform(platform: str) -> Optional[str]:
    """플랫폼명에 맞는 sqlglot dialect. 모르는 플랫폼이면 None (기본 dialect)."""
    lowered = platform.lower()
    for keyword, dialect in PLATFORM_DIALECTS:
        if keyword in lowered:
            return dialect
    return None


class DDLGenerator:
    """Model -> SQL 문장 목록"""

    def __init__(self, type_mapping: TypeMapping, config: Optional[RunConfig] = None):
        self.type_mapping = type_mapping
        self.config = config or RunConfig()
        self.dialect = dialect_for_platform(type_mapping.platform)

    def quote(self, name: str) -> str:
        """일반 식별자가 아닌 경우에만 dialect 규칙으로 인용합니다."""
        ident = exp.to_identifier(name)
        if not ident.args.get("quoted"):
            return name
        return ident.sql(dialect=self.dialect)

    def literal(self, text: str) -> str:
        return exp.Literal.string(text).sql(dialect=self.dialect)

    def table_name(self, table: Table) -> str:
        if table.schema:
            return f"{self.quote(table.schema)}.{self.quote(table.name)}"
        return self.quote(table.name)

    def native_type(self, table: Table, column: Column) -> str:
        if column.logical_type not in self.type_mapping:
            raise UnresolvedTypeMapping(
                table.name, column.name, column.logical_type, self.type_mapping.platform
            )
        return self.type_mapping.render(
            column.logical_type,
            length=column.length,
            precision=column.precision,
            scale=column.scale,
        )

    def column_clause(self, table: Table, column: Column) -> str:
        parts = [self.quote(column.name), self.native_type(table, column)]
        if column.default is not None:
            parts.append(f"DEFAULT {column.default}")
        if not column.nullable or column.name in table.primary_key:
            parts.append("NOT NULL")
        return " ".join(parts)

    def create_table(self, table: Table) -> str:
        clauses = [self.column_clause(table, col) for col in table.columns]
        if table.primary_key:
            pk_cols = ", ".join(self.quote(name) for name in table.primary_key)
            pk = f"PRIMARY KEY ({pk_cols})"
            if table.primary_key_name:
                pk = f"CONSTRAINT {self.quote(table.primary_key_name)} {pk}"
            clauses.append(pk)
        return f"CREATE TABLE {self.table_name(table)} ({', '.join(clauses)});"

    def comments(self, table: Table) -> List[str]:
        statements = []
        name = self.table_name(table)
        if table.comment:
            statements.append(f"COMMENT ON TABLE {name} IS {self.literal(table.comment)};")
        for col in table.columns:
            if col.comment:
                statements.append(
                    f"COMMENT ON COLUMN {name}.{self.quote(col.name)} IS {self.literal(col.comment)};"
                )
        return statements

    def add_foreign_key(self, model: Model, rel: Relationship) -> str:
        parent = model.table_by_id(rel.parent_id)
        child = model.table_by_id(rel.child_id)
        child_cols = ", ".join(self.quote(pair.child) for pair in rel.columns)
        parent_cols = ", ".join(self.quote(pair.parent) for pair in rel.columns)
        constraint = f"CONSTRAINT {self.quote(rel.name)} " if rel.name else ""
        return (
            f"ALTER TABLE {self.table_name(child)} ADD {constraint}FOREIGN KEY ({child_cols}) "
            f"REFERENCES {self.table_name(parent)} ({parent_cols});"
        )

    def generate(self, model: Model) -> List[str]:
        """
        SQL 문장 목록을 생성합니다. 같은 입력이면 항상 같은 결과.

        Raises:
            UnresolvedTypeMapping: 매핑되지 않은 논리 타입이 있는 경우 (부분 결과 없음)
        """
        statements = [self.create_table(table) for table in model.tables]

        if self.config.include_comments:
            for table in model.tables:
                statements.extend(self.comments(table))

        statements.extend(self.add_foreign_key(model, rel) for rel in model.relationships)

        logger.info(
            f"DDL 생성 완료: 테이블 {len(model.tables)}개, FK {len(model.relationships)}개 "
            f"(platform={self.type_mapping.platform}, dialect={self.dialect or 'default'})"
        )
        return statements


def generate_ddl(model: Model, type_mapping: TypeMapping, config: Optional[RunConfig] = None) -> List[str]:
    return DDLGenerator(type_mapping, config).generate(model)


def render_ddl(statements: List[str]) -> str:
    """문장 목록을 줄 단위 텍스트로 만듭니다 (마지막 줄바꿈 포함)."""
    return "".join(f"{stmt}\n" for stmt in statements)
