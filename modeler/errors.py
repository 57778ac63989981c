"""
변환 파이프라인 전반에서 사용하는 예외 정의
모든 예외는 한 번의 실행을 중단시키는 치명적 오류입니다.
"""

from typing import Iterable, Optional


class ModelerError(Exception):
    """모든 변환 오류의 기본 클래스"""
    pass


class ConfigError(ModelerError):
    """필수 파라미터 누락 등 실행 설정이 잘못된 경우 발생하는 예외"""
    pass


class NotFound(ModelerError):
    """모델 루트 경로 또는 타입 파일이 존재하지 않는 경우"""

    def __init__(self, path: str, what: str = "path"):
        self.path = path
        self.what = what
        super().__init__(f"Required {what} not found: {path}")


class FragmentParseError(ModelerError):
    """프래그먼트(또는 타입 문서)의 마크업/구조를 해석할 수 없는 경우"""

    def __init__(
        self,
        path: str,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        self.path = path
        self.line = line
        self.column = column
        self.reason = message
        where = path
        if line is not None:
            where = f"{path}:{line}"
            if column is not None:
                where = f"{where}:{column}"
        super().__init__(f"{where}: {message}")


class ConflictingDefinition(ModelerError):
    """같은 design ID가 서로 다른 값으로 재정의된 경우"""

    def __init__(self, design_id: str, first_source: str, second_source: str, detail: str = ""):
        self.design_id = design_id
        self.first_source = first_source
        self.second_source = second_source
        message = (
            f"Conflicting definition for '{design_id}' "
            f"(first declared in {first_source}, redeclared in {second_source})"
        )
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class DanglingReference(ModelerError):
    """인덱싱되지 않은 design ID를 참조하는 경우"""

    def __init__(self, missing_id: str, source: str, referrer: Optional[str] = None, detail: str = ""):
        self.missing_id = missing_id
        self.source = source
        self.referrer = referrer
        message = f"Dangling reference to '{missing_id}'"
        if referrer:
            message = f"{message} from '{referrer}'"
        message = f"{message} declared in {source}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class UnknownPlatform(ModelerError):
    """타입 문서에 요청한 플랫폼 항목이 없는 경우"""

    def __init__(self, platform: str, known: Iterable[str] = ()):
        self.platform = platform
        self.known = sorted(known)
        super().__init__(
            f"Unknown platform '{platform}'. "
            f"Known platforms: {', '.join(self.known) or '(none)'}"
        )


class UnresolvedTypeMapping(ModelerError):
    """컬럼의 논리 타입이 선택한 플랫폼에 매핑되어 있지 않은 경우"""

    def __init__(self, table: str, column: str, logical_type: str, platform: str):
        self.table = table
        self.column = column
        self.logical_type = logical_type
        self.platform = platform
        super().__init__(
            f"No type mapping for logical type '{logical_type}' "
            f"on platform '{platform}' (column {table}.{column})"
        )


class WriteFailure(ModelerError):
    """출력 파일 쓰기에 실패한 경우"""

    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to write {path}: {cause}")


class LoaderStateError(ModelerError):
    """ModelLoader의 상태 전이가 허용되지 않는 경우"""
    pass
