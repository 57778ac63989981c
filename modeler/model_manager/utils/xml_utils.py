"""
lxml 기반 XML 읽기 헬퍼
프래그먼트와 타입 문서가 공통으로 사용합니다.
"""

from typing import Iterator, Optional

from lxml import etree

from modeler.errors import FragmentParseError


def _new_parser() -> etree.XMLParser:
    # 파서 객체는 스레드 간에 공유하지 않음
    return etree.XMLParser(remove_comments=True, remove_pis=True, resolve_entities=False)


def parse_xml(path: str) -> etree._Element:
    """
    XML 파일을 파싱하여 루트 요소를 반환합니다.

    Raises:
        FragmentParseError: 파일을 읽을 수 없거나 마크업이 잘못된 경우 (파일/위치 포함)
    """
    try:
        tree = etree.parse(path, _new_parser())
    except etree.XMLSyntaxError as e:
        line, column = getattr(e, "position", (None, None))
        raise FragmentParseError(path, e.msg or str(e), line, column)
    except OSError as e:
        raise FragmentParseError(path, f"cannot read file: {e}")
    return tree.getroot()


def local_name(el: etree._Element) -> str:
    """네임스페이스를 제외한 태그명 (소문자)"""
    return etree.QName(el).localname.lower()


def child_elements(el: etree._Element) -> Iterator[etree._Element]:
    for child in el:
        if isinstance(child.tag, str):
            yield child


def find_child(el: etree._Element, name: str) -> Optional[etree._Element]:
    name = name.lower()
    for child in child_elements(el):
        if local_name(child) == name:
            return child
    return None


def text_value(el: etree._Element, name: str) -> Optional[str]:
    """
    속성 또는 같은 이름의 자식 요소 텍스트를 반환합니다.
    <Column length="50"/> 와 <Column><length>50</length></Column> 를 같게 취급.
    """
    value = el.get(name)
    if value is None:
        child = find_child(el, name)
        if child is not None:
            value = child.text
    if value is None:
        return None
    value = value.strip()
    return value or None


def ref_value(el: etree._Element, name: str) -> Optional[str]:
    """
    참조값을 읽습니다.
    name="ID" 속성, <name ref="ID"/>, <name>ID</name> 형식을 모두 허용.
    """
    value = el.get(name)
    if value is None:
        child = find_child(el, name)
        if child is None:
            return None
        value = child.get("ref")
        if value is None:
            value = child.text
    if value is None:
        return None
    value = value.strip()
    return value or None
