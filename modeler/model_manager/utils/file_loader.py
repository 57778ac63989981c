from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List, Sequence

from modeler.config import DEFAULT_EXTENSIONS, normalize_extension
from modeler.errors import NotFound
from utils.logger import setup_logger


logger = setup_logger("file_loader")


def locate_fragments(
    root: str,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
) -> List[str]:
    """
    모델 루트 아래의 프래그먼트 파일 목록을 결정적인 순서로 반환합니다.

    - root가 파일이면 그 파일 하나만 반환 (확장자 검사 없음)
    - 디렉토리면 하위까지 재귀 탐색, 확장자로 필터링
    - 숨김 디렉토리(.으로 시작)는 건너뜀
    - 전체 경로(POSIX 형식) 사전순 정렬: 파일 시스템 순회 순서와 무관

    Raises:
        NotFound: root 경로가 없는 경우
    """
    root_path = Path(root)
    if not root_path.exists():
        raise NotFound(str(root), "model path")

    root_path = root_path.resolve()
    if root_path.is_file():
        logger.debug(f"단일 프래그먼트 파일: {root_path}")
        return [str(root_path)]

    exts = {normalize_extension(ext) for ext in extensions}
    results: List[str] = []

    for dirpath, dirnames, filenames in os.walk(root_path):
        dirnames[:] = [d for d in dirnames if not d.startswith(".")]
        for fn in filenames:
            if os.path.splitext(fn)[1].lower() not in exts:
                continue
            results.append(os.path.join(dirpath, fn))

    results.sort(key=_canonical_key)
    logger.info(f"프래그먼트 파일 {len(results)}개 발견: {root_path}")
    return results


def _canonical_key(path: str) -> str:
    return Path(path).as_posix()


def sorted_paths(paths: Sequence[str]) -> List[str]:
    """임의 순서로 받은 경로 목록을 locate_fragments()와 같은 정렬 기준으로 정렬합니다."""
    return sorted((str(Path(p).resolve()) for p in paths), key=_canonical_key)
