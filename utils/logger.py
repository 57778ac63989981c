"""
간단한 로거 유틸리티
모든 모듈은 setup_logger()로 모듈 단위 로거를 만들고,
CLI가 RunConfig.verbose 값에 따라 set_verbosity()를 한 번 호출합니다.
"""
import logging
import sys

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# setup_logger()로 만든 로거 이름 목록
_registered = set()


def setup_logger(name: str) -> logging.Logger:
    """
    로거를 설정하고 반환합니다.

    Args:
        name: 로거 이름

    Returns:
        설정된 로거 인스턴스
    """
    logger = logging.getLogger(name)
    _registered.add(name)

    # 이미 핸들러가 있으면 중복 추가하지 않음
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)

    # 콘솔 핸들러
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    logger.addHandler(handler)

    return logger


def set_verbosity(verbose: bool) -> None:
    """
    등록된 모든 로거의 레벨을 조정합니다.
    verbose=True이면 DEBUG, 아니면 INFO.
    """
    level = logging.DEBUG if verbose else logging.INFO
    for name in _registered:
        logging.getLogger(name).setLevel(level)
