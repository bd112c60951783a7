"""
로깅 시스템
콘솔(Rich) 및 파일 로깅, 디버그 모드 지원
"""

import logging
import os
from typing import Optional
from rich.logging import RichHandler
from rich.console import Console

console = Console()

DEFAULT_LOG_FILE = "/var/log/k8s-install.log"


class InstallerLogger:
    """설치 로거

    파일에는 실행된 명령어와 출력까지 모두 기록하고,
    콘솔에는 설정된 레벨 이상만 표시한다.
    """

    def __init__(self, log_file: str = DEFAULT_LOG_FILE, log_level: str = "INFO", debug: bool = False):
        self.log_file = log_file
        self.log_level = logging.DEBUG if debug else getattr(logging, log_level.upper())
        self.debug_mode = debug
        self.file_error: Optional[OSError] = None

        self.logger = logging.getLogger("k8s_installer")
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False

        # 기존 핸들러 제거
        for handler in list(self.logger.handlers):
            handler.close()
        self.logger.handlers.clear()

        # 콘솔 핸들러 (Rich)
        rich_handler = RichHandler(
            console=console,
            rich_tracebacks=True,
            show_time=False,
            show_path=debug
        )
        rich_handler.setLevel(self.log_level)
        self.logger.addHandler(rich_handler)

        # 파일 핸들러 (전체 실행 기록)
        try:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
        except OSError as e:
            self.file_error = e
            self.logger.warning(f"Cannot open log file {log_file}: {e}")
            return

        file_handler.setLevel(logging.DEBUG)
        file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler.setFormatter(file_formatter)
        self.logger.addHandler(file_handler)

    def debug(self, message: str):
        """디버그 로그"""
        self.logger.debug(message)

    def info(self, message: str):
        """정보 로그"""
        self.logger.info(message)

    def warning(self, message: str):
        """경고 로그"""
        self.logger.warning(message)

    def error(self, message: str):
        """에러 로그"""
        self.logger.error(message)

    def critical(self, message: str):
        """치명적 에러 로그"""
        self.logger.critical(message)

    def exception(self, message: str):
        """예외 로그 (트레이스백 포함)"""
        self.logger.exception(message)

    def get_log_file(self) -> Optional[str]:
        """로그 파일 경로 반환 (파일 로깅 실패 시 None)"""
        if self.file_error is not None:
            return None
        return self.log_file


# 글로벌 로거 인스턴스
_logger: Optional[InstallerLogger] = None


def get_logger(log_file: str = DEFAULT_LOG_FILE,
               log_level: str = "INFO",
               debug: bool = False) -> InstallerLogger:
    """로거 인스턴스 가져오기"""
    global _logger
    if _logger is None:
        _logger = InstallerLogger(log_file, log_level, debug)
    return _logger


def init_logger(log_file: str, log_level: str, debug: bool) -> InstallerLogger:
    """로거 초기화"""
    global _logger
    _logger = InstallerLogger(log_file, log_level, debug)
    return _logger
