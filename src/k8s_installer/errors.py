"""
설치 과정에서 사용하는 예외 정의
"""

from typing import List, Optional


class InstallerError(Exception):
    """설치 도구 기본 예외"""

    exit_code = 1


class PreconditionError(InstallerError):
    """사전 조건 실패 (권한, CPU 코어 수, 지원하지 않는 OS)"""

    exit_code = 1


class CommandError(InstallerError):
    """외부 명령어 실행 실패"""

    def __init__(self, cmd: List[str], returncode: int, output: Optional[str] = None):
        self.cmd = cmd
        self.returncode = returncode
        self.output = output or ""
        self.exit_code = returncode if returncode > 0 else 1
        super().__init__(f"'{' '.join(cmd)}' exited with status {returncode}")
