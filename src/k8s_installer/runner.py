"""
외부 명령어 실행 모듈
명령어를 기록하고 출력을 로그 파일로 남긴다
"""

import os
import shlex
import subprocess
from typing import Dict, List, Optional
from rich.console import Console
from rich.markup import escape
from .errors import CommandError
from .logger import get_logger

console = Console()


class CommandRunner:
    """외부 명령어 실행기

    모든 명령은 동기식으로 실행되며 완료될 때까지 대기한다.
    """

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.logger = get_logger()

    def run(self, cmd: List[str], check: bool = True, capture: bool = False,
            input_text: Optional[str] = None,
            env: Optional[Dict[str, str]] = None) -> subprocess.CompletedProcess:
        """명령어 실행

        Args:
            cmd: 실행할 명령어 (인자 리스트)
            check: True면 실패 시 CommandError 발생
            capture: True면 stdout을 결과로 돌려받음 (화면에 출력하지 않음)
            input_text: 표준 입력으로 전달할 문자열
            env: 추가 환경 변수
        """
        display = " ".join(shlex.quote(part) for part in cmd)
        console.print(f"\n[green]{escape(display)}[/green]")
        self.logger.debug(f"Running: {display}")

        run_env = None
        if env:
            run_env = dict(os.environ)
            run_env.update(env)

        try:
            if capture or input_text is not None:
                result = subprocess.run(
                    cmd,
                    input=input_text,
                    capture_output=True,
                    encoding="utf-8",
                    errors="replace",
                    env=run_env
                )
                if not capture:
                    self._log_output(result.stdout)
                self._log_output(result.stderr)
            else:
                result = self._stream(cmd, run_env)
        except FileNotFoundError as e:
            self.logger.error(f"Command not found: {cmd[0]}")
            result = subprocess.CompletedProcess(cmd, 127, stdout="", stderr=str(e))

        if result.returncode != 0:
            if check:
                self.logger.error(f"Command failed ({result.returncode}): {display}")
                raise CommandError(cmd, result.returncode, result.stderr or result.stdout)
            self.logger.warning(f"Command failed ({result.returncode}), continuing: {display}")

        return result

    def _stream(self, cmd: List[str], env: Optional[Dict[str, str]]) -> subprocess.CompletedProcess:
        """출력을 한 줄씩 로그로 흘려보내며 실행"""
        lines = []
        with subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            encoding="utf-8",
            errors="replace",
            env=env
        ) as process:
            for line in process.stdout:
                line = line.rstrip("\n")
                lines.append(line)
                self.logger.info(line)
            returncode = process.wait()
        output = "\n".join(lines)
        return subprocess.CompletedProcess(cmd, returncode, stdout=output, stderr=output)

    def _log_output(self, text: Optional[str]):
        for line in (text or "").splitlines():
            self.logger.debug(line)
