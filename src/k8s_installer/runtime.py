"""
컨테이너 런타임(containerd) 설정 모듈
"""

import os
import re
from typing import Tuple
from rich.console import Console
from .config import RuntimeConfig
from .logger import get_logger
from .runner import CommandRunner

console = Console()

_SYSTEMD_CGROUP = re.compile(r"(SystemdCgroup\s*=\s*)false")


def enable_systemd_cgroup(config_text: str) -> Tuple[str, int]:
    """SystemdCgroup = false 를 true 로 변경"""
    return _SYSTEMD_CGROUP.subn(r"\1true", config_text)


class ContainerdConfigurator:
    """containerd 기본 설정 생성 및 서비스 활성화"""

    def __init__(self, runtime: RuntimeConfig, runner: CommandRunner, debug: bool = False):
        self.runtime = runtime
        self.runner = runner
        self.debug = debug
        self.logger = get_logger()

    def write_config(self) -> int:
        """기본 설정을 생성하여 저장 (기존 설정은 덮어씀)"""
        result = self.runner.run(["containerd", "config", "default"], capture=True)
        config_text = result.stdout
        patched = 0

        if self.runtime.systemd_cgroup:
            config_text, patched = enable_systemd_cgroup(config_text)
            if not patched:
                self.logger.warning("SystemdCgroup option not found in default containerd config")

        config_dir = os.path.dirname(self.runtime.config_path)
        if config_dir:
            os.makedirs(config_dir, exist_ok=True)
        with open(self.runtime.config_path, "w", encoding="utf-8") as f:
            f.write(config_text)

        self.logger.info(f"containerd config written to {self.runtime.config_path}")
        return patched

    def configure(self) -> Tuple[bool, str]:
        console.print("\n[bold cyan]containerd 설정 중...[/bold cyan]\n")
        self.logger.info("Setting up containerd...")

        self.write_config()
        self.runner.run(["systemctl", "enable", "containerd"])
        # 이미 실행 중이면 새 설정이 반영되지 않으므로 재시작
        self.runner.run(["systemctl", "restart", "containerd"])

        console.print("[green]✓ containerd 설정 완료[/green]")
        self.logger.info("Containerd setup complete")
        return True, "완료"
