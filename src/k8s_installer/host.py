"""
호스트 준비 모듈
swap/SELinux 비활성화, Red Hat 계열 방화벽 및 커널 파라미터 설정
"""

import os
import re
from typing import Tuple
from rich.console import Console
from .config import PathsConfig
from .logger import get_logger
from .runner import CommandRunner
from .system import HostProfile
from .templates import render_sysctl

console = Console()


def comment_swap_entries(fstab: str) -> Tuple[str, int]:
    """fstab의 swap 항목을 주석 처리 (이미 주석인 줄은 그대로 둔다)"""
    lines = fstab.splitlines(keepends=True)
    changed = 0
    for i, line in enumerate(lines):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        fields = stripped.split()
        if len(fields) >= 3 and fields[2] == "swap":
            lines[i] = "#" + line
            changed += 1
    return "".join(lines), changed


def disable_selinux_config(content: str) -> str:
    return re.sub(r"^SELINUX=enforcing", "SELINUX=disabled", content, flags=re.MULTILINE)


class HostPreparer:
    """kubelet 실행 전 호스트 설정"""

    def __init__(self, profile: HostProfile, paths: PathsConfig,
                 runner: CommandRunner, debug: bool = False):
        self.profile = profile
        self.paths = paths
        self.runner = runner
        self.debug = debug
        self.logger = get_logger()

    def disable_swap(self):
        """swap 즉시 해제 및 재부팅 후에도 유지되도록 fstab 수정"""
        self.logger.info("Disabling swap...")
        self.runner.run(["swapoff", "-a"])

        if not os.path.exists(self.paths.fstab):
            self.logger.debug(f"{self.paths.fstab} not found, skipping")
            return

        with open(self.paths.fstab, "r", encoding="utf-8") as f:
            content = f.read()

        updated, changed = comment_swap_entries(content)
        if changed:
            with open(self.paths.fstab, "w", encoding="utf-8") as f:
                f.write(updated)
        self.logger.debug(f"Commented {changed} swap entries in {self.paths.fstab}")
        console.print("  ✓ swap 비활성화")

    def disable_selinux(self):
        """SELinux enforcing 해제 (실패해도 계속 진행)"""
        if not os.path.exists(self.paths.selinux_config):
            self.logger.debug("SELinux config not found, skipping")
            return

        with open(self.paths.selinux_config, "r", encoding="utf-8") as f:
            content = f.read()
        updated = disable_selinux_config(content)
        if updated != content:
            with open(self.paths.selinux_config, "w", encoding="utf-8") as f:
                f.write(updated)
            self.logger.info("SELinux disabled in config")

        self.runner.run(["setenforce", "0"], check=False)
        console.print("  ✓ SELinux 비활성화")

    def disable_firewall(self):
        """firewalld 중지 (실패해도 계속 진행)"""
        self.logger.info("Disabling firewalld...")
        self.runner.run(["systemctl", "disable", "--now", "firewalld"], check=False)
        console.print("  ✓ firewalld 비활성화")

    def apply_sysctl(self):
        """브리지 트래픽 netfilter 설정"""
        self.logger.info(f"Writing {self.paths.sysctl_dropin}")
        sysctl_dir = os.path.dirname(self.paths.sysctl_dropin)
        if sysctl_dir:
            os.makedirs(sysctl_dir, exist_ok=True)
        with open(self.paths.sysctl_dropin, "w", encoding="utf-8") as f:
            f.write(render_sysctl())
        self.runner.run(["sysctl", "--system"])
        console.print("  ✓ 브리지 netfilter 커널 파라미터 적용")

    def prepare(self) -> Tuple[bool, str]:
        """호스트 준비 실행"""
        console.print("\n[bold cyan]커널 및 방화벽 설정 중...[/bold cyan]\n")
        self.logger.info("Applying kernel & firewall settings...")

        if self.profile.is_redhat:
            self.disable_firewall()
            self.apply_sysctl()

        self.disable_selinux()
        self.disable_swap()

        console.print("\n[green]✓ 호스트 준비 완료[/green]")
        self.logger.info("Kernel & firewall settings applied")
        return True, "완료"
