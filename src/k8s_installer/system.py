"""
시스템 확인 모듈
권한, CPU 코어 수, OS/패키지 매니저 감지 및 호스트명 설정
"""

import os
import pwd
import socket
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from rich.console import Console
from .config import InstallConfig, PathsConfig
from .errors import PreconditionError
from .logger import get_logger
from .runner import CommandRunner

console = Console()


class OSFamily(Enum):
    DEBIAN = "Debian"
    UBUNTU = "Ubuntu"
    CENTOS = "CentOS"
    FEDORA = "Fedora"

    @property
    def is_redhat(self) -> bool:
        return self in (OSFamily.CENTOS, OSFamily.FEDORA)


class PackageManagerType(Enum):
    APT = "apt-get"
    YUM = "yum"
    DNF = "dnf"


@dataclass(frozen=True)
class HostProfile:
    """감지된 호스트 정보 (감지 후 읽기 전용)"""
    os_family: OSFamily
    package_manager: PackageManagerType
    cpu_count: int = 1

    @property
    def is_redhat(self) -> bool:
        return self.os_family.is_redhat


@dataclass(frozen=True)
class InvokingUser:
    """설치를 실행한 사용자 (sudo 사용 시 원래 사용자)"""
    name: str
    home: str
    uid: int
    gid: int

    @classmethod
    def detect(cls) -> "InvokingUser":
        sudo_user = os.environ.get("SUDO_USER")
        if sudo_user:
            try:
                entry = pwd.getpwnam(sudo_user)
                return cls(entry.pw_name, entry.pw_dir, entry.pw_uid, entry.pw_gid)
            except KeyError:
                pass
        entry = pwd.getpwuid(os.geteuid())
        return cls(entry.pw_name, os.path.expanduser("~") or entry.pw_dir, entry.pw_uid, entry.pw_gid)


def sanitize_hostname(hostname: str) -> str:
    """DNS에 사용할 수 없는 '_'를 '-'로 변환"""
    return hostname.strip().replace("_", "-")


def usable_cpu_count() -> int:
    """현재 프로세스가 사용할 수 있는 CPU 수 (nproc와 동일)"""
    if hasattr(os, "sched_getaffinity"):
        return len(os.sched_getaffinity(0)) or 1
    return os.cpu_count() or 1


def detect_os(redhat_release: str = "/etc/redhat-release",
              issue_file: str = "/etc/issue") -> HostProfile:
    """릴리스 파일로 OS 종류 판별

    Red Hat 계열 파일을 먼저 확인하고, 그 다음 issue 파일에서 Debian/Ubuntu를 찾는다.
    """
    cpu_count = usable_cpu_count()

    if os.path.exists(redhat_release):
        with open(redhat_release, "r", encoding="utf-8", errors="replace") as f:
            release = f.read()
        if "Fedora" in release:
            return HostProfile(OSFamily.FEDORA, PackageManagerType.DNF, cpu_count)
        return HostProfile(OSFamily.CENTOS, PackageManagerType.YUM, cpu_count)

    issue = ""
    if os.path.exists(issue_file):
        with open(issue_file, "r", encoding="utf-8", errors="replace") as f:
            issue = f.read()

    if "Debian" in issue:
        return HostProfile(OSFamily.DEBIAN, PackageManagerType.APT, cpu_count)
    if "Ubuntu" in issue:
        return HostProfile(OSFamily.UBUNTU, PackageManagerType.APT, cpu_count)

    raise PreconditionError("지원하지 않는 OS입니다 (Debian, Ubuntu, CentOS, Fedora만 지원)")


class SystemProber:
    """시스템 사전 조건 확인 클래스"""

    def __init__(self, install_config: InstallConfig, paths: PathsConfig,
                 runner: CommandRunner, debug: bool = False):
        self.install_config = install_config
        self.paths = paths
        self.runner = runner
        self.debug = debug
        self.logger = get_logger()
        self.profile: Optional[HostProfile] = None

    def check_root(self):
        """루트 권한 확인"""
        if os.geteuid() != 0:
            self.logger.error("Installer must be run as root")
            raise PreconditionError("root 권한으로 실행해야 합니다 (sudo 사용)")

    def check_cpu(self):
        """컨트롤 플레인은 최소 2 코어 필요"""
        cpu_count = usable_cpu_count()
        self.logger.debug(f"CPU cores: {cpu_count}")
        if cpu_count < 2 and self.install_config.is_control_plane:
            self.logger.error(f"Control plane requires at least 2 CPU cores (found {cpu_count})")
            raise PreconditionError("컨트롤 플레인 노드는 최소 2개의 CPU 코어가 필요합니다")

    def probe(self) -> HostProfile:
        """사전 조건 확인 및 OS 감지

        조건을 만족하지 않으면 PreconditionError를 발생시킨다.
        """
        console.print("\n[bold cyan]시스템 확인 중...[/bold cyan]\n")
        self.logger.info("Running system checks...")

        self.check_root()
        self.check_cpu()

        self.profile = detect_os(self.paths.redhat_release, self.paths.issue_file)
        console.print(
            f"[green]✓ 시스템 확인 완료: OS={self.profile.os_family.value}, "
            f"패키지 매니저={self.profile.package_manager.value}[/green]"
        )
        self.logger.info(
            f"System checks passed. OS={self.profile.os_family.value}, "
            f"pkg_mgr={self.profile.package_manager.value}"
        )
        return self.profile

    def current_hostname(self) -> str:
        if os.path.exists(self.paths.hostname_file):
            with open(self.paths.hostname_file, "r", encoding="utf-8") as f:
                hostname = f.read().strip()
            if hostname:
                return hostname
        return socket.gethostname()

    def set_hostname(self, hostname: str) -> str:
        """호스트명 설정 및 /etc/hosts 등록 (이미 등록된 경우 추가하지 않음)"""
        sanitized = sanitize_hostname(hostname)
        if sanitized != hostname.strip():
            console.print("[yellow]호스트명에 '_'를 사용할 수 없어 '-'로 변환합니다...[/yellow]")
            self.logger.warning(f"Hostname '{hostname}' contains '_', using '{sanitized}'")

        console.print(f"[cyan]호스트명을 {sanitized}로 설정합니다...[/cyan]")
        self.logger.info(f"Setting hostname to {sanitized}")

        with open(self.paths.hosts_file, "a+", encoding="utf-8") as f:
            f.seek(0)
            content = f.read()
            registered = any(
                parts[0] == "127.0.0.1" and sanitized in parts[1:]
                for parts in (line.split() for line in content.splitlines())
                if parts
            )
            if registered:
                self.logger.debug(f"{self.paths.hosts_file} already maps {sanitized}")
            else:
                if content and not content.endswith("\n"):
                    f.write("\n")
                f.write(f"127.0.0.1 {sanitized}\n")

        self.runner.run(["hostnamectl", "--static", "set-hostname", sanitized])
        console.print(f"[green]✓ 호스트명 설정 완료: {sanitized}[/green]")
        return sanitized

    def setup_hostname(self) -> str:
        """요청된 호스트명 적용, 없으면 현재 호스트명의 '_'만 정리"""
        if self.install_config.hostname:
            return self.set_hostname(self.install_config.hostname)

        current = self.current_hostname()
        if "_" in current:
            return self.set_hostname(current)

        self.logger.debug(f"Hostname unchanged: {current}")
        return current
