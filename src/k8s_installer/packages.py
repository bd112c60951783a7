"""
패키지 매니저 모듈
Debian 계열(APT)과 Red Hat 계열(YUM/DNF)의 설치 방법을 하나의 인터페이스로 제공
"""

import os
import requests
from typing import List, Tuple
from rich.console import Console
from .config import InstallConfig, RepositoryConfig
from .logger import get_logger
from .runner import CommandRunner
from .system import HostProfile, PackageManagerType
from .templates import render_apt_source, render_yum_repo

console = Console()

KUBE_PACKAGES = ["kubelet", "kubeadm", "kubectl"]


class PackageManager:
    """패키지 매니저 공통 인터페이스"""

    base_packages: List[str] = []

    def __init__(self, binary: str, repository: RepositoryConfig,
                 runner: CommandRunner, debug: bool = False):
        self.binary = binary
        self.repository = repository
        self.runner = runner
        self.debug = debug
        self.logger = get_logger()

    def refresh_index(self):
        raise NotImplementedError

    def install(self, packages: List[str]):
        raise NotImplementedError

    def add_repository(self, install_config: InstallConfig):
        """Kubernetes 패키지 저장소 등록"""
        raise NotImplementedError

    def pinned_packages(self, version: str) -> List[str]:
        """버전이 고정된 kubelet/kubeadm/kubectl 패키지 목록"""
        raise NotImplementedError

    def hold(self, packages: List[str]):
        """의도하지 않은 업그레이드 방지"""
        self.logger.debug(f"{self.binary}: package hold not supported, skipping")

    def install_base_packages(self) -> Tuple[bool, str]:
        """의존성 패키지 설치"""
        console.print("\n[bold cyan]의존성 패키지 설치 중...[/bold cyan]\n")
        self.logger.info(f"Installing dependencies: {', '.join(self.base_packages)}")

        self.refresh_index()
        self.install(self.base_packages)

        console.print("[green]✓ 의존성 패키지 설치 완료[/green]")
        self.logger.info("Dependencies installed")
        return True, "완료"


class AptPackageManager(PackageManager):
    """Debian/Ubuntu"""

    base_packages = ["apt-transport-https", "ca-certificates", "curl", "gpg", "containerd"]

    NONINTERACTIVE = {"DEBIAN_FRONTEND": "noninteractive"}

    def refresh_index(self):
        self.runner.run([self.binary, "update"], env=self.NONINTERACTIVE)

    def install(self, packages: List[str]):
        self.runner.run([self.binary, "install", "-y"] + packages, env=self.NONINTERACTIVE)

    def channel_url(self, install_config: InstallConfig) -> str:
        return f"{self.repository.apt_base_url.rstrip('/')}/v{install_config.minor_version}/deb/"

    def download_key(self, install_config: InstallConfig) -> str:
        """릴리스 채널 서명 키 다운로드"""
        url = f"{self.channel_url(install_config)}Release.key"
        self.logger.info(f"Downloading signing key: {url}")
        response = requests.get(url, timeout=self.repository.download_timeout)
        response.raise_for_status()
        return response.text

    def add_repository(self, install_config: InstallConfig):
        keyring = self.repository.apt_keyring
        keyring_dir = os.path.dirname(keyring)
        os.makedirs(keyring_dir, exist_ok=True)
        os.chmod(keyring_dir, 0o755)

        key = self.download_key(install_config)
        self.runner.run(["gpg", "--dearmor", "--batch", "--yes", "-o", keyring], input_text=key)

        source = render_apt_source(keyring, self.repository.apt_base_url, install_config.minor_version)
        source_dir = os.path.dirname(self.repository.apt_source_list)
        if source_dir:
            os.makedirs(source_dir, exist_ok=True)
        with open(self.repository.apt_source_list, "w", encoding="utf-8") as f:
            f.write(source)
        console.print(f"  ✓ APT 저장소 등록: v{install_config.minor_version}")
        self.logger.info(f"APT source written to {self.repository.apt_source_list}")

    def pinned_packages(self, version: str) -> List[str]:
        return [f"{name}={version}-*" for name in KUBE_PACKAGES]

    def hold(self, packages: List[str]):
        self.runner.run(["apt-mark", "hold"] + packages)


class RpmPackageManager(PackageManager):
    """CentOS(yum) / Fedora(dnf)"""

    base_packages = ["bash-completion", "curl", "containerd"]

    def refresh_index(self):
        self.runner.run([self.binary, "makecache"])

    def install(self, packages: List[str]):
        self.runner.run([self.binary, "install", "-y"] + packages)

    def add_repository(self, install_config: InstallConfig):
        repo_file = self.repository.rpm_repo_file
        repo_dir = os.path.dirname(repo_file)
        if repo_dir:
            os.makedirs(repo_dir, exist_ok=True)
        with open(repo_file, "w", encoding="utf-8") as f:
            f.write(render_yum_repo(self.repository.rpm_baseurl, self.repository.rpm_gpgkey))
        console.print("  ✓ YUM/DNF 저장소 등록")
        self.logger.info(f"RPM repository written to {repo_file}")

    def pinned_packages(self, version: str) -> List[str]:
        return [f"{name}-{version}" for name in KUBE_PACKAGES]


def create_package_manager(profile: HostProfile, repository: RepositoryConfig,
                           runner: CommandRunner, debug: bool = False) -> PackageManager:
    """호스트에 맞는 패키지 매니저 생성"""
    if profile.package_manager is PackageManagerType.APT:
        return AptPackageManager(profile.package_manager.value, repository, runner, debug)
    return RpmPackageManager(profile.package_manager.value, repository, runner, debug)
