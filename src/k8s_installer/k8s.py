"""
Kubernetes 설치 및 클러스터 부트스트랩 모듈
컨트롤 플레인 초기화(kubeadm init) 또는 워커 노드 조인 안내
"""

import os
import shutil
from typing import Tuple, Optional, Dict, List
from rich.console import Console
from rich.markup import escape
from .config import InstallConfig, NetworkConfig, PathsConfig
from .logger import get_logger
from .packages import KUBE_PACKAGES, PackageManager
from .runner import CommandRunner
from .system import InvokingUser

console = Console()

COMPLETION_LINES = [
    "source <(kubectl completion bash)",
    "source <(kubeadm completion bash)",
]


def append_missing_lines(path: str, lines: List[str]) -> int:
    """파일에 없는 줄만 추가하고 추가한 줄 수를 반환"""
    existing = ""
    if os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            existing = f.read()

    present = set(existing.splitlines())
    missing = [line for line in lines if line not in present]
    if not missing:
        return 0

    with open(path, "a", encoding="utf-8") as f:
        if existing and not existing.endswith("\n"):
            f.write("\n")
        for line in missing:
            f.write(line + "\n")
    return len(missing)


class K8sManager:
    """Kubernetes 패키지 설치 및 클러스터 관리 클래스"""

    def __init__(self, install_config: InstallConfig, network: NetworkConfig,
                 paths: PathsConfig, runner: CommandRunner,
                 user: Optional[InvokingUser] = None, debug: bool = False):
        self.install_config = install_config
        self.network = network
        self.paths = paths
        self.runner = runner
        self.user = user or InvokingUser.detect()
        self.debug = debug
        self.logger = get_logger()

    @property
    def kubeconfig_path(self) -> str:
        return os.path.join(self.user.home, ".kube", "config")

    @property
    def bashrc_path(self) -> str:
        return os.path.join(self.user.home, ".bashrc")

    def install_packages(self, package_manager: PackageManager) -> Tuple[bool, str]:
        """저장소 등록 후 버전을 고정하여 kubelet/kubeadm/kubectl 설치"""
        version = self.install_config.kubernetes_version
        console.print(f"\n[bold cyan]Kubernetes v{version} 설치 중...[/bold cyan]\n")
        self.logger.info(f"Installing Kubernetes v{version}...")

        package_manager.add_repository(self.install_config)
        package_manager.refresh_index()
        package_manager.install(package_manager.pinned_packages(version))
        package_manager.hold(KUBE_PACKAGES)

        self.runner.run(["systemctl", "enable", "--now", "kubelet"])
        self.install_completions()

        console.print("[green]✓ Kubernetes 설치 완료[/green]")
        self.logger.info("Kubernetes installation complete")
        return True, f"v{version}"

    def install_completions(self) -> int:
        """셸 자동완성 설정 (중복 추가 방지)"""
        added = append_missing_lines(self.bashrc_path, COMPLETION_LINES)
        if added and os.geteuid() == 0:
            os.chown(self.bashrc_path, self.user.uid, self.user.gid)
        self.logger.debug(f"Added {added} completion lines to {self.bashrc_path}")
        return added

    def is_initialized(self) -> bool:
        """이미 kubeadm init이 완료된 노드인지 확인"""
        initialized = os.path.exists(self.paths.admin_conf)
        self.logger.debug(f"Control plane initialized: {initialized}")
        return initialized

    def init_command(self) -> List[str]:
        cmd = ["kubeadm", "init", f"--kubernetes-version={self.install_config.kubernetes_version}"]
        cidr = self.install_config.pod_network_cidr
        if cidr:
            cmd.append(f"--pod-network-cidr={cidr}")
        return cmd

    def setup_kubeconfig(self):
        """관리자 kubeconfig를 사용자 홈 디렉토리로 복사"""
        kube_dir = os.path.dirname(self.kubeconfig_path)
        os.makedirs(kube_dir, exist_ok=True)
        shutil.copyfile(self.paths.admin_conf, self.kubeconfig_path)
        if os.geteuid() == 0:
            os.chown(kube_dir, self.user.uid, self.user.gid)
            os.chown(self.kubeconfig_path, self.user.uid, self.user.gid)
        console.print(f"  ✓ kubeconfig 복사: {self.kubeconfig_path}")
        self.logger.info(f"Admin kubeconfig copied to {self.kubeconfig_path}")

    def apply_cni(self):
        cni = self.install_config.cni
        manifest = self.network.manifest_for(cni)
        if not manifest:
            console.print("[yellow]⚠ CNI가 선택되지 않아 네트워크 플러그인을 설치하지 않습니다.[/yellow]")
            self.logger.warning("No CNI selected, skipping manifest apply")
            return
        self.runner.run(["kubectl", "--kubeconfig", self.paths.admin_conf, "apply", "-f", manifest])
        console.print(f"  ✓ {cni.value} 적용")

    def show_join_command(self):
        """워커 노드 조인 명령어 표시 (실패해도 무시)"""
        result = self.runner.run(
            ["kubeadm", "token", "create", "--print-join-command"],
            check=False,
            capture=True
        )
        if result.returncode == 0 and result.stdout.strip():
            console.print("\n[yellow]워커 노드에서 다음 명령어를 실행하세요:[/yellow]")
            console.print(f"[cyan]  {escape(result.stdout.strip())}[/cyan]")

    def init_control_plane(self) -> Tuple[bool, str]:
        """컨트롤 플레인 초기화 (이미 초기화된 경우 init 생략)"""
        console.print("\n[bold cyan]클러스터 초기화 중...[/bold cyan]\n")

        if self.is_initialized():
            console.print("[green]✓ 이미 초기화된 컨트롤 플레인입니다. kubeadm init을 건너뜁니다.[/green]")
            self.logger.info("Control plane already initialized (idempotent)")
        else:
            self.logger.info(f"Executing init command: {' '.join(self.init_command())}")
            self.runner.run(self.init_command())

        self.setup_kubeconfig()
        self.apply_cni()
        self.show_join_command()

        console.print("[bold green]✓ 클러스터 초기화 완료![/bold green]")
        self.logger.info("Cluster initialized")
        return True, "초기화 완료"

    def bootstrap(self) -> Tuple[bool, str]:
        """역할에 따라 클러스터 초기화 또는 조인 안내"""
        self.logger.info("Preparing cluster init/join...")
        if self.install_config.is_control_plane:
            return self.init_control_plane()

        console.print("\n[yellow]워커 노드: 컨트롤 플레인에서 조인 명령어를 받아 이 노드에서 실행하세요.[/yellow]")
        console.print("[cyan]  (컨트롤 플레인) kubeadm token create --print-join-command[/cyan]")
        console.print("[cyan]  (이 노드) kubeadm join <api-server>:6443 --token <token> "
                      "--discovery-token-ca-cert-hash sha256:<hash>[/cyan]")
        self.logger.info("Worker node: run 'kubeadm join' manually to join the cluster")
        return True, "조인 대기"

    def verify_node_status(self) -> Dict:
        """노드 구성요소 상태 확인"""
        self.logger.info("Verifying node status...")
        results = {}

        for service in ("containerd", "kubelet"):
            result = self.runner.run(["systemctl", "is-active", service], check=False, capture=True)
            results[service] = result.stdout.strip() == "active"

        swap = self.runner.run(["swapon", "--noheadings", "--show"], check=False, capture=True)
        results["swap_off"] = swap.returncode == 0 and not swap.stdout.strip()

        results["admin_conf"] = os.path.exists(self.paths.admin_conf)
        results["kubeconfig"] = os.path.exists(self.kubeconfig_path)

        self.logger.info(f"Node status: {results}")
        return results
