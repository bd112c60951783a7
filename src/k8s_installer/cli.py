"""
CLI 메인 인터페이스
Click 및 Rich 기반 사용자 친화적 CLI
"""

import sys
import click
import requests
from typing import Callable, List, Optional, Tuple
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.prompt import Prompt
from . import __version__
from .config import CNI, Config, InstallConfig
from .errors import InstallerError
from .host import HostPreparer
from .images import ImagePrefetcher
from .k8s import K8sManager
from .logger import init_logger, get_logger
from .packages import PackageManager, create_package_manager
from .runner import CommandRunner
from .runtime import ContainerdConfigurator
from .system import HostProfile, InvokingUser, SystemProber

console = Console()

Step = Tuple[str, Callable[[], Tuple[bool, str]]]


class InstallOrchestrator:
    """설치 오케스트레이터

    이름이 붙은 단계를 순서대로 실행하고, 첫 실패에서 중단한다.
    """

    def __init__(self, install_config: InstallConfig, config: Config,
                 runner: Optional[CommandRunner] = None,
                 user: Optional[InvokingUser] = None, debug: bool = False):
        self.install_config = install_config
        self.config = config
        self.debug = debug
        self.logger = get_logger()
        self.runner = runner or CommandRunner(debug)
        self.user = user
        self.prober = SystemProber(install_config, config.paths, self.runner, debug)
        self.profile: Optional[HostProfile] = None
        self.package_manager: Optional[PackageManager] = None
        self.execution_log = []
        self.exit_code = 0

    def log_step(self, step: str, status: str, message: str = ""):
        """실행 단계 로깅"""
        self.execution_log.append({
            "step": step,
            "status": status,
            "message": message
        })

    def show_summary(self):
        """실행 결과 요약 표시"""
        console.print("\n" + "="*60)
        console.print("[bold]실행 결과 요약[/bold]")
        console.print("="*60 + "\n")

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("단계", style="cyan", width=24)
        table.add_column("상태", width=6)
        table.add_column("메시지", width=40)

        for log in self.execution_log:
            status_icon = "✓" if log["status"] == "success" else "✗"
            status_color = "green" if log["status"] == "success" else "red"
            table.add_row(
                log["step"],
                f"[{status_color}]{status_icon}[/{status_color}]",
                escape(log["message"][:40]) if log["message"] else ""
            )

        console.print(table)

        log_file = self.logger.get_log_file()
        if log_file:
            console.print(f"\n[bold]로그 파일:[/bold] {log_file}")

    def probe_system(self) -> Tuple[bool, str]:
        self.profile = self.prober.probe()
        self.package_manager = create_package_manager(
            self.profile, self.config.repository, self.runner, self.debug
        )
        return True, f"{self.profile.os_family.value} ({self.profile.package_manager.value})"

    def setup_hostname(self) -> Tuple[bool, str]:
        return True, self.prober.setup_hostname()

    def prepare_host(self) -> Tuple[bool, str]:
        preparer = HostPreparer(self.profile, self.config.paths, self.runner, self.debug)
        return preparer.prepare()

    def install_dependencies(self) -> Tuple[bool, str]:
        return self.package_manager.install_base_packages()

    def configure_runtime(self) -> Tuple[bool, str]:
        configurator = ContainerdConfigurator(self.config.runtime, self.runner, self.debug)
        return configurator.configure()

    def install_kubernetes(self) -> Tuple[bool, str]:
        return self.k8s_manager().install_packages(self.package_manager)

    def prefetch_images(self) -> Tuple[bool, str]:
        prefetcher = ImagePrefetcher(self.install_config, self.config.runtime, self.runner, self.debug)
        return prefetcher.prefetch()

    def bootstrap_cluster(self) -> Tuple[bool, str]:
        return self.k8s_manager().bootstrap()

    def k8s_manager(self) -> K8sManager:
        return K8sManager(
            self.install_config, self.config.network, self.config.paths,
            self.runner, self.user, self.debug
        )

    def steps(self) -> List[Step]:
        return [
            ("시스템 확인", self.probe_system),
            ("호스트명 설정", self.setup_hostname),
            ("호스트 준비", self.prepare_host),
            ("의존성 설치", self.install_dependencies),
            ("containerd 설정", self.configure_runtime),
            ("Kubernetes 설치", self.install_kubernetes),
            ("이미지 다운로드", self.prefetch_images),
            ("클러스터 부트스트랩", self.bootstrap_cluster),
        ]

    def fail(self, step: str, message: str, exit_code: int = 1) -> bool:
        console.print(f"\n[bold red]✗ '{step}' 단계 실패: {escape(message)}[/bold red]")
        self.logger.error(f"Step '{step}' failed: {message}")
        self.log_step(step, "failed", message)
        self.exit_code = exit_code
        self.show_summary()
        return False

    def run(self) -> bool:
        """메인 실행 로직"""
        role = "컨트롤 플레인" if self.install_config.is_control_plane else "워커"
        cni = self.install_config.cni.value or "없음"
        console.print(Panel.fit(
            "[bold cyan]Kubernetes Node Installer[/bold cyan]\n"
            f"버전: v{self.install_config.kubernetes_version} / 역할: {role} / CNI: {cni}",
            border_style="cyan"
        ))
        self.logger.info("=== Installation started ===")
        self.logger.info(f"Install config: {self.install_config}")

        for name, step in self.steps():
            try:
                success, message = step()
            except KeyboardInterrupt:
                console.print("\n[yellow]사용자에 의해 중단되었습니다.[/yellow]")
                self.logger.warning("Execution interrupted by user")
                return self.fail(name, "중단됨", 130)
            except InstallerError as e:
                return self.fail(name, str(e), e.exit_code)
            except requests.RequestException as e:
                self.logger.exception("Download failed")
                return self.fail(name, f"다운로드 실패: {e}")
            except OSError as e:
                self.logger.exception("File operation failed")
                return self.fail(name, str(e))

            if not success:
                return self.fail(name, message)
            self.log_step(name, "success", message)

        self.logger.info("=== Installation completed successfully ===")
        self.show_summary()

        console.print("\n" + "="*60)
        console.print("[bold green]✓ Kubernetes 설치 완료![/bold green]")
        console.print("="*60)

        self.exit_code = 0
        return True


def build_install_config(cfg: Config, hostname: Optional[str], version: Optional[str],
                         flannel: bool, calico: bool, interactive: bool) -> InstallConfig:
    """명령행 옵션 > 설정 파일 > 기본값 순으로 InstallConfig 생성"""
    if flannel and calico:
        raise click.UsageError("--flannel과 --calico는 함께 사용할 수 없습니다.")

    cni = cfg.kubernetes.cni
    if flannel:
        cni = CNI.FLANNEL.value
    elif calico:
        cni = CNI.CALICO.value

    version = version or cfg.kubernetes.version
    hostname = hostname or cfg.kubernetes.hostname
    control_plane = bool(cfg.kubernetes.control_plane)

    if interactive:
        console.print("\n[bold cyan]대화형 설정[/bold cyan]\n")
        version = Prompt.ask("Kubernetes 버전", default=version)
        cni = Prompt.ask(
            "CNI (none이면 워커 노드)",
            choices=["none", CNI.FLANNEL.value, CNI.CALICO.value],
            default=cni or "none"
        )
        hostname = Prompt.ask("호스트명 (비워두면 유지)", default=hostname or "")

    try:
        CNI.parse(cni)
    except ValueError as e:
        raise click.UsageError(str(e))

    try:
        return InstallConfig.build(version, cni, control_plane, hostname)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="'-v' / '--version'")


INSTALL_CONTEXT = {
    "help_option_names": ["-h", "--help"],
    "ignore_unknown_options": True,
    "allow_extra_args": True,
}


@click.command(context_settings=INSTALL_CONTEXT)
@click.option('--hostname', help='노드 호스트명 설정 (\'_\'는 \'-\'로 변환)')
@click.option('--version', '-v', 'version', help='설치할 Kubernetes 버전 (예: 1.33.0)')
@click.option('--flannel', is_flag=True, help='Flannel CNI 사용 및 컨트롤 플레인으로 초기화')
@click.option('--calico', is_flag=True, help='Calico CNI 사용 및 컨트롤 플레인으로 초기화')
@click.option('--config', '-c', type=click.Path(exists=True), help='설정 파일 경로')
@click.option('--debug', is_flag=True, help='디버그 모드')
@click.option('--interactive', '-i', is_flag=True, help='대화형 모드')
@click.pass_context
def install(ctx, hostname, version, flannel, calico, config, debug, interactive):
    """Kubernetes 노드 설치 (컨트롤 플레인 또는 워커)"""

    # 설정 로드
    cfg = Config(config)
    install_config = build_install_config(cfg, hostname, version, flannel, calico, interactive)

    # 로거 초기화
    init_logger(cfg.logging.log_file, cfg.logging.log_level, debug)
    logger = get_logger()

    logger.info(f"Starting install command (debug={debug}, interactive={interactive})")
    for arg in ctx.args:
        logger.warning(f"Unknown option: {arg}")

    # 실행
    orchestrator = InstallOrchestrator(install_config, cfg, debug=debug)
    orchestrator.run()

    sys.exit(orchestrator.exit_code)


@click.group()
@click.version_option(version=__version__)
def cli():
    """K8s Installer

    Debian/Ubuntu/CentOS/Fedora 노드에 Kubernetes를 설치하고 부트스트랩합니다.
    """
    pass


cli.add_command(install)


@cli.command()
@click.argument('output', type=click.Path(), default='./config.yaml')
def init(output):
    """샘플 설정 파일 생성"""
    cfg = Config()
    cfg.create_sample(output)
    console.print(f"[green]✓ 샘플 설정 파일 생성: {output}[/green]")
    console.print(f"[cyan]설정 파일을 편집한 후 다음 명령어로 실행하세요:[/cyan]")
    console.print(f"[cyan]  k8s-install --config {output}[/cyan]")


@cli.command()
@click.option('--config', '-c', type=click.Path(exists=True), help='설정 파일 경로')
def validate(config):
    """설정 파일 유효성 검사"""
    try:
        cfg = Config(config)
        install_config = InstallConfig.build(
            cfg.kubernetes.version, cfg.kubernetes.cni,
            bool(cfg.kubernetes.control_plane), cfg.kubernetes.hostname
        )
    except (ValueError, OSError) as e:
        console.print(f"[red]✗ 설정 파일 오류: {str(e)}[/red]")
        sys.exit(1)

    console.print("[green]✓ 설정 파일이 유효합니다.[/green]")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("항목", style="cyan")
    table.add_column("값")

    table.add_row("설정 파일", cfg.config_path or "(기본값)")
    table.add_row("Kubernetes 버전", install_config.kubernetes_version)
    table.add_row("역할", "컨트롤 플레인" if install_config.is_control_plane else "워커")
    table.add_row("CNI", install_config.cni.value or "없음")
    table.add_row("파드 네트워크", install_config.pod_network_cidr or "-")
    table.add_row("호스트명", install_config.hostname or "(유지)")
    table.add_row("로그 파일", cfg.logging.log_file)

    console.print(table)


@cli.command()
@click.option('--config', '-c', type=click.Path(exists=True), help='설정 파일 경로')
@click.option('--debug', is_flag=True, help='디버그 모드')
def status(config, debug):
    """노드 구성요소 상태 확인"""
    cfg = Config(config)
    init_logger(cfg.logging.log_file, cfg.logging.log_level, debug)

    manager = K8sManager(InstallConfig(), cfg.network, cfg.paths, CommandRunner(debug), debug=debug)
    with console.status("[bold green]상태 확인 중...[/bold green]"):
        results = manager.verify_node_status()

    labels = {
        "containerd": "containerd 실행",
        "kubelet": "kubelet 실행",
        "swap_off": "swap 비활성화",
        "admin_conf": "admin.conf 존재",
        "kubeconfig": "사용자 kubeconfig 존재",
    }

    table = Table(title="노드 상태")
    table.add_column("항목", style="cyan")
    table.add_column("상태")
    for key, label in labels.items():
        table.add_row(label, "[green]✓[/green]" if results.get(key) else "[red]✗[/red]")
    console.print(table)

    sys.exit(0 if results.get("containerd") and results.get("kubelet") else 1)


def main():
    """메인 엔트리 포인트 (k8s-install)"""
    install(prog_name="k8s-install")


if __name__ == '__main__':
    main()
