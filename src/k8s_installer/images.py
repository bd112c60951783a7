"""
이미지 사전 다운로드 모듈
kubeadm이 요구하는 이미지를 containerd(ctr)로 미리 받아둔다
"""

from typing import List, Tuple
from rich.console import Console
from .config import InstallConfig, RuntimeConfig
from .logger import get_logger
from .runner import CommandRunner

console = Console()


class ImagePrefetcher:
    """필수 컨테이너 이미지 다운로드"""

    def __init__(self, install_config: InstallConfig, runtime: RuntimeConfig,
                 runner: CommandRunner, debug: bool = False):
        self.install_config = install_config
        self.runtime = runtime
        self.runner = runner
        self.debug = debug
        self.logger = get_logger()

    def list_images(self) -> List[str]:
        result = self.runner.run(
            ["kubeadm", "config", "images", "list",
             f"--kubernetes-version={self.install_config.kubernetes_version}"],
            capture=True
        )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def pull(self, image: str):
        self.runner.run(["ctr", "-n", self.runtime.namespace, "images", "pull", image])

    def prefetch(self) -> Tuple[bool, str]:
        """이미지를 순서대로 하나씩 다운로드 (하나라도 실패하면 중단)"""
        console.print("\n[bold cyan]registry.k8s.io 이미지 다운로드 중...[/bold cyan]\n")
        self.logger.info("Pulling images via containerd...")

        images = self.list_images()
        self.logger.info(f"Required images: {', '.join(images)}")

        for image in images:
            self.pull(image)
            console.print(f"  ✓ {image}")

        console.print("[green]✓ 이미지 다운로드 완료[/green]")
        self.logger.info("Image pull complete")
        return True, f"{len(images)}개 이미지"
