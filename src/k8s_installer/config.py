"""
설정 관리 모듈
YAML/JSON 기반 설정 파일 관리 및 기본값 제공
"""

import os
import re
import yaml
import json
from enum import Enum
from typing import Dict, Any, Optional
from dataclasses import dataclass, asdict

DEFAULT_K8S_VERSION = "1.33.2"

_VERSION_PATTERN = re.compile(r"^\d+\.\d+\.\d+$")


class CNI(Enum):
    """파드 네트워크 플러그인"""
    NONE = ""
    FLANNEL = "flannel"
    CALICO = "calico"

    @property
    def pod_network_cidr(self) -> Optional[str]:
        """CNI별 고정 파드 네트워크 대역"""
        return {
            CNI.FLANNEL: "10.244.0.0/16",
            CNI.CALICO: "192.168.0.0/16",
        }.get(self)

    @classmethod
    def parse(cls, value: Optional[str]) -> "CNI":
        value = (value or "").strip().lower()
        if value in ("", "none"):
            return cls.NONE
        for member in cls:
            if member.value == value:
                return member
        raise ValueError(f"지원하지 않는 CNI: {value}")


def normalize_version(version: Any) -> str:
    """버전 문자열 정규화 (앞의 'v' 제거 후 MAJOR.MINOR.PATCH 검증)"""
    version = "" if version is None else str(version).strip()
    if version.startswith("v"):
        version = version[1:]
    if not _VERSION_PATTERN.match(version):
        raise ValueError(f"잘못된 Kubernetes 버전 형식: '{version}' (예: 1.33.2)")
    return version


def minor_version(version: str) -> str:
    """패키지 릴리스 채널 (1.33.2 -> 1.33)"""
    return version.rsplit(".", 1)[0]


@dataclass
class KubernetesConfig:
    """Kubernetes 설치 설정"""
    version: str = DEFAULT_K8S_VERSION
    cni: str = ""
    control_plane: bool = False
    hostname: str = ""


@dataclass
class RuntimeConfig:
    """컨테이너 런타임 설정"""
    config_path: str = "/etc/containerd/config.toml"
    namespace: str = "k8s.io"
    systemd_cgroup: bool = True


@dataclass
class RepositoryConfig:
    """패키지 저장소 설정"""
    apt_base_url: str = "https://pkgs.k8s.io/core:/stable:"
    apt_keyring: str = "/etc/apt/keyrings/kubernetes-apt-keyring.gpg"
    apt_source_list: str = "/etc/apt/sources.list.d/kubernetes.list"
    rpm_repo_file: str = "/etc/yum.repos.d/kubernetes.repo"
    rpm_baseurl: str = "https://packages.cloud.google.com/yum/repos/kubernetes-el7-x86_64/"
    rpm_gpgkey: str = "https://packages.cloud.google.com/yum/doc/yum-key.gpg"
    download_timeout: int = 30


@dataclass
class NetworkConfig:
    """CNI 매니페스트 설정"""
    flannel_manifest: str = "https://raw.githubusercontent.com/coreos/flannel/master/Documentation/kube-flannel.yml"
    calico_manifest: str = "https://docs.projectcalico.org/manifests/calico.yaml"

    def manifest_for(self, cni: CNI) -> Optional[str]:
        return {
            CNI.FLANNEL: self.flannel_manifest,
            CNI.CALICO: self.calico_manifest,
        }.get(cni)


@dataclass
class PathsConfig:
    """호스트 파일 경로"""
    hosts_file: str = "/etc/hosts"
    hostname_file: str = "/etc/hostname"
    fstab: str = "/etc/fstab"
    selinux_config: str = "/etc/selinux/config"
    sysctl_dropin: str = "/etc/sysctl.d/k8s.conf"
    redhat_release: str = "/etc/redhat-release"
    issue_file: str = "/etc/issue"
    admin_conf: str = "/etc/kubernetes/admin.conf"


@dataclass
class LoggingConfig:
    """로그 설정"""
    log_file: str = "/var/log/k8s-install.log"
    log_level: str = "INFO"


@dataclass(frozen=True)
class InstallConfig:
    """한 번의 설치 실행에 사용되는 파라미터 (파싱 후 변경 불가)"""
    kubernetes_version: str = DEFAULT_K8S_VERSION
    is_control_plane: bool = False
    cni: CNI = CNI.NONE
    hostname: Optional[str] = None

    @property
    def minor_version(self) -> str:
        return minor_version(self.kubernetes_version)

    @property
    def pod_network_cidr(self) -> Optional[str]:
        return self.cni.pod_network_cidr

    @classmethod
    def build(cls, version: Optional[str] = None, cni: Optional[str] = None,
              control_plane: bool = False, hostname: Optional[str] = None) -> "InstallConfig":
        """입력값을 검증하여 InstallConfig 생성

        CNI가 선택되면 컨트롤 플레인 모드가 된다.
        """
        selected = CNI.parse(cni)
        return cls(
            kubernetes_version=normalize_version(version or DEFAULT_K8S_VERSION),
            is_control_plane=control_plane or selected is not CNI.NONE,
            cni=selected,
            hostname=hostname or None,
        )


class Config:
    """전체 설정 관리 클래스"""

    DEFAULT_CONFIG_PATHS = [
        "/etc/k8s-installer/config.yaml",
        "~/.k8s-installer/config.yaml",
        "./config.yaml",
    ]

    SECTIONS = ("kubernetes", "runtime", "repository", "network", "paths", "logging")

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path
        self.kubernetes = KubernetesConfig()
        self.runtime = RuntimeConfig()
        self.repository = RepositoryConfig()
        self.network = NetworkConfig()
        self.paths = PathsConfig()
        self.logging = LoggingConfig()

        if config_path:
            self.load(config_path)
        else:
            self._load_from_default_paths()

    def _load_from_default_paths(self):
        """기본 경로에서 설정 파일 로드"""
        for path in self.DEFAULT_CONFIG_PATHS:
            expanded_path = os.path.expanduser(path)
            if os.path.exists(expanded_path):
                self.load(expanded_path)
                return

    def load(self, path: str):
        """설정 파일 로드"""
        path = os.path.expanduser(path)
        if not os.path.exists(path):
            return

        with open(path, 'r', encoding='utf-8') as f:
            if path.endswith('.json'):
                data = json.load(f)
            else:
                data = yaml.safe_load(f) or {}

        self._update_from_dict(data)
        self.config_path = path

    def _update_from_dict(self, data: Dict[str, Any]):
        """딕셔너리에서 설정 업데이트 (알 수 없는 키는 무시)"""
        for section in self.SECTIONS:
            values = data.get(section)
            if not isinstance(values, dict):
                continue
            target = getattr(self, section)
            for key, value in values.items():
                if hasattr(target, key):
                    setattr(target, key, value)

    def save(self, path: Optional[str] = None):
        """설정 파일 저장"""
        save_path = path or self.config_path or self.DEFAULT_CONFIG_PATHS[0]
        save_path = os.path.expanduser(save_path)

        save_dir = os.path.dirname(save_path)
        if save_dir:
            os.makedirs(save_dir, exist_ok=True)

        data = self.to_dict()

        with open(save_path, 'w', encoding='utf-8') as f:
            if save_path.endswith('.json'):
                json.dump(data, f, indent=2)
            else:
                yaml.dump(data, f, default_flow_style=False, allow_unicode=True)

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리로 변환"""
        return {section: asdict(getattr(self, section)) for section in self.SECTIONS}

    def create_sample(self, output_path: str):
        """샘플 설정 파일 생성"""
        template = """# K8s Installer Configuration File
# 명령행 옵션이 이 파일의 값보다 우선합니다

# Kubernetes 설치 설정
kubernetes:
  version: "1.33.2"  # 설치할 버전 (앞의 'v'는 무시)
  cni: ""  # flannel, calico 또는 "" (워커 노드)
  control_plane: false  # cni를 지정하면 자동으로 true
  hostname: ""  # 비워두면 현재 호스트명 유지 ('_'는 '-'로 변환)

# 컨테이너 런타임 (containerd)
runtime:
  config_path: "/etc/containerd/config.toml"
  namespace: "k8s.io"
  systemd_cgroup: true

# 패키지 저장소
repository:
  apt_base_url: "https://pkgs.k8s.io/core:/stable:"
  apt_keyring: "/etc/apt/keyrings/kubernetes-apt-keyring.gpg"
  apt_source_list: "/etc/apt/sources.list.d/kubernetes.list"
  rpm_repo_file: "/etc/yum.repos.d/kubernetes.repo"
  # 레거시 Google 저장소. pkgs.k8s.io를 사용하려면 예:
  # rpm_baseurl: "https://pkgs.k8s.io/core:/stable:/v1.33/rpm/"
  # rpm_gpgkey: "https://pkgs.k8s.io/core:/stable:/v1.33/rpm/repodata/repomd.xml.key"
  rpm_baseurl: "https://packages.cloud.google.com/yum/repos/kubernetes-el7-x86_64/"
  rpm_gpgkey: "https://packages.cloud.google.com/yum/doc/yum-key.gpg"
  download_timeout: 30

# CNI 매니페스트 (파드 네트워크 대역은 고정: flannel 10.244.0.0/16, calico 192.168.0.0/16)
network:
  flannel_manifest: "https://raw.githubusercontent.com/coreos/flannel/master/Documentation/kube-flannel.yml"
  calico_manifest: "https://docs.projectcalico.org/manifests/calico.yaml"

# 로그 설정
logging:
  log_file: "/var/log/k8s-install.log"
  log_level: "INFO"  # DEBUG, INFO, WARNING, ERROR
"""

        output_dir = os.path.dirname(output_path)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(template)
