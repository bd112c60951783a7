"""
K8s Installer
단일 노드에 Kubernetes(컨트롤 플레인 또는 워커)를 설치하고 부트스트랩하는 도구

Features:
- Debian/Ubuntu(APT), CentOS/Fedora(YUM/DNF) 지원
- containerd 런타임 자동 설정 (systemd cgroup)
- kubelet/kubeadm/kubectl 버전 고정 설치
- 필수 이미지 사전 다운로드
- Flannel/Calico CNI 기반 컨트롤 플레인 초기화
"""

__version__ = "1.0.0"
__author__ = "DevOps Team"
