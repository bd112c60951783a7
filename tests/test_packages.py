"""
패키지 매니저 모듈 테스트
"""

from k8s_installer.config import InstallConfig, RepositoryConfig
from k8s_installer.packages import (
    AptPackageManager, RpmPackageManager, create_package_manager
)
from k8s_installer.system import HostProfile, OSFamily, PackageManagerType


def test_create_package_manager():
    ubuntu = HostProfile(OSFamily.UBUNTU, PackageManagerType.APT)
    fedora = HostProfile(OSFamily.FEDORA, PackageManagerType.DNF)
    centos = HostProfile(OSFamily.CENTOS, PackageManagerType.YUM)

    repository = RepositoryConfig()

    assert isinstance(create_package_manager(ubuntu, repository, None), AptPackageManager)
    dnf = create_package_manager(fedora, repository, None)
    assert isinstance(dnf, RpmPackageManager)
    assert dnf.binary == "dnf"
    assert create_package_manager(centos, repository, None).binary == "yum"


def test_apt_pinned_packages(settings, runner):
    apt = AptPackageManager("apt-get", settings.repository, runner)
    assert apt.pinned_packages("1.34.0") == [
        "kubelet=1.34.0-*", "kubeadm=1.34.0-*", "kubectl=1.34.0-*"
    ]


def test_rpm_pinned_packages(settings, runner):
    yum = RpmPackageManager("yum", settings.repository, runner)
    assert yum.pinned_packages("1.34.0") == ["kubelet-1.34.0", "kubeadm-1.34.0", "kubectl-1.34.0"]


def test_apt_base_packages(settings, runner):
    apt = AptPackageManager("apt-get", settings.repository, runner)
    success, _ = apt.install_base_packages()

    assert success
    assert runner.lines() == [
        "apt-get update",
        "apt-get install -y apt-transport-https ca-certificates curl gpg containerd",
    ]


def test_rpm_base_packages(settings, runner):
    dnf = RpmPackageManager("dnf", settings.repository, runner)
    dnf.install_base_packages()
    assert runner.lines()[-1] == "dnf install -y bash-completion curl containerd"


def test_apt_add_repository(settings, runner, fake_download):
    apt = AptPackageManager("apt-get", settings.repository, runner)
    apt.add_repository(InstallConfig.build("v1.34.0"))

    assert fake_download == ["https://pkgs.k8s.io/core:/stable:/v1.34/deb/Release.key"]
    keyring = settings.repository.apt_keyring
    assert runner.commands == [["gpg", "--dearmor", "--batch", "--yes", "-o", keyring]]
    assert runner.inputs[0].startswith("-----BEGIN PGP PUBLIC KEY BLOCK-----")

    with open(settings.repository.apt_source_list) as f:
        assert f.read() == (
            f"deb [signed-by={keyring}] https://pkgs.k8s.io/core:/stable:/v1.34/deb/ /\n"
        )


def test_apt_hold(settings, runner):
    apt = AptPackageManager("apt-get", settings.repository, runner)
    apt.hold(["kubelet", "kubeadm", "kubectl"])
    assert runner.lines() == ["apt-mark hold kubelet kubeadm kubectl"]


def test_rpm_add_repository(settings, runner):
    yum = RpmPackageManager("yum", settings.repository, runner)
    yum.add_repository(InstallConfig.build())

    with open(settings.repository.rpm_repo_file) as f:
        repo = f.read()
    assert repo.startswith("[kubernetes]\n")
    assert "baseurl=https://packages.cloud.google.com/yum/repos/kubernetes-el7-x86_64/\n" in repo
    assert "gpgcheck=1\n" in repo
    assert runner.commands == []
