"""
호스트 준비 모듈 테스트
"""

import os
from k8s_installer.host import HostPreparer, comment_swap_entries, disable_selinux_config
from k8s_installer.system import HostProfile, OSFamily, PackageManagerType

DEBIAN = HostProfile(OSFamily.DEBIAN, PackageManagerType.APT, 4)
CENTOS = HostProfile(OSFamily.CENTOS, PackageManagerType.YUM, 4)


def test_comment_swap_entries():
    fstab = (
        "UUID=abcd / ext4 defaults 0 1\n"
        "/dev/sda2\tnone\tswap\tsw\t0\t0\n"
        "#/old.swap none swap sw 0 0\n"
    )
    updated, changed = comment_swap_entries(fstab)
    assert changed == 1
    assert updated.splitlines() == [
        "UUID=abcd / ext4 defaults 0 1",
        "#/dev/sda2\tnone\tswap\tsw\t0\t0",
        "#/old.swap none swap sw 0 0",
    ]


def test_comment_swap_entries_is_stable():
    once, _ = comment_swap_entries("/swap.img none swap sw 0 0\n")
    twice, changed = comment_swap_entries(once)
    assert twice == once
    assert changed == 0


def test_disable_selinux_config():
    content = "# SELINUX=enforcing\nSELINUX=enforcing\nSELINUXTYPE=targeted\n"
    assert disable_selinux_config(content) == (
        "# SELINUX=enforcing\nSELINUX=disabled\nSELINUXTYPE=targeted\n"
    )


def test_prepare_debian(settings, runner):
    preparer = HostPreparer(DEBIAN, settings.paths, runner)
    success, _ = preparer.prepare()

    assert success
    assert runner.lines() == ["swapoff -a"]
    assert not os.path.exists(settings.paths.sysctl_dropin)
    with open(settings.paths.fstab) as f:
        assert "#/swap.img none swap sw 0 0" in f.read()


def test_prepare_redhat(settings, runner):
    preparer = HostPreparer(CENTOS, settings.paths, runner)
    preparer.prepare()

    assert runner.lines() == [
        "systemctl disable --now firewalld",
        "sysctl --system",
        "swapoff -a",
    ]
    with open(settings.paths.sysctl_dropin) as f:
        assert f.read() == (
            "net.bridge.bridge-nf-call-ip6tables = 1\n"
            "net.bridge.bridge-nf-call-iptables = 1\n"
        )


def test_best_effort_steps_tolerate_failures(settings, make_runner):
    os.makedirs(os.path.dirname(settings.paths.selinux_config))
    with open(settings.paths.selinux_config, "w") as f:
        f.write("SELINUX=enforcing\n")

    runner = make_runner(failures={"setenforce": 1, "systemctl disable --now firewalld": 5})
    preparer = HostPreparer(CENTOS, settings.paths, runner)
    success, _ = preparer.prepare()

    assert success
    assert runner.ran("setenforce 0")
    assert runner.ran("swapoff -a")
    with open(settings.paths.selinux_config) as f:
        assert f.read() == "SELINUX=disabled\n"
