"""
공용 테스트 픽스처
"""

import os
import subprocess
import pytest
import yaml
from k8s_installer.config import Config
from k8s_installer.errors import CommandError
from k8s_installer.logger import init_logger
from k8s_installer.runner import CommandRunner
from k8s_installer.system import InvokingUser


class FakeRunner(CommandRunner):
    """명령어를 실행하지 않고 기록만 하는 러너"""

    def __init__(self, outputs=None, failures=None, callbacks=None):
        super().__init__()
        self.commands = []
        self.inputs = []
        self.outputs = outputs or {}
        self.failures = failures or {}
        self.callbacks = callbacks or {}

    def run(self, cmd, check=True, capture=False, input_text=None, env=None):
        self.commands.append(list(cmd))
        self.inputs.append(input_text)
        line = " ".join(cmd)

        for prefix, callback in self.callbacks.items():
            if line.startswith(prefix):
                callback()

        returncode = 0
        for prefix, code in self.failures.items():
            if line.startswith(prefix):
                returncode = code

        stdout = ""
        for prefix, output in self.outputs.items():
            if line.startswith(prefix):
                stdout = output

        if returncode and check:
            raise CommandError(list(cmd), returncode, "failed")
        return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr="")

    def lines(self):
        return [" ".join(cmd) for cmd in self.commands]

    def ran(self, prefix):
        return any(line.startswith(prefix) for line in self.lines())


@pytest.fixture(autouse=True)
def logger(tmp_path):
    return init_logger(str(tmp_path / "logs" / "install.log"), "DEBUG", False)


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def user(tmp_path):
    home = tmp_path / "home"
    home.mkdir()
    return InvokingUser("tester", str(home), os.getuid(), os.getgid())


@pytest.fixture
def host_root(tmp_path):
    """가짜 호스트 파일 시스템"""
    root = tmp_path / "root"
    (root / "etc" / "kubernetes").mkdir(parents=True)
    (root / "etc" / "hosts").write_text("127.0.0.1 localhost\n")
    (root / "etc" / "hostname").write_text("node1\n")
    (root / "etc" / "fstab").write_text(
        "UUID=abcd / ext4 defaults 0 1\n"
        "/swap.img none swap sw 0 0\n"
    )
    (root / "etc" / "issue").write_text("Ubuntu 22.04.3 LTS \\n \\l\n")
    return root


@pytest.fixture
def settings(tmp_path, host_root):
    """가짜 호스트 경로를 사용하는 설정"""
    etc = host_root / "etc"
    data = {
        "paths": {
            "hosts_file": str(etc / "hosts"),
            "hostname_file": str(etc / "hostname"),
            "fstab": str(etc / "fstab"),
            "selinux_config": str(etc / "selinux" / "config"),
            "sysctl_dropin": str(etc / "sysctl.d" / "k8s.conf"),
            "redhat_release": str(etc / "redhat-release"),
            "issue_file": str(etc / "issue"),
            "admin_conf": str(etc / "kubernetes" / "admin.conf"),
        },
        "repository": {
            "apt_keyring": str(etc / "apt" / "keyrings" / "kubernetes-apt-keyring.gpg"),
            "apt_source_list": str(etc / "apt" / "sources.list.d" / "kubernetes.list"),
            "rpm_repo_file": str(etc / "yum.repos.d" / "kubernetes.repo"),
        },
        "runtime": {
            "config_path": str(etc / "containerd" / "config.toml"),
        },
        "logging": {
            "log_file": str(tmp_path / "logs" / "install.log"),
        },
    }
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.dump(data))
    return Config(str(config_path))


class FakeResponse:
    def __init__(self, text="-----BEGIN PGP PUBLIC KEY BLOCK-----\nkey\n"):
        self.text = text
        self.status_code = 200

    def raise_for_status(self):
        pass


@pytest.fixture
def fake_download(monkeypatch):
    """서명 키 다운로드를 가짜 응답으로 대체"""
    requested = []

    def fake_get(url, timeout=None):
        requested.append(url)
        return FakeResponse()

    monkeypatch.setattr("k8s_installer.packages.requests.get", fake_get)
    return requested


@pytest.fixture
def make_runner():
    return FakeRunner
