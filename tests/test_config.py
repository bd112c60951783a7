"""
설정 관리 모듈 테스트
"""

import os
import tempfile
import pytest
from k8s_installer.config import CNI, Config, InstallConfig, minor_version, normalize_version


def test_default_config():
    """기본 설정 테스트"""
    config = Config()
    assert config.kubernetes.version == "1.33.2"
    assert config.runtime.namespace == "k8s.io"
    assert config.logging.log_file == "/var/log/k8s-install.log"


def test_config_load_yaml():
    """YAML 설정 파일 로드 테스트"""
    yaml_content = """
kubernetes:
  version: "1.34.0"
  cni: "calico"

runtime:
  systemd_cgroup: false

unknown_section:
  foo: bar
"""

    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        f.write(yaml_content)
        temp_path = f.name

    try:
        config = Config(temp_path)
        assert config.kubernetes.version == "1.34.0"
        assert config.kubernetes.cni == "calico"
        assert config.runtime.systemd_cgroup is False
        assert config.config_path == temp_path
    finally:
        os.unlink(temp_path)


def test_config_ignores_unknown_keys(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("kubernetes:\n  flavour: vanilla\n  hostname: edge_1\n")

    config = Config(str(path))
    assert config.kubernetes.hostname == "edge_1"
    assert not hasattr(config.kubernetes, "flavour")


def test_config_save():
    """설정 저장 테스트"""
    config = Config()
    config.kubernetes.version = "1.32.1"

    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        temp_path = f.name

    try:
        config.save(temp_path)

        # 저장된 파일 다시 로드
        config2 = Config(temp_path)
        assert config2.kubernetes.version == "1.32.1"
    finally:
        os.unlink(temp_path)


def test_config_to_dict():
    """딕셔너리 변환 테스트"""
    config = Config()
    data = config.to_dict()

    assert "kubernetes" in data
    assert "paths" in data
    assert "logging" in data
    assert data["runtime"]["systemd_cgroup"] is True


def test_sample_config_matches_defaults(tmp_path):
    output = tmp_path / "sample" / "config.yaml"
    Config().create_sample(str(output))

    sample = Config(str(output))
    assert sample.to_dict() == Config().to_dict()


@pytest.mark.parametrize("raw, expected", [
    ("1.34.0", "1.34.0"),
    ("v1.34.0", "1.34.0"),
    (" v1.30.12 ", "1.30.12"),
])
def test_normalize_version(raw, expected):
    assert normalize_version(raw) == expected


@pytest.mark.parametrize("raw", ["", None, 1.33, "1.34", "latest", "vv1.34.0", "1.34.0-rc.1"])
def test_normalize_version_rejects_invalid(raw):
    with pytest.raises(ValueError):
        normalize_version(raw)


def test_minor_version():
    assert minor_version("1.33.2") == "1.33"


def test_install_config_flannel():
    install_config = InstallConfig.build("1.33.2", "flannel")
    assert install_config.is_control_plane
    assert install_config.cni is CNI.FLANNEL
    assert install_config.pod_network_cidr == "10.244.0.0/16"


def test_install_config_calico():
    install_config = InstallConfig.build("v1.34.0", "calico")
    assert install_config.is_control_plane
    assert install_config.kubernetes_version == "1.34.0"
    assert install_config.minor_version == "1.34"
    assert install_config.pod_network_cidr == "192.168.0.0/16"


def test_install_config_worker_by_default():
    install_config = InstallConfig.build()
    assert not install_config.is_control_plane
    assert install_config.cni is CNI.NONE
    assert install_config.pod_network_cidr is None
    assert install_config.hostname is None


def test_install_config_is_immutable():
    install_config = InstallConfig.build()
    with pytest.raises(Exception):
        install_config.kubernetes_version = "1.30.0"


def test_cni_parse_rejects_unknown():
    with pytest.raises(ValueError):
        CNI.parse("weave")
