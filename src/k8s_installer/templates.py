"""
호스트 설정 파일 템플릿 (Jinja2)
"""

from jinja2 import Template

SYSCTL_TEMPLATE = Template("""\
{% for key, value in settings.items() -%}
{{ key }} = {{ value }}
{% endfor %}""", keep_trailing_newline=True)

APT_SOURCE_TEMPLATE = Template("""\
deb [signed-by={{ keyring }}] {{ base_url }}/v{{ channel }}/deb/ /
""", keep_trailing_newline=True)

YUM_REPO_TEMPLATE = Template("""\
[kubernetes]
name=Kubernetes Repo
baseurl={{ baseurl }}
enabled=1
gpgcheck=1
gpgkey={{ gpgkey }}
""", keep_trailing_newline=True)

BRIDGE_SYSCTL_SETTINGS = {
    "net.bridge.bridge-nf-call-ip6tables": 1,
    "net.bridge.bridge-nf-call-iptables": 1,
}


def render_sysctl(settings=None) -> str:
    return SYSCTL_TEMPLATE.render(settings=settings or BRIDGE_SYSCTL_SETTINGS)


def render_apt_source(keyring: str, base_url: str, channel: str) -> str:
    return APT_SOURCE_TEMPLATE.render(keyring=keyring, base_url=base_url.rstrip("/"), channel=channel)


def render_yum_repo(baseurl: str, gpgkey: str) -> str:
    return YUM_REPO_TEMPLATE.render(baseurl=baseurl, gpgkey=gpgkey)
