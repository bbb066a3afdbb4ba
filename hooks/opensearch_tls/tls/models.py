#
# Copyright 2023 Flant JSC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from enum import Enum

CA_CRT = "ca.crt"
CA_KEY = "ca.key"
TLS_CRT = "tls.crt"
TLS_KEY = "tls.key"

CONFIG_DIR = "/usr/share/opensearch/config"


class Interface(Enum):
    """
    A TLS-bearing network interface of an OpenSearch node.
    Each member carries the opensearch.yml directives written when the interface is managed.
    """
    TRANSPORT = "transport"
    HTTP = "http"

    @property
    def directory(self) -> str:
        return f"tls-{self.value}"

    @property
    def trusts_node_dn(self) -> bool:
        return self is Interface.TRANSPORT

    def directives(self) -> dict[str, str]:
        prefix = f"plugins.security.ssl.{self.value}"
        d = {}
        if self is Interface.HTTP:
            d[f"{prefix}.enabled"] = "true"
        d[f"{prefix}.pemcert_filepath"] = f"{self.directory}/{TLS_CRT}"
        d[f"{prefix}.pemkey_filepath"] = f"{self.directory}/{TLS_KEY}"
        d[f"{prefix}.pemtrustedcas_filepath"] = f"{self.directory}/{CA_CRT}"
        if self is Interface.TRANSPORT:
            # TODO: enable once certificates are issued per node instead of per cluster.
            d[f"{prefix}.enforce_hostname_verification"] = "false"
        return d


class ClusterIdentity:
    def __init__(self, name: str, namespace: str) -> None:
        self.name = name
        self.namespace = namespace

    @property
    def ca_secret_name(self) -> str:
        return f"{self.name}-ca"

    def node_secret_name(self, interface: Interface) -> str:
        return f"{self.name}-{interface.value}-cert"

    def __repr__(self) -> str:
        return f"ClusterIdentity(name={self.name!r}, namespace={self.namespace!r})"


class SecretRef:
    def __init__(self, secret_name: str, key: str = None) -> None:
        self.secret_name = secret_name
        self.key = key

    def key_or(self, filename: str) -> str:
        return self.key if self.key else filename

    @classmethod
    def from_values(cls, data: dict):
        if data is None:
            return None
        return cls(secret_name=data["secretName"], key=data.get("key"))


class TlsInterfaceSpec:
    def __init__(self, generate: bool = False,
                 ca_secret: SecretRef = None,
                 cert_secret: SecretRef = None,
                 key_secret: SecretRef = None) -> None:
        self.generate = generate
        self.ca_secret = ca_secret
        self.cert_secret = cert_secret
        self.key_secret = key_secret

    @classmethod
    def from_values(cls, data: dict):
        if data is None:
            return None
        return cls(generate=bool(data.get("generate", False)),
                   ca_secret=SecretRef.from_values(data.get("caSecret")),
                   cert_secret=SecretRef.from_values(data.get("certSecret")),
                   key_secret=SecretRef.from_values(data.get("keySecret")))


class TlsSpec:
    def __init__(self, transport: TlsInterfaceSpec = None,
                 http: TlsInterfaceSpec = None,
                 nodes_dn: list[str] = None) -> None:
        self.transport = transport
        self.http = http
        self.nodes_dn = list(nodes_dn or [])

    def interface(self, interface: Interface) -> TlsInterfaceSpec:
        if interface is Interface.TRANSPORT:
            return self.transport
        return self.http


class CertificateAuthority:
    def __init__(self, certificate: bytes, private_key: bytes) -> None:
        self.certificate = certificate
        self.private_key = private_key

    def secret_data(self) -> dict[str, bytes]:
        return {CA_CRT: self.certificate, CA_KEY: self.private_key}


class NodeCertificate:
    def __init__(self, certificate: bytes, private_key: bytes, ca_certificate: bytes) -> None:
        self.certificate = certificate
        self.private_key = private_key
        self.ca_certificate = ca_certificate

    def secret_data(self) -> dict[str, bytes]:
        return {CA_CRT: self.ca_certificate, TLS_CRT: self.certificate, TLS_KEY: self.private_key}

    @classmethod
    def from_secret_data(cls, data: dict[str, bytes]):
        return cls(certificate=data.get(TLS_CRT, b""),
                   private_key=data.get(TLS_KEY, b""),
                   ca_certificate=data.get(CA_CRT, b""))


class BuildContext:
    """
    Volumes, mounts and opensearch.yml settings accumulated during one reconciliation pass.
    Steps only append to it; config keys are last write wins.
    """

    def __init__(self) -> None:
        self.volumes: list[dict] = []
        self.volume_mounts: list[dict] = []
        self.config: dict[str, str] = {}

    def add_secret_volume(self, name: str, secret_name: str) -> None:
        self.volumes.append({"name": name, "secret": {"secretName": secret_name}})

    def add_mount(self, name: str, mount_path: str, sub_path: str = None) -> None:
        mount = {"name": name, "mountPath": mount_path}
        if sub_path is not None:
            mount["subPath"] = sub_path
        self.volume_mounts.append(mount)

    def add_config(self, key: str, value: str) -> None:
        self.config[key] = value

    def is_empty(self) -> bool:
        return len(self.volumes) == 0 and len(self.volume_mounts) == 0 and len(self.config) == 0

    def to_values(self) -> dict:
        return {
            "volumes": list(self.volumes),
            "volumeMounts": list(self.volume_mounts),
            "config": dict(self.config),
        }
