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

from OpenSSL import crypto
from cryptography.exceptions import UnsupportedAlgorithm
from opensearch_tls.certificate.certificate import CertificateGenerator
from opensearch_tls.certificate import parse
from opensearch_tls.errors import GenerationError, SecretStoreError
from opensearch_tls.tls.models import CertificateAuthority, ClusterIdentity, Interface, NodeCertificate
from opensearch_tls.tls.store import SecretStore, get_or_create


def node_dns_names(identity: ClusterIdentity) -> list[str]:
    name, namespace = identity.name, identity.namespace
    return [
        name,
        f"{name}.{namespace}",
        f"{name}.{namespace}.svc",
        f"{name}.{namespace}.svc.cluster.local",
    ]


def ensure_node_cert(store: SecretStore,
                     identity: ClusterIdentity,
                     interface: Interface,
                     ca: CertificateAuthority,
                     expire: int = 31536000,
                     key_size: int = 4096,
                     algo: str = "rsa",
                     labels: dict = None) -> NodeCertificate:
    """
    Return the node certificate of the interface, issuing it from ca and storing it
    in secret <cluster>-<interface>-cert on first use.

    A stored certificate is returned unchanged, even if it was signed by another CA.

    :raises GenerationError: The certificate cannot be signed or stored.
    """
    def generate() -> dict[str, bytes]:
        ca_crt = parse.parse_certificate(ca.certificate).to_cryptography()
        ca_key = parse.parse_key(ca.private_key).to_cryptography_key()
        crt, key = CertificateGenerator(cn=identity.name, expire=expire, key_size=key_size, algo=algo) \
            .with_hosts(*node_dns_names(identity)) \
            .with_usages("serverAuth", "clientAuth") \
            .generate(ca_crt=ca_crt, ca_key=ca_key)
        check_issued(parse.parse_certificate(ca.certificate), parse.parse_certificate(crt))
        return NodeCertificate(certificate=crt, private_key=key, ca_certificate=ca.certificate).secret_data()

    name = identity.node_secret_name(interface)
    try:
        data = get_or_create(store, name, identity.namespace, generate, labels)
    except (SecretStoreError, ValueError, TypeError, UnsupportedAlgorithm, crypto.Error) as e:
        raise GenerationError(f"Failed to ensure {interface.value} certificate {identity.namespace}/{name}: {e}",
                              interface=interface.value) from e
    return NodeCertificate.from_secret_data(data)


def check_issued(ca: crypto.X509, crt: crypto.X509) -> None:
    if (e := parse.verify_certificate(ca, crt)) is not None:
        raise ValueError(f"issued certificate does not verify against its CA: {e}")
    print(f"Issued certificate CN={parse.get_common_name(crt)} for {', '.join(parse.get_certificate_san(crt))}")
