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
from opensearch_tls.certificate.certificate import CACertificateGenerator
from opensearch_tls.certificate import parse
from opensearch_tls.errors import GenerationError, SecretStoreError
from opensearch_tls.tls.models import CA_CRT, CA_KEY, CertificateAuthority, ClusterIdentity
from opensearch_tls.tls.store import SecretStore, get_or_create


def ensure_ca(store: SecretStore,
              identity: ClusterIdentity,
              expire: int = 31536000,
              key_size: int = 4096,
              algo: str = "rsa",
              labels: dict = None) -> CertificateAuthority:
    """
    Return the cluster CA, generating and storing it in secret <cluster>-ca on first use.
    A stored CA is reused as is.

    :param store: Secret store.
    :type store: :py:class:`SecretStore`

    :param identity: Cluster the CA belongs to. Its name is the CA common name.
    :type identity: :py:class:`ClusterIdentity`

    :param expire: Optional. Validity period of a new CA in seconds.
    :type expire: :py:class:`int`

    :param key_size: Optional. Key Size.
    :type key_size: :py:class:`int`

    :param algo: Optional. Key generation algorithm. Supports only rsa and ecdsa.
    :type algo: :py:class:`str`

    :raises GenerationError: The CA cannot be generated, stored or loaded.
    """
    def generate() -> dict[str, bytes]:
        generator = CACertificateGenerator(cn=identity.name, expire=expire, key_size=key_size, algo=algo)
        crt, key = generator.generate()
        return CertificateAuthority(certificate=crt, private_key=key).secret_data()

    name = identity.ca_secret_name
    try:
        data = get_or_create(store, name, identity.namespace, generate, labels)
    except (SecretStoreError, ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise GenerationError(f"Failed to ensure CA {identity.namespace}/{name}: {e}") from e
    return load_ca(data, f"{identity.namespace}/{name}")


def load_ca(data: dict[str, bytes], secret: str) -> CertificateAuthority:
    crt, key = data.get(CA_CRT, b""), data.get(CA_KEY, b"")
    if len(crt) == 0 or len(key) == 0:
        raise GenerationError(f"Secret {secret} has no {CA_CRT} or {CA_KEY}")
    try:
        ca = parse.parse_certificate(crt)
        parse.parse_key(key)
    except crypto.Error as e:
        raise GenerationError(f"Secret {secret} holds an unreadable CA: {e}") from e
    if not parse.is_ca(ca):
        raise GenerationError(f"Secret {secret} holds a certificate that is not a CA")
    return CertificateAuthority(certificate=crt, private_key=key)
