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

import re
from datetime import datetime, timedelta, timezone
from ipaddress import ip_address
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

EXTENDED_KEY_USAGES = {
    "serverAuth": ExtendedKeyUsageOID.SERVER_AUTH,
    "clientAuth": ExtendedKeyUsageOID.CLIENT_AUTH,
}


class Certificate:
    def __init__(self, cn: str, expire: int, key_size: int, algo: str) -> None:
        self.key = self.__with_key(algo=algo, size=key_size)
        self.subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, cn)])
        now = datetime.now(timezone.utc)
        self.builder = x509.CertificateBuilder() \
            .subject_name(self.subject) \
            .public_key(self.key.public_key()) \
            .serial_number(x509.random_serial_number()) \
            .not_valid_before(now) \
            .not_valid_after(now + timedelta(seconds=expire))

    @staticmethod
    def __with_key(algo: str, size: int):
        if algo == "rsa":
            return rsa.generate_private_key(public_exponent=65537, key_size=size)
        if algo == "ecdsa":
            return ec.generate_private_key(ec.SECP256R1())
        raise ValueError(f"Algo {algo} is not support. Only [rsa, ecdsa]")

    def add_extension(self, extension: x509.ExtensionType, critical: bool = False):
        """
        Adds extension to certificate.

        :param extension: The extension value.
        :type extension: :py:class:`x509.ExtensionType`

        :param critical: A flag indicating whether this is a critical
            extension.
        :type critical: :py:class:`bool`
        """
        self.builder = self.builder.add_extension(extension, critical=critical)
        return self

    def _sign(self, issuer: x509.Name, issuer_key) -> x509.Certificate:
        return self.builder.issuer_name(issuer).sign(issuer_key, hashes.SHA256())

    def _dump(self, crt: x509.Certificate) -> tuple[bytes, bytes]:
        """
        Serialize certificate and key to PEM.
        Private keys are written in PKCS#8, the format OpenSearch reads.
        :return: (certificate, key)
        :rtype: (:py:data:`bytes`, :py:data:`bytes`)
        """
        pub = crt.public_bytes(serialization.Encoding.PEM)
        priv = self.key.private_bytes(encoding=serialization.Encoding.PEM,
                                      format=serialization.PrivateFormat.PKCS8,
                                      encryption_algorithm=serialization.NoEncryption())
        return pub, priv


class CACertificateGenerator(Certificate):
    """
    A class representing a generator CA certificate.
    """

    def generate(self) -> tuple[bytes, bytes]:
        """
        Generate self-signed CA certificate.
        :return: (ca crt, ca key)
        :rtype: (:py:data:`bytes`, :py:data:`bytes`)
        """
        public_key = self.key.public_key()
        self.add_extension(x509.SubjectKeyIdentifier.from_public_key(public_key))
        self.add_extension(x509.AuthorityKeyIdentifier.from_issuer_public_key(public_key))
        self.add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        self.add_extension(x509.KeyUsage(digital_signature=False,
                                         content_commitment=False,
                                         key_encipherment=True,
                                         data_encipherment=False,
                                         key_agreement=False,
                                         key_cert_sign=True,
                                         crl_sign=True,
                                         encipher_only=False,
                                         decipher_only=False))
        return self._dump(self._sign(self.subject, self.key))


class CertificateGenerator(Certificate):
    """
    A class representing a generator certificate signed by a CA.
    """

    def with_hosts(self, *hosts: str):
        """
        This function is used to add subject alternative names to a certificate.
        It takes a variable number of hosts as parameters, and based on the type of host (IP or DNS).

        :param hosts: Variable number of hosts to be added as subject alternative names to the certificate.
        :type hosts: :py:class:`tuple`

        :raises ValueError: A host is neither an IP address nor a valid DNS name.
        """
        alt_names = []
        for h in hosts:
            try:
                alt_names.append(x509.IPAddress(ip_address(h)))
            except ValueError:
                if not is_valid_hostname(h):
                    raise ValueError(f"Invalid host {h!r} for subject alternative name")
                alt_names.append(x509.DNSName(h))
        if len(alt_names) > 0:
            self.add_extension(x509.SubjectAlternativeName(alt_names))
        return self

    def with_usages(self, *extended_key_usages: str):
        self.add_extension(x509.KeyUsage(digital_signature=True,
                                         content_commitment=False,
                                         key_encipherment=True,
                                         data_encipherment=False,
                                         key_agreement=False,
                                         key_cert_sign=False,
                                         crl_sign=False,
                                         encipher_only=False,
                                         decipher_only=False))
        if len(extended_key_usages) > 0:
            self.add_extension(x509.ExtendedKeyUsage(
                [EXTENDED_KEY_USAGES[u] for u in extended_key_usages]))
        return self

    def generate(self, ca_crt: x509.Certificate, ca_key) -> tuple[bytes, bytes]:
        """
        Generate certificate.
        :param ca_crt: CA certificate.
        :type ca_crt: :py:class:`x509.Certificate`
        :param ca_key: CA private key.
        :return: (certificate, key)
        :rtype: (:py:data:`bytes`, :py:data:`bytes`)
        """
        self.add_extension(x509.SubjectKeyIdentifier.from_public_key(self.key.public_key()))
        self.add_extension(x509.AuthorityKeyIdentifier.from_issuer_public_key(ca_key.public_key()))
        return self._dump(self._sign(ca_crt.subject, ca_key))


def is_valid_hostname(hostname: str) -> bool:
    if len(hostname) == 0 or len(hostname) > 255:
        return False
    if hostname[-1] == ".":
        hostname = hostname[:-1]
    allowed = re.compile(r"(?!-)[A-Z\d-]{1,63}(?<!-)$", re.IGNORECASE)
    return all(allowed.match(x) for x in hostname.split("."))
