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
from cryptography import x509
from cryptography.x509.oid import NameOID


def parse_certificate(crt: bytes) -> crypto.X509:
    return crypto.load_certificate(crypto.FILETYPE_PEM, crt)


def parse_key(key: bytes) -> crypto.PKey:
    return crypto.load_privatekey(crypto.FILETYPE_PEM, key)


def get_common_name(crt: crypto.X509) -> str:
    attrs = crt.to_cryptography().subject.get_attributes_for_oid(NameOID.COMMON_NAME)
    if len(attrs) == 0:
        return ""
    return str(attrs[0].value)


def get_certificate_san(crt: crypto.X509) -> list[str]:
    """
    Subject alternative names in the openssl text form, e.g. ["DNS:demo", "IP Address:127.0.0.1"].
    :param crt: Certificate
    :type crt: :py:class:`crypto.X509`
    :rtype: :py:class:`list[str]`
    """
    try:
        ext = crt.to_cryptography().extensions.get_extension_for_class(x509.SubjectAlternativeName)
    except x509.ExtensionNotFound:
        return []
    sans = [f"DNS:{name}" for name in ext.value.get_values_for_type(x509.DNSName)]
    sans.extend(f"IP Address:{ip}" for ip in ext.value.get_values_for_type(x509.IPAddress))
    return sans


def is_ca(crt: crypto.X509) -> bool:
    try:
        ext = crt.to_cryptography().extensions.get_extension_for_class(x509.BasicConstraints)
    except x509.ExtensionNotFound:
        return False
    return ext.value.ca


def verify_certificate(ca: crypto.X509, crt: crypto.X509) -> crypto.X509StoreContextError:
    """
    Verify that crt is signed by ca.
    :return: None if the chain is valid, the verification error otherwise.
    """
    store = crypto.X509Store()
    store.add_cert(ca)
    ctx = crypto.X509StoreContext(store, crt)
    try:
        ctx.verify_certificate()
        return None
    except crypto.X509StoreContextError as e:
        return e
