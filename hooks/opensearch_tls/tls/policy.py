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
import jsonschema
import yaml
from opensearch_tls.errors import ConfigurationError
from opensearch_tls.tls.models import Interface, SecretRef, TlsInterfaceSpec, TlsSpec

TLS_SCHEMA = yaml.safe_load("""
type: object
additionalProperties: false
properties:
  nodesDn:
    type: array
    items:
      type: string
  transport:
    $ref: "#/definitions/interface"
  http:
    $ref: "#/definitions/interface"
definitions:
  secret:
    type: object
    additionalProperties: false
    required: [secretName]
    properties:
      secretName:
        type: string
        minLength: 1
      key:
        type: string
  interface:
    type: object
    additionalProperties: false
    properties:
      generate:
        type: boolean
      caSecret:
        $ref: "#/definitions/secret"
      certSecret:
        $ref: "#/definitions/secret"
      keySecret:
        $ref: "#/definitions/secret"
""")


class Action(Enum):
    SKIP = "skip"
    GENERATE = "generate"
    EXTERNAL = "external"


class Resolution:
    def __init__(self, interface: Interface, action: Action,
                 ca_secret: SecretRef = None,
                 cert_secret: SecretRef = None,
                 key_secret: SecretRef = None) -> None:
        self.interface = interface
        self.action = action
        self.ca_secret = ca_secret
        self.cert_secret = cert_secret
        self.key_secret = key_secret


def parse_tls_spec(data: dict) -> TlsSpec:
    """
    Build TlsSpec from the security.tls section of the module values.
    :raises ConfigurationError: The section does not match the schema.
    """
    if data is None:
        return None
    try:
        jsonschema.validate(instance=data, schema=TLS_SCHEMA)
    except jsonschema.ValidationError as e:
        path = ".".join(str(p) for p in e.absolute_path)
        raise ConfigurationError(f"Invalid security.tls{'.' + path if path else ''}: {e.message}",
                                 interface=e.absolute_path[0] if len(e.absolute_path) > 0 else None) from e
    return TlsSpec(transport=TlsInterfaceSpec.from_values(data.get("transport")),
                   http=TlsInterfaceSpec.from_values(data.get("http")),
                   nodes_dn=data.get("nodesDn"))


def resolve(interface: Interface, spec: TlsInterfaceSpec) -> Resolution:
    if spec is None:
        return Resolution(interface, Action.SKIP)
    if spec.generate:
        return Resolution(interface, Action.GENERATE)
    refs = {"caSecret": spec.ca_secret, "certSecret": spec.cert_secret, "keySecret": spec.key_secret}
    missing = [name for name, ref in refs.items() if ref is None]
    if len(missing) > 0:
        raise ConfigurationError(f"Not all secrets for {interface.value} provided, missing: {', '.join(missing)}",
                                 interface=interface.value)
    return Resolution(interface, Action.EXTERNAL,
                      ca_secret=spec.ca_secret,
                      cert_secret=spec.cert_secret,
                      key_secret=spec.key_secret)
