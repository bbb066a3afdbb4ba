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
from opensearch_tls.tls import planner
from opensearch_tls.tls.authority import ensure_ca
from opensearch_tls.tls.issuer import ensure_node_cert
from opensearch_tls.tls.models import BuildContext, ClusterIdentity, Interface, TlsSpec
from opensearch_tls.tls.policy import Action, resolve
from opensearch_tls.tls.store import SecretStore

NODES_DN_KEY = "plugins.security.nodes_dn"
ALLOW_UNSAFE_DEMOCERTIFICATES_KEY = "plugins.security.allow_unsafe_democertificates"


class State(Enum):
    NOT_STARTED = "NotStarted"
    PROCESSING_TRANSPORT = "ProcessingTransport"
    PROCESSING_HTTP = "ProcessingHttp"
    DONE = "Done"
    ABORTED = "Aborted"


PROCESSING = {
    Interface.TRANSPORT: State.PROCESSING_TRANSPORT,
    Interface.HTTP: State.PROCESSING_HTTP,
}


class TrustedDNs:
    """Distinguished names of the nodes allowed to join the cluster over transport."""

    def __init__(self, initial: list[str] = None) -> None:
        self.dns = list(initial or [])

    def add_node(self, identity: ClusterIdentity) -> None:
        self.dns.append(f"CN={identity.name}")

    def config_value(self) -> str:
        return "[\"" + "\",\"".join(self.dns) + "\"]"

    def write(self, build: BuildContext) -> None:
        if len(self.dns) > 0:
            build.add_config(NODES_DN_KEY, self.config_value())


class TlsReconciler:
    def __init__(self, store: SecretStore,
                 expire: int = 31536000,
                 key_size: int = 4096,
                 algo: str = "rsa",
                 labels: dict = None) -> None:
        self.store = store
        self.expire = expire
        self.key_size = key_size
        self.algo = algo
        self.labels = labels or {}
        self.state = State.NOT_STARTED

    def reconcile(self, identity: ClusterIdentity, tls: TlsSpec) -> BuildContext:
        """
        Run one reconciliation pass.
        Interfaces are processed in fixed order, transport then http.
        The first error aborts the pass and is re-raised, unexpected ones included; nothing is returned for a failed pass.
        """
        build = BuildContext()
        if tls is None:
            print("No security specified. Not doing anything")
            self.state = State.DONE
            return build

        trusted = TrustedDNs(tls.nodes_dn)
        for interface in (Interface.TRANSPORT, Interface.HTTP):
            self.state = PROCESSING[interface]
            try:
                self.handle_interface(identity, interface, tls, build, trusted)
            except Exception as e:
                self.state = State.ABORTED
                print(f"ERROR: {interface.value} TLS of cluster {identity.namespace}/{identity.name} "
                      f"is not reconciled: {e}")
                raise

        trusted.write(build)
        # Temporary until the security config is managed separately.
        build.add_config(ALLOW_UNSAFE_DEMOCERTIFICATES_KEY, "true")
        self.state = State.DONE
        return build

    def handle_interface(self, identity: ClusterIdentity,
                         interface: Interface,
                         tls: TlsSpec,
                         build: BuildContext,
                         trusted: TrustedDNs) -> None:
        resolution = resolve(interface, tls.interface(interface))
        if resolution.action is Action.SKIP:
            return
        if resolution.action is Action.EXTERNAL:
            print(f"Using provided certificates for {interface.value}.")
            planner.plan_external(resolution, build)
            return

        print(f"Generating certificates for {interface.value}.")
        labels = self.secret_labels(identity)
        ca = ensure_ca(self.store, identity,
                       expire=self.expire, key_size=self.key_size, algo=self.algo, labels=labels)
        ensure_node_cert(self.store, identity, interface, ca,
                         expire=self.expire, key_size=self.key_size, algo=self.algo, labels=labels)
        planner.plan_generated(interface, identity.node_secret_name(interface), build)
        if interface.trusts_node_dn:
            trusted.add_node(identity)

    def secret_labels(self, identity: ClusterIdentity) -> dict:
        labels = {"app.kubernetes.io/instance": identity.name}
        labels.update(self.labels)
        return labels
