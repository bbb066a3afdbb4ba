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

from deckhouse import hook
from typing import Callable
from opensearch_tls.hooks.hook import Hook
from opensearch_tls.module import module
from opensearch_tls.tls.models import ClusterIdentity
from opensearch_tls.tls.policy import parse_tls_spec
from opensearch_tls.tls.reconciler import TlsReconciler
from opensearch_tls.tls.store import KubernetesSecretStore, SecretStore


class TlsCertificatesHook(Hook):
    """
    Config for the hook that provisions transport and http TLS of an OpenSearch cluster.

    Reads <module>.general.clusterName and <module>.security.tls from values
    and stores volumes, volume mounts and opensearch.yml settings at <module>.internal.tls.
    """
    SCHEDULE_NAME = "tlsCheck"

    def __init__(self, module_name: str = None,
                 store: SecretStore = None,
                 expire: int = 31536000,
                 key_size: int = 4096,
                 algo: str = "rsa") -> None:
        super().__init__(module_name=module_name)
        self.store = store
        self.expire = expire
        self.key_size = key_size
        self.algo = algo
        self.queue = f"/modules/{self.module_name}/generate-tls"
        self.values_path = f"{self.module_name}.internal.tls"

        """
        :param module_name: Module name
        :type module_name: :py:class:`str`

        :param store: Optional. Secret store. Kubernetes API is used by default.
        :type store: :py:class:`SecretStore`

        :param expire: Optional. Validity period of generated certificates in seconds.
        :type expire: :py:class:`int`

        :param key_size: Optional. Key Size.
        :type key_size: :py:class:`int`

        :param algo: Optional. Key generation algorithm. Supports only rsa and ecdsa.
        :type algo: :py:class:`str`
        """

    def generate_config(self) -> dict:
        return {
            "configVersion": "v1",
            "beforeHelm": 5,
            "schedule": [
                {
                    "name": self.SCHEDULE_NAME,
                    "crontab": "42 4 * * *",
                    "queue": self.queue
                }
            ]
        }

    def get_store(self) -> SecretStore:
        if self.store is None:
            self.store = KubernetesSecretStore.from_environment()
        return self.store

    def reconcile(self) -> Callable[[hook.Context], None]:
        def r(ctx: hook.Context) -> None:
            tls = parse_tls_spec(self.get_value(f"{self.module_name}.security.tls", ctx.values))
            identity, store = None, None
            if tls is not None:
                identity = ClusterIdentity(name=module.get_cluster_name(self.module_name, ctx.values),
                                           namespace=module.get_cluster_namespace(self.module_name, ctx.values))
                store = self.get_store()
            reconciler = TlsReconciler(store=store,
                                       expire=self.expire,
                                       key_size=self.key_size,
                                       algo=self.algo,
                                       labels={"app.kubernetes.io/managed-by": self.module_name})
            build = reconciler.reconcile(identity, tls)
            self.set_value(self.values_path, ctx.values, build.to_values())
        return r
