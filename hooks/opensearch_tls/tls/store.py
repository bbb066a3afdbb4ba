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

from typing import Callable
import binascii
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import MaxRetryError
from opensearch_tls.errors import SecretAlreadyExists, SecretStoreError
import opensearch_tls.utils as utils


class SecretStore:
    """
    Key-value store of secrets addressed by (name, namespace).
    Secret fields are raw bytes.
    """

    def fetch(self, name: str, namespace: str) -> dict[str, bytes]:
        """
        :return: Secret fields or None if the secret does not exist.
        :raises SecretStoreError: The store cannot serve the read.
        """
        raise NotImplementedError

    def create(self, name: str, namespace: str, data: dict[str, bytes], labels: dict = None) -> None:
        """
        Create the secret if absent.
        :raises SecretAlreadyExists: A secret with this name already exists.
        :raises SecretStoreError: The store cannot serve the write.
        """
        raise NotImplementedError


class KubernetesSecretStore(SecretStore):
    def __init__(self, api: client.CoreV1Api = None) -> None:
        self.api = api if api is not None else client.CoreV1Api()

    @classmethod
    def from_environment(cls):
        try:
            config.load_incluster_config()
        except ConfigException:
            config.load_kube_config()
        return cls()

    @staticmethod
    def generate_secret(name: str, namespace: str, data: dict[str, bytes], labels: dict = None) -> dict:
        return {
            "apiVersion": "v1",
            "kind": "Secret",
            "metadata": {
                "name": name,
                "namespace": namespace,
                "labels": labels or {}
            },
            "data": utils.encode_secret_data(data),
            "type": "Opaque"
        }

    def fetch(self, name: str, namespace: str) -> dict[str, bytes]:
        try:
            secret = self.api.read_namespaced_secret(name=name, namespace=namespace)
        except ApiException as e:
            if e.status == 404:
                return None
            raise SecretStoreError(f"Failed to read secret {namespace}/{name}: {e.status} {e.reason}") from e
        except MaxRetryError as e:
            raise SecretStoreError(f"Failed to read secret {namespace}/{name}: {e.reason}") from e
        try:
            return utils.decode_secret_data(secret.data)
        except binascii.Error as e:
            raise SecretStoreError(f"Secret {namespace}/{name} has malformed data: {e}") from e

    def create(self, name: str, namespace: str, data: dict[str, bytes], labels: dict = None) -> None:
        body = self.generate_secret(name, namespace, data, labels)
        try:
            self.api.create_namespaced_secret(namespace=namespace, body=body)
        except ApiException as e:
            if e.status == 409:
                raise SecretAlreadyExists(f"Secret {namespace}/{name} already exists") from e
            raise SecretStoreError(f"Failed to create secret {namespace}/{name}: {e.status} {e.reason}") from e
        except MaxRetryError as e:
            raise SecretStoreError(f"Failed to create secret {namespace}/{name}: {e.reason}") from e


def get_or_create(store: SecretStore,
                  name: str,
                  namespace: str,
                  generator: Callable[[], dict[str, bytes]],
                  labels: dict = None) -> dict[str, bytes]:
    """
    Return the fields of secret namespace/name, creating it from generator() when it does not exist.
    If another writer creates the secret first, its fields are returned instead of the generated ones.
    """
    data = store.fetch(name, namespace)
    if data is not None:
        return data
    print(f"Secret {namespace}/{name} not found. Generate new one.")
    data = generator()
    try:
        store.create(name, namespace, data, labels)
    except SecretAlreadyExists:
        print(f"Secret {namespace}/{name} was created concurrently. Use the stored one.")
        data = store.fetch(name, namespace)
        if data is None:
            raise SecretStoreError(f"Secret {namespace}/{name} already exists but cannot be read")
    return data
