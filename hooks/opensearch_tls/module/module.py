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

from opensearch_tls.module import values as module_values
from opensearch_tls.errors import ConfigurationError
import os


def get_values_first_defined(values: dict, *keys):
    for key in keys:
        if (val := module_values.get_value(path=key, values=values)) is not None:
            return val
    return None


def get_module_name() -> str:
    module = os.getenv("MODULE_NAME", "")
    if module == "":
        raise Exception("module name is not defined. Pass module_name or set MODULE_NAME")
    return module


def get_cluster_name(module_name: str, values: dict) -> str:
    cluster_name = get_values_first_defined(values,
                                            f"{module_name}.general.clusterName",
                                            f"{module_name}.clusterName")
    if cluster_name is None or str(cluster_name) == "":
        raise ConfigurationError("cluster name is not defined")
    return str(cluster_name)


def get_cluster_namespace(module_name: str, values: dict) -> str:
    # Clusters are deployed into a namespace named after them unless overridden.
    namespace = get_values_first_defined(values,
                                         f"{module_name}.general.namespace",
                                         f"{module_name}.general.clusterName",
                                         f"{module_name}.clusterName")
    if namespace is None or str(namespace) == "":
        raise ConfigurationError("cluster namespace is not defined")
    return str(namespace)
