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


def _keys(path: str) -> list[str]:
    return path.lstrip(".").split(".")


def get_value(path: str, values: dict, default=None):
    node = values
    for key in _keys(path):
        if not isinstance(node, dict) or node.get(key) is None:
            return default
        node = node[key]
    return node


def set_value(path: str, values: dict, value) -> None:
    """
    Save value to dict, creating the intermediate dicts.

    Example:
        path = "opensearch.internal.tls"
        values = {"opensearch": {}}
        value = {"volumes": [], "volumeMounts": [], "config": {}}

        result values = {"opensearch": {"internal": {"tls": {"volumes": [], "volumeMounts": [], "config": {}}}}}
    """
    keys = _keys(path)
    node = values
    for key in keys[:-1]:
        if node.get(key) is None:
            node[key] = {}
        node = node[key]
    node[keys[-1]] = value
