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

from opensearch_tls.tls.models import BuildContext, CA_CRT, CONFIG_DIR, Interface, SecretRef, TLS_CRT, TLS_KEY
from opensearch_tls.tls.policy import Resolution


def plan_generated(interface: Interface, node_secret_name: str, build: BuildContext) -> None:
    """The node secret holds all three files and is mounted as the interface directory."""
    volume = f"{interface.value}-cert"
    build.add_secret_volume(volume, node_secret_name)
    build.add_mount(volume, f"{CONFIG_DIR}/{interface.directory}")
    add_directives(interface, build)


def plan_external(resolution: Resolution, build: BuildContext) -> None:
    interface = resolution.interface
    mount_file(interface, "ca", CA_CRT, resolution.ca_secret, build)
    mount_file(interface, "key", TLS_KEY, resolution.key_secret, build)
    mount_file(interface, "cert", TLS_CRT, resolution.cert_secret, build)
    add_directives(interface, build)


def mount_file(interface: Interface, role: str, filename: str, ref: SecretRef, build: BuildContext) -> None:
    volume = f"{interface.value}-{role}"
    build.add_secret_volume(volume, ref.secret_name)
    build.add_mount(volume, f"{CONFIG_DIR}/{interface.directory}/{filename}", sub_path=ref.key_or(filename))


def add_directives(interface: Interface, build: BuildContext) -> None:
    for key, value in interface.directives().items():
        build.add_config(key, value)
