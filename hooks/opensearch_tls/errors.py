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


class TlsError(Exception):
    """Base exception for TLS reconciliation errors."""


class ConfigurationError(TlsError):
    """
    Raised when the TLS policy of an interface is invalid.
    It requires operator action and is never fixed by a retry.
    """

    def __init__(self, message: str, interface: str = None) -> None:
        super().__init__(message)
        self.interface = interface


class GenerationError(TlsError):
    """
    Raised when a CA or node certificate cannot be generated, loaded or stored.
    The whole pass is aborted and expected to be retried later.
    """

    def __init__(self, message: str, interface: str = None) -> None:
        super().__init__(message)
        self.interface = interface


class SecretStoreError(TlsError):
    """Raised when the secret store cannot serve a read or a write."""


class SecretAlreadyExists(SecretStoreError):
    """Raised when a secret is created under a name that is already taken."""
