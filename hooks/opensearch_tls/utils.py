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

import base64


def base64_encode(b: bytes) -> str:
    return str(base64.b64encode(b), encoding='utf-8')


def base64_decode(s: str) -> bytes:
    return base64.b64decode(s, validate=True)


def encode_secret_data(data: dict[str, bytes]) -> dict[str, str]:
    return {k: base64_encode(v) for k, v in data.items()}


def decode_secret_data(data: dict[str, str]) -> dict[str, bytes]:
    if data is None:
        return {}
    return {k: base64_decode(v) for k, v in data.items()}
