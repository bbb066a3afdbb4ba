#!/usr/bin/env python3
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

import os

MODULE_NAME = "opensearch"

# Validity period of generated CA and node certificates, seconds.
CERT_EXPIRE = int(os.getenv("OPENSEARCH_TLS_CERT_EXPIRE", 31536000))
CERT_KEY_SIZE = int(os.getenv("OPENSEARCH_TLS_KEY_SIZE", 4096))
