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
import unittest
from unittest.mock import patch
from opensearch_tls.errors import ConfigurationError
from opensearch_tls.module import module
from opensearch_tls.module import values as module_values


class TestValues(unittest.TestCase):
    def setUp(self):
        self.values = {"opensearch": {"general": {"clusterName": "demo"}, "internal": {}}}

    def test_get_value(self):
        self.assertEqual(module_values.get_value("opensearch.general.clusterName", self.values), "demo")
        self.assertEqual(module_values.get_value(".opensearch.general.clusterName", self.values), "demo")
        self.assertIsNone(module_values.get_value("opensearch.security.tls", self.values))
        self.assertEqual(module_values.get_value("opensearch.general.clusterName.x", self.values, "d"), "d")

    def test_set_value(self):
        module_values.set_value("opensearch.internal.tls.config", self.values, {"key": "value"})
        self.assertEqual(self.values["opensearch"]["internal"], {"tls": {"config": {"key": "value"}}})


class TestModule(unittest.TestCase):
    def test_module_name(self):
        with patch.dict(os.environ, {"MODULE_NAME": "opensearch"}):
            self.assertEqual(module.get_module_name(), "opensearch")
        with patch.dict(os.environ, {"MODULE_NAME": ""}):
            with self.assertRaises(Exception):
                module.get_module_name()

    def test_cluster_name(self):
        values = {"opensearch": {"general": {"clusterName": "demo"}}}
        self.assertEqual(module.get_cluster_name("opensearch", values), "demo")
        self.assertEqual(module.get_cluster_name("opensearch", {"opensearch": {"clusterName": "logs"}}), "logs")

    def test_missing_cluster_name(self):
        for values in ({}, {"opensearch": {"general": {"clusterName": ""}}}):
            with self.subTest(values=values):
                with self.assertRaises(ConfigurationError):
                    module.get_cluster_name("opensearch", values)

    def test_cluster_namespace(self):
        values = {"opensearch": {"general": {"clusterName": "demo", "namespace": "search"}}}
        self.assertEqual(module.get_cluster_namespace("opensearch", values), "search")
        del values["opensearch"]["general"]["namespace"]
        self.assertEqual(module.get_cluster_namespace("opensearch", values), "demo")
        with self.assertRaises(ConfigurationError):
            module.get_cluster_namespace("opensearch", {})
