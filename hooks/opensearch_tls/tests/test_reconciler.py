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

import unittest
from copy import deepcopy
from opensearch_tls.certificate import parse
from opensearch_tls.errors import ConfigurationError, GenerationError, SecretStoreError
from opensearch_tls.tests import testing
from opensearch_tls.tls.models import BuildContext, ClusterIdentity, SecretRef, TlsInterfaceSpec, TlsSpec
from opensearch_tls.tls.reconciler import State, TlsReconciler, TrustedDNs

DEMO = ClusterIdentity(name="demo", namespace="demo")
NODES_DN = "plugins.security.nodes_dn"
ALLOW_UNSAFE = "plugins.security.allow_unsafe_democertificates"


def http_certs_spec() -> TlsInterfaceSpec:
    return TlsInterfaceSpec(generate=False,
                            ca_secret=SecretRef("demo-http-certs"),
                            cert_secret=SecretRef("demo-http-certs"),
                            key_secret=SecretRef("demo-http-certs"))


class TestReconciler(unittest.TestCase):
    def setUp(self):
        self.store = testing.MemorySecretStore()
        self.reconciler = TlsReconciler(self.store, key_size=testing.KEY_SIZE)

    def test_no_policy(self):
        build = self.reconciler.reconcile(DEMO, None)
        self.assertTrue(build.is_empty())
        self.assertEqual(self.store.operations, [])
        self.assertIs(self.reconciler.state, State.DONE)

    def test_demo_scenario(self):
        build = self.reconciler.reconcile(DEMO, TlsSpec(transport=TlsInterfaceSpec(generate=True),
                                                        http=http_certs_spec()))
        self.assertEqual(self.store.created(), ["demo-ca", "demo-transport-cert"])
        crt = parse.parse_certificate(self.store.get("demo-transport-cert", "demo")["tls.crt"])
        self.assertEqual(sorted(parse.get_certificate_san(crt)), sorted([
            "DNS:demo",
            "DNS:demo.demo",
            "DNS:demo.demo.svc",
            "DNS:demo.demo.svc.cluster.local",
        ]))

        http_mounts = [m for m in build.volume_mounts if "/tls-http/" in m["mountPath"]]
        self.assertEqual(len(http_mounts), 3)
        http_volumes = {v["name"]: v["secret"]["secretName"] for v in build.volumes if v["name"].startswith("http-")}
        self.assertEqual(http_volumes, {"http-ca": "demo-http-certs",
                                        "http-key": "demo-http-certs",
                                        "http-cert": "demo-http-certs"})
        self.assertEqual(build.volumes[0], {"name": "transport-cert",
                                            "secret": {"secretName": "demo-transport-cert"}})
        self.assertEqual(build.config[NODES_DN], '["CN=demo"]')
        self.assertEqual(build.config["plugins.security.ssl.http.enabled"], "true")
        self.assertEqual(build.config["plugins.security.ssl.transport.enforce_hostname_verification"], "false")
        self.assertEqual(build.config[ALLOW_UNSAFE], "true")
        self.assertIs(self.reconciler.state, State.DONE)

    def test_generate_transport_skip_http(self):
        build = self.reconciler.reconcile(DEMO, TlsSpec(transport=TlsInterfaceSpec(generate=True)))
        self.assertEqual(build.config[NODES_DN], '["CN=demo"]')
        self.assertNotIn("plugins.security.ssl.http.enabled", build.config)
        self.assertEqual(len(build.volumes), 1)

    def test_ca_created_before_node_certificates(self):
        self.reconciler.reconcile(DEMO, TlsSpec(transport=TlsInterfaceSpec(generate=True),
                                                http=TlsInterfaceSpec(generate=True)))
        self.assertEqual(self.store.created(), ["demo-ca", "demo-transport-cert", "demo-http-cert"])
        ca = parse.parse_certificate(self.store.get("demo-ca", "demo")["ca.crt"])
        for name in ("demo-transport-cert", "demo-http-cert"):
            crt = parse.parse_certificate(self.store.get(name, "demo")["tls.crt"])
            self.assertIsNone(parse.verify_certificate(ca, crt))

    def test_generated_http_is_not_trusted_dn(self):
        build = self.reconciler.reconcile(DEMO, TlsSpec(http=TlsInterfaceSpec(generate=True)))
        self.assertNotIn(NODES_DN, build.config)
        self.assertEqual(build.config[ALLOW_UNSAFE], "true")

    def test_external_transport_is_not_trusted_dn(self):
        build = self.reconciler.reconcile(DEMO, TlsSpec(transport=http_certs_spec()))
        self.assertNotIn(NODES_DN, build.config)
        self.assertEqual(self.store.operations, [])

    def test_operator_nodes_dn_come_first(self):
        build = self.reconciler.reconcile(DEMO, TlsSpec(transport=TlsInterfaceSpec(generate=True),
                                                        nodes_dn=["CN=admin"]))
        self.assertEqual(build.config[NODES_DN], '["CN=admin","CN=demo"]')

    def test_empty_tls_section(self):
        build = self.reconciler.reconcile(DEMO, TlsSpec())
        self.assertEqual(build.config, {ALLOW_UNSAFE: "true"})
        self.assertEqual(self.store.operations, [])

    def test_idempotence(self):
        tls = TlsSpec(transport=TlsInterfaceSpec(generate=True), http=TlsInterfaceSpec(generate=True))
        first = self.reconciler.reconcile(DEMO, tls)
        secrets = deepcopy(self.store.secrets)
        second = TlsReconciler(self.store, key_size=testing.KEY_SIZE).reconcile(DEMO, tls)
        self.assertEqual(self.store.secrets, secrets)
        self.assertEqual(first.to_values(), second.to_values())
        self.assertEqual(self.store.writes(), 3)

    def test_resumes_after_partial_progress(self):
        self.store.fail_on[("create", "demo-transport-cert")] = SecretStoreError("connection refused")
        tls = TlsSpec(transport=TlsInterfaceSpec(generate=True))
        with self.assertRaises(GenerationError):
            self.reconciler.reconcile(DEMO, tls)
        ca = self.store.get("demo-ca", "demo")

        self.store.fail_on.clear()
        TlsReconciler(self.store, key_size=testing.KEY_SIZE).reconcile(DEMO, tls)
        self.assertEqual(self.store.get("demo-ca", "demo"), ca)
        self.assertEqual(self.store.created().count("demo-ca"), 1)
        self.assertEqual(self.store.get("demo-transport-cert", "demo")["ca.crt"], ca["ca.crt"])


class TestReconcilerErrors(unittest.TestCase):
    def setUp(self):
        self.store = testing.MemorySecretStore()
        self.reconciler = TlsReconciler(self.store, key_size=testing.KEY_SIZE)

    def test_missing_reference(self):
        tls = TlsSpec(http=TlsInterfaceSpec(generate=False,
                                            ca_secret=SecretRef("demo-http-certs"),
                                            cert_secret=SecretRef("demo-http-certs")))
        with self.assertRaises(ConfigurationError) as ctx:
            self.reconciler.reconcile(DEMO, tls)
        self.assertEqual(ctx.exception.interface, "http")
        self.assertIs(self.reconciler.state, State.ABORTED)
        self.assertEqual(self.store.writes(), 0)

    def test_transport_failure_aborts_http(self):
        self.store.fail_on[("create", "demo-ca")] = SecretStoreError("connection refused")
        tls = TlsSpec(transport=TlsInterfaceSpec(generate=True),
                      http=TlsInterfaceSpec(generate=False))
        with self.assertRaises(GenerationError):
            self.reconciler.reconcile(DEMO, tls)
        self.assertIs(self.reconciler.state, State.ABORTED)
        self.assertEqual(self.store.created(), ["demo-ca"])
        self.assertIsNone(self.store.get("demo-ca", "demo"))

    def test_ca_failure_stops_before_node_certificate(self):
        self.store.fail_on[("fetch", "demo-ca")] = SecretStoreError("connection refused")
        with self.assertRaises(GenerationError):
            self.reconciler.reconcile(DEMO, TlsSpec(transport=TlsInterfaceSpec(generate=True)))
        self.assertNotIn(("fetch", "demo", "demo-transport-cert"), self.store.operations)

    def test_http_failure(self):
        self.store.fail_on[("create", "demo-http-cert")] = SecretStoreError("connection refused")
        tls = TlsSpec(transport=TlsInterfaceSpec(generate=True), http=TlsInterfaceSpec(generate=True))
        with self.assertRaises(GenerationError) as ctx:
            self.reconciler.reconcile(DEMO, tls)
        self.assertEqual(ctx.exception.interface, "http")
        self.assertIs(self.reconciler.state, State.ABORTED)


class TestTrustedDNs(unittest.TestCase):
    def test_config_value(self):
        dns = TrustedDNs(["CN=admin"])
        dns.add_node(DEMO)
        dns.add_node(DEMO)
        self.assertEqual(dns.config_value(), '["CN=admin","CN=demo","CN=demo"]')

    def test_empty_is_not_written(self):
        build = BuildContext()
        TrustedDNs().write(build)
        self.assertTrue(build.is_empty())



class TestReconcilerUnexpectedErrors(unittest.TestCase):
    def test_unexpected_error_aborts(self):
        store = testing.MemorySecretStore()
        store.fail_on[("fetch", "demo-ca")] = RuntimeError("unexpected")
        reconciler = TlsReconciler(store, key_size=testing.KEY_SIZE)
        with self.assertRaises(RuntimeError):
            reconciler.reconcile(DEMO, TlsSpec(transport=TlsInterfaceSpec(generate=True),
                                               http=TlsInterfaceSpec(generate=True)))
        self.assertIs(reconciler.state, State.ABORTED)
        self.assertEqual(store.writes(), 0)
