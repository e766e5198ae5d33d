"""Tests for the installer JSON template."""

import json
import tempfile
import unittest
from pathlib import Path

from tests.helpers import make_secrets, static_answers

from config_loader import apply_defaults, validate_answers
from vcsa_config_generator import build_deployment_config, write_deployment_config


def build(**overrides):
    cfg = validate_answers(apply_defaults(static_answers(**overrides)))
    secrets = make_secrets()
    return build_deployment_config(cfg, secrets), secrets


class TestBuildDeploymentConfig(unittest.TestCase):

    def test_top_level_layout(self):
        doc, _ = build()
        self.assertEqual(doc["__version"], "2.13.0")
        self.assertEqual(set(doc["new_vcsa"]), {"esxi", "appliance", "network", "os", "sso"})
        self.assertEqual(doc["ceip"], {"settings": {"ceip_enabled": False}})

    def test_static_network_block(self):
        doc, _ = build()
        network = doc["new_vcsa"]["network"]
        self.assertEqual(network["mode"], "static")
        self.assertEqual(network["ip"], "10.0.0.5")
        self.assertEqual(network["prefix"], "24")
        self.assertEqual(network["gateway"], "10.0.0.1")
        self.assertEqual(network["dns_servers"], ["8.8.8.8", "8.8.4.4"])
        self.assertEqual(network["system_name"], "vcsa01.lab.local")
        self.assertEqual(network["ip_family"], "ipv4")

    def test_deployment_option_verbatim(self):
        doc, _ = build(deployment_option="medium")
        self.assertEqual(doc["new_vcsa"]["appliance"]["deployment_option"], "medium")
        doc, _ = build(deployment_option="tiny")
        self.assertEqual(doc["new_vcsa"]["appliance"]["deployment_option"], "tiny")

    def test_esxi_and_appliance_blocks(self):
        doc, _ = build()
        self.assertEqual(doc["new_vcsa"]["esxi"], {
            "hostname": "esxi01.lab.local",
            "username": "root",
            "deployment_network": "VM Network",
            "datastore": "datastore1",
            "password": "esxi-pw",
        })
        self.assertEqual(doc["new_vcsa"]["appliance"]["name"], "vcsa01")
        self.assertTrue(doc["new_vcsa"]["appliance"]["thin_disk_mode"])

    def test_dhcp_omits_static_fields(self):
        doc, _ = build(network_mode="dhcp")
        network = doc["new_vcsa"]["network"]
        self.assertEqual(network, {"ip_family": "ipv4", "mode": "dhcp", "system_name": "vcsa01.lab.local"})

    def test_ntp_or_tools_sync(self):
        doc, _ = build()
        self.assertTrue(doc["new_vcsa"]["os"]["time_tools_sync"])
        self.assertNotIn("ntp_servers", doc["new_vcsa"]["os"])
        doc, _ = build(ntp_servers="10.0.0.1, 10.0.0.2")
        self.assertEqual(doc["new_vcsa"]["os"]["ntp_servers"], ["10.0.0.1", "10.0.0.2"])
        self.assertNotIn("time_tools_sync", doc["new_vcsa"]["os"])

    def test_explicit_toggles(self):
        doc, _ = build(ceip_enabled=True, thin_disk_mode=False, ssh_enable=False, sso_domain="corp.local")
        self.assertTrue(doc["ceip"]["settings"]["ceip_enabled"])
        self.assertFalse(doc["new_vcsa"]["appliance"]["thin_disk_mode"])
        self.assertFalse(doc["new_vcsa"]["os"]["ssh_enable"])
        self.assertEqual(doc["new_vcsa"]["sso"]["domain_name"], "corp.local")

    def test_passwords_plaintext_only(self):
        doc, _ = build()
        self.assertEqual(doc["new_vcsa"]["os"]["password"], "Root-pw1")
        self.assertEqual(doc["new_vcsa"]["sso"]["password"], "Sso-pw1")
        for block in ("esxi", "os", "sso"):
            self.assertIsInstance(doc["new_vcsa"][block]["password"], str)
        text = json.dumps(doc)
        self.assertNotIn("SecretValue", text)
        self.assertNotIn("bytearray", text)

    def test_secrets_released_after_build(self):
        _, secrets = build()
        self.assertTrue(all(s.released for s in secrets.values()))


class TestWriteDeploymentConfig(unittest.TestCase):

    def test_writes_json_creating_parent_dirs(self):
        doc, _ = build()
        with tempfile.TemporaryDirectory() as tmp:
            out = write_deployment_config(doc, Path(tmp) / "out" / "vcsa.json")
            self.assertTrue(out.exists())
            self.assertEqual(json.loads(out.read_text()), doc)


if __name__ == "__main__":
    unittest.main()
