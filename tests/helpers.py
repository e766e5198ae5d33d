"""Shared fixtures for the kit tests."""

from credentials import SecretValue


def static_answers(**overrides):
    cfg = {
        "esxi_host": "esxi01.lab.local",
        "esxi_username": "root",
        "datastore": "datastore1",
        "deployment_network": "VM Network",
        "appliance_name": "vcsa01",
        "deployment_option": "medium",
        "network_mode": "static",
        "system_name": "vcsa01.lab.local",
        "ip": "10.0.0.5",
        "prefix": "24",
        "gateway": "10.0.0.1",
        "dns_servers": "8.8.8.8,8.8.4.4",
        "ntp_servers": "",
    }
    cfg.update(overrides)
    return cfg


def make_secrets(root="Root-pw1", esxi="esxi-pw", sso="Sso-pw1"):
    return {
        "root_password": SecretValue(root),
        "esxi_password": SecretValue(esxi),
        "sso_password": SecretValue(sso),
    }
