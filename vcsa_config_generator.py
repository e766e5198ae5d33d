#!/usr/bin/env python3
"""
VCSA Deploy Kit — Installer Template Generator
===============================================
Generates the JSON template consumed by `vcsa-deploy install`.

Generated document:
  __version      — installer template schema version
  new_vcsa.esxi  — target ESXi host, login, network and datastore
  new_vcsa.appliance — sizing tier, VM name, thin provisioning
  new_vcsa.network   — static or DHCP addressing
  new_vcsa.os        — root password, NTP (or VMware Tools time sync), SSH
  new_vcsa.sso       — SSO administrator password and domain
  ceip           — telemetry opt-in

Passwords are revealed one at a time, directly into the document, and their
buffers are wiped as soon as each value has been placed.

Usage:
  python3 vcsa_config_generator.py --answers answers.yaml --output vcsa-deploy.json
"""
import argparse
import json
import sys
from pathlib import Path
from typing import Any

from credentials import SecretValue

TEMPLATE_COMMENT = "Generated by vcsa-deploy-kit. Deploys a vCenter Server Appliance on an ESXi host."


def build_network_block(cfg: dict[str, Any]) -> dict[str, Any]:
    network: dict[str, Any] = {
        "ip_family": cfg.get("ip_family", "ipv4"),
        "mode": cfg["network_mode"],
    }
    if cfg.get("system_name"):
        network["system_name"] = cfg["system_name"]
    # Addressing fields only mean something for static mode
    if cfg["network_mode"] == "static":
        network["ip"] = cfg["ip"]
        network["prefix"] = str(cfg["prefix"])
        network["gateway"] = cfg["gateway"]
        network["dns_servers"] = list(cfg["dns_servers"])
    return network


def build_deployment_config(cfg: dict[str, Any], secrets: dict[str, SecretValue]) -> dict[str, Any]:
    """
    Shape validated answers and credentials into the installer document.

    Args:
        cfg: validated answers (see config_loader.validate_answers)
        secrets: root_password, esxi_password and sso_password holders;
                 each is released once placed

    Returns:
        DeploymentConfig dict ready for json.dump
    """
    esxi: dict[str, Any] = {
        "hostname": cfg["esxi_host"],
        "username": cfg.get("esxi_username", "root"),
        "deployment_network": cfg["deployment_network"],
        "datastore": cfg["datastore"],
    }
    os_block: dict[str, Any] = {"ssh_enable": bool(cfg.get("ssh_enable", True))}
    if cfg.get("ntp_servers"):
        os_block["ntp_servers"] = list(cfg["ntp_servers"])
    else:
        os_block["time_tools_sync"] = True
    sso: dict[str, Any] = {"domain_name": cfg.get("sso_domain", "vsphere.local")}

    with secrets["esxi_password"].reveal() as pw:
        esxi["password"] = pw
    with secrets["root_password"].reveal() as pw:
        os_block["password"] = pw
    with secrets["sso_password"].reveal() as pw:
        sso["password"] = pw

    return {
        "__version": cfg.get("schema_version", "2.13.0"),
        "__comments": TEMPLATE_COMMENT,
        "new_vcsa": {
            "esxi": esxi,
            "appliance": {
                "thin_disk_mode": bool(cfg.get("thin_disk_mode", True)),
                "deployment_option": cfg["deployment_option"],
                "name": cfg["appliance_name"],
            },
            "network": build_network_block(cfg),
            "os": os_block,
            "sso": sso,
        },
        "ceip": {"settings": {"ceip_enabled": bool(cfg.get("ceip_enabled", False))}},
    }


def write_deployment_config(doc: dict[str, Any], path: "str | Path") -> Path:
    """Serialize the document as JSON. Overwrites any previous file."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w") as f:
        json.dump(doc, f, indent=2)
        f.write("\n")
    return out


def main() -> None:
    from config_loader import load_config, resolve_path

    parser = argparse.ArgumentParser(
        description="Generate the vcsa-deploy JSON template from answers.yaml + .env"
    )
    parser.add_argument("--answers", default="answers.yaml", help="Answers file (default: answers.yaml)")
    parser.add_argument("--env-file", default=".env",       help="Credentials file (default: .env)")
    parser.add_argument("--output",  default=None,          help="Template path (default: output_path from answers)")
    args = parser.parse_args()

    try:
        cfg, secrets = load_config(args.answers, args.env_file)
    except (FileNotFoundError, KeyError, ValueError) as e:
        print(f"❌ Configuration error: {e}")
        sys.exit(1)

    out = resolve_path(args.output or cfg["output_path"])
    write_deployment_config(build_deployment_config(cfg, secrets), out)
    print(f"✅ Template written: {out}")


if __name__ == "__main__":
    main()
