#!/usr/bin/env python3
"""
Config Loader — VCSA Deploy Kit
================================
Loads deployment answers from answers.yaml and merges credentials from the
environment.

Security model:
  - Non-secret settings: answers.yaml (safe to keep alongside the kit)
  - Secrets/credentials: .env file or environment variables (NEVER in answers.yaml)

Usage:
  from config_loader import load_config
  cfg, secrets = load_config()
  print(cfg["appliance_name"])

Environment variables required (set in .env or shell):
  VCSA_ROOT_PASSWORD — appliance OS root password
  ESXI_PASSWORD      — password of the target ESXi host user
  VCSA_SSO_PASSWORD  — vCenter Single Sign-On administrator password
"""
import ipaddress
import sys
from pathlib import Path
from typing import Any

try:
    import yaml
    from dotenv import load_dotenv
except ImportError:
    print("❌ ERROR: pyyaml / python-dotenv not installed. Run: pip install -e .")
    sys.exit(1)

from credentials import SecretValue

KIT_DIR = Path(__file__).parent

DEPLOYMENT_SIZES = ("tiny", "small", "medium", "large")
NETWORK_MODES = ("static", "dhcp")

# Template versions shipped with recent vcsa-deploy releases
KNOWN_SCHEMA_VERSIONS = ("2.3.0", "2.13.0")

DEFAULTS: dict[str, Any] = {
    "schema_version": "2.13.0",
    "esxi_username": "root",
    "ceip_enabled": False,
    "thin_disk_mode": True,
    "ssh_enable": True,
    "sso_domain": "vsphere.local",
    "ip_family": "ipv4",
    "ntp_servers": [],
    "installer_path": "vcsa-deploy",
    "output_path": "vcsa-deploy.json",
}

REQUIRED_KEYS = [
    "esxi_host", "datastore", "deployment_network",
    "deployment_option", "appliance_name", "network_mode",
]
STATIC_KEYS = ["system_name", "ip", "prefix", "gateway", "dns_servers"]

CREDENTIAL_ENV = {
    "root_password": "VCSA_ROOT_PASSWORD",
    "esxi_password": "ESXI_PASSWORD",
    "sso_password":  "VCSA_SSO_PASSWORD",
}


def resolve_path(path: "str | Path") -> Path:
    """Relative paths are resolved against the kit directory."""
    p = Path(path)
    return p if p.is_absolute() else KIT_DIR / p


def parse_server_list(raw: "str | list | None") -> list[str]:
    """Split a comma-delimited server list. Blank tokens are dropped."""
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        items = [str(x) for x in raw]
    else:
        items = str(raw).split(",")
    return [s.strip() for s in items if s.strip()]


def is_ipv4(value: str) -> bool:
    try:
        ipaddress.IPv4Address(str(value).strip())
    except ValueError:
        return False
    return True


def is_prefix(value: "str | int") -> bool:
    try:
        n = int(str(value).strip())
    except ValueError:
        return False
    return 1 <= n <= 32


def apply_defaults(cfg: dict[str, Any]) -> dict[str, Any]:
    for k, v in DEFAULTS.items():
        cfg.setdefault(k, list(v) if isinstance(v, list) else v)
    return cfg


def validate_answers(cfg: dict[str, Any]) -> dict[str, Any]:
    """
    Validate and normalise answers in place.

    Server lists are parsed into lists and the prefix is kept as a string.

    Raises:
        ValueError: listing every problem found
    """
    problems = []

    missing = [k for k in REQUIRED_KEYS if cfg.get(k) is None or not str(cfg[k]).strip()]
    if missing:
        problems.append(f"missing required keys: {missing}")

    size = cfg.get("deployment_option")
    if size is not None and size not in DEPLOYMENT_SIZES:
        problems.append(f"deployment_option '{size}' must be one of {list(DEPLOYMENT_SIZES)}")

    mode = cfg.get("network_mode")
    if mode is not None and mode not in NETWORK_MODES:
        problems.append(f"network_mode '{mode}' must be one of {list(NETWORK_MODES)}")

    cfg["dns_servers"] = parse_server_list(cfg.get("dns_servers"))
    cfg["ntp_servers"] = parse_server_list(cfg.get("ntp_servers"))
    if cfg.get("prefix") is not None:
        cfg["prefix"] = str(cfg["prefix"]).strip()

    if mode == "static":
        missing_static = [k for k in STATIC_KEYS if not cfg.get(k)]
        if missing_static:
            problems.append(f"static network mode requires: {missing_static}")
        if cfg.get("ip") and not is_ipv4(cfg["ip"]):
            problems.append(f"ip '{cfg['ip']}' is not a valid IPv4 address")
        if cfg.get("gateway") and not is_ipv4(cfg["gateway"]):
            problems.append(f"gateway '{cfg['gateway']}' is not a valid IPv4 address")
        if cfg.get("prefix") and not is_prefix(cfg["prefix"]):
            problems.append(f"prefix '{cfg['prefix']}' must be a number between 1 and 32")
        bad_dns = [s for s in cfg["dns_servers"] if not is_ipv4(s)]
        if bad_dns:
            problems.append(f"dns_servers contain invalid IPv4 addresses: {bad_dns}")

    bad_ntp = [s for s in cfg["ntp_servers"] if not is_ipv4(s)]
    if bad_ntp:
        problems.append(f"ntp_servers contain invalid IPv4 addresses: {bad_ntp}")

    for flag in ("ceip_enabled", "thin_disk_mode", "ssh_enable"):
        if not isinstance(cfg.get(flag), bool):
            problems.append(f"{flag} must be true or false, got {cfg.get(flag)!r}")

    if problems:
        raise ValueError("invalid deployment answers:\n  - " + "\n  - ".join(problems))
    return cfg


def load_answers(answers_path: "str | Path" = "answers.yaml") -> dict[str, Any]:
    """
    Load and validate answers.yaml.

    Raises:
        FileNotFoundError: If answers.yaml does not exist
        ValueError: If the answers are incomplete or malformed
    """
    answers_file = resolve_path(answers_path)
    if not answers_file.exists():
        raise FileNotFoundError(
            f"answers file not found at {answers_file}\n"
            f"Run: python3 wizard.py   (or copy answers.example.yaml to answers.yaml)"
        )
    with open(answers_file) as f:
        try:
            cfg = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"answers file {answers_file} is not valid YAML:\n{e}") from e
    if not isinstance(cfg, dict):
        raise ValueError(
            f"answers file {answers_file} must be a mapping of key: value, got {type(cfg).__name__}"
        )
    return validate_answers(apply_defaults(cfg))


def load_credentials(env_path: "str | Path" = ".env") -> dict[str, SecretValue]:
    """
    Read the three deployment passwords from the environment.

    A .env file is loaded first if present; real environment variables win.

    Raises:
        KeyError: If a required environment variable is missing
    """
    env_file = resolve_path(env_path)
    if env_file.exists():
        load_dotenv(env_file, override=False)

    secrets: dict[str, SecretValue] = {}
    missing_env = []
    for key, env_var in CREDENTIAL_ENV.items():
        try:
            secrets[key] = SecretValue.from_env(env_var)
        except KeyError:
            missing_env.append(env_var)
    if missing_env:
        raise KeyError(
            f"Required environment variables not set: {missing_env}\n"
            f"Copy .env.example to .env and fill in your credentials."
        )
    return secrets


def load_config(answers_path: "str | Path" = "answers.yaml",
                env_path: "str | Path" = ".env") -> tuple[dict[str, Any], dict[str, SecretValue]]:
    """Load answers and credentials for a non-interactive run."""
    cfg = load_answers(answers_path)
    secrets = load_credentials(env_path)
    return cfg, secrets


if __name__ == "__main__":
    """Quick validation — run: python3 config_loader.py"""
    try:
        cfg, secrets = load_config()
        print("✅ Configuration loaded successfully")
        print(f"   Appliance: {cfg['appliance_name']} ({cfg['deployment_option']})")
        print(f"   ESXi host: {cfg['esxi_host']} / {cfg['datastore']}")
        print(f"   Network:   {cfg['network_mode']} on {cfg['deployment_network']}")
        for key, secret in secrets.items():
            print(f"   {key:<14} {secret!r}")
    except (FileNotFoundError, KeyError, ValueError) as e:
        print(f"❌ Configuration error: {e}")
        sys.exit(1)
