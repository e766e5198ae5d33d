#!/usr/bin/env python3
"""
VCSA Deploy Kit — Interactive Configuration Wizard
===================================================
Guides you through all deployment parameters, writes answers.yaml (no
secrets) and optionally deploys straight away.

Usage:
  python3 wizard.py                     # Run wizard, optionally deploy
  python3 deploy_pipeline.py            # Wizard auto-runs before deploy
  python3 deploy_pipeline.py --auto     # Skip wizard, use answers.yaml + .env
"""
import getpass
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

try:
    import yaml
except ImportError:
    print("pyyaml not installed. Run: pip install -e .")
    sys.exit(1)

from config_loader import (
    DEFAULTS, DEPLOYMENT_SIZES, NETWORK_MODES,
    is_ipv4, is_prefix, parse_server_list, resolve_path,
)
from credentials import REDACTED, SecretValue

# ── ANSI colours ──────────────────────────────────────────────
BOLD="\033[1m"; DIM="\033[2m"; CYAN="\033[36m"
GREEN="\033[32m"; YELLOW="\033[33m"; RED="\033[31m"; RESET="\033[0m"

def bold(s):   return f"{BOLD}{s}{RESET}"
def dim(s):    return f"{DIM}{s}{RESET}"
def green(s):  return f"{GREEN}{s}{RESET}"
def yellow(s): return f"{YELLOW}{s}{RESET}"
def red(s):    return f"{RED}{s}{RESET}"

# ── Option tables ──────────────────────────────────────────────
SIZE_DESCRIPTIONS = {
    "tiny":   " 2 vCPU, 14 GB RAM  — up to 10 hosts / 100 VMs (lab)",
    "small":  " 4 vCPU, 21 GB RAM  — up to 100 hosts / 1000 VMs",
    "medium": " 8 vCPU, 30 GB RAM  — up to 400 hosts / 4000 VMs (recommended)",
    "large":  "16 vCPU, 39 GB RAM  — up to 1000 hosts / 10000 VMs",
}
DEPLOYMENT_OPTIONS = [(s, SIZE_DESCRIPTIONS[s]) for s in DEPLOYMENT_SIZES]
MODE_DESCRIPTIONS = {
    "static": "Fixed IP, prefix, gateway and DNS servers (recommended)",
    "dhcp":   "Address assigned by DHCP — FQDN must still resolve",
}
NETWORK_MODE_OPTIONS = [(m, MODE_DESCRIPTIONS[m]) for m in NETWORK_MODES]

# ── UI helpers ────────────────────────────────────────────────
def hdr(title: str):
    print(f"\n{CYAN}{'='*62}{RESET}")
    print(f"{CYAN}  {BOLD}{title}{RESET}")
    print(f"{CYAN}{'='*62}{RESET}")

def sec(num: int, total: int, title: str):
    print(f"\n{BOLD}{CYAN}[{num}/{total}] {title}{RESET}")
    print(f"{DIM}{'-'*50}{RESET}")

def prompt(q: str, default: str = "", required: bool = False) -> str:
    sfx = f" [{dim(default)}]" if default else ""
    while True:
        v = input(f"  {q}{sfx}: ").strip()
        if not v:
            if default: return default
            if required: print(f"  {red('Required.')}"); continue
        return v or default

def prompt_ipv4(q: str, default: str = "") -> str:
    while True:
        v = prompt(q, default, required=True)
        if is_ipv4(v): return v
        print(f"  {red('Enter a valid IPv4 address, e.g. 10.0.0.5.')}")

def prompt_prefix(q: str, default: str = "24") -> str:
    while True:
        v = prompt(q, default, required=True)
        if is_prefix(v): return v
        print(f"  {red('Must be 1-32.')}")

def prompt_servers(q: str, default: list | None = None, required: bool = False) -> list[str]:
    """Comma-separated IPv4 list. Re-asks on any invalid entry."""
    default_str = ",".join(default or [])
    while True:
        servers = parse_server_list(prompt(q, default_str, required=required))
        bad = [s for s in servers if not is_ipv4(s)]
        if not bad: return servers
        print(f"  {red(f'Not valid IPv4: {bad}')}")

def prompt_bool(q: str, default: bool = True) -> bool:
    sfx = "Y/n" if default else "y/N"
    raw = input(f"  {q} [{dim(sfx)}]: ").strip().lower()
    if not raw: return default
    return raw in ("y", "yes", "1", "true")

def prompt_secret(q: str, confirm: bool = False) -> SecretValue:
    """Hidden input. The value goes straight into a SecretValue."""
    while True:
        v = getpass.getpass(f"  {q}: ")
        if not v:
            print(f"  {red('Required.')}"); continue
        if confirm and getpass.getpass(f"  Confirm {q[0].lower()}{q[1:]}: ") != v:
            print(f"  {red('Values do not match.')}"); continue
        return SecretValue(v)

def choose(opts: list, def_idx: int = 0) -> tuple:
    for i, (v, d) in enumerate(opts, 1):
        marker = green("->") if i == def_idx + 1 else "  "
        print(f"    {marker} {bold(str(i))}. {bold(v):<16} {dim(d)}")
    while True:
        raw = input(f"  Choice [{dim(str(def_idx + 1))}]: ").strip()
        if not raw: return def_idx, opts[def_idx][0]
        try:
            idx = int(raw) - 1
            if 0 <= idx < len(opts): return idx, opts[idx][0]
        except ValueError:
            pass
        print(f"  {red(f'Enter 1-{len(opts)}.')}")

def load_existing(path: "str | Path" = "answers.yaml") -> dict:
    """Previous answers as prompt defaults. Unreadable files count as empty."""
    p = resolve_path(path)
    if p.exists():
        try:
            with open(p) as f: return yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError):
            pass
    return {}


# ════════════════════════════════════════════════════════════════
#  WIZARD — 6-step interactive configuration
# ════════════════════════════════════════════════════════════════
def run_wizard(existing: dict | None = None) -> tuple[dict, dict]:
    """Run interactive wizard. Returns (answers dict, secrets dict)."""
    if existing is None:
        existing = load_existing()
    existing = {**DEFAULTS, **existing}

    hdr("VCSA DEPLOY KIT — CONFIGURATION WIZARD")
    print(f"  {dim('Guides you through all appliance deployment parameters.')}")
    print(f"  {dim('Press Enter to accept the default shown in [brackets].')}")
    print(f"  {dim('Ctrl+C at any time to abort without saving.')}")

    cfg: dict[str, Any] = {}
    secrets: dict[str, SecretValue] = {}
    TOTAL = 6

    # ── [1/6] Target ESXi Host ────────────────────────────────
    sec(1, TOTAL, "TARGET ESXI HOST")
    cfg["esxi_host"]          = prompt("ESXi host address (FQDN or IP)",
                                       existing.get("esxi_host", ""), required=True)
    cfg["esxi_username"]      = prompt("ESXi username", existing["esxi_username"], required=True)
    secrets["esxi_password"]  = prompt_secret("ESXi password")
    cfg["datastore"]          = prompt("Datastore name",
                                       existing.get("datastore", "datastore1"), required=True)
    cfg["deployment_network"] = prompt("Port group / network name",
                                       existing.get("deployment_network", "VM Network"), required=True)

    # ── [2/6] Appliance ───────────────────────────────────────
    sec(2, TOTAL, "APPLIANCE")
    cfg["appliance_name"] = prompt("Appliance VM name",
                                   existing.get("appliance_name", "vcsa01"), required=True)
    print(f"\n  {bold('Deployment size:')}")
    existing_size = existing.get("deployment_option", "medium")
    size_def_idx = next((i for i,(v,_) in enumerate(DEPLOYMENT_OPTIONS) if v == existing_size), 2)
    _, cfg["deployment_option"] = choose(DEPLOYMENT_OPTIONS, size_def_idx)
    cfg["thin_disk_mode"] = prompt_bool("Thin-provision appliance disks?", existing["thin_disk_mode"])

    # ── [3/6] Network ─────────────────────────────────────────
    sec(3, TOTAL, "NETWORK")
    existing_mode = existing.get("network_mode", "static")
    mode_def_idx = next((i for i,(v,_) in enumerate(NETWORK_MODE_OPTIONS) if v == existing_mode), 0)
    _, cfg["network_mode"] = choose(NETWORK_MODE_OPTIONS, mode_def_idx)
    cfg["ip_family"] = existing["ip_family"]
    static = cfg["network_mode"] == "static"
    cfg["system_name"] = prompt("Appliance FQDN (system name)",
                                existing.get("system_name", ""), required=static)
    if static:
        cfg["ip"]          = prompt_ipv4("IP address", existing.get("ip", ""))
        cfg["prefix"]      = prompt_prefix("Subnet prefix length", str(existing.get("prefix", "24")))
        cfg["gateway"]     = prompt_ipv4("Default gateway", existing.get("gateway", ""))
        cfg["dns_servers"] = prompt_servers("DNS servers (comma-separated)",
                                            parse_server_list(existing.get("dns_servers")), required=True)
    else:
        print(f"  {yellow('DHCP: IP, prefix, gateway and DNS come from the DHCP server.')}")
        cfg["dns_servers"] = []

    # ── [4/6] Appliance OS ────────────────────────────────────
    sec(4, TOTAL, "APPLIANCE OS")
    secrets["root_password"] = prompt_secret("Appliance root password", confirm=True)
    cfg["ntp_servers"] = prompt_servers("NTP servers (comma-separated, blank = sync with ESXi host)",
                                        parse_server_list(existing.get("ntp_servers")))
    cfg["ssh_enable"] = prompt_bool("Enable SSH on the appliance?", existing["ssh_enable"])

    # ── [5/6] Single Sign-On ──────────────────────────────────
    sec(5, TOTAL, "SINGLE SIGN-ON")
    cfg["sso_domain"] = prompt("SSO domain", existing["sso_domain"], required=True)
    secrets["sso_password"] = prompt_secret(f"administrator@{cfg['sso_domain']} password", confirm=True)

    # ── [6/6] Installer ───────────────────────────────────────
    sec(6, TOTAL, "INSTALLER")
    print(f"  {dim('CEIP = Customer Experience Improvement Program (telemetry).')}")
    cfg["ceip_enabled"]   = prompt_bool("Join CEIP?", existing["ceip_enabled"])
    cfg["installer_path"] = prompt("Path to vcsa-deploy executable", existing["installer_path"], required=True)
    cfg["output_path"]    = prompt("Where to write the installer JSON", existing["output_path"], required=True)
    cfg["schema_version"] = existing["schema_version"]

    return cfg, secrets


# ════════════════════════════════════════════════════════════════
#  SUMMARY + WRITE + MAIN
# ════════════════════════════════════════════════════════════════
def print_summary(cfg: dict):
    """Print a deployment summary before proceeding. Passwords are masked."""
    hdr("DEPLOYMENT SUMMARY — PLEASE REVIEW CAREFULLY")
    W = 24
    def row(k, v): print(f"  {bold(k.ljust(W))} {v}")

    print()
    row("ESXi host:",   f"{cfg['esxi_username']}@{cfg['esxi_host']}  (password {REDACTED})")
    row("Datastore:",   cfg["datastore"])
    row("Network:",     cfg["deployment_network"])
    print()
    row("Appliance:",   f"{cfg['appliance_name']} — {cfg['deployment_option']}")
    row("Thin disks:",  green("YES") if cfg["thin_disk_mode"] else yellow("No (thick)"))
    print()
    if cfg["network_mode"] == "static":
        row("Addressing:", f"static {cfg['ip']}/{cfg['prefix']} via {cfg['gateway']}")
        row("DNS:",        ", ".join(cfg["dns_servers"]))
    else:
        row("Addressing:", "dhcp")
    row("FQDN:",        cfg.get("system_name") or dim("(none)"))
    print()
    row("NTP:",         ", ".join(cfg["ntp_servers"]) or dim("sync with ESXi host"))
    row("SSH:",         green("enabled") if cfg["ssh_enable"] else yellow("disabled"))
    row("SSO domain:",  cfg["sso_domain"])
    row("CEIP:",        "joined" if cfg["ceip_enabled"] else "declined")
    print()
    row("Installer:",   cfg["installer_path"])
    row("Template:",    f"{cfg['output_path']}  (schema {cfg['schema_version']})")
    print()
    print(f"  {yellow(bold('WARNING: This will DEPLOY a new appliance VM onto the ESXi host above.'))}")


def write_answers(cfg: dict, path: "str | Path" = "answers.yaml") -> Path:
    """Write answers to YAML with header comments. Secrets are never written."""
    path = resolve_path(path)
    sep = "=" * 61
    ts = datetime.now().strftime("%Y-%m-%d %H:%M")
    hlines = [
        f"# {sep}",
        "# VCSA Deploy Kit - Deployment answers",
        f"# Generated by wizard.py on {ts}",
        f"# {sep}",
        "# Edit values below OR re-run: python3 wizard.py",
        "# Passwords go in .env (NEVER in this file)",
        "# Deploy:   python3 deploy_pipeline.py --auto",
        f"# {sep}",
        "",
    ]
    with open(path, "w") as f:
        f.write(chr(10).join(hlines))
        yaml.dump(cfg, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
    return path


def main():
    """Entry point for standalone wizard run."""
    try:
        existing = load_existing()
        cfg, secrets = run_wizard(existing)
        print_summary(cfg)
        print()
        if prompt_bool("Save these answers to answers.yaml?", True):
            path = write_answers(cfg)
            print(f"\n  {green('Answers saved to:')} {bold(str(path))}")
        print()
        if prompt_bool("Deploy now?", False):
            import deploy_pipeline
            sys.exit(deploy_pipeline.deploy(cfg, secrets))
        else:
            for secret in secrets.values():
                secret.release()
            print(f"\n  {dim('When ready:')} {bold('python3 deploy_pipeline.py --auto')}")
            print(f"  {dim('Re-run wizard:')} {bold('python3 wizard.py')}")

    except KeyboardInterrupt:
        print(f"\n\n  {yellow('Wizard aborted. No changes made.')}")
        sys.exit(0)


if __name__ == "__main__":
    main()
