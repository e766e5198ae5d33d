#!/usr/bin/env python3
"""Pre-flight check — verify answers, credentials and installer before deploying."""
import os
import shutil
import sys
from pathlib import Path

from config_loader import KNOWN_SCHEMA_VERSIONS, load_answers, load_credentials, resolve_path


def find_installer(installer: str) -> Path | None:
    """Resolve the installer from a path or from PATH."""
    p = resolve_path(installer)
    if p.is_file() and os.access(p, os.X_OK):
        return p
    found = shutil.which(installer)
    return Path(found) if found else None


def preflight(answers_path: str = "answers.yaml", env_path: str = ".env") -> tuple[list[str], list[str]]:
    """Returns (errors, warnings)."""
    errors: list[str] = []
    warnings: list[str] = []

    try:
        cfg = load_answers(answers_path)
    except (FileNotFoundError, ValueError) as e:
        return [str(e)], warnings

    try:
        for secret in load_credentials(env_path).values():
            secret.release()
    except KeyError as e:
        errors.append(str(e.args[0]))

    # ── Installer binary ──────────────────────────────────────────────────────
    if find_installer(cfg["installer_path"]) is None:
        errors.append(
            f"installer '{cfg['installer_path']}' not found or not executable.\n"
            f"     Mount the VCSA ISO and set installer_path to vcsa-cli-installer/lin64/vcsa-deploy"
        )

    # ── Template schema version ───────────────────────────────────────────────
    if cfg["schema_version"] not in KNOWN_SCHEMA_VERSIONS:
        warnings.append(
            f"schema_version '{cfg['schema_version']}' is not a known template version {list(KNOWN_SCHEMA_VERSIONS)}.\n"
            f"     Run: python3 deploy_pipeline.py --auto --verify-only"
        )

    if cfg["deployment_option"] == "tiny":
        warnings.append("deployment_option 'tiny' is sized for labs (10 hosts / 100 VMs).")
    if cfg["network_mode"] == "dhcp" and not cfg.get("system_name"):
        warnings.append("dhcp mode without system_name: the appliance will be addressed by IP only.")

    print("=== Answers Loaded ===")
    print(f"  esxi_host:          {cfg['esxi_username']}@{cfg['esxi_host']}")
    print(f"  datastore:          {cfg['datastore']}")
    print(f"  deployment_network: {cfg['deployment_network']}")
    print(f"  appliance_name:     {cfg['appliance_name']}")
    print(f"  deployment_option:  {cfg['deployment_option']}")
    print(f"  network_mode:       {cfg['network_mode']}")
    print(f"  schema_version:     {cfg['schema_version']}")
    print(f"  installer_path:     {cfg['installer_path']}")
    print()
    return errors, warnings


def main() -> int:
    errors, warnings = preflight()
    for w in warnings:
        print(f"  ⚠️  WARNING: {w}")
    for e in errors:
        print(f"  ❌ ERROR:   {e}")

    if errors:
        print("\nPREFLIGHT FAILED — fix errors above before deploying.")
        return 1
    elif warnings:
        print("Preflight complete with warnings — review above before deploying.")
    else:
        print("All answers, credentials and installer present — READY TO DEPLOY")
    return 0


if __name__ == "__main__":
    sys.exit(main())
