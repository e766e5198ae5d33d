#!/usr/bin/env python3
"""
VCSA Deploy Kit — Deployment Pipeline
======================================
Builds the vcsa-deploy JSON template and runs the installer against it.

ARCHITECTURE:
  Stage 1: Collect answers (wizard, or answers.yaml + .env with --auto)
  Stage 2: Validate answers
  Stage 3: Write installer JSON template
  Stage 4: Run `vcsa-deploy install ...`
  Stage 5: Report

NOTES:
  1. Passwords are read into SecretValue holders and only revealed while the
     template is being built. The written JSON is the only place they exist
     in plaintext; never commit it.
  2. The installer is always called with --accept-eula, --acknowledge-ceip and
     --no-ssl-certificate-verification. CEIP participation itself is the
     ceip_enabled answer.
  3. Installer failures are reported, not retried. The JSON template is left
     on disk so the run can be inspected or repeated by hand.
  4. Installer args are passed as a Python list, never a shell string.

CONFIGURATION:
  answers.yaml for all non-secret settings (python3 wizard.py writes it).
  Copy .env.example to .env and fill in the passwords.

Usage:
  python3 deploy_pipeline.py                  # wizard, then deploy
  python3 deploy_pipeline.py --auto           # answers.yaml + .env, no prompts
  python3 deploy_pipeline.py --auto --dry-run # write template only
  python3 deploy_pipeline.py --auto --verify-only
"""
import argparse
import subprocess
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any

from config_loader import apply_defaults, load_config, resolve_path, validate_answers
from credentials import SecretValue
from vcsa_config_generator import build_deployment_config, write_deployment_config

INSTALLER_FLAGS = [
    "--accept-eula",
    "--acknowledge-ceip",
    "--no-ssl-certificate-verification",
]


def log(msg):   print(f"[{datetime.now().strftime('%H:%M:%S')}] {msg}")
def ok(msg):    print(f"[{datetime.now().strftime('%H:%M:%S')}] OK {msg}")
def warn(msg):  print(f"[{datetime.now().strftime('%H:%M:%S')}] WARN {msg}")
def fail(msg):  print(f"[{datetime.now().strftime('%H:%M:%S')}] FAIL {msg}")
def section(s): print(f"\n{'='*60}\n  {s}\n{'='*60}")
def elapsed(t): return f"{time.time()-t:.0f}s"


def installer_command(installer: "str | Path", template: "str | Path",
                      verify_only: bool = False, log_dir: "str | Path | None" = None) -> list[str]:
    cmd = [str(installer), "install", *INSTALLER_FLAGS]
    if verify_only:
        cmd.append("--verify-template-only")
    if log_dir:
        cmd += ["--log-dir", str(log_dir)]
    cmd.append(str(template))
    return cmd


def run_installer(installer: "str | Path", template: "str | Path",
                  verify_only: bool = False, log_dir: "str | Path | None" = None) -> int:
    """
    Run the installer and block until it exits.

    Returns the installer's exit code, or 1 if it could not be started.
    Nothing is retried and the template is never removed.
    """
    section("STAGE 4: Run Installer" + (" (verify template only)" if verify_only else ""))
    t0 = time.time()
    cmd = installer_command(installer, template, verify_only, log_dir)
    log(f"Running: {' '.join(cmd)}")
    try:
        r = subprocess.run(cmd, check=False)
    except OSError as e:
        fail(f"Installer could not be started: {e}")
        warn(f"Template left in place: {template}")
        return 1

    if r.returncode != 0:
        fail(f"Installer exited with code {r.returncode} after {elapsed(t0)}")
        warn(f"Template left in place: {template}")
        return r.returncode
    ok(f"Installer finished in {elapsed(t0)}")
    return 0


def deploy(cfg: dict[str, Any], secrets: dict[str, SecretValue],
           output: "str | Path | None" = None, installer: "str | Path | None" = None,
           dry_run: bool = False, verify_only: bool = False,
           log_dir: "str | Path | None" = None) -> int:
    """Validate, write the template and run the installer. Returns an exit code."""
    section("STAGE 2: Validate Answers")
    try:
        validate_answers(apply_defaults(cfg))
    except ValueError as e:
        fail(str(e))
        for secret in secrets.values():
            secret.release()
        return 1
    ok(f"{cfg['appliance_name']} ({cfg['deployment_option']}) on {cfg['esxi_host']}")

    section("STAGE 3: Write Installer Template")
    template = resolve_path(output or cfg["output_path"])
    doc = build_deployment_config(cfg, secrets)
    try:
        write_deployment_config(doc, template)
    except OSError as e:
        fail(f"Template could not be written: {e}")
        return 1
    finally:
        del doc
    ok(f"Template written: {template} (schema {cfg['schema_version']})")

    if dry_run:
        log("--dry-run: installer not started")
        return 0

    rc = run_installer(installer or cfg["installer_path"], template, verify_only, log_dir)

    section("STAGE 5: Report")
    if rc == 0:
        ok(f"Appliance {cfg['appliance_name']} deployed" if not verify_only else "Template verified")
        if cfg.get("system_name"):
            log(f"  vSphere Client: https://{cfg['system_name']}/ui")
    else:
        fail("Deployment FAILED — see installer output above")
    return rc


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Deploy a vCenter Server Appliance with vcsa-deploy")
    parser.add_argument("--auto",        action="store_true", help="Skip wizard, use answers.yaml + .env")
    parser.add_argument("--answers",     default="answers.yaml", help="Answers file (default: answers.yaml)")
    parser.add_argument("--env-file",    default=".env",       help="Credentials file (default: .env)")
    parser.add_argument("--output",      default=None,         help="Installer JSON path (overrides output_path)")
    parser.add_argument("--installer",   default=None,         help="vcsa-deploy path (overrides installer_path)")
    parser.add_argument("--dry-run",     action="store_true",  help="Write the template, do not run the installer")
    parser.add_argument("--verify-only", action="store_true",  help="Run the installer with --verify-template-only")
    parser.add_argument("--log-dir",     default=None,         help="Installer log directory")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    section("STAGE 1: Collect Answers")
    if args.auto:
        try:
            cfg, secrets = load_config(args.answers, args.env_file)
        except (FileNotFoundError, KeyError, ValueError) as e:
            fail(f"Configuration error: {e}")
            return 1
        ok(f"Loaded {resolve_path(args.answers)}")
    else:
        import wizard as _wiz
        try:
            cfg, secrets = _wiz.run_wizard(_wiz.load_existing(args.answers))
            _wiz.print_summary(cfg)
            if not _wiz.prompt_bool("Proceed with deployment?", True):
                for secret in secrets.values():
                    secret.release()
                return 0
        except KeyboardInterrupt:
            print("\n\n  Wizard aborted. No changes made.")
            return 0
        _wiz.write_answers(cfg, args.answers)

    return deploy(cfg, secrets, output=args.output, installer=args.installer,
                  dry_run=args.dry_run, verify_only=args.verify_only, log_dir=args.log_dir)


if __name__ == "__main__":
    sys.exit(main())
