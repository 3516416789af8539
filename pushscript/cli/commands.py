"""CLI Commands"""

import os
import sys
from pathlib import Path

from pushscript.config import (
    Config, ConfigManager, ENV_MODEL, ENV_PROVIDER, apply_overrides, get_config_path, load_config,
)
from pushscript.git import GitError, GitRepo
from pushscript.output import bold, dim, field, print_error, print_info, print_success, print_table
from pushscript.security import ScanResult, SecretScanner, StagedFile, detection_config
from pushscript.security.report import display_pattern_stats, display_scan_results, print_scan_verdict


def display_config() -> int:
    """Display current configuration."""
    config = load_config()
    config_path = get_config_path()

    print(f"\n{bold('Current Configuration')}\n")

    if config_path:
        print(field('Loaded from', config_path, indent=2))
    else:
        print(field('Loaded from', 'defaults (no .pushscript.json found)', indent=2))

    overrides = {name: os.environ[name] for name in (ENV_PROVIDER, ENV_MODEL) if os.environ.get(name)}
    if overrides:
        print(f"  {dim('Environment overrides:')}")
        for name, value in overrides.items():
            print(f"    {name}={value}")

    settings = [
        ('provider', config.provider),
        ('model', config.model or 'auto'),
        ('style', config.style),
        ('include_body', str(config.include_body).lower()),
        ('max_subject_length', config.max_subject_length),
        ('default_branch', config.default_branch),
        ('scan_secrets', str(config.scan_secrets).lower()),
        ('confirm_push', str(config.confirm_push).lower()),
    ]
    if config.disabled_patterns:
        settings.append(('disabled_patterns', ', '.join(config.disabled_patterns)))
    if config.ignore_paths:
        settings.append(('ignore_paths', ', '.join(config.ignore_paths)))
    print_table('Settings:', settings, width=19, value_style='info')

    detection = detection_config()
    print(f"\n  {bold('Secret detection:')}")
    print(f"    {detection['patterns']} patterns, {detection['categories']} categories, "
          f"entropy threshold {detection['entropy_threshold']}, "
          f"{detection['context_lines']} context lines")

    print(f"\n  {dim('Config locations:')}")
    print("    Local:  .pushscript.json (in current directory)")
    print("    Global: ~/.pushscript.json\n")

    return 0


def run_init_config() -> int:
    """Write the default settings to .pushscript.json in the current directory."""
    manager = ConfigManager()
    path = Path.cwd() / manager.CONFIG_FILENAME
    if path.exists():
        print_error(f"{path} already exists")
        return 1
    manager.save(Config())
    print_success(f"Created {path}")
    return 0


def scan_and_report(files: list[StagedFile], config: Config, verbose: bool = False) -> ScanResult:
    """Scan staged files, apply config overrides and print the report."""
    print_info(f"Scanning {len(files)} staged files for secrets...")
    result = SecretScanner().scan_files(files)
    result.findings = apply_overrides(result.findings, config)
    display_scan_results(result, verbose=verbose)
    print_scan_verdict(result)
    return result


def run_patterns() -> int:
    """Show the secret pattern registry."""
    display_pattern_stats()
    return 0


def run_scan(verbose: bool = False) -> int:
    """Scan what is already staged without committing. Exit 1 when blocking."""
    try:
        repo = GitRepo()
        files = repo.read_staged_files()
    except GitError as e:
        print_error(str(e))
        return 1

    if not files:
        print_info("No staged files to scan")
        return 0

    result = scan_and_report(files, load_config(), verbose)
    return 1 if result.should_block else 0


def run_install_completion() -> int:
    """Install shell tab completion."""
    shell = os.environ.get('SHELL', '')
    line = 'eval "$(register-python-argcomplete pushscript)"'

    print(f"\n{bold('Tab Completion Setup')}\n")

    if 'zsh' in shell or 'bash' in shell:
        rc_file = '~/.zshrc' if 'zsh' in shell else '~/.bashrc'
        print(f"Add this line to {dim(rc_file)}:\n")
        print(f"  {line}\n")
        print(f"Then run: {dim(f'source {rc_file}')}")
    elif sys.platform == 'win32':
        print("For PowerShell, run:\n")
        print("  register-python-argcomplete --shell powershell pushscript | Out-String | Invoke-Expression")
    else:
        print("Run one of these based on your shell:\n")
        print(f"  {dim('# Bash/Zsh')}")
        print(f"  {line}\n")
        print(f"  {dim('# Fish')}")
        print("  register-python-argcomplete --shell fish pushscript | source")

    print(f"\n{dim('After setup, press TAB to autocomplete flags.')}")
    return 0
