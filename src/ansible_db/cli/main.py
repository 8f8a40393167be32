# Copyright (c) 2024 ansible-db Contributors
# MIT License

"""
CLI entrypoint for ansible-db.

Usage:
    ansible-db --version
    ansible-db -i hosts
    ansible-db -i hosts --list
    ansible-db -i hosts --graph
    ansible-db -i hosts --vault vault.yml --vault-password-file vault.key --host ny-sw01
"""

import argparse
import json
import platform
import sys
from typing import Any, Dict, List, Optional, Set

import yaml

from ansible_db import __version__
from ansible_db.config import get_config
from ansible_db.engine.credentials import CredentialMatcher
from ansible_db.engine.errors import AnsibleDbError, ExitCode
from ansible_db.engine.vault import VaultLib, VaultSecret
from ansible_db.inventory.manager import ROOT_GROUP, Inventory
from ansible_db.log import level_for_verbosity, setup_logger


def get_version_string() -> str:
    """Generate a detailed version string."""
    python_version = platform.python_version()
    os_info = f"{platform.system()} {platform.release()}"
    return (
        f"ansible-db {__version__}\n"
        f"  python: {python_version}\n"
        f"  platform: {os_info}"
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for ansible-db."""
    config = get_config()
    parser = argparse.ArgumentParser(
        prog="ansible-db",
        description="Ansible DB (Inventory and Vault) client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ansible-db -i hosts
  ansible-db -i hosts --list
  ansible-db -i hosts --graph
  ansible-db -i hosts --vault vault.yml --vault-password-file vault.key --host ny-sw01
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=get_version_string(),
    )

    parser.add_argument(
        "-i", "--inventory",
        dest="inventory",
        default=config.inventory_path,
        help=f"Inventory file (default: {config.inventory_path})",
    )

    parser.add_argument(
        "--vault",
        dest="vault",
        default=config.vault_path,
        help="Vault file with credentials",
    )

    password = parser.add_mutually_exclusive_group()
    password.add_argument(
        "--vault-password",
        dest="vault_password",
        default=None,
        help="Vault password",
    )
    password.add_argument(
        "--vault-password-file",
        dest="vault_password_file",
        default=config.vault_password_file,
        help="File whose first line is the vault password",
    )

    action = parser.add_mutually_exclusive_group()
    action.add_argument(
        "--host",
        dest="host",
        default=None,
        help="Output specific host info (JSON)",
    )
    action.add_argument(
        "--list",
        action="store_true",
        dest="list_hosts",
        help="Output all hosts info (JSON)",
    )
    action.add_argument(
        "--graph",
        action="store_true",
        help="Output inventory graph",
    )

    parser.add_argument(
        "-y", "--yaml",
        action="store_true",
        help="Output in YAML format",
    )

    parser.add_argument(
        "--show-secrets",
        action="store_true",
        dest="show_secrets",
        help="Print credential passwords instead of masking them",
    )

    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=config.log_level,
        help=f"Logging severity level (default: {config.log_level})",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v, -vv)",
    )

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entrypoint for the ansible-db CLI."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    try:
        setup_logger(level_for_verbosity(parsed.verbose, default=parsed.log_level))
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return ExitCode.GENERIC_ERROR

    try:
        inventory = Inventory.load_from_file(parsed.inventory, max_iterations=get_config().max_iterations)
        matcher = load_matcher(parsed)

        if parsed.host:
            emit(host_detail(inventory, parsed.host, matcher, parsed.show_secrets), parsed.yaml)
        elif parsed.list_hosts:
            emit(list_inventory(inventory), parsed.yaml)
        elif parsed.graph:
            print(render_graph(inventory))
        else:
            for host in inventory.get_hosts():
                print(host.name)
        return ExitCode.SUCCESS

    except AnsibleDbError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return e.exit_code
    except OSError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return ExitCode.GENERIC_ERROR
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return ExitCode.KEYBOARD_INTERRUPT


def load_matcher(parsed: argparse.Namespace) -> Optional[CredentialMatcher]:
    """Decode the vault named on the command line, if any."""
    if not parsed.vault:
        return None
    if parsed.vault_password is not None:
        secret = VaultSecret(parsed.vault_password)
    elif parsed.vault_password_file:
        secret = VaultSecret.from_file(parsed.vault_password_file)
    else:
        raise AnsibleDbError("a vault was given without --vault-password or --vault-password-file")
    return CredentialMatcher(VaultLib(secret).decode_file(parsed.vault))


def host_detail(
    inventory: Inventory,
    name: str,
    matcher: Optional[CredentialMatcher],
    reveal: bool = False,
) -> Dict[str, Any]:
    """Host variables, groups and chains, plus credentials when a vault is loaded."""
    result = inventory.get_host(name).to_dict()
    if matcher is not None:
        result["credentials"] = [c.to_dict(reveal=reveal) for c in matcher.match(name)]
    return result


def list_inventory(inventory: Inventory) -> Dict[str, Any]:
    """Group membership and host variables in ansible-inventory's --list layout."""
    result: Dict[str, Any] = {"_meta": {"hostvars": {}}}
    for group in inventory.groups:
        entry: Dict[str, Any] = {}
        hosts = [h.name for h in inventory.hosts if h.parent == group.name]
        children = [c.name for c in _children(inventory, group.name)]
        if hosts:
            entry["hosts"] = hosts
        if children:
            entry["children"] = children
        if group.variables:
            entry["vars"] = dict(group.variables)
        result[group.name] = entry
    for host in inventory.hosts:
        result["_meta"]["hostvars"][host.name] = dict(host.variables)
    return result


def render_graph(inventory: Inventory) -> str:
    """Render the group tree like ``ansible-inventory --graph``."""
    lines: List[str] = []
    _graph_group(inventory, ROOT_GROUP, 0, set(), lines)
    return "\n".join(lines)


def _graph_group(inventory: Inventory, name: str, depth: int, path: Set[str], lines: List[str]) -> None:
    indent = "  |" * depth
    lines.append(f"{indent[:-1]}|--@{name}:" if depth else f"@{name}:")
    if name in path:
        return
    path = path | {name}
    for child in _children(inventory, name):
        _graph_group(inventory, child.name, depth + 1, path, lines)
    for host in inventory.hosts:
        if host.parent == name:
            lines.append(f"{indent}  |--{host.name}")


def _children(inventory: Inventory, name: str):
    if name == ROOT_GROUP:
        return [g for g in inventory.groups if g.is_top_level]
    return list(inventory.walk_children(name))


def emit(data: Dict[str, Any], as_yaml: bool = False) -> None:
    if as_yaml:
        print(yaml.safe_dump(data, default_flow_style=False, sort_keys=False), end="")
    else:
        print(json.dumps(data, indent=2))


if __name__ == "__main__":
    sys.exit(main())
