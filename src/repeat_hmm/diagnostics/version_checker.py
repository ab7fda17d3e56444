"""
Checks installed versions of the packages the aligner depends on.
"""

import platform
import os
import sys
import warnings
from importlib import metadata
from typing import Dict, Tuple

from packaging import version

REQUIRED_PACKAGES = {
    'numpy': '1.21.0',
    'PyYAML': '6.0',
    'biopython': '1.79',
    'psutil': '5.9.0',
    'packaging': '21.0',
}

OPTIONAL_PACKAGES = {
    'pytest': '7.0.0',
}


def get_package_version(package_name: str) -> str:
    """Get version of installed package using importlib.metadata."""
    try:
        return metadata.version(package_name)
    except metadata.PackageNotFoundError:
        return "Not installed"


def check_package(package_name: str, min_version: str) -> Tuple[bool, str, str]:
    """Check if package meets version requirements."""
    installed_version = get_package_version(package_name)

    if installed_version == "Not installed":
        return False, "Not installed", min_version

    try:
        ok = version.parse(installed_version) >= version.parse(min_version)
    except version.InvalidVersion:
        warnings.warn(f"Cannot parse versions for {package_name}: installed={installed_version}, required={min_version}")
        ok = True

    return ok, installed_version, min_version


def check_required_packages() -> Dict[str, Dict]:
    """Check all required packages."""
    results = {}

    for package, min_version in REQUIRED_PACKAGES.items():
        is_ok, installed, required = check_package(package, min_version)
        results[package] = {
            'required': required,
            'installed': installed,
            'ok': is_ok,
            'status': 'OK' if is_ok else 'FAIL'
        }

    return results


def check_optional_packages() -> Dict[str, Dict]:
    """Check all optional packages."""
    results = {}

    for package, recommended_version in OPTIONAL_PACKAGES.items():
        is_ok, installed, recommended = check_package(package, recommended_version)
        results[package] = {
            'recommended': recommended,
            'installed': installed,
            'ok': is_ok,
            'status': 'OK' if is_ok else 'WARNING'
        }

    return results


def check_python_version(min_version: Tuple[int, int] = (3, 8)) -> Dict:
    """Check Python version."""
    current_version = sys.version_info[:2]
    is_ok = current_version >= min_version

    return {
        'required': f"{min_version[0]}.{min_version[1]}",
        'installed': f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        'ok': is_ok,
        'status': 'OK' if is_ok else 'FAIL'
    }


def check_system() -> Dict:
    """Check system information."""
    return {
        'platform': platform.platform(),
        'processor': platform.processor(),
        'python_implementation': platform.python_implementation(),
        'cpus': os.cpu_count(),
    }


def print_version_report() -> None:
    """Print version report."""
    print("=" * 70)
    print("REPEAT HMM - VERSION CHECK")
    print("=" * 70)

    py_info = check_python_version()
    print(f"\nPython: {py_info['installed']} (required: {py_info['required']})")
    print(f"  Status: {py_info['status']}")

    sys_info = check_system()
    print("\nSystem:")
    print(f"  Platform: {sys_info['platform']}")
    print(f"  CPUs: {sys_info['cpus']}")

    print("\nRequired Packages:")
    req_results = check_required_packages()
    for package, info in req_results.items():
        status_icon = "✓" if info['ok'] else "✗"
        print(f"  {status_icon} {package:20} {info['installed']:15} (required: {info['required']})")

    print("\nOptional Packages:")
    for package, info in check_optional_packages().items():
        if info['installed'] != "Not installed":
            status_icon = "✓" if info['ok'] else "⚠"
            print(f"  {status_icon} {package:20} {info['installed']:15} (recommended: {info['recommended']})")

    req_failures = sum(1 for info in req_results.values() if not info['ok'])

    print("\n" + "=" * 70)
    print("SUMMARY:")
    print(f"  Required packages: {len(req_results) - req_failures}/{len(req_results)} OK")
    if req_failures == 0 and py_info['ok']:
        print("\n  ALL CHECKS PASSED!")
    else:
        print("  Some checks failed. See details above.")
    print("=" * 70)


def check_versions() -> Dict:
    """Run all version checks and return results."""
    results = {
        'python': check_python_version(),
        'system': check_system(),
        'required_packages': check_required_packages(),
        'optional_packages': check_optional_packages(),
    }

    for pkg, info in results['required_packages'].items():
        if not info['ok']:
            warnings.warn(f"Package {pkg} {info['installed']} does not meet requirement {info['required']}")

    return results


__all__ = [
    'REQUIRED_PACKAGES',
    'check_versions',
    'check_package',
    'print_version_report',
]
