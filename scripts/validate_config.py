"""
Validate a scene configuration file and report any issues.

Usage:
    python scripts/validate_config.py configs/default_scene.yaml
"""

import sys
from pathlib import Path

# Add src to path so we can import galorb package
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from galorb.config import SceneParameters
from galorb.diagnostics import check_orbit_constants
from galorb.orbit import derive_sun_orbit_constants


def main():
    if len(sys.argv) < 2:
        print("Usage: python scripts/validate_config.py <config_file.yaml>")
        sys.exit(1)

    config_path = sys.argv[1]

    print(f"Validating configuration: {config_path}")
    print("=" * 70)

    try:
        params = SceneParameters.from_yaml(config_path)
    except FileNotFoundError as e:
        print(f"[ERROR] {e}")
        sys.exit(1)
    except (ValueError, TypeError) as e:
        print(f"[ERROR] loading configuration: {e}")
        sys.exit(1)

    print("[OK] Configuration loaded successfully")
    print()

    warnings = params.validate()
    warnings.extend(check_orbit_constants(derive_sun_orbit_constants(params.sun_orbit))['warnings'])

    if not warnings:
        print("[OK] All validation checks passed!")
        print()
        print("Configuration summary:")
        print(params)
        sys.exit(0)

    errors = [w for w in warnings if w.startswith("ERROR")]
    warns = [w for w in warnings if w.startswith("WARNING")]
    infos = [w for w in warnings if w.startswith("INFO")]

    if errors:
        print(f"[ERROR] {len(errors)} ERROR(S) found:")
        for error in errors:
            print(f"  {error}")
        print()

    if warns:
        print(f"[WARN] {len(warns)} WARNING(S):")
        for warn in warns:
            print(f"  {warn}")
        print()

    if infos:
        print(f"[INFO] {len(infos)} INFO message(s):")
        for info in infos:
            print(f"  {info}")
        print()

    if errors:
        print("Configuration has ERRORS and should not be used.")
        sys.exit(1)
    else:
        print("Configuration has warnings but may be usable.")
        sys.exit(0)


if __name__ == "__main__":
    main()
