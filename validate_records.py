#!/usr/bin/env python3
"""Validate stored vehicle records against the record schema."""
import sys
from pathlib import Path

import yaml
from jsonschema import validate, ValidationError

from autobuddy.records import load_schema


def validate_record_file(filepath: Path, schema: dict) -> list[str]:
    """Validate a single vehicle record file. Returns list of errors."""
    errors = []
    try:
        with open(filepath, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        # An empty file is an empty record
        validate(instance={} if data is None else data, schema=schema)
    except yaml.YAMLError as e:
        errors.append(f"YAML parse error: {e}")
    except UnicodeDecodeError as e:
        errors.append(f"Encoding error: {e}")
    except ValidationError as e:
        errors.append(f"Schema validation error: {e.message}")
        if e.path:
            errors.append(f"  at path: {'.'.join(str(p) for p in e.path)}")
    except OSError as e:
        errors.append(f"Error: {e}")
    return errors


def find_record_files(data_dir: Path) -> list[Path]:
    """Every users/*/vehicles/*.yaml file under the data directory."""
    return sorted(data_dir.glob("users/*/vehicles/*.yaml"))


def main(argv=None):
    """Validate all vehicle records in the data directory."""
    argv = sys.argv[1:] if argv is None else argv
    data_dir = Path(argv[0]) if argv else Path("data")
    schema = load_schema()

    if not data_dir.exists():
        print(f"Error: data directory not found: {data_dir}")
        return 1

    record_files = find_record_files(data_dir)

    if not record_files:
        print(f"Warning: No vehicle records found in {data_dir}")
        return 0

    all_valid = True
    for filepath in record_files:
        errors = validate_record_file(filepath, schema)
        name = filepath.relative_to(data_dir)
        if errors:
            print(f"FAIL: {name}")
            for error in errors:
                print(f"  {error}")
            all_valid = False
        else:
            print(f"OK: {name}")

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())
