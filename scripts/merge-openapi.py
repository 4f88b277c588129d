#!/usr/bin/env python3
"""Merge the apps/ and common/ specs of a local api-docs checkout into one file."""

import logging
import sys
from pathlib import Path

from openapi_client_runner.config import load_config
from openapi_client_runner.pipeline import ClientPipeline


def main() -> int:
    if len(sys.argv) not in (2, 3):
        print("Usage: merge-openapi.py <api-docs checkout> [output.json]")
        return 1

    checkout = Path(sys.argv[1])
    output_path = Path(sys.argv[2]) if len(sys.argv) == 3 else Path("openapi/merged/openapi.json")

    if not (checkout / "apps").is_dir():
        print(f"Error: {checkout / 'apps'} does not exist")
        return 1

    logging.basicConfig(level=logging.INFO, format="%(levelname)s - %(message)s")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    result = ClientPipeline(load_config(push=False)).merge_sources(checkout, output_path)

    print(f"Merged OpenAPI spec written to {output_path}")
    print(f"Total schemas in merged file: {len(result.document.components['schemas'])}")
    print(f"Total paths in merged file: {len(result.document.paths)}")
    if result.path_collisions:
        for collision in result.path_collisions:
            print(f"  Overwritten: {collision.key} ({collision.previous_prefix} -> {collision.prefix})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
