#!/usr/bin/env python3
"""
Wrapper script to run the webapp-operator with Kopf.

With PRINT_CRD set in the environment, prints the CustomResourceDefinition
as YAML and exits. Otherwise launches Kopf's CLI with all standard arguments.

Usage:
    python run_operator.py [any kopf run arguments]

Examples:
    python run_operator.py --verbose --all-namespaces
    python run_operator.py -n my-namespace --log-format=json
    PRINT_CRD=1 python run_operator.py > crd.yaml
"""

import sys

from webapp.types.settings import print_crd_requested


def main() -> int:
    if print_crd_requested():
        from webapp.crd import print_crd

        print_crd()
        return 0

    import kopf.cli

    # Import the operator module (which registers handlers via decorators)
    import webapp.app  # noqa: F401

    # Inject 'run' as the command since we're calling the CLI directly
    # This makes it behave as if user called: kopf run <args>
    sys.argv.insert(1, "run")

    # Call Kopf's CLI main entry point - it handles all argument parsing
    return kopf.cli.main(prog_name="kopf")


if __name__ == "__main__":
    sys.exit(main())
