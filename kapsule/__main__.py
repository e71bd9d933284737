"""
CLI entry point, when used as a module: `python -m kapsule`.

Useful for debugging in the IDEs (use the start-mode "Module", module "kapsule").
"""
from kapsule import cli

if __name__ == '__main__':
    cli.main()
