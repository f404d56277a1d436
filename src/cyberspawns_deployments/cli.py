"""Command-line entry point for cyberspawns-deployments.

Usage:
  cyberspawns-deploy                      # CyberSpawns721 on $HARDHAT_NETWORK or localhost
  cyberspawns-deploy --network testnet
  cyberspawns-deploy Splinters NanoDose --network mainnet

Exit codes:
  0 on success,
  1 on any failure (error printed to stderr).
"""

import argparse
import logging
import sys
from typing import List, Optional

from .deployer import deploy
from .exceptions import DeploymentError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cyberspawns-deploy",
        description="Deploy compiled Hardhat contracts and verify them on BscScan.",
    )
    parser.add_argument(
        "contracts",
        nargs="*",
        metavar="CONTRACT",
        help="contract names to deploy, in order (default: CyberSpawns721)",
    )
    parser.add_argument(
        "--network",
        default=None,
        help="network to deploy to (default: $HARDHAT_NETWORK or localhost)",
    )
    parser.add_argument(
        "--project",
        default=None,
        help="Hardhat project directory containing artifacts/ "
        "(default: nearest directory with a hardhat.config file, else cwd)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        outcome = deploy(
            contract_names=args.contracts or None,
            network=args.network,
            project_root=args.project,
        )
    except DeploymentError as e:
        print(e, file=sys.stderr)
        return 1

    if not outcome.ok:
        print(outcome.error, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
