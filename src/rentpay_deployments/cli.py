"""Command-line entry point for rentpay-deployments."""

import argparse
import logging
import sys
from typing import List, Optional

from .config import load_config
from .exceptions import DeploymentError
from .orchestrator import DeploymentOrchestrator

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
# A transaction is on chain but no deployment record points at it
EXIT_UNRECORDED = 3


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rentpay-deploy",
        description="Deploy the RentPaymentSystem contract and record where it went.",
        epilog="Every option defaults to its DEPLOY_* environment variable.",
    )
    parser.add_argument("--network", default=None, help="Network name (default: $DEPLOY_NETWORK)")
    parser.add_argument("--rpc-url", default=None, help="JSON-RPC endpoint (default: $DEPLOY_RPC_URL)")
    parser.add_argument("--chain-id", type=int, default=None, help="Expected chain id")
    parser.add_argument("--contract", default=None, help="Contract name (default: RentPaymentSystem)")
    parser.add_argument("--artifact", default=None, help="Path to the Hardhat artifact JSON")
    parser.add_argument(
        "--deployments-dir", default=None, help="Directory for deployment records (default: ./deployments)"
    )
    parser.add_argument("--confirmations", type=int, default=None, help="Blocks to wait after inclusion (min 2)")
    parser.add_argument("--timeout", type=float, default=None, help="Confirmation deadline in seconds")
    pending = parser.add_mutually_exclusive_group()
    pending.add_argument(
        "--resume", action="store_true", help="Finish a pending deployment instead of submitting a new one"
    )
    pending.add_argument(
        "--force", action="store_true", help="Discard a pending deployment marker and submit again"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(
            args.network,
            rpc_url=args.rpc_url,
            chain_id=args.chain_id,
            contract_name=args.contract,
            artifact_path=args.artifact,
            deployments_dir=args.deployments_dir,
            confirmations=args.confirmations,
            confirmation_timeout=args.timeout,
            resume=args.resume,
            force=args.force,
        )
        result = DeploymentOrchestrator(config).run()
    except DeploymentError as e:
        print(f"Deployment failed: {e}", file=sys.stderr)
        return EXIT_FAILED
    except Exception:
        logger.exception("Deployment failed with an unexpected error")
        return EXIT_FAILED

    if result.ok:
        return EXIT_OK

    print(f"Deployment failed: {result.error}", file=sys.stderr)
    if result.unrecorded:
        logger.error(
            "UNRECORDED DEPLOYMENT: transaction %s was broadcast on '%s' but no "
            "deployment record was written; track it manually or rerun with --resume",
            result.transaction_hash,
            config.network,
        )
        return EXIT_UNRECORDED
    return EXIT_FAILED


if __name__ == "__main__":
    raise SystemExit(main())
