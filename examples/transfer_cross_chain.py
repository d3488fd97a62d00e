"""Example: run one mint → transferCrossChain workflow without the HTTP server."""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

from xchain_relay import OrchestrationResult, RelayService, load_config

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger("transfer_cross_chain")


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ValueError(f"{name} not found in environment variables")
    return value


def _log_result(result: OrchestrationResult) -> None:
    if result.success:
        logger.info("Transfer succeeded")
        logger.info("  transfer tx: %s", result.transfer_tx)
        if result.mint_tx:
            logger.info("  mint tx: %s (token %s)", result.mint_tx, result.token_id)
    else:
        step = result.step.value if result.step else "unknown"
        logger.error("Workflow failed at step %s: %s", step, result.error)
        if result.mint_tx:
            logger.error("  token was already minted in %s", result.mint_tx)


def main() -> None:
    receiver = _require_env("RECEIVER_ADDRESS")
    destination = _require_env("DESTINATION")
    payload = {"receiver": receiver, "destination": destination}
    if os.getenv("TOKEN_ID"):
        payload["tokenId"] = os.environ["TOKEN_ID"]

    service = RelayService.from_config(load_config())
    _log_result(service.handle(payload))


if __name__ == "__main__":
    main()
