"""CLI entry point: MQTT topic → stdout, una línea por mensaje."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from prometheus_client import start_http_server

from .common.config import get_settings
from .core.domain.subscription_config import SubscriptionConfig
from .core.errors import Mqtt2JsonsError
from .mqtt.sink import print_strings

logger = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


async def run(config: SubscriptionConfig) -> int:
    """Suscribe y drena el stream en stdout."""
    strings = await config.into_strings()
    try:
        return await print_strings(strings)
    finally:
        await strings.aclose()


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="mqtt2jsons",
        description="Print every payload published on an MQTT topic, one per line",
    )
    p.add_argument("--env-file", default=None, help="dotenv file with MQTT_* variables")
    p.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="log level for stderr diagnostics",
    )
    p.add_argument(
        "--metrics-port",
        type=int,
        default=None,
        help="expose Prometheus metrics on this port",
    )
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    # stdout queda reservado para los mensajes
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    try:
        config = get_settings(env_file=args.env_file).to_subscription()
    except Mqtt2JsonsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    logger.info(
        "[CLI] Config: broker=%s topic=%s qos=%d retries=%d",
        config.options.broker,
        config.topic,
        int(config.qos),
        config.retries,
    )

    if args.metrics_port is not None:
        start_http_server(args.metrics_port)
        logger.info("[CLI] Metrics on :%d", args.metrics_port)

    try:
        asyncio.run(run(config))
    except Mqtt2JsonsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except (OSError, UnicodeEncodeError) as e:
        # Fallos del sink: stdout cerrado (p.ej. `| head`) o sin UTF-8
        print(f"Error: output failed: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.info("[CLI] Interrupted")
        return EXIT_INTERRUPTED
    return 0


if __name__ == "__main__":
    sys.exit(main())
