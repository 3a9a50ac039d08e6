"""Interactive JSON-RPC loop: python -m rpcdispatch [config.yaml]"""
import asyncio
import logging
import sys

from .config import load_config
from .jsonrpc.handler import JSONRPCHandler
from .methods import register_example_methods
from .stdio import run_stdio


def main() -> None:
    config = load_config(sys.argv[1] if len(sys.argv) > 1 else None)
    # Logs go to stderr so stdout only carries responses
    logging.basicConfig(
        level=config.log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )

    rpc = JSONRPCHandler.from_config(config)
    register_example_methods(rpc)

    try:
        asyncio.run(run_stdio(rpc, prompt=sys.stdin.isatty()))
    except KeyboardInterrupt:
        print()


if __name__ == "__main__":
    main()
