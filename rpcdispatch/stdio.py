"""Line oriented JSON-RPC loop over text streams."""
import asyncio
import logging
import sys
from typing import TextIO

from .jsonrpc.handler import JSONRPCHandler

logger = logging.getLogger(__name__)

PROMPT = "Enter json: "


async def run_stdio(
    jsonrpc_handler: JSONRPCHandler,
    stdin: TextIO = sys.stdin,
    stdout: TextIO = sys.stdout,
    prompt: bool = False
) -> None:
    """Serve one payload per input line until EOF.

    Each response is written on its own line. Notifications write nothing.
    """
    while True:
        if prompt:
            stdout.write(PROMPT)
            stdout.flush()

        line = await asyncio.to_thread(stdin.readline)
        if not line:
            break
        if not line.strip():
            continue

        payload = await jsonrpc_handler.serve(line.encode("utf-8"))
        if payload is not None:
            stdout.write(payload.decode("utf-8") + "\n")
            stdout.flush()

    if jsonrpc_handler.pending:
        logger.info(f"Waiting for {jsonrpc_handler.pending} timed-out handlers")
        await jsonrpc_handler.drain()
