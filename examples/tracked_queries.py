"""Run several queries at once and let a CompletionTracker match completions."""

import asyncio
import logging

from joern import ClientConfig, CompletionTracker, JoernClient

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
)

QUERIES = [
    "help",
    'importCode("/tmp/example")',
    "cpg.method.name.l",
]


async def main():
    async with JoernClient(ClientConfig.from_env()) as client:
        await client.open()

        queue = JoernClient.message_queue()
        tracker = CompletionTracker(queue)
        receiver = asyncio.create_task(client.receive(queue))
        consumer = asyncio.create_task(tracker.run())
        await tracker.wait_connected(timeout=10)

        # Queries finish in whatever order the server likes
        results = await asyncio.gather(*(client.query(q, tracker) for q in QUERIES))
        for query, result in zip(QUERIES, results):
            print(f"--- {query} (success={result.success}) ---")
            print(result.stdout or result.stderr)

        await client.close()
        consumer.cancel()
        await asyncio.gather(receiver, consumer, return_exceptions=True)

asyncio.run(main())
