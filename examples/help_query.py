"""Raw protocol example: submit a query, watch the push channel, fetch the result."""

import asyncio
import logging

from joern import CONNECTED, ClientConfig, JoernClient

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
)


async def main():
    async with JoernClient(ClientConfig.from_env()) as client:
        cancel = asyncio.Event()
        await client.open(cancel)

        queue = JoernClient.message_queue()
        receiver = asyncio.create_task(client.receive(queue, cancel))

        query_id = await client.send("help", cancel)
        print("Submitted:", query_id)

        while True:
            msg = await queue.get()
            if msg == CONNECTED:
                print("Push channel connected")
            elif msg == str(query_id):
                break

        result = await client.result(query_id, cancel)
        print(f"--- success={result.success} ---")
        print(result.stdout)

        cancel.set()
        await client.close()
        print("Receiver stopped:", (await receiver).value)

asyncio.run(main())
