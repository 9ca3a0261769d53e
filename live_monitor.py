"""Live check: connect to /ws/simulator, inject a severity change, watch the interval adapt."""

import asyncio
import json
import os

import websockets


HOST = os.environ.get("SAFE_AMR_HOST", "127.0.0.1:8000")
SIMULATOR_URI = f"ws://{HOST}/ws/simulator"


async def watch(ws, ticks: int):
    """Print *ticks* streamed snapshots, skipping acknowledgements."""
    seen = 0
    while seen < ticks:
        data = json.loads(await ws.recv())
        if data.get("type") != "snapshot":
            print(f"[ACK] {data}")
            continue
        bar = "#" * int(data["sampling_bar_percent"] / 5)
        print(f"  tick={data['tick']:>4}  {data['mode_label']:<12} {data['interval_label']:>6}  {bar}")
        seen += 1


async def main():
    async with websockets.connect(SIMULATOR_URI) as ws:
        print("[SIMULATOR] Connected — current state:")
        await watch(ws, 1)

        for mode, ticks in [("catastrophic", 15), ("critical", 10), ("moderate", 20)]:
            print(f"\n[SIMULATOR] Injecting {mode.upper()} event\n")
            await ws.send(json.dumps({"mode": mode}))
            await watch(ws, ticks)

    print("\nDone!")


if __name__ == "__main__":
    asyncio.run(main())
