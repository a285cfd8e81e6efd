"""Live demo: create a trip just outside the QR threshold and watch it flip.

Run the server first with fast refresh so transitions show up quickly:

    LOBBY_REVEAL_ACTIVITY_REFRESH_SECONDS=1 uvicorn lobby_reveal.main:app

Then run this script.  The member stream should report the ticket moving
hidden → qr_only and the surprise activity being revealed within ~15s.
"""

import asyncio
import json
from datetime import datetime, timedelta, timezone

import httpx
import websockets


HOST = "127.0.0.1:8000"
API = f"http://{HOST}/api"
WS = f"ws://{HOST}/ws/trips"

ADMIN = "admin-demo"
MEMBER = "member-demo"


def _iso(dt: datetime) -> str:
    return dt.isoformat().replace("+00:00", "Z")


async def setup_trip(client: httpx.AsyncClient) -> str:
    """Create a trip, a ticket and one surprise activity; return the trip id."""
    now = datetime.now(timezone.utc)
    resp = await client.post(f"{API}/trips", json={
        "name": "Mystery Weekend",
        "admin_id": ADMIN,
        "departure_time": _iso(now + timedelta(hours=3, seconds=10)),
        "destination": "Lisbon",
        "weather_summary": "Sunny, 24°C",
    })
    trip = resp.json()
    print(f"[SETUP] Trip {trip['id']} (lobby {trip['lobby_code']})")

    joined = (await client.post(f"{API}/lobbies/{trip['lobby_code']}/join", json={"user_id": MEMBER})).json()
    print(f"[SETUP] {MEMBER} joined as {joined['role']}")

    await client.post(f"{API}/trips/{trip['id']}/tickets", params={"user_id": ADMIN}, json={
        "member_id": MEMBER,
        "type": "flight",
        "carrier": "TP",
        "departure_location": "Amsterdam",
        "arrival_location": "Lisbon",
        "seat_number": "14C",
        "qr_code_url": "https://example.invalid/qr.png",
    })
    await client.post(f"{API}/trips/{trip['id']}/schedule", params={"user_id": ADMIN}, json={
        "title": "Sunset boat tour",
        "start_time": _iso(now + timedelta(hours=1, seconds=5)),
        "type": "activity",
    })
    return trip["id"]


async def watch(trip_id: str, seconds: float = 20.0) -> None:
    """Print every message the member's reveal stream pushes."""
    async with websockets.connect(f"{WS}/{trip_id}/reveal?user_id={MEMBER}") as ws:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + seconds
        while loop.time() < deadline:
            try:
                raw = await asyncio.wait_for(ws.recv(), timeout=deadline - loop.time())
            except asyncio.TimeoutError:
                break
            data = json.loads(raw)
            if data["type"] == "snapshot":
                for key, decision in data["decisions"].items():
                    print(f"[SNAPSHOT] {key}: {decision['state']}")
            elif data["type"] == "reveal_changed":
                print(f"[CHANGED]  {data['key']}: {data['decision']['state']}")
            elif data["type"] == "countdown":
                print(f"[TICK]     {data['label']} {data['countdown']}")


async def main():
    async with httpx.AsyncClient() as client:
        trip_id = await setup_trip(client)
        await watch(trip_id)

        lobby = (await client.get(f"{API}/trips/{trip_id}/lobby", params={"user_id": MEMBER})).json()
        print("\n[LOBBY] ticket:", lobby["tickets"])
        print("[LOBBY] destination:", lobby["destination"])
    print("\nDone!")


if __name__ == "__main__":
    asyncio.run(main())
