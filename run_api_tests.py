import urllib.request
import urllib.error
import json
import uuid

BASE = "http://localhost:8000/api/v1"

def request(method, path, body=None, token=None):
    data = json.dumps(body).encode() if body is not None else None
    req = urllib.request.Request(
        f"{BASE}{path}",
        data=data,
        method=method,
        headers={"Content-Type": "application/json"}
    )
    if token:
        req.add_header("Authorization", f"Bearer {token}")
    try:
        with urllib.request.urlopen(req) as r:
            return json.loads(r.read())
    except urllib.error.HTTPError as e:
        return json.loads(e.read())

def post(path, body=None, token=None):
    return request("POST", path, body, token)

def get(path, token=None, params=None):
    if params:
        path += "?" + "&".join(f"{k}={v}" for k, v in params.items())
    return request("GET", path, token=token)

def section(title):
    print(f"\n{'='*60}")
    print(f"### {title} ###")
    print('='*60)

def label(name):
    print(f"\n--- {name} ---")

def out(data):
    print(json.dumps(data, indent=2, ensure_ascii=False))

def signup(name):
    uid = uuid.uuid4().hex[:6]
    user = {"email": f"{name}_{uid}@test.com", "display_name": name.title(), "password": "Paid-in-full-42"}
    post("/auth/register", user)
    r = post("/auth/login", {"email": user["email"], "password": user["password"]})
    return user["email"], r.get("data", {}).get("access_token", "")

# ── Users ──────────────────────────────────────────────────────
section("USERS")

ALICE, TA = signup("alice")
BOB, TB = signup("bob")
print(f"\n  alice = {ALICE}  token {TA[:32]}...")
print(f"  bob   = {BOB}  token {TB[:32]}...")

label("T1-1: Access protected endpoint with no token")
out(get("/accounts"))

# ── T2 Accounts ────────────────────────────────────────────────
section("T2 - ACCOUNTS")

label("T2-1: Connect alice checking (500.00)")
r = post("/accounts", {"name": "Checking", "provider": "Chase", "balance_cents": 50000}, token=TA)
out(r)
ACC_A = r.get("data", {}).get("id", "")

label("T2-2: Connect bob card (unknown balance)")
r = post("/accounts", {"name": "My Visa", "provider": "Visa"}, token=TB)
out(r)
ACC_B = r.get("data", {}).get("id", "")

label("T2-3: Negative balance rejected")
out(post("/accounts", {"name": "x", "provider": "Visa", "balance_cents": -1}, token=TA))

# ── T3 Transfers ───────────────────────────────────────────────
section("T3 - TRANSFERS")

label("T3-1: Send 100.00 with a 1 km fence around Times Square")
r = post("/transfers/send", {
    "source_account_id": ACC_A,
    "recipient_identity": BOB,
    "amount_cents": 10000,
    "description": "birthday",
    "geo_fence": {"kind": "circle", "latitude": 40.758, "longitude": -73.9855,
                  "radius_km": 1.0, "location_name": "Times Square"},
}, token=TA)
out(r)
TXN = r.get("data", {}).get("id", "")

label("T3-2: Claim without location")
out(post(f"/transfers/{TXN}/claim", {"destination_account_id": ACC_B}, token=TB))

label("T3-3: Claim from Harlem (outside)")
out(post(f"/transfers/{TXN}/claim",
         {"destination_account_id": ACC_B, "latitude": 40.8116, "longitude": -73.9465}, token=TB))

label("T3-4: Claim from inside the fence")
out(post(f"/transfers/{TXN}/claim",
         {"destination_account_id": ACC_B, "latitude": 40.758, "longitude": -73.9855}, token=TB))

label("T3-5: Claim again (idempotent)")
out(post(f"/transfers/{TXN}/claim",
         {"destination_account_id": ACC_B, "latitude": 40.758, "longitude": -73.9855}, token=TB))

label("T3-6: Bob requests 25.00 from alice")
r = post("/transfers/request", {"payer_identity": ALICE, "amount_cents": 2500,
                                "destination_account_id": ACC_B}, token=TB)
out(r)
REQ = r.get("data", {}).get("id", "")

label("T3-7: Alice approves")
out(post(f"/transfers/{REQ}/approve", {"source_account_id": ACC_A}, token=TA))

label("T3-8: History (alice, limit=5)")
out(get("/transfers", token=TA, params={"limit": 5}))

label("T3-9: Balances")
out(get(f"/accounts/{ACC_A}", token=TA))
out(get(f"/accounts/{ACC_B}", token=TB))

# ── T4 Locked savings ──────────────────────────────────────────
section("T4 - LOCKED SAVINGS")

label("T4-1: Invalid lock period")
out(post("/savings", {"account_id": ACC_A, "amount_cents": 20000, "lock_period_months": 5}, token=TA))

label("T4-2: Initiate 3-month lock (needs PayPal sandbox credentials)")
r = post("/savings", {"account_id": ACC_A, "amount_cents": 20000, "lock_period_months": 3}, token=TA)
out(r)

label("T4-3: List savings")
out(get("/savings", token=TA))

print("\n\n=== ALL TESTS COMPLETE ===\n")
