from __future__ import annotations

import os
import sys
from pathlib import Path

# Allow running as: python scripts/demo_sequence.py
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from fastapi.testclient import TestClient

from user_directory.main import app


def main() -> int:
    # Run against the in-process store so no MongoDB is needed.
    os.environ.setdefault("USER_STORE_BACKEND", "memory")

    with TestClient(app) as c:
        r = c.get("/users")
        print("/users(empty)", r.status_code, r.json())

        alex = {"username": "alex_w", "firstName": "Alex", "email": "alex.w@example.com", "isActive": True}
        r = c.post("/users", json=alex)
        print("create alex_w", r.status_code, r.json())
        if r.status_code != 201:
            return 1

        r = c.post("/users", json={**alex, "email": "alex2@example.com"})
        print("create alex_w again", r.status_code, r.json())

        r = c.post("/users", json={**alex, "username": "12345"})
        print("create 12345", r.status_code, r.json())

        r = c.get("/users/alex_w")
        print("read alex_w", r.status_code, r.json())

        r = c.put("/users/alex_w", json={**alex, "firstName": "Alexander", "isActive": False})
        print("update alex_w", r.status_code, r.json())

        r = c.put("/users/nobody", json={**alex, "username": "nobody", "email": "nobody@example.com"})
        print("update nobody", r.status_code, r.json())

        r = c.get("/users")
        print("/users(after)", r.status_code, r.json())

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
