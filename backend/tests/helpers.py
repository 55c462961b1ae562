import asyncio
from typing import Any, Dict

from recipeshare.services.accounts import verify_access

PASSWORD = "Password123!"

RECIPE: Dict[str, Any] = {
    "title": "Tomato Soup",
    "description": "A simple weeknight soup",
    "ingredients": ["4 tomatoes", "1 onion", "2 cups stock"],
    "steps": ["Chop everything", "Simmer 20 minutes", "Blend"],
    "category": "Soup",
    "cookTime": 30,
    "prepTime": 10,
    "diet": "vegetarian",
    "cuisine": "Italian",
    "difficulty": "easy",
    "tags": ["quick", "comfort"],
    "imageUrls": ["https://images.example.com/soup.jpg"],
}


def run(coro):
    # 동기 테스트에서 mongomock-motor 조회용
    return asyncio.run(coro)


def auth(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register(client, name="Test User", email="test@example.com", password=PASSWORD) -> Dict[str, str]:
    r = client.post("/auth/register", json={"name": name, "email": email, "password": password})
    assert r.status_code == 200, r.text
    token = r.json()["token"]
    return {"token": token, "id": verify_access(token, client.app.state.settings)}


def login(client, email="test@example.com", password=PASSWORD) -> Dict[str, Any]:
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()


def create_recipe(client, token: str, **overrides) -> Dict[str, Any]:
    body = {**RECIPE, **overrides}
    r = client.post("/recipes", json=body, headers=auth(token))
    assert r.status_code == 201, r.text
    return r.json()
