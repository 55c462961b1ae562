from bson import ObjectId

from helpers import RECIPE, auth, create_recipe, register, run


# ------------------------------
# 작성
# ------------------------------

def test_create_recipe_sets_author_and_defaults(client):
    acct = register(client, name="Chef")
    r = client.post("/recipes", json=RECIPE, headers=auth(acct["token"]))
    assert r.status_code == 201
    body = r.json()
    assert body["title"] == "Tomato Soup"
    assert body["author"] == {"id": acct["id"], "name": "Chef"}
    assert body["averageRating"] == 0
    assert body["comments"] == []
    assert body["likes"] == []
    assert body["ingredients"] == RECIPE["ingredients"]


def test_create_ignores_client_supplied_aggregate_fields(client, db):
    acct = register(client)
    other = str(ObjectId())
    body = {**RECIPE, "author": other, "averageRating": 5, "comments": [{"text": "x", "rating": 5}]}
    created = create_recipe(client, acct["token"], **body)
    doc = run(db["recipes"].find_one({"_id": ObjectId(created["id"])}))
    assert str(doc["author"]) == acct["id"]
    assert doc["averageRating"] == 0
    assert doc["comments"] == []
    assert doc["version"] == 0


def test_create_requires_login(anon):
    assert anon.post("/recipes", json=RECIPE).status_code == 401


def test_create_validates_body(client):
    token = register(client)["token"]
    bad = [
        {**RECIPE, "title": "ab"},
        {**RECIPE, "ingredients": []},
        {**RECIPE, "steps": ["ok", "   "]},
        {**RECIPE, "cookTime": 0},
        {**RECIPE, "difficulty": "impossible"},
        {**RECIPE, "imageUrls": ["not a url"]},
        {k: v for k, v in RECIPE.items() if k != "category"},
    ]
    for body in bad:
        r = client.post("/recipes", json=body, headers=auth(token))
        assert r.status_code == 400, body


def test_create_sanitizes_text(client):
    token = register(client)["token"]
    out = create_recipe(client, token, title="<script>x</script>Pasta", tags=["quick", "quick", "easy"])
    assert out["title"] == "xPasta"
    assert out["tags"] == ["quick", "easy"]


# ------------------------------
# 조회
# ------------------------------

def test_get_recipe(client, anon):
    token = register(client)["token"]
    rid = create_recipe(client, token)["id"]
    r = anon.get(f"/recipes/{rid}")
    assert r.status_code == 200
    assert r.json()["id"] == rid
    assert r.json()["steps"] == RECIPE["steps"]


def test_get_missing_or_malformed_recipe(anon):
    r = anon.get(f"/recipes/{ObjectId()}")
    assert r.status_code == 404
    r = anon.get("/recipes/not-an-id")
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid recipe id format"


# ------------------------------
# 수정/삭제
# ------------------------------

def test_owner_can_update_only_sent_fields(client):
    token = register(client)["token"]
    rid = create_recipe(client, token)["id"]
    r = client.put(f"/recipes/{rid}", json={"title": "Roasted Tomato Soup", "cookTime": 45}, headers=auth(token))
    assert r.status_code == 200
    body = r.json()
    assert body["title"] == "Roasted Tomato Soup"
    assert body["cookTime"] == 45
    assert body["description"] == RECIPE["description"]


def test_update_with_null_clears_optional_fields(client, db):
    token = register(client)["token"]
    rid = create_recipe(client, token, nutrition={"calories": 250, "protein": 8})["id"]
    body = {"diet": None, "nutrition": None, "prepTime": None, "title": None}
    r = client.put(f"/recipes/{rid}", json=body, headers=auth(token))
    assert r.status_code == 200
    out = r.json()
    assert out["diet"] is None
    assert out["nutrition"] is None
    assert out["prepTime"] is None
    # 필수 필드의 null은 무시, 보내지 않은 필드는 그대로
    assert out["title"] == RECIPE["title"]
    assert out["cuisine"] == RECIPE["cuisine"]

    doc = run(db["recipes"].find_one({"_id": ObjectId(rid)}))
    assert "diet" not in doc
    assert "nutrition" not in doc
    assert "prepTime" not in doc
    assert doc["difficulty"] == "easy"
    assert doc["title"] == RECIPE["title"]


def test_update_cannot_touch_author_or_rating(client, db):
    token = register(client)["token"]
    rid = create_recipe(client, token)["id"]
    r = client.put(
        f"/recipes/{rid}",
        json={"author": str(ObjectId()), "averageRating": 5, "title": "New Title"},
        headers=auth(token),
    )
    assert r.status_code == 200
    doc = run(db["recipes"].find_one({"_id": ObjectId(rid)}))
    assert doc["title"] == "New Title"
    assert doc["averageRating"] == 0


def test_non_owner_cannot_update_or_delete(client, db):
    owner = register(client, email="owner@example.com")["token"]
    other = register(client, email="other@example.com")["token"]
    rid = create_recipe(client, owner)["id"]

    r = client.put(f"/recipes/{rid}", json={"title": "Stolen"}, headers=auth(other))
    assert r.status_code == 403
    assert r.json()["detail"] == "Not authorized to modify this recipe"
    assert client.delete(f"/recipes/{rid}", headers=auth(other)).status_code == 403

    doc = run(db["recipes"].find_one({"_id": ObjectId(rid)}))
    assert doc["title"] == RECIPE["title"]


def test_update_missing_recipe(client):
    token = register(client)["token"]
    r = client.put(f"/recipes/{ObjectId()}", json={"title": "Nothing"}, headers=auth(token))
    assert r.status_code == 404


def test_update_rejects_invalid_values(client):
    token = register(client)["token"]
    rid = create_recipe(client, token)["id"]
    r = client.put(f"/recipes/{rid}", json={"cookTime": -5}, headers=auth(token))
    assert r.status_code == 400


def test_owner_can_delete(client, anon):
    token = register(client)["token"]
    rid = create_recipe(client, token)["id"]
    r = client.delete(f"/recipes/{rid}", headers=auth(token))
    assert r.status_code == 200
    assert r.json() == {"msg": "Recipe deleted"}
    assert anon.get(f"/recipes/{rid}").status_code == 404
    assert client.delete(f"/recipes/{rid}", headers=auth(token)).status_code == 404


def test_write_requires_login(anon, client):
    token = register(client)["token"]
    rid = create_recipe(client, token)["id"]
    assert anon.put(f"/recipes/{rid}", json={"title": "Nope!"}).status_code == 401
    assert anon.delete(f"/recipes/{rid}").status_code == 401


# ------------------------------
# 목록/필터/페이지네이션
# ------------------------------

def _seed(client, token):
    create_recipe(client, token, title="Tomato Soup", category="Soup", diet="vegetarian",
                  cuisine="Italian", difficulty="easy", prepTime=10)
    create_recipe(client, token, title="Chicken Curry", description="Spicy and warm",
                  ingredients=["chicken", "curry paste", "coconut milk"], category="Main",
                  diet="none", cuisine="Indian", difficulty="medium", prepTime=25)
    create_recipe(client, token, title="Green Salad", ingredients=["lettuce", "cucumber"],
                  category="Salad", diet="vegan", cuisine="French", difficulty="easy", prepTime=5)
    create_recipe(client, token, title="Beef Stew", ingredients=["beef", "carrot", "tomato paste"],
                  category="soup", diet="none", cuisine="French", difficulty="hard", prepTime=40)


def _titles(r):
    assert r.status_code == 200, r.text
    return {x["title"] for x in r.json()}


def test_list_filters(client, anon):
    token = register(client)["token"]
    _seed(client, token)

    assert len(anon.get("/recipes").json()) == 4
    assert _titles(anon.get("/recipes", params={"search": "curry"})) == {"Chicken Curry"}
    assert _titles(anon.get("/recipes", params={"search": "spicy"})) == {"Chicken Curry"}
    assert _titles(anon.get("/recipes", params={"category": "SOUP"})) == {"Tomato Soup", "Beef Stew"}
    assert _titles(anon.get("/recipes", params={"ingredient": "tomato"})) == {"Tomato Soup", "Beef Stew"}
    assert _titles(anon.get("/recipes", params={"diet": "vegan"})) == {"Green Salad"}
    assert _titles(anon.get("/recipes", params={"cuisine": "french"})) == {"Green Salad", "Beef Stew"}
    assert _titles(anon.get("/recipes", params={"difficulty": "Easy"})) == {"Tomato Soup", "Green Salad"}
    assert _titles(anon.get("/recipes", params={"maxPrepTime": 10})) == {"Tomato Soup", "Green Salad"}
    assert _titles(anon.get("/recipes", params={"cuisine": "french", "maxPrepTime": 10})) == {"Green Salad"}


def test_search_treats_regex_characters_literally(client, anon):
    token = register(client)["token"]
    _seed(client, token)
    assert anon.get("/recipes", params={"search": ".*"}).json() == []
    assert anon.get("/recipes", params={"search": "(unclosed"}).status_code == 200


def test_list_summary_shape(client, anon):
    acct = register(client, name="Chef")
    create_recipe(client, acct["token"])
    item = anon.get("/recipes").json()[0]
    assert item["author"] == {"id": acct["id"], "name": "Chef"}
    assert item["commentCount"] == 0
    assert "steps" not in item
    assert "comments" not in item


def test_list_newest_first_and_pages_do_not_overlap(client, anon):
    token = register(client)["token"]
    for i in range(6):
        create_recipe(client, token, title=f"Recipe number {i}")

    all_titles = [x["title"] for x in anon.get("/recipes").json()]
    assert all_titles == [f"Recipe number {i}" for i in reversed(range(6))]

    first = [x["id"] for x in anon.get("/recipes", params={"skip": 0, "limit": 3}).json()]
    second = [x["id"] for x in anon.get("/recipes", params={"skip": 3, "limit": 3}).json()]
    assert len(first) == len(second) == 3
    assert not set(first) & set(second)


def test_pagination_values_are_clamped(client, anon):
    token = register(client)["token"]
    for i in range(3):
        create_recipe(client, token, title=f"Recipe number {i}")

    assert len(anon.get("/recipes", params={"limit": "abc"}).json()) == 3
    assert len(anon.get("/recipes", params={"limit": 0}).json()) == 3
    assert len(anon.get("/recipes", params={"limit": 500}).json()) == 3
    assert len(anon.get("/recipes", params={"skip": -4, "limit": 2}).json()) == 2


def test_negative_max_prep_time_is_rejected(anon):
    assert anon.get("/recipes", params={"maxPrepTime": -1}).status_code == 400


# ------------------------------
# 좋아요
# ------------------------------

def test_like_toggles(client):
    token = register(client)["token"]
    rid = create_recipe(client, token)["id"]
    r = client.post(f"/recipes/{rid}/like", headers=auth(token))
    assert r.json() == {"liked": True, "likes": 1}
    r = client.post(f"/recipes/{rid}/like", headers=auth(token))
    assert r.json() == {"liked": False, "likes": 0}


def test_like_missing_recipe(client):
    token = register(client)["token"]
    assert client.post(f"/recipes/{ObjectId()}/like", headers=auth(token)).status_code == 404


def test_likes_are_rate_limited(make_client):
    c = make_client(RATE_LIMIT_RECIPE_WRITE="3/minute")
    token = register(c)["token"]
    rid = create_recipe(c, token)["id"]
    for _ in range(3):
        assert c.post(f"/recipes/{rid}/like", headers=auth(token)).status_code == 200
    r = c.post(f"/recipes/{rid}/like", headers=auth(token))
    assert r.status_code == 429
    assert "Too many requests" in r.json()["detail"]
