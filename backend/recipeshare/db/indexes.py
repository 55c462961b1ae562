# 컬렉션 인덱스 생성
# 앱 스타트업에서 한 번 ensure_indexes(db)를 await로 호출한다.

async def ensure_user_indexes(db):
    col = db["users"]
    await col.create_index("email", unique=True)
    await col.create_index("refreshTokens")

async def ensure_recipe_indexes(db):
    col = db["recipes"]
    await col.create_index("author")
    await col.create_index("category")
    await col.create_index([("createdAt", -1), ("_id", -1)])  # 목록 정렬/페이지네이션
    await col.create_index([("diet", 1)])
    await col.create_index([("cuisine", 1)])
    await col.create_index([("difficulty", 1)])

async def ensure_indexes(db):
    await ensure_user_indexes(db)
    await ensure_recipe_indexes(db)
