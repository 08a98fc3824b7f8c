import asyncio

from ideaboard.database import Base, async_session, engine
from ideaboard.services.idea_board import build_idea_board
from ideaboard.services.store import USERS, SqlAlchemyDocumentStore


async def async_main():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        store = SqlAlchemyDocumentStore(session)
        board = build_idea_board(session)

        # Create users
        users = [
            ("alice", "alice@example.com", "Alice Builder"),
            ("bob", "bob@example.com", "Bob Designer"),
            ("charlie", "charlie@example.com", "Charlie Research"),
            ("diana", "diana@example.com", "Diana Communicator"),
        ]
        for user_id, email, full_name in users:
            await store.create(USERS, {"id": user_id, "email": email, "full_name": full_name})

        # Ideas for the Mavericks
        guide = await board.create_idea(
            "mavericks", "ai-innovation",
            {"title": "AI campus guide", "description": "Chatbot that answers campus questions.",
             "tags": ["ai", "backend"], "created_by": "alice"},
            "Alice Builder",
        )
        dark = await board.create_idea(
            "mavericks", "ai-innovation",
            {"title": "Dark mode", "description": "Theme toggle for the web app.",
             "tags": ["ui"], "created_by": "bob"},
            "Bob Designer",
        )
        await board.create_idea(
            "mavericks", "ai-innovation",
            {"title": "Offline sync", "description": "Cache answers for flaky campus wifi.",
             "tags": ["backend"], "created_by": "charlie"},
            "Charlie Research",
        )

        # Three votes approve the guide; the team then starts on it
        for user_id, _, full_name in users[1:]:
            await board.vote_on_idea(guide.id, user_id, full_name)
        await board.convert_idea_to_task(guide.id, "Alice Builder")

        await board.vote_on_idea(dark.id, "alice", "Alice Builder")

    print("Database seeded with idea board data successfully.")

asyncio.run(async_main())
