"""Admin catalog and user management, including cascading deletes."""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from olw.progress.models import Progress
from olw.stacks.models import Topic, Video
from olw.submissions.models import Submission
from olw.users.models import User
from tests.conftest import Catalog


async def _count(session: AsyncSession, column, *criteria) -> int:
    return await session.scalar(select(func.count(column)).where(*criteria))


class TestRoleGate:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/admin/stacks", "/admin/topics", "/admin/videos", "/admin/submissions", "/admin/users"])
    async def test_student_is_forbidden(self, client: AsyncClient, student_headers: dict, path: str) -> None:
        response = await client.get(path, headers=student_headers)

        assert response.status_code == 403
        assert response.json() == {"success": False, "message": "Admin access required"}

    @pytest.mark.asyncio
    async def test_anonymous_is_unauthorized(self, client: AsyncClient) -> None:
        response = await client.get("/admin/users")

        assert response.status_code == 401
        assert response.json()["message"] == "No token provided"


class TestStacks:
    @pytest.mark.asyncio
    async def test_create_stack(self, client: AsyncClient, admin_headers: dict) -> None:
        response = await client.post(
            "/admin/stacks",
            json={"slug": "python-101", "title": "Python", "description": "Start here", "sortOrder": 5},
            headers=admin_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Stack created successfully"
        assert body["data"]["slug"] == "python-101"
        assert body["data"]["sortOrder"] == 5

        listed = await client.get("/stacks")
        assert [s["slug"] for s in listed.json()["data"]] == ["python-101"]

    @pytest.mark.asyncio
    async def test_duplicate_slug(self, client: AsyncClient, catalog: Catalog, admin_headers: dict) -> None:
        response = await client.post(
            "/admin/stacks", json={"slug": "node-basics", "title": "Again"}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Stack with this slug already exists"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("slug", ["Has Spaces", "UPPER", "trailing-", "double--dash"])
    async def test_invalid_slug(self, client: AsyncClient, admin_headers: dict, slug: str) -> None:
        response = await client.post("/admin/stacks", json={"slug": slug, "title": "Bad"}, headers=admin_headers)

        assert response.status_code == 422
        assert response.json()["errors"][0]["field"] == "slug"

    @pytest.mark.asyncio
    async def test_missing_title(self, client: AsyncClient, admin_headers: dict) -> None:
        response = await client.post("/admin/stacks", json={"slug": "no-title"}, headers=admin_headers)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_partial_update(self, client: AsyncClient, catalog: Catalog, admin_headers: dict) -> None:
        response = await client.put(
            f"/admin/stacks/{catalog.react.id}", json={"title": "React 19"}, headers=admin_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Stack updated successfully"
        assert body["data"]["title"] == "React 19"
        assert body["data"]["slug"] == "react-fundamentals"
        assert body["data"]["description"] == "Components and hooks"

    @pytest.mark.asyncio
    async def test_update_keeping_own_slug(self, client: AsyncClient, catalog: Catalog, admin_headers: dict) -> None:
        response = await client.put(
            f"/admin/stacks/{catalog.react.id}",
            json={"slug": "react-fundamentals", "title": "Same slug"},
            headers=admin_headers,
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_update_to_taken_slug(self, client: AsyncClient, catalog: Catalog, admin_headers: dict) -> None:
        response = await client.put(
            f"/admin/stacks/{catalog.react.id}", json={"slug": "node-basics"}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Stack with this slug already exists"

    @pytest.mark.asyncio
    async def test_update_unknown(self, client: AsyncClient, admin_headers: dict) -> None:
        response = await client.put("/admin/stacks/999", json={"title": "Ghost"}, headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Stack not found"

    @pytest.mark.asyncio
    async def test_delete_cascades(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        catalog: Catalog,
        student: User,
        student_headers: dict,
        admin_headers: dict,
    ) -> None:
        await client.post("/progress", json={"videoId": catalog.videos[0].id}, headers=student_headers)
        await client.post(
            "/submissions",
            json={"stackId": catalog.react.id, "repoLink": "https://github.com/me/react"},
            headers=student_headers,
        )

        response = await client.delete(f"/admin/stacks/{catalog.react.id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Stack deleted successfully", "data": None}
        assert await _count(db_session, Topic.id, Topic.stack_id == catalog.react.id) == 0
        assert await _count(db_session, Video.id, Video.topic_id.in_([catalog.basics.id, catalog.hooks.id])) == 0
        assert await _count(db_session, Progress.id, Progress.user_id == student.id) == 0
        assert await _count(db_session, Submission.id, Submission.user_id == student.id) == 0

        missing = await client.get("/stacks/react-fundamentals")
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_unknown(self, client: AsyncClient, admin_headers: dict) -> None:
        response = await client.delete("/admin/stacks/999", headers=admin_headers)

        assert response.status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("method", "path"),
        [
            ("DELETE", "/admin/stacks/100000000000000000000"),
            ("PUT", "/admin/topics/2147483648"),
            ("GET", "/admin/submissions/100000000000000000000"),
            ("DELETE", "/admin/users/0"),
        ],
    )
    async def test_out_of_range_ids(self, client: AsyncClient, admin_headers: dict, method: str, path: str) -> None:
        response = await client.request(method, path, json={"title": "x"}, headers=admin_headers)

        assert response.status_code == 422
        assert response.json()["message"] == "Validation failed"

    @pytest.mark.asyncio
    async def test_largest_id_is_not_found(self, client: AsyncClient, admin_headers: dict) -> None:
        response = await client.delete("/admin/stacks/2147483647", headers=admin_headers)

        assert response.status_code == 404


class TestTopics:
    @pytest.mark.asyncio
    async def test_list_topics(self, client: AsyncClient, catalog: Catalog, admin_headers: dict) -> None:
        response = await client.get("/admin/topics", headers=admin_headers)

        topics = response.json()["data"]
        react_topics = [t for t in topics if t["stackId"] == catalog.react.id]
        assert [(t["title"], t["videoCount"]) for t in react_topics] == [("Basics", 2), ("Hooks", 1)]
        assert react_topics[0]["stack"]["slug"] == "react-fundamentals"

    @pytest.mark.asyncio
    async def test_create_topic(self, client: AsyncClient, catalog: Catalog, admin_headers: dict) -> None:
        response = await client.post(
            "/admin/topics",
            json={"title": "Effects", "stackId": catalog.react.id, "sortOrder": 3},
            headers=admin_headers,
        )

        assert response.status_code == 201
        assert response.json()["message"] == "Topic created successfully"

        detail = await client.get("/stacks/react-fundamentals")
        assert [t["title"] for t in detail.json()["data"]["topics"]] == ["Basics", "Hooks", "Effects"]

    @pytest.mark.asyncio
    async def test_create_topic_unknown_stack(self, client: AsyncClient, admin_headers: dict) -> None:
        response = await client.post("/admin/topics", json={"title": "Orphan", "stackId": 999}, headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Stack not found"

    @pytest.mark.asyncio
    async def test_update_and_delete_topic(
        self, client: AsyncClient, db_session: AsyncSession, catalog: Catalog, admin_headers: dict
    ) -> None:
        updated = await client.put(
            f"/admin/topics/{catalog.hooks.id}", json={"sortOrder": 0}, headers=admin_headers
        )
        assert updated.json()["message"] == "Topic updated successfully"
        assert updated.json()["data"]["title"] == "Hooks"

        detail = await client.get("/stacks/react-fundamentals")
        assert [t["title"] for t in detail.json()["data"]["topics"]] == ["Hooks", "Basics"]

        deleted = await client.delete(f"/admin/topics/{catalog.hooks.id}", headers=admin_headers)
        assert deleted.json()["message"] == "Topic deleted successfully"
        assert await _count(db_session, Video.id, Video.topic_id == catalog.hooks.id) == 0


class TestVideos:
    @pytest.mark.asyncio
    async def test_list_videos(self, client: AsyncClient, catalog: Catalog, admin_headers: dict) -> None:
        response = await client.get("/admin/videos", headers=admin_headers)

        videos = response.json()["data"]
        assert len(videos) == 4
        basics = [v for v in videos if v["topicId"] == catalog.basics.id]
        assert [v["title"] for v in basics] == ["Intro", "JSX"]
        assert basics[0]["topic"]["stack"]["slug"] == "react-fundamentals"

    @pytest.mark.asyncio
    async def test_create_video_defaults(self, client: AsyncClient, catalog: Catalog, admin_headers: dict) -> None:
        response = await client.post(
            "/admin/videos",
            json={"title": "useEffect", "youtubeId": "yt-effect", "topicId": catalog.hooks.id},
            headers=admin_headers,
        )

        assert response.status_code == 201
        assert response.json()["message"] == "Video created successfully"
        assert response.json()["data"]["duration"] == 0
        assert response.json()["data"]["sortOrder"] == 0

    @pytest.mark.asyncio
    async def test_create_video_unknown_topic(self, client: AsyncClient, admin_headers: dict) -> None:
        response = await client.post(
            "/admin/videos",
            json={"title": "Lost", "youtubeId": "yt-lost", "topicId": 999},
            headers=admin_headers,
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Topic not found"

    @pytest.mark.asyncio
    async def test_negative_duration(self, client: AsyncClient, catalog: Catalog, admin_headers: dict) -> None:
        response = await client.post(
            "/admin/videos",
            json={"title": "Bad", "youtubeId": "yt-bad", "topicId": catalog.hooks.id, "duration": -1},
            headers=admin_headers,
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_update_and_delete_video(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        catalog: Catalog,
        student_headers: dict,
        admin_headers: dict,
    ) -> None:
        video = catalog.videos[2]
        await client.post("/progress", json={"videoId": video.id}, headers=student_headers)

        updated = await client.put(f"/admin/videos/{video.id}", json={"duration": 660}, headers=admin_headers)
        assert updated.json()["message"] == "Video updated successfully"
        assert updated.json()["data"]["duration"] == 660
        assert updated.json()["data"]["title"] == "useState"

        deleted = await client.delete(f"/admin/videos/{video.id}", headers=admin_headers)
        assert deleted.json()["message"] == "Video deleted successfully"
        assert await _count(db_session, Progress.id, Progress.video_id == video.id) == 0


class TestUsers:
    @pytest.mark.asyncio
    async def test_list_users_with_counts(
        self, client: AsyncClient, catalog: Catalog, student: User, student_headers: dict, admin_headers: dict
    ) -> None:
        await client.post("/progress", json={"videoId": catalog.videos[0].id}, headers=student_headers)
        await client.post("/progress", json={"videoId": catalog.videos[1].id}, headers=student_headers)
        await client.post(
            "/submissions",
            json={"stackId": catalog.react.id, "repoLink": "https://github.com/me/react"},
            headers=student_headers,
        )

        response = await client.get("/admin/users", headers=admin_headers)

        users = {u["email"]: u for u in response.json()["data"]}
        assert users[student.email]["progressCount"] == 2
        assert users[student.email]["submissionCount"] == 1
        assert users["admin@learn.io"]["progressCount"] == 0
        assert "passwordHash" not in users[student.email]

    @pytest.mark.asyncio
    async def test_delete_self_is_rejected(self, client: AsyncClient, admin: User, admin_headers: dict) -> None:
        response = await client.delete(f"/admin/users/{admin.id}", headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "You cannot delete your own account"

    @pytest.mark.asyncio
    async def test_delete_unknown_user(self, client: AsyncClient, admin_headers: dict) -> None:
        response = await client.delete("/admin/users/999", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "User not found"

    @pytest.mark.asyncio
    async def test_delete_user_cascades(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        catalog: Catalog,
        student: User,
        student_headers: dict,
        admin_headers: dict,
    ) -> None:
        await client.post("/progress", json={"videoId": catalog.videos[0].id}, headers=student_headers)
        await client.post(
            "/submissions",
            json={"stackId": catalog.node.id, "repoLink": "https://github.com/me/node"},
            headers=student_headers,
        )

        response = await client.delete(f"/admin/users/{student.id}", headers=admin_headers)

        assert response.json()["message"] == "User deleted successfully"
        assert await _count(db_session, Progress.id, Progress.user_id == student.id) == 0
        assert await _count(db_session, Submission.id, Submission.user_id == student.id) == 0

        me = await client.get("/auth/me", headers=student_headers)
        assert me.status_code == 401
        assert me.json()["message"] == "User not found"
