"""Unit tests for MeetingStorage service."""

import pytest

from roundtable.api.models.meeting import Meeting, MeetingStatus
from roundtable.api.services.meeting_storage import MeetingStorage
from roundtable.providers.types import TokenUsage


def _meeting(meeting_id: str = "m1", **overrides) -> Meeting:
    data = {
        "id": meeting_id,
        "title": "Launch review",
        "topic": "Should we launch?",
        "whiteboard": "Line one\nLine two",
        "workflow_id": "wf1",
    }
    data.update(overrides)
    return Meeting(**data)


class TestMeetingStorage:
    """Test cases for MeetingStorage class."""

    @pytest.mark.asyncio
    async def test_create_and_get_meeting(self, temp_meetings_dir):
        storage = MeetingStorage(temp_meetings_dir)

        await storage.create_meeting(_meeting())
        loaded = await storage.get_meeting("m1")

        assert (temp_meetings_dir / "m1.md").exists()
        assert loaded.topic == "Should we launch?"
        assert loaded.whiteboard == "Line one\nLine two"
        assert loaded.status == MeetingStatus.PENDING
        assert loaded.current_step == 0

    @pytest.mark.asyncio
    async def test_create_duplicate_raises(self, temp_meetings_dir):
        storage = MeetingStorage(temp_meetings_dir)
        await storage.create_meeting(_meeting())

        with pytest.raises(ValueError):
            await storage.create_meeting(_meeting())

    @pytest.mark.asyncio
    async def test_invalid_id_is_not_found(self, temp_meetings_dir):
        storage = MeetingStorage(temp_meetings_dir)

        assert await storage.get_meeting("../etc/passwd") is None
        with pytest.raises(ValueError):
            await storage.create_meeting(_meeting("bad/id"))

    @pytest.mark.asyncio
    async def test_update_meeting_fields(self, temp_meetings_dir):
        storage = MeetingStorage(temp_meetings_dir)
        await storage.create_meeting(_meeting())

        updated = await storage.update_meeting(
            "m1", current_step=2, status=MeetingStatus.COMPLETED, final_conclusion="Go"
        )
        reloaded = await storage.get_meeting("m1")

        assert updated.current_step == 2
        assert reloaded.status == MeetingStatus.COMPLETED
        assert reloaded.final_conclusion == "Go"

    @pytest.mark.asyncio
    async def test_update_missing_meeting_raises(self, temp_meetings_dir):
        storage = MeetingStorage(temp_meetings_dir)

        with pytest.raises(FileNotFoundError):
            await storage.update_meeting("missing", status=MeetingStatus.ERROR)

    @pytest.mark.asyncio
    async def test_append_and_read_messages_in_order(self, temp_meetings_dir):
        storage = MeetingStorage(temp_meetings_dir)
        await storage.create_meeting(_meeting())

        first = await storage.append_message(
            "m1",
            agent_id="A",
            agent_name="Alice",
            agent_role="Strategist",
            step_number=1,
            content="## Heading inside content\n\n- point one",
            usage=TokenUsage(prompt_tokens=10, completion_tokens=5, total_tokens=15),
        )
        await storage.append_message("m1", agent_id="B", agent_name="Bob (guest)", content="Reply")

        messages = await storage.get_messages("m1")

        assert [m.agent_id for m in messages] == ["A", "B"]
        assert messages[0].id == first.id
        assert messages[0].content == "## Heading inside content\n\n- point one"
        assert messages[0].agent_role == "Strategist"
        assert messages[0].step_number == 1
        assert messages[0].usage.total_tokens == 15
        assert messages[1].agent_name == "Bob (guest)"
        assert messages[1].agent_role is None
        assert messages[1].step_number is None

    @pytest.mark.asyncio
    async def test_append_keeps_frontmatter(self, temp_meetings_dir):
        storage = MeetingStorage(temp_meetings_dir)
        await storage.create_meeting(_meeting())
        await storage.append_message("m1", agent_id="A", agent_name="Alice", content="Hi")

        meeting = await storage.get_meeting("m1")

        assert meeting.title == "Launch review"

    @pytest.mark.asyncio
    async def test_list_and_delete(self, temp_meetings_dir):
        storage = MeetingStorage(temp_meetings_dir)
        await storage.create_meeting(_meeting("m1"))
        await storage.create_meeting(_meeting("m2"))

        assert {m.id for m in await storage.list_meetings()} == {"m1", "m2"}
        assert await storage.delete_meeting("m1") is True
        assert await storage.delete_meeting("m1") is False
        assert [m.id for m in await storage.list_meetings()] == ["m2"]

    @pytest.mark.asyncio
    async def test_messages_for_missing_meeting_raise(self, temp_meetings_dir):
        storage = MeetingStorage(temp_meetings_dir)

        with pytest.raises(FileNotFoundError):
            await storage.get_messages("missing")

    @pytest.mark.asyncio
    async def test_message_content_keeps_leading_indentation(self, temp_meetings_dir):
        storage = MeetingStorage(temp_meetings_dir)
        await storage.create_meeting(_meeting())
        code = "    def f():\n        return 1"
        await storage.append_message("m1", agent_id="A", agent_name="Alice", content=code)
        await storage.append_message("m1", agent_id="B", agent_name="Bob", content="\n  indented after blank")

        messages = await storage.get_messages("m1")

        assert messages[0].content == code
        assert messages[1].content == "\n  indented after blank"

    @pytest.mark.asyncio
    async def test_record_step_writes_messages_and_fields_together(self, temp_meetings_dir):
        storage = MeetingStorage(temp_meetings_dir)
        await storage.create_meeting(_meeting())

        updated, messages = await storage.record_step(
            "m1",
            [
                {"agent_id": "A", "agent_name": "Alice", "step_number": 1, "content": "First"},
                {"agent_id": "B", "agent_name": "Bob", "step_number": 1, "content": "Second"},
            ],
            current_step=1,
            status=MeetingStatus.IN_PROGRESS,
        )

        assert updated.current_step == 1
        assert [m.content for m in messages] == ["First", "Second"]
        reloaded = await storage.get_meeting("m1")
        assert reloaded.current_step == 1
        assert [m.id for m in await storage.get_messages("m1")] == [m.id for m in messages]

    @pytest.mark.asyncio
    async def test_record_step_with_invalid_fields_writes_nothing(self, temp_meetings_dir):
        storage = MeetingStorage(temp_meetings_dir)
        await storage.create_meeting(_meeting())

        with pytest.raises(ValueError):
            await storage.record_step(
                "m1",
                [{"agent_id": "A", "agent_name": "Alice", "content": "Lost"}],
                current_step=-1,
            )

        assert await storage.get_messages("m1") == []
        assert (await storage.get_meeting("m1")).current_step == 0
