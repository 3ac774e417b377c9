"""Meeting storage service using Markdown files with YAML frontmatter."""

import asyncio
import json
import logging
import re
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import aiofiles
import frontmatter

from ..models.meeting import Meeting, Message
from ...providers.types import TokenUsage

logger = logging.getLogger(__name__)

_MEETING_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
# A message starts with its header immediately followed by its message_id comment,
# so headings inside message content are never mistaken for a new message.
_MESSAGE_HEADER_PATTERN = re.compile(
    r'^## (?P<name>.+) \((?P<created_at>[0-9T:\-. ]+)\)\n<!-- message_id: "(?P<message_id>[^"]+)" -->$',
    re.MULTILINE,
)
_META_COMMENT_PATTERN = re.compile(r"^<!-- (?P<key>[a-z_]+): (?P<value>.+) -->$")
_MESSAGE_META_KEYS = ("agent_id", "agent_role", "agent_avatar_url", "step_number", "usage")


class MeetingStorage:
    """Markdown-based storage for meetings and their transcripts.

    Each meeting is stored as a separate .md file with:
    - YAML frontmatter for meeting fields (topic, whiteboard, current_step, status, ...)
    - Markdown body with one "## name (timestamp)" section per message
    """

    def __init__(self, meetings_dir: Path):
        """Initialize storage with meetings directory.

        Args:
            meetings_dir: Path to directory for storing meeting files
        """
        self.meetings_dir = Path(meetings_dir)
        self.meetings_dir.mkdir(parents=True, exist_ok=True)
        # Per-file locks to prevent concurrent read-modify-write corruption
        self._file_locks: Dict[str, asyncio.Lock] = {}

    def _get_lock(self, meeting_id: str) -> asyncio.Lock:
        lock = self._file_locks.get(meeting_id)
        if lock is None:
            lock = asyncio.Lock()
            self._file_locks[meeting_id] = lock
        return lock

    def _meeting_path(self, meeting_id: str) -> Optional[Path]:
        if not meeting_id or not _MEETING_ID_PATTERN.match(meeting_id):
            return None
        return self.meetings_dir / f"{meeting_id}.md"

    async def _read_post(self, filepath: Path) -> frontmatter.Post:
        async with aiofiles.open(filepath, "r", encoding="utf-8") as f:
            content = await f.read()
        return frontmatter.loads(content)

    async def _write_post(self, filepath: Path, post: frontmatter.Post) -> None:
        temp_path = filepath.with_suffix(".md.tmp")
        async with aiofiles.open(temp_path, "w", encoding="utf-8") as f:
            await f.write(frontmatter.dumps(post))
        temp_path.replace(filepath)

    @staticmethod
    def _meeting_metadata(meeting: Meeting) -> Dict[str, Any]:
        return meeting.model_dump(mode="json")

    async def create_meeting(self, meeting: Meeting) -> Meeting:
        """Persist a new meeting.

        Raises:
            ValueError: If the meeting ID is invalid or already exists
        """
        filepath = self._meeting_path(meeting.id)
        if filepath is None:
            raise ValueError(f"Invalid meeting ID: {meeting.id}")

        async with self._get_lock(meeting.id):
            if filepath.exists():
                raise ValueError(f"Meeting {meeting.id} already exists")
            post = frontmatter.Post("", **self._meeting_metadata(meeting))
            await self._write_post(filepath, post)

        logger.info(f"[MeetingStorage] Created meeting {meeting.id}: {meeting.title}")
        return meeting

    async def get_meeting(self, meeting_id: str) -> Optional[Meeting]:
        """Load a meeting snapshot, or None if it does not exist."""
        filepath = self._meeting_path(meeting_id)
        if filepath is None or not filepath.exists():
            return None
        post = await self._read_post(filepath)
        return Meeting(**post.metadata)

    async def list_meetings(self) -> List[Meeting]:
        """List all meetings, newest first."""
        meetings: List[Meeting] = []
        for filepath in self.meetings_dir.glob("*.md"):
            post = await self._read_post(filepath)
            meetings.append(Meeting(**post.metadata))
        meetings.sort(key=lambda meeting: meeting.created_at, reverse=True)
        return meetings

    async def update_meeting(self, meeting_id: str, **fields: Any) -> Meeting:
        """Update meeting fields in the frontmatter.

        Raises:
            FileNotFoundError: If meeting doesn't exist
        """
        filepath = self._meeting_path(meeting_id)
        if filepath is None or not filepath.exists():
            raise FileNotFoundError(f"Meeting {meeting_id} not found")

        async with self._get_lock(meeting_id):
            post = await self._read_post(filepath)
            current = Meeting(**post.metadata)
            updated = current.model_copy(update=fields)
            # Re-validate so bad field values fail before touching the file.
            updated = Meeting(**updated.model_dump())
            post.metadata = self._meeting_metadata(updated)
            await self._write_post(filepath, post)

        return updated

    async def delete_meeting(self, meeting_id: str) -> bool:
        """Delete a meeting file. Returns False if it did not exist."""
        filepath = self._meeting_path(meeting_id)
        if filepath is None or not filepath.exists():
            return False
        async with self._get_lock(meeting_id):
            filepath.unlink()
        self._file_locks.pop(meeting_id, None)
        logger.info(f"[MeetingStorage] Deleted meeting {meeting_id}")
        return True

    async def append_message(
        self,
        meeting_id: str,
        *,
        agent_id: str,
        agent_name: str,
        content: str,
        agent_role: Optional[str] = None,
        agent_avatar_url: Optional[str] = None,
        step_number: Optional[int] = None,
        usage: Optional[TokenUsage] = None,
    ) -> Message:
        """Append a message to the meeting transcript.

        Raises:
            FileNotFoundError: If meeting doesn't exist
        """
        filepath = self._meeting_path(meeting_id)
        if filepath is None or not filepath.exists():
            raise FileNotFoundError(f"Meeting {meeting_id} not found")

        message = self._new_message(
            meeting_id,
            agent_id=agent_id,
            agent_name=agent_name,
            agent_role=agent_role,
            agent_avatar_url=agent_avatar_url,
            step_number=step_number,
            content=content,
            usage=usage,
        )

        async with self._get_lock(meeting_id):
            post = await self._read_post(filepath)
            post.content += self._render_message(message)
            await self._write_post(filepath, post)

        return message

    async def record_step(
        self,
        meeting_id: str,
        messages: List[Dict[str, Any]],
        **fields: Any,
    ) -> Tuple[Meeting, List[Message]]:
        """Append a step's messages and update meeting fields in one file write.

        Args:
            meeting_id: Meeting ID
            messages: append_message keyword arguments, one dict per message
            **fields: Meeting fields to update (cursor, status, ...)

        Raises:
            FileNotFoundError: If meeting doesn't exist
        """
        filepath = self._meeting_path(meeting_id)
        if filepath is None or not filepath.exists():
            raise FileNotFoundError(f"Meeting {meeting_id} not found")

        new_messages = [self._new_message(meeting_id, **data) for data in messages]

        async with self._get_lock(meeting_id):
            post = await self._read_post(filepath)
            updated = Meeting(**Meeting(**post.metadata).model_copy(update=fields).model_dump())
            post.metadata = self._meeting_metadata(updated)
            post.content += "".join(self._render_message(message) for message in new_messages)
            await self._write_post(filepath, post)

        return updated, new_messages

    @staticmethod
    def _new_message(meeting_id: str, *, content: str, **fields: Any) -> Message:
        # Trailing whitespace is not kept in the file, so drop it up front.
        return Message(id=str(uuid.uuid4()), meeting_id=meeting_id, content=content.rstrip(), **fields)

    async def get_messages(self, meeting_id: str) -> List[Message]:
        """Return the transcript in creation order.

        Raises:
            FileNotFoundError: If meeting doesn't exist
        """
        filepath = self._meeting_path(meeting_id)
        if filepath is None or not filepath.exists():
            raise FileNotFoundError(f"Meeting {meeting_id} not found")
        post = await self._read_post(filepath)
        return self._parse_messages(post.content, meeting_id)

    @staticmethod
    def _render_message(message: Message) -> str:
        name = message.agent_name.replace("\n", " ").strip() or message.agent_id
        lines = [
            "",
            f"## {name} ({message.created_at.isoformat()})",
            f'<!-- message_id: "{message.id}" -->',
            f"<!-- agent_id: {json.dumps(message.agent_id)} -->",
        ]
        if message.agent_role is not None:
            lines.append(f"<!-- agent_role: {json.dumps(message.agent_role, ensure_ascii=False)} -->")
        if message.agent_avatar_url is not None:
            lines.append(f"<!-- agent_avatar_url: {json.dumps(message.agent_avatar_url)} -->")
        if message.step_number is not None:
            lines.append(f"<!-- step_number: {json.dumps(message.step_number)} -->")
        if message.usage is not None:
            lines.append(f"<!-- usage: {json.dumps(message.usage.model_dump())} -->")
        lines.append("")
        lines.append(message.content)
        lines.append("")
        return "\n".join(lines)

    def _parse_messages(self, content: str, meeting_id: str) -> List[Message]:
        """Parse messages from markdown content.

        Args:
            content: Markdown body content (without frontmatter)
            meeting_id: Owning meeting ID

        Returns:
            Messages in file order
        """
        headers = list(_MESSAGE_HEADER_PATTERN.finditer(content))
        messages: List[Message] = []

        for index, header in enumerate(headers):
            body_end = headers[index + 1].start() if index + 1 < len(headers) else len(content)
            body_lines = content[header.end():body_end].split("\n")

            meta: Dict[str, Any] = {}
            # First element is the remainder of the message_id line.
            cursor = 1
            while cursor < len(body_lines):
                match = _META_COMMENT_PATTERN.match(body_lines[cursor].strip())
                if not match or match.group("key") not in _MESSAGE_META_KEYS:
                    break
                try:
                    meta[match.group("key")] = json.loads(match.group("value"))
                except json.JSONDecodeError:
                    logger.warning(
                        f"[MeetingStorage] Bad {match.group('key')} metadata in meeting {meeting_id}"
                    )
                cursor += 1
            # Blank separator written by _render_message between metadata and content.
            if cursor < len(body_lines) and body_lines[cursor] == "":
                cursor += 1

            usage = meta.get("usage")
            messages.append(
                Message(
                    id=header.group("message_id"),
                    meeting_id=meeting_id,
                    agent_id=meta.get("agent_id") or "unknown",
                    agent_name=header.group("name"),
                    agent_role=meta.get("agent_role"),
                    agent_avatar_url=meta.get("agent_avatar_url"),
                    step_number=meta.get("step_number"),
                    # Leading whitespace is content; trailing whitespace is not preserved.
                    content="\n".join(body_lines[cursor:]).rstrip(),
                    usage=TokenUsage(**usage) if isinstance(usage, dict) else None,
                    created_at=datetime.fromisoformat(header.group("created_at").strip()),
                )
            )

        return messages
