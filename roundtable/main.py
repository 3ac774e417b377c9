"""Command-line entry point: run a meeting end to end in the terminal."""

import argparse
import asyncio
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

from roundtable.api.config import settings
from roundtable.api.logging_config import setup_logging
from roundtable.api.models.meeting import MeetingCreate, MeetingStatus, Message
from roundtable.api.services.meeting_runner_service import (
    MeetingRunnerService,
    MeetingStepResult,
    StepExecutionError,
)
from roundtable.api.services.meeting_services import (
    build_meeting_runner,
    build_model_invoker,
    get_meeting_config_service,
    get_meeting_storage,
)


def _print_messages(messages: List[Message]) -> None:
    for message in messages:
        role = f" ({message.agent_role})" if message.agent_role else ""
        print(f"\n[{message.agent_name}{role}]")
        print(message.content)


def _read_whiteboard(current: str) -> Optional[str]:
    print("\n--- Whiteboard ---")
    print(current or "(empty)")
    print("------------------")
    print("Enter new whiteboard text (finish with an empty line; leave blank to keep it):")
    lines: List[str] = []
    while True:
        line = input()
        if not line:
            break
        lines.append(line)
    return "\n".join(lines) if lines else None


async def run_meeting(runner: MeetingRunnerService, meeting_id: str, max_retries: int) -> None:
    meeting = await runner.get_meeting(meeting_id)
    if meeting.status == MeetingStatus.PENDING:
        result = await runner.start_meeting(meeting_id)
        _print_messages(result.messages)
        meeting = result.meeting

    failures = 0
    while meeting.status in (MeetingStatus.IN_PROGRESS, MeetingStatus.WAITING):
        try:
            if meeting.status == MeetingStatus.WAITING:
                whiteboard = _read_whiteboard(meeting.whiteboard)
                result: MeetingStepResult = await runner.resume_meeting(meeting_id, whiteboard=whiteboard)
            else:
                result = await runner.run_next_step(meeting_id)
        except StepExecutionError as e:
            failures += 1
            print(f"\nStep {e.step_index + 1} failed: {e.error}")
            if failures > max_retries:
                print("Giving up; rerun with --meeting-id to retry the same step.")
                return
            meeting = await runner.get_meeting(meeting_id)
            continue

        failures = 0
        _print_messages(result.messages)
        meeting = result.meeting

    print(f"\nMeeting {meeting.id} finished with status: {meeting.status.value}")
    if meeting.final_conclusion:
        print("\n=== Conclusion ===")
        print(meeting.final_conclusion)


async def main_async(args: argparse.Namespace) -> None:
    config_service = get_meeting_config_service()
    runner = build_meeting_runner(
        settings,
        storage=get_meeting_storage(),
        config_service=config_service,
        model_invoker=build_model_invoker(settings),
    )

    if args.list_workflows:
        for workflow in await config_service.get_workflows():
            print(f"{workflow.id}: {workflow.name} ({len(workflow.steps)} steps)")
        return

    meeting_id = args.meeting_id
    if not meeting_id:
        if not args.workflow or not args.topic:
            raise SystemExit("--workflow and --topic are required to create a meeting")
        meeting = await runner.create_meeting(
            MeetingCreate(
                title=args.title or args.topic,
                topic=args.topic,
                workflow_id=args.workflow,
                whiteboard=args.whiteboard or "",
                summary_agent_id=args.summary_agent,
            )
        )
        meeting_id = meeting.id
        print(f"Created meeting {meeting_id}")

    await run_meeting(runner, meeting_id, args.max_step_retries)

    if args.minutes:
        print("\n" + await runner.export_minutes(meeting_id))


def main():
    """Run a meeting from the command line."""
    parser = argparse.ArgumentParser(description="Run a multi-agent meeting")
    parser.add_argument("--workflow", help="Workflow ID for a new meeting")
    parser.add_argument("--topic", help="Topic for a new meeting")
    parser.add_argument("--title", help="Title for a new meeting (defaults to the topic)")
    parser.add_argument("--whiteboard", help="Initial whiteboard text")
    parser.add_argument("--summary-agent", help="Override the summary agent")
    parser.add_argument("--meeting-id", help="Continue an existing meeting")
    parser.add_argument("--max-step-retries", type=int, default=1, help="Retries per failed step")
    parser.add_argument("--minutes", action="store_true", help="Print Markdown minutes at the end")
    parser.add_argument("--list-workflows", action="store_true", help="List configured workflows and exit")
    args = parser.parse_args()

    setup_logging(settings.log_level, settings.logs_dir)
    asyncio.run(main_async(args))


if __name__ == "__main__":
    main()
