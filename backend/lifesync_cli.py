#!/usr/bin/env python3
"""
LifeSync CLI

Usage:
    python lifesync_cli.py [--mock] [--user USER_ID] [--memory]

Options:
    --mock      Use mock LLM for testing (no API key needed)
    --user      User ID the conversation and records belong to
    --memory    Keep records in memory instead of MongoDB

Examples:
    python lifesync_cli.py                    # Run with Gemini/OpenAI/Groq
    python lifesync_cli.py --mock --memory    # Fully offline
    python lifesync_cli.py --user alex        # Custom user ID
"""

import asyncio
import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from dotenv import load_dotenv
load_dotenv()


class MockLLMClient:
    """Mock LLM for testing without API keys."""

    async def generate(self, prompt: str, system_instruction: str = None) -> str:
        prompt_lower = prompt.lower()
        if "mode: emotional" in prompt_lower:
            return "That sounds hard. I'm here for you, take all the time you need."
        return "Got it! Let me see how I can help with that."


async def build_executor(use_memory: bool, display):
    """Executor over MongoDB stores, or in-memory ones when asked or unavailable."""
    from lifesync.conversation.executor import ActionExecutor
    from lifesync.storage import repositories

    if not use_memory:
        try:
            from lifesync.core.database import connect_mongodb

            await connect_mongodb()
            display.print_success("Connected to MongoDB")
            return ActionExecutor(
                tasks=repositories.TaskRepository(),
                calendar=repositories.CalendarEventRepository(),
                goals=repositories.GoalRepository(),
                mood=repositories.MoodEntryRepository(),
            )
        except Exception as e:
            display.print_warning(f"MongoDB not available: {e}")

    display.print_info("Records are kept in memory for this session")
    return ActionExecutor(
        tasks=repositories.InMemoryTaskRepository(),
        calendar=repositories.InMemoryCalendarEventRepository(),
        goals=repositories.InMemoryGoalRepository(),
        mood=repositories.InMemoryMoodEntryRepository(),
    )


async def run_cli(mock: bool = False, user_id: str = "cli_user", use_memory: bool = False):
    """Run the CLI with specified configuration."""
    from lifesync.cli.app import LifeSyncCLI
    from lifesync.cli.display import LifeSyncDisplay

    display = LifeSyncDisplay()

    if mock:
        display.print_info("Running in MOCK mode (no API calls)")
        llm = MockLLMClient()
    else:
        from lifesync.adapters.llm import LLMFactory
        from lifesync.core.config import settings

        try:
            llm = LLMFactory.from_settings(settings)
        except ValueError as e:
            display.print_error(str(e))
            display.console.print("""
[bold]Setup required:[/bold]

1. Create a .env file with your API key:
   [cyan]GEMINI_API_KEY=your_key_here[/cyan]
   or
   [cyan]OPENAI_API_KEY=your_key_here[/cyan]
   or
   [cyan]GROQ_API_KEY=your_key_here[/cyan]

2. Or run in mock mode for testing:
   [cyan]python lifesync_cli.py --mock --memory[/cyan]
            """)
            sys.exit(1)

    executor = await build_executor(use_memory, display)
    cli = LifeSyncCLI(llm_client=llm, executor=executor, user_id=user_id, display=display)
    await cli.run()


def main():
    """Parse arguments and run CLI."""
    parser = argparse.ArgumentParser(
        description="LifeSync CLI - chat with your personal assistant"
    )
    parser.add_argument(
        "--mock",
        action="store_true",
        help="Use mock LLM for testing"
    )
    parser.add_argument(
        "--user",
        default="cli_user",
        help="User ID the conversation belongs to"
    )
    parser.add_argument(
        "--memory",
        action="store_true",
        help="Keep records in memory instead of MongoDB"
    )

    args = parser.parse_args()

    try:
        asyncio.run(run_cli(mock=args.mock, user_id=args.user, use_memory=args.memory))
    except KeyboardInterrupt:
        print("\nGoodbye!")


if __name__ == "__main__":
    main()
