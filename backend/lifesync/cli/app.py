"""
LifeSyncCLI - Interactive command-line chat with the assistant.

Runs the same DialogueManager as the API, so proposed actions are
confirmed with yes/no and saved to whichever stores were injected.
"""

import os
from typing import Optional

from lifesync.adapters.llm import LLMClientInterface
from lifesync.cli.display import LifeSyncDisplay
from lifesync.conversation.context import SessionStore
from lifesync.conversation.dialogue import DialogueManager, DialogueResponse
from lifesync.conversation.executor import ActionExecutor
from lifesync.conversation.sequencer import SequencerState
from lifesync.core.errors import LifeSyncError


class LifeSyncCLI:
    """
    Interactive CLI for the assistant.

    Manages the conversation loop for a single user.
    """

    def __init__(
        self,
        llm_client: LLMClientInterface,
        executor: ActionExecutor,
        user_id: str = "cli_user",
        redis_url: Optional[str] = None,
        display: Optional[LifeSyncDisplay] = None,
    ):
        self.llm = llm_client
        self.executor = executor
        self.user_id = user_id
        self.redis_url = redis_url or os.getenv("REDIS_URL", "redis://localhost:6379/0")

        self.display = display or LifeSyncDisplay()
        self.dialogue: Optional[DialogueManager] = None
        self._running = False

    async def initialize(self):
        """Initialize the CLI components."""
        self.display.print_info("Initializing LifeSync...")

        self.dialogue = DialogueManager(
            llm_client=self.llm,
            executor=self.executor,
            sessions=SessionStore(),
        )

        try:
            await self.dialogue.connect(self.redis_url)
            self.display.print_success("Connected to Redis")
        except Exception as e:
            self.display.print_warning(f"Redis not available: {e}")
            self.display.print_info("Running in memory-only mode")

        self.display.print_success("Ready!")

    async def cleanup(self):
        if self.dialogue:
            await self.dialogue.close()

    async def run(self):
        """Main CLI loop."""
        self.display.clear()
        self.display.print_banner()
        self.display.print_help()

        await self.initialize()

        self._running = True
        while self._running:
            try:
                user_input = self.display.print_user_prompt()

                if not user_input.strip():
                    continue

                command = user_input.strip().lower()
                if command in ("quit", "exit", "q"):
                    self.display.print_info("Goodbye!")
                    break
                if command in ("help", "?"):
                    self.display.print_help()
                    continue
                if command == "history":
                    turns = await self.dialogue.get_history(self.user_id)
                    self.display.print_history(turns)
                    continue
                if command == "reset":
                    await self.dialogue.clear_history(self.user_id)
                    self.display.print_success("Conversation cleared")
                    continue

                await self.handle_message(user_input)

            except KeyboardInterrupt:
                self.display.print_info("\nInterrupted. Type 'quit' to exit.")
            except EOFError:
                self.display.print_info("\nEnd of input. Goodbye!")
                break
            except LifeSyncError as e:
                self.display.print_error(e.message)

        await self.cleanup()

    async def handle_message(self, message: str) -> DialogueResponse:
        """Send one message and render the response."""
        response = await self.dialogue.process_message(self.user_id, message)
        mode = await self.dialogue.sessions.get_mode(self.user_id)
        self._show_response(response, mode.value)
        return response

    def _show_response(self, response: DialogueResponse, mode: str):
        message = response.message
        if response.confirmation_prompt and response.confirmation_prompt not in message:
            message = f"{message}\n\n{response.confirmation_prompt}"
        self.display.print_agent(message, mode=mode)

        self.display.print_actions(response.response.pending_confirmations or [])
        self.display.print_suggestions(response.response.suggestions)

        if response.execution and response.execution.success:
            self.display.print_success(f"Saved {response.execution.action.type}")
        if response.state == SequencerState.AWAITING_CONFIRMATION:
            self.display.print_info("Reply yes or no")
