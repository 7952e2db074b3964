"""Session Chat Agent: open Q&A across every document in a chat session."""

from zephvault.agents.base import AgentResult, BaseAgent


class SessionChatAgent(BaseAgent):
    """Higher temperature; answers are conversational rather than extractive."""

    def __init__(self):
        super().__init__(
            agent_name="session_chat",
            temperature=0.7,
            max_tokens=1000,
        )

    async def reply(self, messages: list[dict]) -> AgentResult:
        return await self.chat(messages)
