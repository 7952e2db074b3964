"""Document Chat Agent: conversational Q&A scoped to a single document."""

from zephvault.agents.base import AgentResult, BaseAgent


class DocumentChatAgent(BaseAgent):

    def __init__(self):
        super().__init__(
            agent_name="document_chat",
            temperature=0.3,
            max_tokens=1000,
        )

    async def reply(self, messages: list[dict]) -> AgentResult:
        return await self.chat(messages)
