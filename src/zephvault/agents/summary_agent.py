"""Summary Agent: five-bullet document summaries."""

from zephvault.agents.base import AgentResult, BaseAgent


class DocumentSummaryAgent(BaseAgent):

    def __init__(self):
        super().__init__(
            agent_name="document_summary",
            temperature=0.3,
            max_tokens=500,
        )

    async def summarize(self, messages: list[dict]) -> AgentResult:
        return await self.chat(messages)
