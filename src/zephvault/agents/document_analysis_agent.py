"""Document Analysis Agent: forensic extraction over one document's context."""

from zephvault.agents.base import AgentResult, BaseAgent


class DocumentAnalysisAgent(BaseAgent):
    """Low-temperature, long-form analysis whose output becomes ``ai_summary``."""

    def __init__(self):
        super().__init__(
            agent_name="document_analysis",
            temperature=0.2,
            max_tokens=2000,
        )

    async def analyze(self, messages: list[dict]) -> AgentResult:
        """Run the analysis prompt built by the PromptComposer."""
        return await self.chat(messages)
