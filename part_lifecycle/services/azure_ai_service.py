"""
Azure AI Service - Same lookup as AIService, run through an Azure AI Foundry
agent that has web grounding configured server-side
"""
from typing import Optional

import structlog
from azure.ai.agents.models import ListSortOrder
from azure.ai.projects import AIProjectClient
from azure.identity import DefaultAzureCredential

from .. import config
from ..models import EnrichmentResult
from .ai_service import build_prompt, parse_enrichment_response

logger = structlog.get_logger(__name__)


class AzureAIService:
    def __init__(self, project: Optional[AIProjectClient] = None, agent_name: str = None):
        endpoint = config.AZURE_AI_API_ENDPOINT
        agent_name = agent_name or config.AZURE_AI_AGENT

        if project is None:
            if not endpoint:
                raise RuntimeError("AZURE_AI_API_ENDPOINT is not set")
            project = AIProjectClient(
                credential=DefaultAzureCredential(),
                endpoint=endpoint,
            )
        if not agent_name:
            raise RuntimeError("AZURE_AI_AGENT is not set")

        self.project = project
        # Agent identifier configured in env
        self.agent = self.project.agents.get_agent(agent_name)

    def _get_assistant_message_text(self, messages) -> Optional[str]:
        """
        Return the text of the last assistant message, or None if there is none
        """
        for message in reversed(list(messages)):
            if getattr(message, 'role', None) != 'assistant':
                continue

            # Some messages may not contain text_messages
            text_messages = getattr(message, 'text_messages', None)
            if not text_messages:
                continue
            # The SDK stores the text value under `.text.value`
            text_val = getattr(getattr(text_messages[-1], 'text', None), 'value', None)
            if text_val:
                return text_val.strip()

        return None

    def enrich(self, part: str, website: str) -> EnrichmentResult:
        """
        Look up one part in a fresh agent thread. Never raises.
        """
        try:
            thread = self.project.agents.threads.create()

            self.project.agents.messages.create(
                thread_id=thread.id,
                role="user",
                content=f"{config.ENRICHMENT_INSTRUCTIONS}\n\n{build_prompt(part, website)}",
            )

            run = self.project.agents.runs.create_and_process(
                thread_id=thread.id,
                agent_id=self.agent.id,
            )
            if getattr(run, "status", None) == "failed":
                raise RuntimeError(f"Agent run failed: {getattr(run, 'last_error', None)}")

            messages = self.project.agents.messages.list(thread_id=thread.id, order=ListSortOrder.ASCENDING)
            response_text = self._get_assistant_message_text(messages)
            if response_text is None:
                raise ValueError("No assistant message received")

            return parse_enrichment_response(response_text)

        except Exception as e:
            logger.warning("enrichment_failed", backend="azure", part=part, website=website, error=str(e))
            return EnrichmentResult.not_found(error=str(e))
