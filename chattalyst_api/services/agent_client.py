from uuid import UUID

import httpx
from pydantic import ValidationError

from chattalyst_api.config import settings
from chattalyst_api.logging_config import get_logger
from chattalyst_api.schemas.agent import AgentQuery, AgentReply
from chattalyst_api.services.result import DISPATCH_ERROR, Result

logger = get_logger("agent_client")


def agent_handler_url() -> str:
    return f"{settings.agent_handler_base_url.rstrip('/')}/ai-agent-handler"


def query_agent(agent_id: UUID, session_id: UUID, contact_identifier: str, query: str) -> Result[AgentReply]:
    """Ask the agent handler for a reply. Transport and HTTP errors become failures."""
    payload = AgentQuery(
        agentId=agent_id,
        query=query,
        sessionId=session_id,
        contactIdentifier=contact_identifier,
    ).model_dump(mode="json")
    headers = {"Authorization": f"Bearer {settings.service_role_key}"}

    try:
        with httpx.Client(timeout=settings.outbound_timeout_seconds) as client:
            response = client.post(agent_handler_url(), json=payload, headers=headers)
    except httpx.HTTPError as e:
        logger.error(f"Agent handler request failed: {e}")
        return Result.failure(f"Agent handler unreachable: {e}", DISPATCH_ERROR)

    logger.info(f"Agent handler response: status={response.status_code}, session={session_id}")
    if not response.is_success:
        return Result.failure(
            f"Agent handler error ({response.status_code}): {response.text[:200]}",
            DISPATCH_ERROR,
        )

    try:
        reply = AgentReply.model_validate(response.json())
    except (ValueError, ValidationError) as e:
        return Result.failure(f"Agent handler returned an unreadable body: {e}", DISPATCH_ERROR)
    return Result.success(reply)
