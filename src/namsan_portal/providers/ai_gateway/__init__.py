from namsan_portal.providers.ai_gateway.ai_gateway_provider import \
    AIGatewayProvider
from namsan_portal.providers.ai_gateway.models import ChatMessage

__all__ = ["AIGatewayProvider", "ChatMessage"]
