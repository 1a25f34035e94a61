"""
Closed set of tables reachable through the generic entity relay and the CSV importer.
"""

from enum import Enum
from typing import Optional


class Table(str, Enum):
    PROFILES = "profiles"
    USER_ONBOARDING = "user_onboarding"
    MARKET_CONFIG = "market_config"
    USER_PREFERENCES = "user_preferences"
    DAILY_ACTIONS = "daily_actions"
    AGENT_CONFIG = "agent_config"
    USER_AGENT_SUBSCRIPTION = "user_agent_subscription"
    GOALS = "goals"
    BUSINESS_PLANS = "business_plans"
    PULSE_SCORES = "pulse_scores"
    PULSE_CONFIG = "pulse_config"
    AGENT_INTELLIGENCE_PROFILES = "agent_intelligence_profiles"
    BRAND_COLOR_PALETTES = "brand_color_palettes"
    CONTENT_PACKS = "content_packs"
    CONTENT_TOPICS = "content_topics"
    CREDIT_TRANSACTIONS = "credit_transactions"
    CRM_CONNECTIONS = "crm_connections"
    EMAIL_CAMPAIGNS = "email_campaigns"
    EMAIL_TEMPLATES = "email_templates"
    EXTERNAL_SERVICE_CONNECTIONS = "external_service_connections"
    GENERATED_CONTENT = "generated_content"
    MARKET_INTELLIGENCE = "market_intelligence"
    REFERRALS = "referrals"
    ROLE_PLAY_SESSION_LOGS = "role_play_session_logs"
    ROLE_PLAY_USER_PROGRESS = "role_play_user_progress"
    CALL_LOGS = "call_logs"
    AI_AGENT_CONVERSATIONS = "ai_agent_conversations"
    AI_ACTIONS_LOG = "ai_actions_log"
    AI_TOOL_USAGE = "ai_tool_usage"
    TRANSACTIONS = "transactions"
    ROLE_PLAY_SCENARIOS = "role_play_scenarios"
    OBJECTION_SCRIPTS = "objection_scripts"
    CLIENT_PERSONAS = "client_personas"
    AGENT_VOICES = "agent_voices"
    TASK_TEMPLATES = "task_templates"
    FEATURED_CONTENT_PACKS = "featured_content_packs"
    CAMPAIGN_TEMPLATES = "campaign_templates"
    LEGAL_DOCUMENTS = "legal_documents"
    FEATURE_FLAGS = "feature_flags"
    AI_PROMPT_CONFIGS = "ai_prompt_configs"
    GRAPH_CONTEXT_CACHE = "graph_context_cache"
    USER_CREDITS = "user_credits"

    @classmethod
    def parse(cls, name: Optional[str]) -> Optional["Table"]:
        try:
            return cls(name)
        except ValueError:
            return None

    @property
    def is_catalogue(self) -> bool:
        """Shared admin-managed content: readable by everyone, never owner-scoped."""
        return self in CATALOGUE_TABLES

    @property
    def owner_column(self) -> Optional[str]:
        if self.is_catalogue:
            return None
        return "id" if self is Table.PROFILES else "user_id"


CATALOGUE_TABLES = frozenset({
    Table.TASK_TEMPLATES,
    Table.OBJECTION_SCRIPTS,
    Table.ROLE_PLAY_SCENARIOS,
    Table.EMAIL_TEMPLATES,
    Table.CONTENT_TOPICS,
    Table.CLIENT_PERSONAS,
    Table.AI_PROMPT_CONFIGS,
    Table.FEATURED_CONTENT_PACKS,
    Table.CONTENT_PACKS,
    Table.CAMPAIGN_TEMPLATES,
    Table.LEGAL_DOCUMENTS,
    Table.FEATURE_FLAGS,
})
