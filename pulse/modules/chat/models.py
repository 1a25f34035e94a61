# Supabase table: ai_agent_conversations (plus the rows read into prompts)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
ai_agent_conversations:
- id: uuid (primary key)
- user_id: text (references profiles.id)
- agent_type: text - executive_assistant, content_agent, transaction_coordinator
- messages: jsonb - [{"role": "user" | "assistant", "content": str}, ...]
- created_at: timestamp - a conversation only grows on the UTC day it was created
- updated_at: timestamp

Read for prompts:
- user_guidelines: user_id, agent_type, guideline_type, guideline_category, guideline_text
- graph_context: user_id, pulse_score, gane_score, moro_score, active_transactions, ytd_volume
- market_config: user_id, city, state, property_types (text[])
- generated_content: user_id, content_type, title, created_at
- transactions: user_id, property_address, transaction_type, stage, status
"""
