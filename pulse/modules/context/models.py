# Supabase tables read by the context aggregator (all keyed by user_id unless noted)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Per-user tables fanned out by ContextService:

profiles (keyed by id)          - see auth/models.py
user_onboarding                 - see onboarding/models.py
market_config                   - one row: primary_territory, market_area, ...
user_preferences                - one row: coaching_style, activity_mode, daily_reminders,
                                  weekly_reports, market_updates, email_notifications, timezone
daily_actions                   - many rows: title, action_type, status, priority, due_date (date)
agent_config                    - one row: per-agent enablement and tone
user_agent_subscription         - one row: subscribed agent bundle
goals                           - many rows, see goals/models.py
business_plans                  - one row: plan_year, detailed_plan (jsonb), see planner/models.py
pulse_scores                    - many rows: date (date), score (numeric), components (jsonb)
pulse_config                    - one row: scoring weights
agent_intelligence_profiles     - one row: learned working-style profile

Reads are capped at 50 daily_actions (newest due_date first) and 30
pulse_scores (newest date first).
"""
