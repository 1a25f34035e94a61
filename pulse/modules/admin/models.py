# Supabase table: system_errors (metrics also count profiles, goals, daily_actions, transactions, pulse_scores)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
system_errors:
- id: uuid (primary key)
- severity: text - critical, error, warning, info
- function_name: text
- message: text
- stack_trace: text (nullable)
- user_id: text (nullable)
- metadata: jsonb (nullable)
- occurrence_count: integer (default: 1)
- last_occurrence_at: timestamp
- resolved: boolean (default: false)
- resolved_at: timestamp (nullable)
- created_at: timestamp (default: now())
"""
