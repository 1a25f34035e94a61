# Supabase table: goals
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- user_id: text (references profiles.id, not null)
- title: text (not null)
- goal_type: text (not null) - annual, quarterly, monthly, custom
- category: text (nullable) - lead-generation, production, ...
- target_value: numeric (nullable)
- current_value: numeric (nullable, default: 0)
- unit: text (nullable) - conversations, closings, USD, ...
- timeframe: text (nullable)
- deadline: date (nullable)
- status: text (default: 'active') - values: active, completed, at-risk
- confidence_score: integer (nullable) - 0..100
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Status is derived from current/target whenever current_value is written; a
status written on its own is a manual override and is stored as given.
"""
